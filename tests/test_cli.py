"""Tests for the command-line interface."""

import json

import httpx
import pytest
import respx
import yaml

from pauperfall.cli import main


@pytest.fixture
def config_path(tmp_path):
    staples = tmp_path / "staples.json"
    staples.write_text(json.dumps({"Counterspell": {"popularityScore": 90, "decks": 380}}))
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "popularity": {"source": str(staples)},
        "reveal": {"page_size": 1},
    }))
    return path


def test_no_command_prints_help(capsys):
    main([])
    assert "pauperfall" in capsys.readouterr().out


def test_query_command(config_path, capsys):
    main(["-c", str(config_path), "query", "island"])
    assert capsys.readouterr().out.strip() == "island legal:pauper"


def test_query_command_easter_egg(config_path, capsys):
    main(["-c", str(config_path), "query", "the best card in pauper"])
    assert capsys.readouterr().out.strip() == "artful dodge"


@respx.mock(base_url="https://api.scryfall.com")
def test_search_json_output(respx_mock, config_path, capsys, make_card, make_envelope):
    respx_mock.get("/cards/search").mock(return_value=httpx.Response(200, json=make_envelope(
        [make_card("c1", "Ponder"), make_card("c2", "Counterspell"), make_card("c3", "Brainstorm")],
    )))
    main(["-c", str(config_path), "search", "c:u", "--json", "--pages", "2"])
    out = capsys.readouterr().out
    rows = [json.loads(line) for line in out.splitlines() if line.startswith("{")]
    assert [r["name"] for r in rows] == ["Counterspell", "Brainstorm"]
    assert rows[0]["popularityScore"] == 90
    assert rows[0]["decks"] == 380
    assert rows[1]["image"] == "https://cards.scryfall.io/normal/c3.jpg"


@respx.mock(base_url="https://api.scryfall.com")
def test_search_failure_exits_nonzero(respx_mock, config_path, capsys):
    respx_mock.get("/cards/search").mock(return_value=httpx.Response(500))
    with pytest.raises(SystemExit) as excinfo:
        main(["-c", str(config_path), "search", "c:u"])
    assert excinfo.value.code == 1
    assert "Failed to fetch search results." in capsys.readouterr().out


def test_invalid_config_exits(tmp_path, capsys):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({"search": {"concurrency": 0}}))
    with pytest.raises(SystemExit) as excinfo:
        main(["-c", str(path), "query", "island"])
    assert excinfo.value.code == 2
