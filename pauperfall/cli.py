"""CLI interface for Pauper card search."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pauperfall.config import AppConfig, load_config
from pauperfall.models import Card
from pauperfall.popularity import lookup
from pauperfall.query import QueryBuilder
from pauperfall.search import SearchResult, SearchSession

console = Console()


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Set up logging
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return

    args.func(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pauperfall",
        description="Search Magic: The Gathering Pauper cards, sorted by Pauperlarity",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: config.yaml)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # query
    query_parser = subparsers.add_parser("query", help="Show the upstream query for a search")
    query_parser.add_argument("text", help="Search text, in Scryfall syntax")
    query_parser.set_defaults(func=_cmd_query)

    # search
    search_parser = subparsers.add_parser("search", help="Search and list ranked cards")
    search_parser.add_argument("text", help="Search text, in Scryfall syntax")
    search_parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Number of result pages to reveal (default: 1)",
    )
    search_parser.add_argument(
        "--json",
        action="store_true",
        help="Print one JSON object per card instead of a table",
    )
    search_parser.set_defaults(func=_cmd_search)

    return parser


def _load_app_config(args: argparse.Namespace) -> AppConfig:
    try:
        return load_config(args.config)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(2)


# ------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------


def _cmd_query(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    if not args.text.strip():
        console.print("[yellow]Empty query[/yellow]")
        return
    builder = QueryBuilder.from_config(config.search)
    console.print(builder.build(args.text), markup=False, highlight=False)


def _cmd_search(args: argparse.Namespace) -> None:
    config = _load_app_config(args)
    result, cards = asyncio.run(_run_search(config, args.text, max(args.pages, 1)))

    if not result.success:
        console.print(f"[red]{result.error}[/red]")
        sys.exit(1)

    if args.json:
        for card in cards:
            print(json.dumps(_card_row(card, result), ensure_ascii=False))
    elif result.cards:
        console.print(_results_table(cards, result))

    console.print(
        f"Found [bold]{len(result.cards)}[/bold] cards, showing {len(cards)}",
        highlight=False,
    )
    if result.partial:
        pages = ", ".join(str(n) for n in result.failed_pages)
        console.print(f"[yellow]Some result pages could not be fetched ({pages})[/yellow]")


async def _run_search(
    config: AppConfig, text: str, pages: int
) -> tuple[SearchResult, List[Card]]:
    session = SearchSession.from_config(config)
    try:
        result = await session.search(text)
        for _ in range(pages - 1):
            if not session.reveal.has_more:
                break
            session.reveal_more()
        return result, session.visible_cards
    finally:
        await session.close()


def _results_table(cards: List[Card], result: SearchResult) -> Table:
    table = Table(title=f"Results for {result.query}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Cost")
    table.add_column("Type")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Decks", justify="right", style="green")

    for pos, card in enumerate(cards, start=1):
        entry = lookup(result.popularity, card.name)
        table.add_row(
            str(pos),
            card.name,
            card.mana_cost or "",
            card.type_line or "",
            f"{entry.popularity_score:g}",
            str(entry.decks),
        )
    return table


def _card_row(card: Card, result: SearchResult) -> dict:
    entry = lookup(result.popularity, card.name)
    return {
        "id": card.id,
        "name": card.name,
        "mana_cost": card.mana_cost,
        "type_line": card.type_line,
        "image": card.image_url,
        "url": card.detail_url,
        "popularityScore": entry.popularity_score,
        "decks": entry.decks,
    }
