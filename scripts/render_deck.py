#!/usr/bin/env python3
"""
Render the funnel charts of a reveal.js deck.

Walks every slide of the deck the way a presenter would (ready, then each
slidechanged), so each funnel container gets its chart markup, and writes
the resulting HTML.

Usage:
    # Data files next to the deck (data/json, data/csv)
    python scripts/render_deck.py examples/deck/index.html --output output/deck.html

    # Data files served over HTTP
    python scripts/render_deck.py slides.html --base-url https://example.org/deck/

    # Narrow viewport: vertical funnels, no animation
    python scripts/render_deck.py slides.html --width 480 --height 800

    # Settings from YAML (env vars FUNNEL_* still override)
    python scripts/render_deck.py slides.html --config config/funnels.yaml
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from deck_funnels.data.schemas import Viewport
from deck_funnels.data.sources import DataSource, HttpDataSource, LocalDataSource
from deck_funnels.deck.coordinator import FunnelChartCoordinator, SlideRenderResult
from deck_funnels.deck.events import READY, SLIDE_CHANGED, ReadyEvent, SlideChangedEvent
from deck_funnels.deck.markup import SlideDeck
from deck_funnels.renderers.funnel_graph import FunnelGraphRenderer
from deck_funnels.settings import Settings, configure_logging, load_settings


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Render funnel charts into a reveal.js deck",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("deck", type=str, help="Path to the deck HTML file")

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output HTML path (default: print to stdout)",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML settings file",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding data/json and data/csv (default: the deck's directory)",
    )

    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Fetch data files over HTTP relative to this URL",
    )

    parser.add_argument("--width", type=int, default=None, help="Viewport width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Viewport height in pixels")

    parser.add_argument(
        "--color-policy",
        type=str,
        choices=["palette", "random"],
        default=None,
        help="Colors for data without colors (default: palette)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args()


def build_source(settings: Settings) -> DataSource:
    """Pick the HTTP or local data source from settings."""
    templates = {
        "json_path_template": settings.json_path_template,
        "csv_path_template": settings.csv_path_template,
    }
    if settings.data_base_url:
        return HttpDataSource(
            settings.data_base_url,
            timeout=settings.fetch_timeout_s,
            **templates,
        )
    return LocalDataSource(settings.data_dir, **templates)


async def render_deck(deck_path: Path, settings: Settings) -> tuple[str, list[SlideRenderResult]]:
    """Walk every slide of a deck and return the rendered HTML."""
    viewport = Viewport(width=settings.viewport_width, height=settings.viewport_height)
    results: list[SlideRenderResult] = []

    async with build_source(settings) as source:
        coordinator = FunnelChartCoordinator(
            FunnelGraphRenderer(),
            source,
            settings=settings,
            viewport=viewport,
        )
        deck = SlideDeck.from_path(deck_path, viewport=viewport)

        # Wire the handlers directly so each slide's outcome can be reported
        async def _on_ready(event: ReadyEvent) -> None:
            results.append(await coordinator.on_ready(event))

        async def _on_slide_changed(event: SlideChangedEvent) -> None:
            results.append(await coordinator.on_slide_changed(event))

        deck.add_event_listener(READY, _on_ready)
        deck.add_event_listener(SLIDE_CHANGED, _on_slide_changed)

        await deck.start()
        while await deck.next():
            pass

    return deck.to_html(), results


def main() -> int:
    args = parse_args()
    deck_path = Path(args.deck)

    if not deck_path.exists():
        print(f"Error: Deck not found: {deck_path}")
        return 1

    settings = load_settings(
        args.config,
        data_dir=args.data_dir or (None if args.base_url else deck_path.parent),
        data_base_url=args.base_url,
        viewport_width=args.width,
        viewport_height=args.height,
        color_policy=args.color_policy,
    )
    configure_logging(settings, verbose=args.verbose)

    html, results = asyncio.run(render_deck(deck_path, settings))

    drawn = sum(len(r.drawn) for r in results)
    skipped = sum(len(r.skipped) for r in results)
    failed = sum(len(r.errors) for r in results)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(html, encoding="utf-8")
        print(f"Wrote {output}")
    else:
        print(html)

    print(f"Charts drawn: {drawn}, skipped: {skipped}, failed: {failed}", file=sys.stderr)
    return 0 if failed == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
