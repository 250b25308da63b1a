#!/usr/bin/env python3
"""Quick start example for deck funnel charts.

Renders the example deck, then narrows the viewport to show the resize path
switching charts to vertical layout.

Usage:
    python examples/quick_start.py
"""

import asyncio
from pathlib import Path

from deck_funnels.data.schemas import Viewport
from deck_funnels.data.sources import LocalDataSource
from deck_funnels.deck.coordinator import FunnelChartCoordinator
from deck_funnels.deck.markup import SlideDeck
from deck_funnels.renderers.funnel_graph import FunnelGraphRenderer

DECK_DIR = Path(__file__).parent / "deck"


async def run() -> None:
    """Walk the example deck and report each chart."""
    viewport = Viewport(width=1280, height=720)

    async with LocalDataSource(DECK_DIR) as source:
        coordinator = FunnelChartCoordinator(FunnelGraphRenderer(), source, viewport=viewport)
        deck = SlideDeck.from_path(DECK_DIR / "index.html", viewport=viewport)
        coordinator.attach(deck)

        print("=" * 60)
        print("Deck Funnel Charts - Quick Start Demo")
        print("=" * 60)

        await deck.start()
        while await deck.next():
            pass

        for container_id, record in coordinator.lifecycle.records.items():
            print(f"\n{container_id}")
            print("-" * 40)
            print(f"  Stages: {', '.join(record.data.labels)}")
            print(f"  Segments: {', '.join(record.data.sub_labels) or '(single)'}")
            print(f"  Direction: {record.options.direction.value}")
            print(f"  Size: {record.options.width}x{record.options.height}")

        # Narrow the viewport: the current slide is re-rendered vertically
        print("\n" + "=" * 60)
        print("RESIZE TO 480px")
        print("=" * 60)
        await deck.resize(480, 800)

        current = deck.get_current_slide()
        for mount in current.find_mount_points():
            record = coordinator.lifecycle.get(mount.id)
            print(f"  {mount.id}: {record.options.direction.value}")

        print(f"\nCached datasets: {coordinator.cache.keys()}")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
