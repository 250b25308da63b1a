"""
Tests for deck_funnels/deck/coordinator.py

End-to-end tests driving the coordinator through deck events, plus
per-container error isolation and reinitialization policies.
"""

import asyncio
import json

import pytest

from conftest import SAMPLE_DECK, FakeSource, RecordingRenderer
from deck_funnels.data.schemas import Direction, Viewport
from deck_funnels.deck.coordinator import (
    FunnelChartCoordinator,
    SlideRenderResult,
    always_reinitialize,
    reinitialize_on_horizontal_only,
)
from deck_funnels.deck.events import READY, RESIZE, SLIDE_CHANGED, ResizeEvent
from deck_funnels.deck.markup import SlideDeck
from deck_funnels.renderers.funnel_graph import FunnelGraphRenderer


SCENARIO_DECK = """\
<div class="reveal"><div class="slides">
  <section><div id="funnel-A" data-data-source="sales" data-format="csv"></div></section>
</div></div>
"""


def build(deck_html, source, renderer, settings, **kwargs):
    viewport = Viewport(width=settings.viewport_width, height=settings.viewport_height)
    coordinator = FunnelChartCoordinator(
        renderer, source, settings=settings, viewport=viewport, **kwargs
    )
    deck = SlideDeck.from_html(deck_html, viewport=viewport)
    coordinator.attach(deck)
    return coordinator, deck


def spec_of(deck: SlideDeck, container_id: str) -> dict:
    """Extract the JSON chart spec written into a container."""
    script = deck.soup.find("script", attrs={"data-spec-for": container_id})
    return json.loads(script.string)


# =============================================================================
# TESTS: END TO END
# =============================================================================


class TestEndToEnd:
    """Deck events through to rendered markup."""

    def test_csv_scenario(self, fake_source, settings):
        coordinator, deck = build(SCENARIO_DECK, fake_source, FunnelGraphRenderer(), settings)

        asyncio.run(deck.start())

        record = coordinator.lifecycle.get("funnel-A")
        assert record is not None
        assert record.has_drawn is True
        assert record.data.labels == ["Top", "Mid"]
        assert record.data.sub_labels == ["US", "EU"]
        assert record.data.values == [[100, 50], [60, 20]]

        spec = spec_of(deck, "funnel-A")
        assert spec["container"] == "#funnel-A"
        assert spec["data"]["subLabels"] == ["US", "EU"]
        assert spec["direction"] == "horizontal"
        assert "graph.draw(" in deck.to_html()

    def test_walk_whole_deck(self, fake_source, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, FunnelGraphRenderer(), settings)

        async def run():
            await deck.start()
            while await deck.next():
                pass

        asyncio.run(run())

        drawn = {cid for cid, r in coordinator.lifecycle.records.items() if r.has_drawn}
        assert drawn == {"funnel-default", "funnel-A", "funnel-B", "funnel-C"}
        assert coordinator.lifecycle.get("funnel-missing") is None
        # funnel-A and funnel-C share one fetch
        assert fake_source.calls.count("data/csv/sales.csv") == 1

    def test_default_uses_fallback(self, fake_source, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, FunnelGraphRenderer(), settings)

        asyncio.run(deck.start())

        spec = spec_of(deck, "funnel-default")
        assert spec["data"]["labels"] == ["Awareness", "Interest", "Desire", "Action"]

    def test_inline_formatter_values(self, settings):
        deck_html = """
        <div class="slides"><section>
          <div id="funnel-i"><!-- {"data": {"labels": ["A", "B"], "values": [[12000], [3400]],
            "valueFormatter": "formatter:compact"}} --></div>
        </section></div>
        """
        coordinator, deck = build(deck_html, FakeSource(), FunnelGraphRenderer(), settings)

        asyncio.run(deck.start())

        spec = spec_of(deck, "funnel-i")
        assert spec["data"]["formattedValues"] == [["12K"], ["3K"]]
        # Authored config survives rendering
        assert coordinator.lifecycle.get("funnel-i").data.labels == ["A", "B"]
        assert "valueFormatter" in deck.to_html()


# =============================================================================
# TESTS: EVENT HANDLING
# =============================================================================


class TestEventHandling:
    """Tests for ready / slidechanged / resize handlers."""

    def test_attach_subscribes(self, fake_source, recording_renderer, settings):
        _, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)

        assert deck.listener_count(READY) == 1
        assert deck.listener_count(SLIDE_CHANGED) == 1
        assert deck.listener_count(RESIZE) == 1

    def test_slide_change_processes_only_current_slide(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)

        async def run():
            await deck.start()
            await deck.slide(1, 0)

        asyncio.run(run())

        assert set(coordinator.lifecycle.records) == {"funnel-default", "funnel-A", "funnel-B"}

    def test_resize_rerenders_current_slide(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)

        async def run():
            await deck.start()
            await deck.slide(1, 0)
            before = coordinator.lifecycle.get("funnel-A")
            await deck.resize(480, 800)
            return before

        before = asyncio.run(run())
        after = coordinator.lifecycle.get("funnel-A")

        assert after is not before
        assert after.options.direction is Direction.VERTICAL
        assert recording_renderer.redraws[-1]["animation"] is False
        assert coordinator.viewport.width == 480

    def test_resize_before_start_does_nothing(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)

        result = asyncio.run(coordinator.on_resize(ResizeEvent(width=500, height=500)))

        assert result.container_count == 0
        assert recording_renderer.created == []

    def test_resize_without_host(self, fake_source, recording_renderer, settings):
        coordinator = FunnelChartCoordinator(recording_renderer, fake_source, settings=settings)

        result = asyncio.run(coordinator.on_resize(ResizeEvent(width=500, height=500)))

        assert result == SlideRenderResult()
        assert coordinator.viewport.width == 500


# =============================================================================
# TESTS: REPROCESSING RENDERED SLIDES
# =============================================================================


class TestReprocessRenderedSlides:
    """Resizes and revisits over slides that already hold chart markup."""

    def test_resize_finds_only_authored_containers(self, fake_source, settings):
        coordinator, deck = build(SCENARIO_DECK, fake_source, FunnelGraphRenderer(), settings)

        async def run():
            await deck.start()
            return await coordinator.on_resize(ResizeEvent(width=480, height=800))

        result = asyncio.run(run())

        assert result.drawn == ["funnel-A"]
        assert result.container_count == 1
        assert set(coordinator.lifecycle.records) == {"funnel-A"}
        assert "data/json/default.json" not in fake_source.calls
        assert spec_of(deck, "funnel-A")["direction"] == "vertical"
        assert len(deck.soup.select("script.funnel-graph-spec")) == 1

    def test_revisit_keeps_one_chart_per_container(self, fake_source, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, FunnelGraphRenderer(), settings)

        async def run():
            await deck.start()
            await deck.slide(1, 0)
            await deck.slide(1, 1)
            await deck.slide(1, 0)
            await deck.resize(600, 800)

        asyncio.run(run())

        assert set(coordinator.lifecycle.records) == {
            "funnel-default",
            "funnel-A",
            "funnel-B",
            "funnel-C",
        }
        # Only the authored funnel-default container asks for default.json
        assert fake_source.calls.count("data/json/default.json") == 1
        for container_id in ("funnel-A", "funnel-B"):
            scripts = deck.soup.find_all("script", attrs={"data-spec-for": container_id})
            assert len(scripts) == 1

    def test_horizontal_only_policy_over_rendered_stack(self, fake_source, settings):
        coordinator, deck = build(
            SAMPLE_DECK,
            fake_source,
            FunnelGraphRenderer(),
            settings,
            reinit_policy=reinitialize_on_horizontal_only,
        )

        async def run():
            await deck.start()
            await deck.slide(1, 0)
            first = coordinator.lifecycle.get("funnel-A")
            await deck.slide(1, 1)
            await deck.slide(1, 0)
            return first

        first = asyncio.run(run())

        assert coordinator.lifecycle.get("funnel-A") is first
        assert first.handle.draw_count == 2
        assert set(coordinator.lifecycle.records) == {
            "funnel-default",
            "funnel-A",
            "funnel-B",
            "funnel-C",
        }


# =============================================================================
# TESTS: ERROR ISOLATION
# =============================================================================


class TestErrorIsolation:
    """A failing container never stops its siblings."""

    def test_missing_data_skipped(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)

        result = asyncio.run(coordinator.process_slide(deck.get_slide(1, 1)))

        assert result.skipped == ["funnel-missing"]
        assert result.drawn == ["funnel-C"]
        assert result.errors == {}

    def test_invalid_data_recorded_as_error(self, recording_renderer, settings):
        source = FakeSource({
            "data/csv/bad.csv": "Stage,A\nTop,not-a-number",
            "data/csv/good.csv": "Stage,A\nTop,10",
        })
        deck_html = """
        <div class="slides"><section>
          <div id="funnel-bad" data-data-source="bad" data-format="csv"></div>
          <div id="funnel-good" data-data-source="good" data-format="csv"></div>
        </section></div>
        """
        coordinator, deck = build(deck_html, source, recording_renderer, settings)

        result = asyncio.run(coordinator.process_slide(deck.get_slide(0)))

        assert "funnel-bad" in result.errors
        assert "non-numeric" in result.errors["funnel-bad"]
        assert result.drawn == ["funnel-good"]

    def test_unexpected_renderer_failure_isolated(self, fake_source, settings):
        class FlakyRenderer(RecordingRenderer):
            def create(self, mount, data, options):
                if mount.id == "funnel-A":
                    raise RuntimeError("renderer exploded")
                return super().create(mount, data, options)

        coordinator, deck = build(SAMPLE_DECK, fake_source, FlakyRenderer(), settings)

        result = asyncio.run(coordinator.process_slide(deck.get_slide(1, 0)))

        assert result.errors == {"funnel-A": "renderer exploded"}
        assert result.drawn == ["funnel-B"]

    def test_slide_without_charts(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)

        result = asyncio.run(coordinator.process_slide(deck.get_slide(2)))

        assert result.container_count == 0


# =============================================================================
# TESTS: REINITIALIZATION POLICY
# =============================================================================


class TestReinitPolicy:
    """Tests for the navigation reinitialization policy hook."""

    def _walk_stack(self, deck):
        async def run():
            await deck.start()
            await deck.slide(1, 0)
            await deck.slide(1, 1)
            await deck.slide(1, 0)

        asyncio.run(run())

    def test_default_always_reinitializes(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(SAMPLE_DECK, fake_source, recording_renderer, settings)
        assert coordinator.reinit_policy is always_reinitialize

        self._walk_stack(deck)

        created_a = [h for h in recording_renderer.created if h["mount"].id == "funnel-A"]
        assert len(created_a) == 2

    def test_horizontal_only_reuses_within_stack(self, fake_source, recording_renderer, settings):
        coordinator, deck = build(
            SAMPLE_DECK,
            fake_source,
            recording_renderer,
            settings,
            reinit_policy=reinitialize_on_horizontal_only,
        )

        self._walk_stack(deck)

        created_a = [h for h in recording_renderer.created if h["mount"].id == "funnel-A"]
        assert len(created_a) == 1
        # Still redrawn on return
        draws_a = [r for r in recording_renderer.redraws if r["handle"]["mount"].id == "funnel-A"]
        assert len(draws_a) == 2


# =============================================================================
# TESTS: EXPOSED API
# =============================================================================


class TestExposedApi:
    """Tests for initialize_chart / draw_chart."""

    def test_initialize_then_draw(self, fake_source, settings):
        coordinator, deck = build(SCENARIO_DECK, fake_source, FunnelGraphRenderer(), settings)
        mount = deck.get_slide(0).find_mount_points()[0]

        record = asyncio.run(coordinator.initialize_chart(mount))
        assert record.has_drawn is False
        assert mount.rendered_html == ""

        coordinator.draw_chart("funnel-A")
        assert record.has_drawn is True
        assert 'data-spec-for="funnel-A"' in mount.rendered_html

    def test_draw_unknown_chart(self, fake_source, recording_renderer, settings):
        coordinator = FunnelChartCoordinator(recording_renderer, fake_source, settings=settings)
        assert coordinator.draw_chart("funnel-nope") is None

    @pytest.mark.parametrize("width,expected", [(480, "vertical"), (1024, "horizontal")])
    def test_direction_follows_viewport(self, fake_source, settings, width, expected):
        coordinator, deck = build(SCENARIO_DECK, fake_source, FunnelGraphRenderer(), settings)
        coordinator.viewport.width = width

        asyncio.run(deck.start())

        assert spec_of(deck, "funnel-A")["direction"] == expected
