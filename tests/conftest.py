"""Shared fakes and fixtures for deck_funnels tests."""

import asyncio
from typing import Any

import pytest
from bs4 import BeautifulSoup

from deck_funnels.data.schemas import ChartOptions, FunnelData
from deck_funnels.data.sources import DataSource
from deck_funnels.deck.markup import MountPoint
from deck_funnels.exceptions import DataSourceError
from deck_funnels.renderers.base import ChartRenderer
from deck_funnels.settings import Settings


SALES_CSV = "Stage,US,EU\nTop,100,50\nMid,60,20"

CONVERSION_JSON = """{
  "labels": ["Landing", "Signup"],
  "subLabels": ["Organic", "Paid"],
  "colors": [["#111111", "#222222"], ["#333333", "#444444"]],
  "values": [[800, 500], [400, 200]]
}"""

SAMPLE_DECK = """\
<html><body>
<div class="reveal"><div class="slides">
  <section id="intro">
    <div id="funnel-default"></div>
  </section>
  <section id="stack">
    <section id="stack-top">
      <div id="funnel-A" data-data-source="sales" data-format="csv"></div>
      <div id="funnel-B" data-data-source="conversion"></div>
    </section>
    <section id="stack-bottom">
      <div id="funnel-missing" data-data-source="missing"></div>
      <div id="funnel-C" data-data-source="sales" data-format="csv"></div>
    </section>
  </section>
  <section id="outro"><p>No charts here</p></section>
</div></div>
</body></html>
"""


class FakeSource(DataSource):
    """In-memory data source that records every fetch.

    Each entry in ``gates`` holds back one fetch (in call order) until the
    event is set.
    """

    def __init__(self, files: dict[str, str] | None = None):
        super().__init__()
        self.files = dict(files or {})
        self.calls: list[str] = []
        self.gates: list[asyncio.Event] = []

    async def fetch_text(self, path: str) -> str:
        self.calls.append(path)
        # Yield like a real fetch would
        await asyncio.sleep(0)
        if self.gates:
            gate = self.gates.pop(0)
            await gate.wait()
        if path not in self.files:
            raise DataSourceError("Failed to load data: 404", status_code=404)
        return self.files[path]


class RecordingRenderer(ChartRenderer):
    """Renderer that records calls instead of producing markup."""

    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []
        self.redraws: list[dict[str, Any]] = []
        self.teardowns: list[dict[str, Any]] = []

    def create(self, mount: Any, data: FunnelData, options: ChartOptions) -> dict[str, Any]:
        handle = {"n": len(self.created), "mount": mount, "data": data, "options": options}
        self.created.append(handle)
        return handle

    def redraw(self, handle: dict[str, Any], *, animation: bool, animation_duration: int) -> None:
        self.redraws.append({"handle": handle, "animation": animation, "duration": animation_duration})

    def teardown(self, handle: dict[str, Any]) -> None:
        self.teardowns.append(handle)


def make_mount(html: str) -> MountPoint:
    """Parse a single container element into a MountPoint."""
    soup = BeautifulSoup(html, "html.parser")
    return MountPoint(soup.find(id=True))


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource({
        "data/csv/sales.csv": SALES_CSV,
        "data/json/conversion.json": CONVERSION_JSON,
    })


@pytest.fixture
def recording_renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def settings() -> Settings:
    return Settings(color_seed=7, viewport_width=1280, viewport_height=720)
