"""
Deck document model backed by BeautifulSoup.

Models the parts of a reveal.js presentation the coordinator needs:
- SlideDeck: the parsed document, slide navigation and lifecycle events
- Slide: one slide (a leaf <section>), possibly inside a vertical stack
- MountPoint: a chart container element within a slide

Expected structure:
    <div class="reveal"><div class="slides">
      <section>...</section>                           <!-- single slide -->
      <section><section>...</section><section>...</section></section>  <!-- stack -->
    </div></div>
"""

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from bs4 import BeautifulSoup, Comment, Tag

from deck_funnels.data.schemas import ContainerDescriptor, Direction, SourceFormat, Viewport
from deck_funnels.deck.events import (
    READY,
    RESIZE,
    SLIDE_CHANGED,
    EventEmitter,
    ReadyEvent,
    ResizeEvent,
    SlideChangedEvent,
)
from deck_funnels.exceptions import DeckMarkupError

logger = logging.getLogger(__name__)

_PX_DIMENSION = re.compile(r"(?:^|;)\s*(width|height)\s*:\s*(\d+(?:\.\d+)?)px", re.IGNORECASE)


# =============================================================================
# MOUNT POINTS
# =============================================================================


def _dataset_key(attribute: str) -> str:
    """Map an attribute name to its DOM dataset key (data-use-json -> useJson)."""
    head, *rest = attribute[len("data-"):].split("-")
    return head + "".join(part.capitalize() for part in rest)


class MountPoint:
    """A chart container element."""

    def __init__(self, tag: Tag):
        self.tag = tag

    @property
    def id(self) -> str:
        return self.tag.get("id", "")

    @property
    def dataset(self) -> dict[str, str]:
        return {
            _dataset_key(name): value
            for name, value in self.tag.attrs.items()
            if name.startswith("data-") and isinstance(value, str)
        }

    def inline_comments(self) -> list[str]:
        """Text of every HTML comment inside the element, in document order."""
        return [str(c) for c in self.tag.find_all(string=lambda s: isinstance(s, Comment))]

    def measure(self, viewport: Viewport) -> tuple[int, int]:
        """Width and height of the element's box.

        Explicit data-width/data-height win, then pixel sizes from the inline
        style, then the viewport size.
        """
        dataset = self.dataset
        style = {
            name.lower(): float(value)
            for name, value in _PX_DIMENSION.findall(self.tag.get("style", ""))
        }

        def _dimension(name: str, default: int) -> int:
            raw = dataset.get(name)
            if raw:
                try:
                    return int(float(raw))
                except ValueError:
                    logger.warning(f"Ignoring invalid data-{name}={raw!r} on #{self.id}")
            if name in style:
                return int(style[name])
            return default

        return _dimension("width", viewport.width), _dimension("height", viewport.height)

    def clear_rendered(self) -> None:
        """Remove rendered content, keeping authored comments."""
        for child in list(self.tag.contents):
            if not isinstance(child, Comment):
                child.extract()

    def insert_rendered(self, markup: str) -> None:
        fragment = BeautifulSoup(markup, "html.parser")
        for node in list(fragment.contents):
            self.tag.append(node.extract())

    @property
    def rendered_html(self) -> str:
        return "".join(str(c) for c in self.tag.contents if not isinstance(c, Comment)).strip()

    def __repr__(self) -> str:
        return f"MountPoint(id={self.id!r})"


def describe_container(
    mount: MountPoint,
    viewport: Viewport,
    *,
    default_data_source: str = "default",
) -> ContainerDescriptor:
    """Build a ContainerDescriptor from a mount point's markup attributes."""
    dataset = mount.dataset

    source_format = SourceFormat.JSON
    declared_format = dataset.get("format", "").lower()
    if declared_format:
        try:
            source_format = SourceFormat(declared_format)
        except ValueError:
            logger.warning(f"Unknown data-format {declared_format!r} on #{mount.id}, using json")
    elif dataset.get("useJson") == "false":
        source_format = SourceFormat.CSV

    direction = _parse_direction(mount, "direction", dataset.get("direction"))
    gradient = _parse_direction(mount, "gradient-direction", dataset.get("gradientDirection"))

    width, height = mount.measure(viewport)

    return ContainerDescriptor(
        id=mount.id,
        data_source_id=dataset.get("dataSource") or default_data_source,
        format=source_format,
        direction=direction,
        gradient_direction=gradient or Direction.HORIZONTAL,
        display_percent=dataset.get("displayPercent") != "false",
        width=width,
        height=height,
        inline_configs=mount.inline_comments(),
        mount_point=mount,
    )


def _parse_direction(mount: MountPoint, attribute: str, raw: str | None) -> Direction | None:
    if not raw:
        return None
    try:
        return Direction(raw.lower())
    except ValueError:
        logger.warning(f"Ignoring invalid data-{attribute}={raw!r} on #{mount.id}")
        return None


# =============================================================================
# SLIDES
# =============================================================================


class Slide:
    """A leaf slide section."""

    def __init__(self, tag: Tag, indexh: int, indexv: int = 0, stack: Tag | None = None):
        self.tag = tag
        self.indexh = indexh
        self.indexv = indexv
        self.stack = stack

    def find_mount_points(self, prefix: str = "funnel-") -> list[MountPoint]:
        """Chart containers on this slide, in document order.

        Script elements never count, whatever their id.
        """
        return [MountPoint(tag) for tag in self.tag.select(f'[id^="{prefix}"]:not(script)')]

    def __repr__(self) -> str:
        return f"Slide(h={self.indexh}, v={self.indexv})"


def is_horizontal_navigation(previous: Slide | None, current: Slide) -> bool:
    """True when moving between different horizontal positions (stacks)."""
    if previous is None:
        return True
    return previous.indexh != current.indexh


# =============================================================================
# DECK
# =============================================================================


class SlideDeck(EventEmitter):
    """A parsed reveal.js document acting as presentation host.

    Usage:
        deck = SlideDeck.from_path("slides/index.html")
        coordinator.attach(deck)
        await deck.start()
        while await deck.next():
            pass
        Path("out.html").write_text(deck.to_html())
    """

    def __init__(self, soup: BeautifulSoup, *, viewport: Viewport | None = None, source: str | None = None):
        super().__init__()
        self.soup = soup
        self.viewport = viewport or Viewport()
        self.source = source

        root = soup.select_one(".reveal .slides") or soup.select_one(".slides")
        if root is None:
            raise DeckMarkupError("No '.slides' container found in deck", source=source)

        self.stacks: list[list[Slide]] = []
        for h, section in enumerate(root.find_all("section", recursive=False)):
            children = section.find_all("section", recursive=False)
            if children:
                self.stacks.append([Slide(child, h, v, stack=section) for v, child in enumerate(children)])
            else:
                self.stacks.append([Slide(section, h)])

        if not self.stacks:
            raise DeckMarkupError("Deck has no slides", source=source)

        self.current: Slide | None = None

    @classmethod
    def from_html(cls, html: str, *, viewport: Viewport | None = None, source: str | None = None) -> "SlideDeck":
        return cls(BeautifulSoup(html, "html.parser"), viewport=viewport, source=source)

    @classmethod
    def from_path(cls, path: str | Path, *, viewport: Viewport | None = None) -> "SlideDeck":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Deck not found: {path}")
        return cls.from_html(path.read_text(encoding="utf-8"), viewport=viewport, source=str(path))

    def get_current_slide(self) -> Slide | None:
        return self.current

    def get_slide(self, h: int, v: int = 0) -> Slide:
        if not 0 <= h < len(self.stacks) or not 0 <= v < len(self.stacks[h]):
            raise IndexError(f"No slide at ({h}, {v})")
        return self.stacks[h][v]

    def iter_slides(self) -> Iterator[Slide]:
        for stack in self.stacks:
            yield from stack

    async def start(self) -> Slide:
        """Show the first slide and emit 'ready'."""
        self.current = self.stacks[0][0]
        await self.emit(READY, ReadyEvent(current_slide=self.current))
        return self.current

    async def slide(self, h: int, v: int = 0) -> Slide:
        """Navigate to (h, v), emitting 'slidechanged' if the slide changes."""
        target = self.get_slide(h, v)
        previous = self.current
        if target is previous:
            return target

        self.current = target
        await self.emit(
            SLIDE_CHANGED,
            SlideChangedEvent(current_slide=target, previous_slide=previous, indexh=h, indexv=v),
        )
        return target

    async def next(self) -> bool:
        """Advance down the current stack, else right. False at the end."""
        if self.current is None:
            await self.start()
            return True

        h, v = self.current.indexh, self.current.indexv
        if v + 1 < len(self.stacks[h]):
            await self.slide(h, v + 1)
            return True
        if h + 1 < len(self.stacks):
            await self.slide(h + 1, 0)
            return True
        return False

    async def resize(self, width: int, height: int) -> None:
        """Change the viewport size and emit 'resize'."""
        self.viewport.width = width
        self.viewport.height = height
        await self.emit(RESIZE, ResizeEvent(width=width, height=height))

    def to_html(self) -> str:
        return str(self.soup)
