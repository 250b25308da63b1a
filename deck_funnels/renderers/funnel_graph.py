"""
Renderer emitting FunnelGraph mount markup with Jinja2.

The browser-side FunnelGraph library paints the chart; this renderer writes
what it needs into the container:
- a JSON block holding the chart spec
- a bootstrap script that builds the graph and calls draw()

FunnelGraph has no destroy operation, so teardown clears the container's
rendered content instead. Generated elements carry no id, so container
discovery never picks them up.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from jinja2 import Environment, select_autoescape
from markupsafe import Markup

from deck_funnels.data.schemas import ChartOptions, FunnelData
from deck_funnels.exceptions import RendererError
from deck_funnels.renderers.base import ChartRenderer

logger = logging.getLogger(__name__)


# =============================================================================
# TEMPLATE
# =============================================================================


MOUNT_TEMPLATE = """\
<script type="application/json" class="funnel-graph-spec" data-spec-for="{{ container_id }}">{{ spec | tojson }}</script>
<script class="funnel-graph-bootstrap">
(function () {
  var spec = JSON.parse(document.currentScript.previousElementSibling.textContent);
  var graph = new FunnelGraph(spec);
  graph.draw({{ draw_options | tojson }});
}());
</script>
"""


def _tojson(value: Any) -> Markup:
    """JSON for embedding inside <script> elements."""
    text = json.dumps(value, default=str)
    return Markup(text.replace("</", "<\\/"))


def get_template_env() -> Environment:
    """Get the Jinja2 environment used for mount markup."""
    env = Environment(
        autoescape=select_autoescape(["html", "xml"], default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["tojson"] = _tojson
    return env


# =============================================================================
# SPEC AND HANDLE
# =============================================================================


@dataclass
class FunnelGraphSpec:
    """Constructor options for a FunnelGraph instance."""

    container_id: str
    data: FunnelData
    options: ChartOptions

    def to_dict(self) -> dict[str, Any]:
        """Convert to the FunnelGraph constructor options."""
        data = self.data.to_dict()
        if self.data.value_formatter is not None:
            data["formattedValues"] = [
                [self.data.format_value(v) for v in row] for row in self.data.values
            ]
        return {
            "container": f"#{self.container_id}",
            "gradientDirection": self.options.gradient_direction.value,
            "data": data,
            "displayPercent": self.options.display_percent,
            "direction": self.options.direction.value,
            "width": self.options.width,
            "height": self.options.height,
            "responsive": self.options.responsive,
        }


@dataclass
class FunnelGraphHandle:
    """A created FunnelGraph instance bound to a mount point."""

    mount: Any
    spec: FunnelGraphSpec
    draw_count: int = 0
    last_draw_options: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# RENDERER
# =============================================================================


class FunnelGraphRenderer(ChartRenderer):
    """Writes FunnelGraph mount markup into MountPoint elements."""

    def __init__(self) -> None:
        self._template = get_template_env().from_string(MOUNT_TEMPLATE)

    def create(self, mount: Any, data: FunnelData, options: ChartOptions) -> FunnelGraphHandle:
        if mount is None:
            raise RendererError("Cannot create a chart without a mount point", operation="create")
        spec = FunnelGraphSpec(container_id=mount.id, data=data, options=options)
        return FunnelGraphHandle(mount=mount, spec=spec)

    def redraw(
        self,
        handle: FunnelGraphHandle,
        *,
        animation: bool,
        animation_duration: int,
    ) -> None:
        draw_options = {"animation": animation, "animationDuration": animation_duration}
        try:
            markup = self.render_markup(handle.spec, draw_options)
        except (TypeError, ValueError) as e:
            raise RendererError(
                f"Could not render chart markup: {e}",
                container_id=handle.spec.container_id,
                operation="redraw",
            ) from e

        # Redrawing replaces whatever an earlier draw left behind
        handle.mount.clear_rendered()
        handle.mount.insert_rendered(markup)
        handle.draw_count += 1
        handle.last_draw_options = draw_options

    def teardown(self, handle: FunnelGraphHandle) -> None:
        handle.mount.clear_rendered()
        logger.debug(f"Cleared rendered content of #{handle.spec.container_id}")

    def render_markup(self, spec: FunnelGraphSpec, draw_options: dict[str, Any]) -> str:
        """Render the mount markup for a spec."""
        return self._template.render(
            container_id=spec.container_id,
            spec=spec.to_dict(),
            draw_options=draw_options,
        )
