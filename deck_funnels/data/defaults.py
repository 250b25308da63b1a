"""
Built-in datasets and palettes.

The fallback dataset keeps the "default" funnel demonstrable without any
backing data files.
"""

from deck_funnels.data.schemas import FunnelData


DEFAULT_DATA_SOURCE = "default"

# Fixed palette cycled per stage for sources without colors
FUNNEL_PALETTE: tuple[str, ...] = (
    "#016391",
    "#e24a38",
    "#feb929",
    "#d9bbf9",
    "#4299e1",
    "#48bb78",
)

# HSL parameters for randomly synthesized colors
RANDOM_SATURATION = 70
RANDOM_LIGHTNESS = 60


FALLBACK_FUNNEL = FunnelData(
    labels=["Awareness", "Interest", "Desire", "Action"],
    sub_labels=["US", "India", "Canada"],
    colors=[
        ["#FFB178", "#FF78B1", "#FF3C8E"],
        ["#A0BBFF", "#EC77FF"],
        ["#A0F9FF"],
    ],
    values=[
        [138028, 29415, 23488],
        [91878, 19516, 15805],
        [10098, 2112, 1759],
        [6827, 1422, 1226],
    ],
)
