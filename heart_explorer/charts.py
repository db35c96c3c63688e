"""
Chart renderers.

Each renderer clears its surface and redraws it from a derived view. None of
them touch application state: clicks are bound to the drawn marks as
ChartEvents, which the router turns into store mutations. Hover bindings only
mark what the surface highlights under the pointer.
"""

import math
from typing import List, Optional, Sequence, Tuple

from heart_explorer.config import (
    BIN_COLOR, DISEASE_COLOR, DIMMED_OPACITY, HEALTHY_COLOR, LABEL_COLOR,
    PATIENT_COLOR, PIE_PALETTE, SCATTER_X_DOMAIN, SCATTER_Y_DOMAIN,
)
from heart_explorer.metrics import Bin, is_number
from heart_explorer.surfaces import CLICK, HOVER, Surface
from heart_explorer.views import HistogramView, PieView, ScatterView


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def bin_key(b: Bin) -> str:
    """Stable key for a histogram bar, based on its lower bound."""
    return f"{b.lower:g}"


def pie_angles(values: Sequence[float]) -> List[Tuple[float, float]]:
    """
    Start/end angles (radians, clockwise from 12 o'clock) for each slice.

    Args:
        values: Slice sizes, in drawing order

    Returns:
        list of (start, end) pairs covering [0, 2*pi]
    """
    total = sum(values)
    angles = []
    start = 0.0
    for value in values:
        span = 2 * math.pi * value / total if total else 0.0
        angles.append((start, start + span))
        start += span
    return angles


def slice_colors(categories: Sequence[str]) -> List[str]:
    """Palette colors by first-seen position, cycling when there are more categories."""
    return [PIE_PALETTE[i % len(PIE_PALETTE)] for i in range(len(categories))]


def _fmt(value) -> str:
    return f"{value:g}" if is_number(value) else "–"


# -----------------------------------------------------------------------------
# Renderers
# -----------------------------------------------------------------------------

def render_scatter(view: Optional[ScatterView], surface: Surface) -> Surface:
    """Age vs MaxHR, one point per filtered record plus the patient on top."""
    surface.clear()
    if view is None:
        return surface

    surface.axes(SCATTER_X_DOMAIN, SCATTER_Y_DOMAIN, x_title="Age", y_title="Max HR")

    records = view.records[["Age", "MaxHR", "HeartDisease"]]
    for idx, age, hr, disease in records.itertuples(index=True, name=None):
        # Records missing either coordinate cannot be placed
        if not (is_number(age) and is_number(hr)):
            continue
        surface.point(
            age, hr,
            radius=4,
            color=DISEASE_COLOR if disease == 1 else HEALTHY_COLOR,
            tooltip=(f"Age: {_fmt(age)}", f"HR: {_fmt(hr)}",
                     f"Disease: {'Yes' if disease == 1 else 'No'}"),
            key=str(idx),
        )

    age, hr = view.patient.get("Age"), view.patient.get("MaxHR")
    if is_number(age) and is_number(hr):
        surface.point(
            age, hr,
            radius=10,
            color=PATIENT_COLOR,
            stroke="#ffffff",
            stroke_width=2,
            tooltip=("YOU", f"Age: {_fmt(age)}", f"HR: {_fmt(hr)}"),
        )
        surface.text(age, hr, "YOU", color=LABEL_COLOR, size=12, dy=-15, bold=True)

    return surface


def render_histogram(view: Optional[HistogramView], surface: Surface,
                     interactive: bool = False) -> Surface:
    """
    Draw a histogram, highlighting the bin holding the patient's value.

    Args:
        view: Histogram view for one metric (None draws nothing)
        surface: Target surface
        interactive: Bind click events to the bars (Age histogram only)

    Returns:
        Surface: The redrawn surface
    """
    surface.clear()
    if view is None:
        return surface

    surface.axes(
        x_domain=view.domain,
        y_domain=(0, max(view.max_count, 1)),
        x_title=view.metric,
        y_title="Records",
    )

    for i, b in enumerate(view.bins):
        key = bin_key(b)
        surface.rect(
            b.lower, b.upper, 0, b.count,
            color=PATIENT_COLOR if i == view.patient_bin else BIN_COLOR,
            tooltip=(f"{view.metric}: {b.lower:g}–{b.upper:g}", f"Records: {b.count}"),
            key=key,
        )
        if interactive:
            surface.bind(CLICK, key, (b.lower, b.upper))

    return surface


def render_pie(view: Optional[PieView], surface: Surface,
               selected: Optional[str] = None) -> Surface:
    """
    Donut chart of chest-pain types.

    Slices grow under the pointer (a hover binding the surface highlights on
    its own); when a chest-pain filter is active, every other slice is dimmed.
    """
    surface.clear()
    if view is None:
        return surface

    outer = surface.height / 2 - 10
    inner = outer * 0.5

    categories = view.categories
    counts = [count for _, count in view.counts]
    for category, count, (start, end), color in zip(
            categories, counts, pie_angles(counts), slice_colors(categories)):
        surface.arc(
            start, end,
            inner=inner,
            outer=outer,
            color=color,
            opacity=1.0 if selected is None or category == selected else DIMMED_OPACITY,
            tooltip=(f"{category}: {count}",),
            key=category,
        )
        surface.bind(CLICK, category, category)
        surface.bind(HOVER, category, category)

    return surface
