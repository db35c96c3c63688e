"""
Drawing surfaces.

Renderers describe a chart as a list of draw commands (points, rectangles,
arcs, text) in data coordinates, plus interaction bindings keyed to the datum
that produced each mark. A surface records those commands; the Altair and
Plotly subclasses compile them into a figure Streamlit can display and turn
the selection Streamlit reports back into the bound ChartEvents.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import altair as alt
import pandas as pd
import plotly.graph_objects as go

from heart_explorer.config import BACKENDS, HOVER_GROWTH, SLICE_STROKE
from heart_explorer.log import get_logger

logger = get_logger(__name__)

CLICK = "click"
HOVER = "hover"

Tooltip = Tuple[str, ...]


@dataclass(frozen=True)
class ChartEvent:
    """A hover or click on a drawn mark, addressed by its datum key."""
    chart: str
    kind: str
    key: str
    value: Any = None


@dataclass(frozen=True)
class Mark:
    kind: str
    attrs: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, name):
        return self.attrs[name]


class Surface:
    """Records draw commands and interaction bindings for one chart."""

    def __init__(self, chart: str, height: int = 300):
        self.chart = chart
        self.height = height
        self.clear()

    def clear(self) -> None:
        self.marks: List[Mark] = []
        self.bindings: Dict[Tuple[str, str], ChartEvent] = {}
        self.x_domain: Optional[Tuple[float, float]] = None
        self.y_domain: Optional[Tuple[float, float]] = None
        self.x_title: Optional[str] = None
        self.y_title: Optional[str] = None

    # ---- draw commands -----------------------------------------------------

    def axes(self, x_domain=None, y_domain=None, x_title=None, y_title=None) -> None:
        self.x_domain = tuple(x_domain) if x_domain is not None else None
        self.y_domain = tuple(y_domain) if y_domain is not None else None
        self.x_title = x_title
        self.y_title = y_title

    def point(self, x, y, *, radius: float, color: str, stroke: Optional[str] = None,
              stroke_width: float = 0, tooltip: Tooltip = (), key: Optional[str] = None) -> None:
        self.marks.append(Mark("point", dict(
            x=x, y=y, radius=radius, color=color, stroke=stroke,
            stroke_width=stroke_width, tooltip=tuple(tooltip), key=key,
        )))

    def rect(self, x0, x1, y0, y1, *, color: str, tooltip: Tooltip = (),
             key: Optional[str] = None) -> None:
        self.marks.append(Mark("rect", dict(
            x0=x0, x1=x1, y0=y0, y1=y1, color=color, tooltip=tuple(tooltip), key=key,
        )))

    def arc(self, start: float, end: float, *, inner: float, outer: float, color: str,
            opacity: float = 1.0, tooltip: Tooltip = (), key: Optional[str] = None) -> None:
        """Annular sector; angles in radians, clockwise from 12 o'clock."""
        self.marks.append(Mark("arc", dict(
            start=start, end=end, inner=inner, outer=outer, color=color,
            opacity=opacity, tooltip=tuple(tooltip), key=key,
        )))

    def text(self, x, y, label: str, *, color: str, size: int = 12, dy: int = 0,
             bold: bool = False) -> None:
        self.marks.append(Mark("text", dict(
            x=x, y=y, label=label, color=color, size=size, dy=dy, bold=bold,
        )))

    def bind(self, kind: str, key: str, value: Any = None) -> ChartEvent:
        """Attach a hover/click interaction to the mark drawn for ``key``."""
        event = ChartEvent(self.chart, kind, str(key), value)
        self.bindings[(kind, str(key))] = event
        return event

    # ---- queries -----------------------------------------------------------

    @property
    def empty(self) -> bool:
        return not self.marks

    def marks_of(self, kind: str) -> List[Mark]:
        return [m for m in self.marks if m.kind == kind]

    def interactive(self, kind: str = CLICK) -> bool:
        return any(k == kind for k, _ in self.bindings)

    def events_for(self, keys: Sequence[str], kind: str = CLICK) -> List[ChartEvent]:
        """Bound events for the given datum keys; unknown keys are ignored."""
        events = []
        for key in keys:
            event = self.bindings.get((kind, str(key)))
            if event is not None:
                events.append(event)
        return events

    def figure(self):
        raise NotImplementedError

    def selected_keys(self, selection: Optional[Mapping]) -> List[str]:
        raise NotImplementedError


def _frame(marks: Sequence[Mark]) -> pd.DataFrame:
    return pd.DataFrame([m.attrs for m in marks])


def _tooltip_text(lines: Tooltip, sep: str) -> str:
    return sep.join(lines)


# =============================================================================
# Altair
# =============================================================================

class AltairSurface(Surface):
    """Compiles draw commands into a layered Altair chart."""

    SELECTION = "pick"
    # Pointer tracking stays in the browser; it is never reported to Streamlit
    HOVER_SELECTION = "hover"

    def _scale(self, domain):
        return alt.Scale(domain=list(domain)) if domain is not None else alt.Undefined

    def _bound(self, kind: str, marks: Sequence[Mark]) -> bool:
        return any((kind, m["key"]) in self.bindings for m in marks if m["key"] is not None)

    def _selectable(self, layer, marks: Sequence[Mark]):
        if self._bound(CLICK, marks):
            return layer.add_params(
                alt.selection_point(name=self.SELECTION, fields=["key"], on="click")
            )
        return layer

    def figure(self) -> Optional[alt.LayerChart]:
        if self.empty:
            return None

        x = dict(scale=self._scale(self.x_domain), title=self.x_title)
        y = dict(scale=self._scale(self.y_domain), title=self.y_title)
        layers = []

        points = self.marks_of("point")
        if points:
            df = _frame(points).assign(
                size=lambda d: math.pi * d["radius"] ** 2,
                stroke=lambda d: d["stroke"].fillna("transparent"),
                tooltip=lambda d: d["tooltip"].apply(_tooltip_text, sep=" · "),
            )
            layer = alt.Chart(df).mark_circle(opacity=1, clip=True).encode(
                x=alt.X("x:Q", **x),
                y=alt.Y("y:Q", **y),
                size=alt.Size("size:Q", scale=None, legend=None),
                color=alt.Color("color:N", scale=None),
                stroke=alt.Stroke("stroke:N", scale=None),
                strokeWidth=alt.StrokeWidth("stroke_width:Q", scale=None),
                tooltip="tooltip:N",
            )
            layers.append(self._selectable(layer, points))

        rects = self.marks_of("rect")
        if rects:
            df = _frame(rects).assign(
                tooltip=lambda d: d["tooltip"].apply(_tooltip_text, sep=" · "),
            )
            clickable = self.interactive(CLICK)
            layer = alt.Chart(df).mark_rect(
                cornerRadius=2, stroke="white", strokeWidth=1,
                cursor="pointer" if clickable else "default",
            ).encode(
                x=alt.X("x0:Q", **x),
                x2="x1",
                y=alt.Y("y0:Q", **y),
                y2="y1",
                color=alt.Color("color:N", scale=None),
                tooltip="tooltip:N",
            )
            layers.append(self._selectable(layer, rects))

        arcs = self.marks_of("arc")
        if arcs:
            df = _frame(arcs).assign(
                tooltip=lambda d: d["tooltip"].apply(_tooltip_text, sep=" · "),
            )
            layer = alt.Chart(df).mark_arc(
                stroke=SLICE_STROKE, strokeWidth=2, cursor="pointer",
            ).encode(
                theta=alt.Theta("start:Q", scale=None),
                theta2=alt.Theta2("end"),
                radius=alt.Radius("outer:Q", scale=None),
                radius2=alt.Radius2("inner"),
                color=alt.Color("color:N", scale=None),
                opacity=alt.Opacity("opacity:Q", scale=None),
                tooltip="tooltip:N",
            )
            if self._bound(HOVER, arcs):
                outer = max(m["outer"] for m in arcs)
                hover = alt.selection_point(
                    name=self.HOVER_SELECTION, fields=["key"],
                    on="pointerover", clear="pointerout",
                )
                layer = layer.encode(
                    radius=alt.condition(
                        hover,
                        alt.value(outer + HOVER_GROWTH),
                        alt.value(outer),
                        empty=False,
                    ),
                    strokeWidth=alt.condition(hover, alt.value(3), alt.value(2), empty=False),
                ).add_params(hover)
            layers.append(self._selectable(layer, arcs))

        for mark in self.marks_of("text"):
            df = pd.DataFrame([{"x": mark["x"], "y": mark["y"], "label": mark["label"]}])
            layer = alt.Chart(df).mark_text(
                dy=mark["dy"], clip=True, fontSize=mark["size"], color=mark["color"],
                fontWeight="bold" if mark["bold"] else "normal",
            ).encode(
                x=alt.X("x:Q", **x),
                y=alt.Y("y:Q", **y),
                text="label:N",
            )
            layers.append(layer)

        return alt.layer(*layers).properties(height=self.height)

    def selected_keys(self, selection: Optional[Mapping]) -> List[str]:
        """Datum keys from ``event.selection`` of ``st.altair_chart``."""
        points = (selection or {}).get(self.SELECTION) or []
        return [str(p["key"]) for p in points if isinstance(p, Mapping) and "key" in p]


# =============================================================================
# Plotly
# =============================================================================

def with_alpha(color: str, opacity: float) -> str:
    """Apply an opacity to a '#rrggbb' color; other formats are returned as-is."""
    if opacity >= 1 or not (color.startswith("#") and len(color) == 7):
        return color
    r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
    return f"rgba({r}, {g}, {b}, {opacity})"


class PlotlySurface(Surface):
    """Compiles draw commands into a plotly Figure."""

    def figure(self) -> Optional[go.Figure]:
        if self.empty:
            return None

        fig = go.Figure()

        points = self.marks_of("point")
        if points:
            fig.add_trace(go.Scatter(
                x=[m["x"] for m in points],
                y=[m["y"] for m in points],
                mode="markers",
                marker=dict(
                    size=[2 * m["radius"] for m in points],
                    color=[m["color"] for m in points],
                    line=dict(
                        color=[m["stroke"] or "rgba(0, 0, 0, 0)" for m in points],
                        width=[m["stroke_width"] for m in points],
                    ),
                ),
                customdata=[m["key"] for m in points],
                hovertext=[_tooltip_text(m["tooltip"], "<br>") for m in points],
                hoverinfo="text",
                showlegend=False,
            ))

        rects = self.marks_of("rect")
        if rects:
            fig.add_trace(go.Bar(
                x=[(m["x0"] + m["x1"]) / 2 for m in rects],
                y=[m["y1"] - m["y0"] for m in rects],
                base=[m["y0"] for m in rects],
                width=[m["x1"] - m["x0"] for m in rects],
                marker=dict(color=[m["color"] for m in rects], line=dict(color="white", width=1)),
                customdata=[m["key"] for m in rects],
                hovertext=[_tooltip_text(m["tooltip"], "<br>") for m in rects],
                hoverinfo="text",
                showlegend=False,
            ))

        arcs = self.marks_of("arc")
        if arcs:
            base = min(m["outer"] for m in arcs)
            fig.add_trace(go.Pie(
                labels=[m["key"] if m["key"] is not None else str(i) for i, m in enumerate(arcs)],
                values=[m["end"] - m["start"] for m in arcs],
                hole=arcs[0]["inner"] / base if base else 0,
                sort=False,
                direction="clockwise",
                rotation=0,
                pull=[(m["outer"] - base) / base if base else 0 for m in arcs],
                marker=dict(
                    colors=[with_alpha(m["color"], m["opacity"]) for m in arcs],
                    line=dict(color=SLICE_STROKE, width=2),
                ),
                hovertext=[_tooltip_text(m["tooltip"], "<br>") for m in arcs],
                hoverinfo="text",
                textinfo="none",
                showlegend=False,
            ))

        texts = self.marks_of("text")
        if texts:
            fig.add_trace(go.Scatter(
                x=[m["x"] for m in texts],
                y=[m["y"] for m in texts],
                mode="text",
                text=[f"<b>{m['label']}</b>" if m["bold"] else m["label"] for m in texts],
                textposition="top center",
                textfont=dict(color=[m["color"] for m in texts], size=[m["size"] for m in texts]),
                hoverinfo="skip",
                showlegend=False,
            ))

        fig.update_layout(
            height=self.height,
            margin=dict(t=20, r=20, b=40, l=50),
            bargap=0,
            clickmode="event+select",
            plot_bgcolor="rgba(0, 0, 0, 0)",
        )
        if self.x_domain is not None:
            fig.update_xaxes(range=list(self.x_domain))
        if self.y_domain is not None:
            fig.update_yaxes(range=list(self.y_domain))
        if self.x_title:
            fig.update_xaxes(title_text=self.x_title)
        if self.y_title:
            fig.update_yaxes(title_text=self.y_title)
        return fig

    def selected_keys(self, selection: Optional[Mapping]) -> List[str]:
        """Datum keys from ``event.selection`` of ``st.plotly_chart``."""
        keys = []
        for point in (selection or {}).get("points", []) or []:
            custom = point.get("customdata")
            if isinstance(custom, (list, tuple)):
                custom = custom[0] if custom else None
            if custom is None:
                custom = point.get("label")
            if custom is not None:
                keys.append(str(custom))
        return keys


def make_surface(chart: str, height: int = 300, backend: str = "altair") -> Surface:
    """Create the surface for ``backend`` ('altair' or 'plotly')."""
    if backend not in BACKENDS:
        logger.warning(f"Unknown chart backend '{backend}', using altair")
        backend = "altair"
    cls = PlotlySurface if backend == "plotly" else AltairSurface
    return cls(chart, height=height)
