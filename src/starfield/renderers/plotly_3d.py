"""Plotly 3D interactive star sphere renderer.

Stars sit on the unit sphere exactly as projected. Supports drag
rotation and wheel zoom.
"""

import plotly.graph_objects as go

from starfield.models import RGB
from starfield.renderers.scene import SceneRenderer

_BG = "#050a1a"
_LINE_COLOR = "#7ec8e3"


def _css(color: RGB) -> str:
    r, g, b = (round(c * 255) for c in color)
    return f"rgb({r},{g},{b})"


def render_plotly_chart(scene: SceneRenderer) -> go.Figure:
    """Render a scene as a Plotly 3D figure.

    Our projection puts Dec along +y; Plotly's vertical axis is z, so the
    y and z components are swapped on the way out.

    Args:
        scene: Star visuals and overlay lines to draw.

    Returns:
        Plotly Figure object.
    """
    visuals = list(scene.stars.values())
    star_trace = go.Scatter3d(
        x=[v.position[0] for v in visuals],
        y=[v.position[2] for v in visuals],
        z=[v.position[1] for v in visuals],
        mode="markers",
        marker=dict(
            size=[max(v.size, 0.1) for v in visuals],
            color=[_css(v.color) for v in visuals],
            opacity=0.9,
            line=dict(width=0),
        ),
        text=[f"HR {v.catalog_number}" for v in visuals],
        hoverinfo="text",
        name="stars",
    )

    # Constellation lines: single trace using None separators
    lx: list[float | None] = []
    ly: list[float | None] = []
    lz: list[float | None] = []
    for start, end in scene.iter_lines():
        lx += [start[0], end[0], None]
        ly += [start[2], end[2], None]
        lz += [start[1], end[1], None]

    line_trace = go.Scatter3d(
        x=lx,
        y=ly,
        z=lz,
        mode="lines",
        line=dict(color=_LINE_COLOR, width=2),
        opacity=0.6,
        hoverinfo="skip",
        name="constellations",
    )

    fig = go.Figure(data=[line_trace, star_trace])

    axis = dict(visible=False, range=[-1.05, 1.05])
    fig.update_layout(
        paper_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        scene=dict(xaxis=axis, yaxis=axis, zaxis=axis, aspectmode="cube", bgcolor=_BG),
    )

    return fig
