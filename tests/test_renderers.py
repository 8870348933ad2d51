import math

import matplotlib.pyplot as plt
import pytest

from starfield.astrometry import project
from starfield.catalog import CatalogLoader
from starfield.constellations import ConstellationRegistry, constellation
from starfield.index import StarCatalogIndex
from starfield.models import BinaryFixedRecord
from starfield.overlay import OverlayController
from starfield.renderers.plotly_3d import render_plotly_chart
from starfield.renderers.scene import SceneRenderer, to_radec_deg
from starfield.renderers.static import render_static_chart, save_static_chart


@pytest.fixture
def scene(binary_catalog, record):
    catalog = StarCatalogIndex(
        CatalogLoader(BinaryFixedRecord()).load(
            binary_catalog(
                [record(1, ra=0.5, dec=0.1), record(2, ra=0.7, dec=0.3), record(3, ra=6.2, dec=-0.1)]
            )
        ).stars
    )
    scene = SceneRenderer()
    controller = OverlayController(
        catalog,
        ConstellationRegistry([constellation("A", [1, 2, 3], [1, 2, 1, 3])]),
        scene,
    )
    controller.place_stars()
    controller.apply_toggle(0)
    return scene


def test_to_radec_inverts_projection():
    ra, dec = to_radec_deg(project(math.radians(250.0), math.radians(-40.0)))
    assert ra == pytest.approx(250.0)
    assert dec == pytest.approx(-40.0)


def test_scene_handles_are_distinct(scene):
    assert len(scene.stars) == 3
    assert len(scene.groups) == 1
    assert not set(scene.stars) & set(scene.groups)
    (group,) = scene.groups.values()
    assert group.name == "A"
    assert len(group.lines) == 2


def test_static_chart(scene):
    fig = render_static_chart(scene, chart_size=4)
    ax = fig.axes[0]
    # The 1–3 segment wraps across RA 0h and is left out
    assert len(ax.lines) == 1
    assert len(ax.collections) == 1
    assert ax.get_xlim() == (360, 0)
    plt.close(fig)


def test_save_static_chart(scene, tmp_path):
    out = save_static_chart(scene, tmp_path / "charts" / "sky.png")
    assert out.exists()
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_static_chart_of_empty_scene():
    fig = render_static_chart(SceneRenderer())
    assert len(fig.axes[0].collections) == 0
    plt.close(fig)


def test_plotly_chart(scene):
    fig = render_plotly_chart(scene)
    line_trace, star_trace = fig.data
    assert star_trace.name == "stars"
    assert len(star_trace.x) == 3
    assert list(star_trace.text) == ["HR 1", "HR 2", "HR 3"]
    # two segments, each followed by a None separator
    assert len(line_trace.x) == 6
    assert line_trace.x[2] is None
    assert star_trace.marker.color[0].startswith("rgb(")
