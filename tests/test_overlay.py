import logging
import math

import pytest

from starfield import astrometry
from starfield.catalog import CatalogLoader
from starfield.constellations import ConstellationRegistry, constellation
from starfield.errors import InvalidConstellationIndex
from starfield.index import StarCatalogIndex
from starfield.models import BinaryFixedRecord, StructuredText
from starfield.overlay import OverlayController, key_to_index

WHITE = (1.0, 1.0, 1.0)


def _catalog(data):
    return StarCatalogIndex(CatalogLoader(BinaryFixedRecord()).load(data).stars)


@pytest.fixture
def two_star_catalog(binary_catalog, record):
    return _catalog(binary_catalog([record(1), record(2)]))


@pytest.fixture
def sky_catalog(binary_catalog, record):
    return _catalog(
        binary_catalog(
            [
                record(1, sptype="B3", mag=50),
                record(2, ra=0.3, sptype="K5", mag=400),
                record(3, ra=0.3, dec=0.4, sptype="M2", mag=600),
                record(4, ra=2.0, dec=-0.2, sptype="A0", mag=-20),
                record(5, ra=4.0, dec=1.0, sptype="F8", mag=300),
            ]
        )
    )


def _controller(catalog, constellations, renderer, **kwargs):
    controller = OverlayController(catalog, ConstellationRegistry(constellations), renderer, **kwargs)
    controller.place_stars()
    return controller


def test_two_star_scenario(two_star_catalog, renderer):
    controller = _controller(
        two_star_catalog, [constellation("Pair", [1, 2], [1, 2])], renderer
    )
    original = renderer.colors()
    assert original == {1: astrometry.spectral_color("G", 0.2), 2: astrometry.spectral_color("G", 0.2)}
    renderer.calls.clear()

    shown = controller.apply_toggle(0)

    assert shown.visible
    assert shown.lines_drawn == 1
    assert shown.recolored == 2
    assert shown.missing == ()
    assert [c for c in renderer.calls if c[0] == "add_line"] == [
        ("add_line", (1.0, 0.0, 0.0), (1.0, 0.0, 0.0))
    ]
    recolors = [c for c in renderer.calls if c[0] == "set_star_color"]
    assert recolors == [("set_star_color", 1, WHITE), ("set_star_color", 2, WHITE)]
    assert renderer.colors() == {1: WHITE, 2: WHITE}
    assert len(renderer.groups) == 1
    assert controller.is_visible(0)

    hidden = controller.apply_toggle(0)

    assert not hidden.visible
    assert hidden.lines_drawn == 0
    assert renderer.groups == {}
    assert renderer.colors() == original
    assert not controller.is_visible(0)


def test_toggle_twice_restores_everything(sky_catalog, renderer):
    controller = _controller(
        sky_catalog,
        [
            constellation("Kite", [1, 2, 3], [1, 2, 2, 3, 3, 1]),
            constellation("Line", [4, 5], [4, 5]),
        ],
        renderer,
    )
    controller.apply_toggle(1)
    before = renderer.snapshot()

    controller.apply_toggle(0)
    assert renderer.snapshot() != before
    controller.apply_toggle(0)

    assert renderer.snapshot() == before
    assert controller.registry.visible_indices() == (1,)


def test_highlight_never_mutates_star(sky_catalog, renderer):
    controller = _controller(sky_catalog, [constellation("Kite", [1, 2], [1, 2])], renderer)
    star = sky_catalog.by_catalog_number(1)
    color = star.color
    controller.apply_toggle(0)
    assert sky_catalog.by_catalog_number(1).color == color
    assert color != WHITE


def test_constellations_are_independent(sky_catalog, renderer):
    controller = _controller(
        sky_catalog,
        [constellation("A", [1, 2], [1, 2]), constellation("B", [3, 4], [3, 4])],
        renderer,
    )
    controller.apply_toggle(0)
    controller.apply_toggle(1)
    assert len(renderer.groups) == 2

    controller.apply_toggle(0)
    assert not controller.is_visible(0)
    assert controller.is_visible(1)
    assert [g.name for g in renderer.groups.values()] == ["B"]
    assert renderer.colors()[3] == WHITE
    assert renderer.colors()[1] == sky_catalog.by_catalog_number(1).color


def test_shared_vertex_is_restored_on_hide(sky_catalog, renderer):
    controller = _controller(
        sky_catalog,
        [constellation("A", [1, 2], [1, 2]), constellation("B", [2, 3], [2, 3])],
        renderer,
    )
    controller.apply_toggle(0)
    controller.apply_toggle(1)
    controller.apply_toggle(1)
    assert renderer.colors()[2] == sky_catalog.by_catalog_number(2).color


def test_invalid_index_changes_nothing(sky_catalog, renderer):
    table = [constellation(f"C{i}", [1, 2], [1, 2]) for i in range(20)]
    controller = _controller(sky_catalog, table, renderer)
    controller.apply_toggle(3)
    before = renderer.snapshot()
    calls = len(renderer.calls)

    with pytest.raises(InvalidConstellationIndex):
        controller.apply_toggle(999)

    assert renderer.snapshot() == before
    assert len(renderer.calls) == calls
    assert controller.registry.visible_indices() == (3,)


def test_missing_entries_are_skipped(sky_catalog, renderer, caplog):
    controller = _controller(
        sky_catalog,
        [constellation("Gappy", [1, 2, 42], [1, 42, 1, 2, 2, 43])],
        renderer,
    )
    with caplog.at_level(logging.WARNING, logger="starfield.overlay"):
        result = controller.apply_toggle(0)

    assert result.visible
    assert result.lines_drawn == 1
    assert result.recolored == 2
    assert sorted(m.catalog_number for m in result.missing) == [42, 42, 43]
    assert "HR 42" in caplog.text
    assert controller.visible_vertex_catalog_numbers(0) == (1, 2)

    hidden = controller.apply_toggle(0)
    assert [m.catalog_number for m in hidden.missing] == [42]
    assert renderer.groups == {}


def test_line_inset(sky_catalog, renderer):
    controller = _controller(
        sky_catalog, [constellation("A", [1, 4], [1, 4])], renderer, line_inset=0.05
    )
    controller.apply_toggle(0)
    ((start, end),) = list(renderer.iter_lines())
    p1 = sky_catalog.by_catalog_number(1).position
    p4 = sky_catalog.by_catalog_number(4).position
    assert math.dist(start, p1) == pytest.approx(0.05)
    assert math.dist(end, p4) == pytest.approx(0.05)
    assert math.dist(start, end) == pytest.approx(math.dist(p1, p4) - 0.1)


def test_renderer_failure_rolls_back(sky_catalog, renderer):
    controller = _controller(sky_catalog, [constellation("A", [1, 2], [1, 2])], renderer)
    before = renderer.snapshot()

    def broken(group, start, end):
        raise RuntimeError("gpu lost")

    renderer.add_line = broken
    with pytest.raises(RuntimeError):
        controller.apply_toggle(0)

    assert not controller.is_visible(0)
    assert renderer.snapshot() == before


def test_line_group_failure_leaves_colors(sky_catalog, renderer):
    controller = _controller(sky_catalog, [constellation("A", [1, 2], [1, 2])], renderer)
    before = renderer.snapshot()

    def broken(name):
        raise RuntimeError("out of buffers")

    renderer.create_line_group = broken
    with pytest.raises(RuntimeError):
        controller.apply_toggle(0)

    assert not controller.is_visible(0)
    assert renderer.snapshot() == before


def test_destroy_failure_keeps_constellation_visible(sky_catalog, renderer):
    controller = _controller(sky_catalog, [constellation("A", [1, 2], [1, 2])], renderer)
    controller.apply_toggle(0)
    shown = renderer.snapshot()

    def broken(group):
        raise RuntimeError("context lost")

    renderer.destroy_line_group = broken
    with pytest.raises(RuntimeError):
        controller.apply_toggle(0)

    assert controller.is_visible(0)
    assert renderer.snapshot() == shown

    del renderer.destroy_line_group
    hidden = controller.apply_toggle(0)
    assert not hidden.visible
    assert renderer.groups == {}
    assert renderer.colors()[1] == sky_catalog.by_catalog_number(1).color


def test_toggle_before_placement_is_refused(sky_catalog, renderer):
    controller = OverlayController(
        sky_catalog, ConstellationRegistry([constellation("A", [1], [])]), renderer
    )
    with pytest.raises(RuntimeError):
        controller.apply_toggle(0)
    assert not controller.is_visible(0)


def test_place_stars_once(sky_catalog, renderer):
    controller = OverlayController(sky_catalog, ConstellationRegistry([]), renderer)
    assert controller.place_stars() == 5
    with pytest.raises(RuntimeError):
        controller.place_stars()


def test_placement_uses_display_size(sky_catalog, renderer):
    _controller(sky_catalog, [], renderer, size_min=1.0, size_max=11.0)
    sizes = {c[1]: c[2] for c in renderer.calls if c[0] == "create_star"}
    for hr, size in sizes.items():
        star = sky_catalog.by_catalog_number(hr)
        assert size == pytest.approx(1.0 + 10.0 * star.size)


def test_rebuild_visual_sizes(sky_catalog, renderer):
    controller = _controller(sky_catalog, [], renderer)
    controller.rebuild_visual_sizes(0.0, 100.0)

    for v in renderer.stars.values():
        star = sky_catalog.by_catalog_number(v.catalog_number)
        assert v.size == pytest.approx(100.0 * star.size)
    assert (controller.size_min, controller.size_max) == (0.0, 100.0)


def test_toggle_by_name(sky_catalog, renderer):
    controller = _controller(sky_catalog, [constellation("Kite", [1, 2], [1, 2])], renderer)
    assert controller.toggle_by_name("kite").visible
    with pytest.raises(KeyError):
        controller.toggle_by_name("Nope")


def test_visible_vertex_catalog_numbers_when_hidden(sky_catalog, renderer):
    controller = _controller(sky_catalog, [constellation("Kite", [1, 2], [1, 2])], renderer)
    assert controller.visible_vertex_catalog_numbers(0) == ()


def test_describe_star(sky_catalog, renderer):
    controller = _controller(sky_catalog, [], renderer)
    text = controller.describe_star(2)
    assert text.splitlines()[0] == "Star Name: HR 2"
    assert "Position: (" in text
    assert "Magnitude: 4.00" in text
    assert controller.describe_star(77) is None


def test_describe_star_decimal_magnitude(renderer, bsc5_json):
    catalog = StarCatalogIndex(CatalogLoader(StructuredText()).load(bsc5_json).stars)
    controller = _controller(catalog, [], renderer)
    text = controller.describe_star(1713)
    assert text.splitlines()[0] == "Star Name: Rigel (HR 1713)"
    assert "Magnitude: 0.12" in text


@pytest.mark.parametrize("key, expected", [("0", 0), ("7", 7), ("a", None), ("10", None), ("", None)])
def test_key_to_index(key, expected):
    assert key_to_index(key) == expected
