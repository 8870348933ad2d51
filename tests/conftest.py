import json

import numpy as np
import pytest

from starfield.catalog import RECORD
from starfield.renderers.scene import SceneRenderer


class RecordingRenderer(SceneRenderer):
    """Scene renderer that also logs every protocol call in order."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple] = []

    def create_star(self, star, size):
        handle = super().create_star(star, size)
        self.calls.append(("create_star", star.catalog_number, size))
        return handle

    def set_star_color(self, handle, color):
        super().set_star_color(handle, color)
        self.calls.append(("set_star_color", self.stars[handle].catalog_number, color))

    def set_star_size(self, handle, size):
        super().set_star_size(handle, size)
        self.calls.append(("set_star_size", self.stars[handle].catalog_number, size))

    def create_line_group(self, name):
        group = super().create_line_group(name)
        self.calls.append(("create_line_group", name))
        return group

    def add_line(self, group, start, end):
        super().add_line(group, start, end)
        self.calls.append(("add_line", start, end))

    def destroy_line_group(self, group):
        super().destroy_line_group(group)
        self.calls.append(("destroy_line_group", group))

    def colors(self) -> dict[int, tuple[float, float, float]]:
        return {v.catalog_number: v.color for v in self.stars.values()}

    def snapshot(self):
        """Comparable copy of everything visible."""
        return (
            sorted((v.catalog_number, v.position, v.color, v.size) for v in self.stars.values()),
            sorted((g.name, tuple(g.lines)) for g in self.groups.values()),
        )


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


def _binary(records, neg_count=None, header_tail=(0, 0, 0, 0)) -> bytes:
    count = -len(records) if neg_count is None else neg_count
    header = np.array([0, 0, count, *header_tail], dtype="<i4")
    body = np.array(records, dtype=RECORD)
    return header.tobytes() + body.tobytes()


@pytest.fixture
def binary_catalog():
    """Factory: list of (hr, ra, dec, class_byte, index_byte, mag×100, pm_ra, pm_dec) → bytes."""
    return _binary


def star_record(hr, ra=0.0, dec=0.0, sptype="G2", mag=100, pm=(0.0, 0.0)):
    return (float(hr), ra, dec, ord(sptype[0]), ord(sptype[1]), mag, pm[0], pm[1])


@pytest.fixture
def record():
    return star_record


BSC5_ROWS = [
    {
        "HR": "15", "Name": "21Alp And", "RAh": "00", "RAm": "08", "RAs": "23.3",
        "DE-": "+", "DEd": "29", "DEm": "05", "DEs": "26", "Vmag": "2.06",
        "SpType": "B8IVpMnHg", "pmRA": "0.137", "pmDE": "-0.158",
        "Common": "Alpheratz", "Constellation": "Andromeda", "K": "13000",
    },
    {
        "HR": "1713", "Name": "19Bet Ori", "RAh": "05", "RAm": "14", "RAs": "32.3",
        "DE-": "-", "DEd": "08", "DEm": "12", "DEs": "06", "Vmag": "0.12",
        "SpType": "B8Ia:", "pmRA": "0.001", "pmDE": "-0.001", "Common": "Rigel",
    },
    {
        "HR": "2061", "Name": "58Alp Ori", "RAh": "05", "RAm": "55", "RAs": "10.3",
        "DE-": "+", "DEd": "07", "DEm": "24", "DEs": "25", "Vmag": "0.50",
        "SpType": "M1-2Ia-Iab", "Common": "Betelgeuse",
    },
]


@pytest.fixture
def bsc5_rows():
    return [dict(r) for r in BSC5_ROWS]


@pytest.fixture
def bsc5_json(bsc5_rows) -> bytes:
    return json.dumps(bsc5_rows).encode("utf-8")
