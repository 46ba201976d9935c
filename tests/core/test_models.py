"""Tests for the immutable document models."""

import dataclasses

import pytest

from rrlabel.core.constants import CalibrationCorners
from rrlabel.core.enums import MarkerCategory
from rrlabel.core.models import (
    Document, Image, Layout, LayoutSize, Marker, Point, inset_calibration, round_coordinate
)


class TestRounding:
    """Half-up rounding of coordinates."""

    @pytest.mark.parametrize("value, expected", [
        (10.6, 11),
        (10.4, 10),
        (10.5, 11),
        (11.5, 12),
        (-10.5, -10),
        (-10.6, -11),
        (0, 0),
    ])
    def test_round_coordinate(self, value, expected):
        assert round_coordinate(value) == expected


class TestLayout:
    def test_ratio_from_named_scale(self):
        assert Layout(scale="HO").ratio == 87
        assert Layout(scale="N").ratio == 160
        assert Layout(scale="Z").ratio == 220
        assert Layout(scale="T").ratio == 450

    def test_explicit_ratio_wins(self):
        assert Layout(scale="HO", scale_ratio=76).ratio == 76

    def test_unknown_scale(self):
        layout = Layout(scale="OO9")
        assert layout.ratio is None
        assert layout.track_mm is None

    def test_track_mm(self):
        assert Layout(scale="HO").track_mm == pytest.approx(1435.0 / 87)
        assert Layout(scale="HO", gauge_mm=1000.0).track_mm == pytest.approx(1000.0 / 87)

    def test_size_unset(self):
        assert LayoutSize().is_unset
        assert not LayoutSize(1200, None).is_unset


class TestDocument:
    def test_defaults(self):
        document = Document()
        assert document.version == 2
        assert document.images == ()
        assert dict(document.calibration) == {}
        assert not document.is_calibrated

    def test_mappings_are_read_only(self):
        document = Document(
            calibration={"rect-0": Point(1, 2)},
            images=[Image("a.jpg", {"m": Marker(1, 2)})],
        )
        with pytest.raises(TypeError):
            document.calibration["rect-1"] = Point(3, 4)
        with pytest.raises(TypeError):
            document.images[0].labels["n"] = Marker(3, 4)
        with pytest.raises(dataclasses.FrozenInstanceError):
            document.version = 3

    def test_not_hashable(self):
        assert Image.__hash__ is None
        assert Document.__hash__ is None
        with pytest.raises(TypeError, match="unhashable"):
            hash(Document())
        with pytest.raises(TypeError, match="unhashable"):
            hash(Image("a.jpg"))
        assert Image("a.jpg") == Image("a.jpg")

    def test_images_become_tuple(self):
        document = Document(images=[Image("a.jpg")])
        assert isinstance(document.images, tuple)

    def test_find_marker(self):
        document = Document(
            calibration={"rect-0": Point(1, 2)},
            images=(Image("a.jpg", {"m": Marker(5, 6, "train")}),),
        )
        assert document.find_marker(MarkerCategory.CALIBRATION, "rect-0") == Point(1, 2)
        assert document.find_marker(MarkerCategory.LABEL, "m") == Marker(5, 6, "train")
        assert document.find_marker(MarkerCategory.LABEL, "m", image_index=3) is None
        assert document.find_marker(MarkerCategory.LABEL, "missing") is None

    def test_image_out_of_range(self):
        document = Document(images=(Image("a.jpg"),))
        assert document.image(0).filename == "a.jpg"
        assert document.image(1) is None
        assert document.image(-1) is None


def test_inset_calibration():
    corners = inset_calibration(640, 480)
    assert corners[CalibrationCorners.TOP_LEFT] == Point(50, 50)
    assert corners[CalibrationCorners.BOTTOM_LEFT] == Point(50, 430)
    assert corners[CalibrationCorners.TOP_RIGHT] == Point(590, 50)
    assert corners[CalibrationCorners.BOTTOM_RIGHT] == Point(590, 430)


def test_marker_moved_to_keeps_type():
    marker = Marker(1, 2, "coupling").moved_to(10, 20)
    assert marker == Marker(10, 20, "coupling")
    assert marker.to_dict() == {"x": 10, "y": 20, "type": "coupling"}
