"""Tests for screen-to-document mapping."""

import pytest

from rrlabel.core.coordinate_transform import CoordinateMapper, ScreenTransform, ViewportSurface
from rrlabel.core.exceptions import TransformUnavailableError


class FixedSurface:
    def __init__(self, ctm):
        self.ctm = ctm

    def get_screen_ctm(self):
        return self.ctm


class TestScreenTransform:
    def test_apply_and_inverse(self):
        ctm = ScreenTransform(a=2.0, d=0.5, e=10.0, f=20.0)
        screen = ctm.apply(100, 100)
        assert (screen.x, screen.y) == (210.0, 70.0)
        back = ctm.inverse().apply(screen.x, screen.y)
        assert back.x == pytest.approx(100.0)
        assert back.y == pytest.approx(100.0)

    def test_rotation_inverse(self):
        ctm = ScreenTransform(a=0.0, b=1.0, c=-1.0, d=0.0, e=5.0, f=0.0)
        point = ctm.inverse().apply(*ctm.apply(3, 4).as_tuple())
        assert point.x == pytest.approx(3.0)
        assert point.y == pytest.approx(4.0)

    def test_singular(self):
        with pytest.raises(TransformUnavailableError):
            ScreenTransform(a=0.0, d=0.0).inverse()

    def test_multiply(self):
        translate = ScreenTransform(e=10.0)
        scale = ScreenTransform(a=2.0, d=2.0)
        combined = translate.multiply(scale)
        assert combined.apply(1, 1).as_tuple() == pytest.approx((12.0, 2.0))


class TestFitViewbox:
    def test_stretch(self):
        # preserveAspectRatio none: independent horizontal and vertical scale
        ctm = ScreenTransform.fit_viewbox((0, 0, 1280, 240), (0, 0, 640, 480), "none")
        assert ctm.a == pytest.approx(2.0)
        assert ctm.d == pytest.approx(0.5)
        point = CoordinateMapper(FixedSurface(ctm)).to_document(640, 120)
        assert point.x == pytest.approx(320.0)
        assert point.y == pytest.approx(240.0)

    def test_letterbox_meet(self):
        # 640x480 shown in a 1000x500 box: uniform scale 500/480, centred horizontally
        ctm = ScreenTransform.fit_viewbox((0, 0, 1000, 500), (0, 0, 640, 480))
        scale = 500 / 480
        assert ctm.a == pytest.approx(scale)
        assert ctm.d == pytest.approx(scale)
        assert ctm.e == pytest.approx((1000 - 640 * scale) / 2)
        assert ctm.f == pytest.approx(0.0)

        point = CoordinateMapper(FixedSurface(ctm)).to_document(500, 250)
        assert point.x == pytest.approx(320.0)
        assert point.y == pytest.approx(240.0)

    def test_client_offset_and_viewbox_origin(self):
        ctm = ScreenTransform.fit_viewbox((100, 50, 640, 480), (10, 20, 640, 480))
        point = ctm.inverse().apply(100, 50)
        assert point.x == pytest.approx(10.0)
        assert point.y == pytest.approx(20.0)

    def test_slice(self):
        ctm = ScreenTransform.fit_viewbox((0, 0, 1000, 500), (0, 0, 640, 480), "xMinYMin slice")
        assert ctm.a == pytest.approx(1000 / 640)
        assert ctm.e == pytest.approx(0.0)

    def test_not_rendered(self):
        with pytest.raises(TransformUnavailableError):
            ScreenTransform.fit_viewbox((0, 0, 0, 0), (0, 0, 640, 480))

    def test_unsupported_alignment(self):
        with pytest.raises(ValueError):
            ScreenTransform.fit_viewbox((0, 0, 10, 10), (0, 0, 10, 10), "center")


class TestCoordinateMapper:
    def test_no_ctm(self):
        mapper = CoordinateMapper(FixedSurface(None))
        with pytest.raises(TransformUnavailableError):
            mapper.to_document(1, 1)

    def test_viewport_surface(self):
        surface = ViewportSurface((0, 0, 320, 240), (0, 0, 640, 480))
        mapper = CoordinateMapper(surface)
        assert mapper.to_document(160, 120).as_tuple() == pytest.approx((320.0, 240.0))
        assert mapper.to_screen(320, 240).as_tuple() == pytest.approx((160.0, 120.0))

        surface.resize(None)
        with pytest.raises(TransformUnavailableError):
            mapper.to_document(160, 120)
