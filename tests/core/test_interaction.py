"""Tests for the pointer interaction state machine."""

import itertools

import pytest

from rrlabel.core.config_spec import Settings
from rrlabel.core.coordinate_transform import CoordinateMapper, ViewportSurface
from rrlabel.core.enums import InteractionPhase, MarkerCategory, ToolKind
from rrlabel.core.interaction import (
    CreateMarker, DeleteMarker, HandleRegistry, MarkerInteractionController,
    MoveMarker, PointerEvent, ToolSelection, handle_id
)
from rrlabel.core.manifest_store import ManifestStore
from rrlabel.core.models import Marker, Point


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def surface():
    # Shown at half size: screen = document / 2
    return ViewportSurface((0, 0, 320, 240), (0, 0, 640, 480))


@pytest.fixture
def controller(empty_store, surface, clock):
    ids = (f"id{n}" for n in itertools.count(1))
    controller = MarkerInteractionController(
        empty_store, CoordinateMapper(surface), tool="train",
        clock=clock, id_factory=lambda: next(ids)
    )
    yield controller
    controller.close()


def click_at(controller, clock, x, y, target=None, hold_ms=20):
    event = PointerEvent(x, y, target)
    controller.pointer_down(event)
    clock.advance(hold_ms)
    controller.pointer_up(event)
    return controller.click(event)


class TestToolSelection:
    @pytest.mark.parametrize("tag, kind", [
        ("delete", ToolKind.DELETE),
        ("calibrate", ToolKind.MOVE_ONLY),
        (None, ToolKind.NONE),
        ("", ToolKind.NONE),
        ("train", ToolKind.CREATE),
        ("coupling", ToolKind.CREATE),
    ])
    def test_parse(self, tag, kind):
        assert ToolSelection.parse(tag).kind is kind

    def test_creation_tag_is_type(self):
        tool = ToolSelection.parse("detector")
        assert tool.creates_markers
        assert tool.tag == "detector"


class TestClickCreates:
    def test_plain_click_creates_one_marker(self, controller, clock, empty_store):
        intent = click_at(controller, clock, 100, 100)

        assert intent == CreateMarker("id1", 200, 200, "train", 0)
        labels = empty_store.document.images[0].labels
        assert dict(labels) == {"id1": Marker(200, 200, "train")}

    def test_fresh_id_per_click(self, controller, clock, empty_store):
        click_at(controller, clock, 100, 100)
        click_at(controller, clock, 150, 150)
        assert set(empty_store.document.images[0].labels) == {"id1", "id2"}

    def test_default_ids_are_unique(self, empty_store, surface, clock):
        controller = MarkerInteractionController(
            empty_store, CoordinateMapper(surface), tool="track", clock=clock
        )
        first = click_at(controller, clock, 100, 100)
        second = click_at(controller, clock, 150, 150)
        assert first.marker_id != second.marker_id
        controller.close()

    def test_slow_press_is_not_a_click(self, controller, clock, empty_store):
        assert click_at(controller, clock, 100, 100, hold_ms=150) is None
        assert len(empty_store.document.images[0].labels) == 0

    def test_click_without_press_is_genuine(self, controller, empty_store):
        assert isinstance(controller.click(PointerEvent(100, 100)), CreateMarker)

    def test_moved_press_is_not_a_click(self, controller, clock, empty_store):
        controller.pointer_down(PointerEvent(100, 100))
        controller.pointer_move(PointerEvent(110, 100))
        clock.advance(20)
        controller.pointer_up(PointerEvent(110, 100))
        assert controller.click(PointerEvent(110, 100)) is None
        assert len(empty_store.document.images[0].labels) == 0

    def test_small_jitter_is_still_a_click(self, controller, clock):
        controller.pointer_down(PointerEvent(100, 100))
        controller.pointer_move(PointerEvent(101, 101))
        clock.advance(20)
        controller.pointer_up(PointerEvent(101, 101))
        assert isinstance(controller.click(PointerEvent(101, 101)), CreateMarker)

    @pytest.mark.parametrize("tag", ["delete", "calibrate", None])
    def test_non_creation_tools(self, controller, clock, empty_store, tag):
        controller.select_tool(tag)
        assert click_at(controller, clock, 100, 100) is None
        assert len(empty_store.document.images[0].labels) == 0

    def test_no_image(self, surface, clock):
        store = ManifestStore()
        controller = MarkerInteractionController(store, CoordinateMapper(surface), tool="train", clock=clock)
        assert click_at(controller, clock, 10, 10) is None
        controller.close()

    def test_unrendered_surface_drops_event(self, controller, clock, surface, empty_store):
        surface.resize(None)
        assert click_at(controller, clock, 100, 100) is None
        assert len(empty_store.document.images[0].labels) == 0


class TestDrag:
    def test_drag_sequence(self, controller, clock, empty_store, recorder):
        empty_store.set_marker(MarkerCategory.LABEL, "m", 200, 200, "coupling")
        empty_store.subscribe(recorder)

        controller.pointer_down(PointerEvent(100, 100, handle_id(MarkerCategory.LABEL, "m")))
        assert controller.state.phase is InteractionPhase.DRAGGING
        assert controller.state.target_id == "m"

        intents = [controller.pointer_move(PointerEvent(100 + step, 100)) for step in (5, 10, 15)]
        controller.pointer_up(PointerEvent(115, 100))
        assert controller.click(PointerEvent(115, 100)) is None

        assert intents[-1] == MoveMarker(MarkerCategory.LABEL, "m", 230, 200, 0)
        labels = empty_store.document.images[0].labels
        assert dict(labels) == {"m": Marker(230, 200, "coupling")}
        assert controller.state.phase is InteractionPhase.IDLE
        assert recorder.count == 3

    def test_drag_calibration_corner(self, controller, clock, empty_store):
        target = handle_id(MarkerCategory.CALIBRATION, "rect-0")
        controller.pointer_down(PointerEvent(25, 25, target))
        controller.pointer_move(PointerEvent(30, 40))
        controller.pointer_up(PointerEvent(30, 40))
        assert empty_store.document.calibration["rect-0"] == Point(60, 80)

    def test_hit_test_without_target(self, controller, empty_store):
        # rect-0 sits at document (50, 50); the pointer lands at (60, 60)
        controller.pointer_down(PointerEvent(30, 30))
        assert controller.state.target_id == "rect-0"
        assert controller.state.category is MarkerCategory.CALIBRATION

    def test_press_on_unknown_element(self, controller):
        controller.pointer_down(PointerEvent(25, 25, "background"))
        assert controller.state.phase is InteractionPhase.IDLE

    def test_stationary_press_on_handle_does_not_create(self, controller, clock, empty_store):
        target = handle_id(MarkerCategory.CALIBRATION, "rect-0")
        assert click_at(controller, clock, 25, 25, target) is None
        assert len(empty_store.document.images[0].labels) == 0

    def test_target_removed_mid_drag(self, controller, empty_store):
        empty_store.set_marker(MarkerCategory.LABEL, "m", 200, 200)
        controller.pointer_down(PointerEvent(100, 100, handle_id(MarkerCategory.LABEL, "m")))
        empty_store.delete_marker(MarkerCategory.LABEL, "m")
        assert controller.state.phase is InteractionPhase.IDLE
        assert controller.pointer_move(PointerEvent(120, 120)) is None


class TestDelete:
    def test_delete_label(self, controller, empty_store):
        empty_store.set_marker(MarkerCategory.LABEL, "m", 200, 200)
        controller.select_tool("delete")
        intent = controller.pointer_down(PointerEvent(100, 100, handle_id(MarkerCategory.LABEL, "m")))

        assert intent == DeleteMarker(MarkerCategory.LABEL, "m", 0)
        assert "m" not in empty_store.document.images[0].labels
        assert controller.state.phase is InteractionPhase.IDLE
        assert handle_id(MarkerCategory.LABEL, "m") not in controller.handles

    def test_calibration_corner_not_deletable(self, controller, empty_store):
        controller.select_tool("delete")
        target = handle_id(MarkerCategory.CALIBRATION, "rect-0")
        assert controller.pointer_down(PointerEvent(25, 25, target)) is None
        assert "rect-0" in empty_store.document.calibration
        assert controller.state.phase is InteractionPhase.DRAGGING

    def test_configurable_deletion_policy(self, empty_store, surface, clock):
        settings = Settings(deletable_categories=["label", "calibration"])
        controller = MarkerInteractionController.from_settings(
            empty_store, CoordinateMapper(surface), settings, tool="delete", clock=clock
        )
        target = handle_id(MarkerCategory.CALIBRATION, "rect-0")
        assert isinstance(controller.pointer_down(PointerEvent(25, 25, target)), DeleteMarker)
        assert "rect-0" not in empty_store.document.calibration
        controller.close()


class TestLifecycle:
    def test_close_unsubscribes(self, controller, empty_store):
        controller.close()
        empty_store.set_marker(MarkerCategory.LABEL, "late", 10, 10)
        assert handle_id(MarkerCategory.LABEL, "late") not in controller.handles

    def test_select_image(self, controller, clock, empty_store):
        empty_store.add_image("second.jpg")
        controller.select_image(1)
        click_at(controller, clock, 100, 100)
        assert "id1" in empty_store.document.images[1].labels
        assert "id1" not in empty_store.document.images[0].labels


class TestHandleRegistry:
    def test_register_and_lookup(self):
        registry = HandleRegistry()
        registry.register("svg-use-7", MarkerCategory.LABEL, "m")
        assert registry.lookup("svg-use-7").marker_id == "m"
        assert registry.handles_for(MarkerCategory.LABEL, "m") == ["svg-use-7"]
        registry.unregister_marker(MarkerCategory.LABEL, "m")
        assert registry.lookup("svg-use-7") is None
        assert registry.lookup(None) is None

    def test_sync_drops_stale(self, store):
        registry = HandleRegistry()
        registry.register("old", MarkerCategory.LABEL, "gone")
        registry.sync(store.document)
        assert "old" not in registry
        assert handle_id(MarkerCategory.LABEL, "a1") in registry
        assert handle_id(MarkerCategory.CALIBRATION, "rect-3") in registry

    def test_hit_test_nearest(self, store):
        registry = HandleRegistry(interaction_radius=60)
        # a1 at (120, 130) is nearer than rect-0 at (100, 100)
        assert registry.hit_test(store.document, Point(118, 128)).marker_id == "a1"
        assert registry.hit_test(store.document, Point(1000, 1000)) is None
