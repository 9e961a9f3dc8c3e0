"""WindowManager 测试"""

import pytest

from panewm.config import DRAG_HANDLE
from panewm.errors import EmptySlotError, PaneExistsError, PaneNotFoundError
from panewm.geometry import Point, Rect, Zone, is_contained
from panewm.manager import RESIZE_ZONE_ORDER, WindowManager, parse_handle
from panewm.overflow import ItemMetrics, OverflowMode
from panewm.pane import AffordanceRole, Capability, WindowState, ZTier
from panewm.telemetry import metrics


@pytest.fixture
def manager():
    """1000x800 视口，最小化区域 300px，item 外宽 100px"""
    return WindowManager(
        1000,
        800,
        minimize_area_width=300,
        measure_item=lambda item: ItemMetrics(width=100),
    )


@pytest.fixture
def pane(manager):
    return manager.register_pane("pane-1", initial_rect=Rect(100, 100, 200, 150), title="One")


class TestRegister:

    def test_register_defaults(self, manager):
        pane = manager.register_pane("p")

        assert pane.capabilities == Capability.ALL
        assert pane.rect == Rect(0, 0, 200, 150)
        assert pane.state == WindowState.NORMAL
        assert manager.zorder.order == ["p"]

    def test_duplicate_id(self, manager, pane):
        with pytest.raises(PaneExistsError):
            manager.register_pane("pane-1")

    def test_initial_rect_contained(self, manager):
        pane = manager.register_pane("big", initial_rect=Rect(900, 0, 400, 100))
        assert is_contained(pane.rect, manager.viewport, pane.edge_margin)

    def test_affordances_for_all_capabilities(self, manager):
        attached = []
        manager.set_attach_affordance(lambda pane_id, role, zone: attached.append((role, zone)))

        manager.register_pane("p")

        zones = [zone for role, zone in attached if role == AffordanceRole.RESIZE_ZONE]
        roles = [role for role, zone in attached if role != AffordanceRole.RESIZE_ZONE]
        assert zones == RESIZE_ZONE_ORDER
        assert roles == [
            AffordanceRole.DRAG_HANDLE,
            AffordanceRole.CLOSE_BUTTON,
            AffordanceRole.MAXIMIZE_BUTTON,
            AffordanceRole.MINIMIZE_BUTTON,
            AffordanceRole.MINIMIZE_DOUBLE_CLICK,
        ]

    def test_affordances_follow_flags(self, manager):
        attached = []
        manager.set_attach_affordance(lambda pane_id, role, zone: attached.append(role))

        manager.register_pane(
            "p",
            capabilities=Capability.DRAGGABLE | Capability.MINIMIZABLE | Capability.CLOSABLE,
            min_max_icons=False,
            close_icon=False,
        )

        assert attached == [AffordanceRole.DRAG_HANDLE, AffordanceRole.MINIMIZE_DOUBLE_CLICK]

    def test_unknown_pane(self, manager):
        with pytest.raises(PaneNotFoundError):
            manager.on_minimize_requested("nope")
        with pytest.raises(PaneNotFoundError):
            manager.on_pointer_down("nope", Point(0, 0))
        with pytest.raises(PaneNotFoundError):
            manager.get_machine("nope")

    def test_tiny_initial_rect_gets_minimum_size(self, manager):
        pane = manager.register_pane("tiny", initial_rect=Rect(10, 10, 3, 3))
        assert pane.rect == Rect(10, 10, 5, 5)


class TestPointer:

    def test_drag(self, manager, pane):
        assert manager.on_pointer_down("pane-1", Point(150, 105), handle=DRAG_HANDLE)
        manager.on_pointer_move(Point(160, 125))
        assert manager.on_pointer_up()

        assert pane.rect == Rect(110, 120, 200, 150)
        assert not manager.sessions.is_active

    def test_resize_by_zone_name(self, manager, pane):
        assert manager.on_pointer_down("pane-1", Point(303, 175), handle="right")
        manager.on_pointer_move(Point(333, 175))
        manager.on_pointer_up()

        assert pane.rect == Rect(100, 100, 230, 150)

    def test_click_promotes_without_session(self, manager, pane):
        other = manager.register_pane("pane-2")

        assert not manager.on_pointer_down("pane-2", Point(10, 10))
        assert other.tier == ZTier.FRONT
        assert pane.tier == ZTier.BACK
        assert manager.zorder.front == "pane-2"

    def test_secondary_button_promotes_only(self, manager, pane):
        assert not manager.on_pointer_down("pane-1", Point(0, 0), handle=DRAG_HANDLE, button=2)
        assert pane.tier == ZTier.FRONT
        assert not manager.sessions.is_active

    def test_handle_requires_capability(self, manager):
        manager.register_pane("fixed", capabilities=Capability.CLOSABLE)
        assert not manager.on_pointer_down("fixed", Point(0, 0), handle=DRAG_HANDLE)
        assert not manager.on_pointer_down("fixed", Point(0, 0), handle=Zone.LEFT)

    def test_no_session_when_maximized(self, manager, pane):
        manager.on_maximize_requested("pane-1")
        assert not manager.on_pointer_down("pane-1", Point(0, 0), handle=DRAG_HANDLE)

    def test_maximize_ends_resize_session(self, manager):
        """resize 过程中最大化：会话结束，后续 move 不改变最大化矩形"""
        pane = manager.register_pane("p")
        manager.on_pointer_down("p", Point(500, 500), handle=Zone.LOWER_RIGHT)

        assert manager.on_maximize_requested("p")
        maximized = pane.rect

        assert not manager.sessions.is_active
        assert manager.on_pointer_move(Point(300, 300)) is None
        assert pane.rect == maximized == Rect(0, 0, 994, 794)

    def test_minimize_ends_drag_session(self, manager, pane):
        manager.on_pointer_down("pane-1", Point(150, 105), handle=DRAG_HANDLE)

        assert manager.on_minimize_requested("pane-1", trigger="dblclick")

        assert not manager.sessions.is_active
        assert manager.on_pointer_move(Point(200, 200)) is None
        assert pane.rect == Rect(100, 100, 200, 150)

    def test_session_on_other_pane_survives(self, manager, pane):
        manager.register_pane("other")
        manager.on_pointer_down("pane-1", Point(150, 105), handle=DRAG_HANDLE)

        manager.on_maximize_requested("other")

        assert manager.sessions.targets("pane-1")

    def test_pointer_move_without_session(self, manager):
        assert manager.on_pointer_move(Point(1, 1)) is None
        assert not manager.on_pointer_up()

    def test_parse_handle(self):
        assert parse_handle("drag") == DRAG_HANDLE
        assert parse_handle("lowerRight") == Zone.LOWER_RIGHT
        assert parse_handle(None) is None
        with pytest.raises(ValueError):
            parse_handle("middle")


class TestMinimize:

    def test_minimize_and_restore(self, manager, pane):
        assert manager.on_minimize_requested("pane-1")

        assert pane.state == WindowState.MINIMIZED
        assert not pane.visible
        assert pane.rect == Rect(100, 100, 200, 150)
        assert manager.overflow.index_of("pane-1") == 0

        restored = manager.on_restore_requested(0)

        assert restored is pane
        assert pane.state == WindowState.NORMAL
        assert pane.rect == Rect(100, 100, 200, 150)
        assert manager.overflow.registry == []

    def test_duplicate_minimize(self, manager, pane):
        """双击 + 冒泡的单击只产生一个条目"""
        assert manager.on_minimize_requested("pane-1", trigger="dblclick")
        assert not manager.on_minimize_requested("pane-1")

        assert len(manager.overflow) == 1
        assert metrics.get_counter("minimize.duplicate") == 1

    def test_minimize_while_maximized_rejected(self, manager, pane):
        manager.on_maximize_requested("pane-1")
        assert not manager.on_minimize_requested("pane-1")
        assert pane.state == WindowState.MAXIMIZED

    def test_restore_empty_slot(self, manager):
        with pytest.raises(EmptySlotError):
            manager.on_restore_requested(0)

    def test_overflow_example(self, manager):
        """4 个 pane 最小化到 300px 区域 → dropdown，恢复一个 → strip 0,1,2"""
        for i in range(4):
            manager.register_pane(f"p{i}")
            manager.on_minimize_requested(f"p{i}")

        assert manager.overflow.mode == OverflowMode.DROPDOWN

        manager.on_restore_requested(1)

        assert manager.overflow.mode == OverflowMode.STRIP
        assert [(i.item_id, i.pane_id) for i in manager.overflow.items] == [
            (0, "p0"), (1, "p2"), (2, "p3"),
        ]


class TestMaximize:

    def test_round_trip(self, manager, pane):
        assert manager.on_maximize_requested("pane-1")

        assert pane.state == WindowState.MAXIMIZED
        assert pane.rect == Rect(0, 0, 994, 794)
        assert pane.saved_rect == Rect(100, 100, 200, 150)

        assert manager.on_maximize_requested("pane-1")

        assert pane.state == WindowState.NORMAL
        assert pane.rect == Rect(100, 100, 200, 150)
        assert pane.saved_rect is None

    def test_explicit_restore(self, manager, pane):
        manager.on_maximize_requested("pane-1")
        assert manager.on_restore_requested_for_pane("pane-1")
        assert pane.rect == Rect(100, 100, 200, 150)
        assert not manager.on_restore_requested_for_pane("pane-1")

    def test_plain_pane_fills_viewport(self, manager):
        pane = manager.register_pane("plain", capabilities=Capability.MINIMIZABLE)
        manager.on_maximize_requested("plain")
        assert pane.rect == Rect(0, 0, 1000, 800)

    def test_restore_after_viewport_shrink(self, manager):
        pane = manager.register_pane("p", initial_rect=Rect(600, 100, 300, 150))
        manager.on_maximize_requested("p")
        manager.on_viewport_resized(500, 800)

        manager.on_maximize_requested("p")

        assert is_contained(pane.rect, manager.viewport, pane.edge_margin)

    def test_requires_capability(self, manager):
        manager.register_pane("p", capabilities=Capability.DRAGGABLE)
        assert not manager.on_maximize_requested("p")


class TestClose:

    def test_close(self, manager, pane):
        detached = []
        manager.set_detach_callback(detached.append)

        assert manager.on_close_requested("pane-1")

        assert pane.state == WindowState.CLOSED
        assert detached == ["pane-1"]
        assert "pane-1" not in manager.zorder
        assert manager.to_dict()["panes"] == []

    def test_close_minimized_releases_entry(self, manager, pane):
        manager.on_minimize_requested("pane-1")
        manager.on_close_requested("pane-1")
        assert manager.overflow.index_of("pane-1") is None

    def test_close_maximized_releases_geometry(self, manager, pane):
        manager.on_maximize_requested("pane-1")
        manager.on_close_requested("pane-1")
        assert pane.saved_rect is None

    def test_triggers_after_close_rejected(self, manager, pane):
        manager.on_close_requested("pane-1")

        assert not manager.on_minimize_requested("pane-1")
        assert not manager.on_maximize_requested("pane-1")
        assert not manager.on_close_requested("pane-1")
        assert not manager.on_pointer_down("pane-1", Point(0, 0), handle=DRAG_HANDLE)

    def test_close_during_session_rejected(self, manager, pane):
        manager.on_pointer_down("pane-1", Point(150, 105), handle=DRAG_HANDLE)

        assert not manager.on_close_requested("pane-1")

        manager.on_pointer_up()
        assert manager.on_close_requested("pane-1")

    def test_requires_capability(self, manager):
        manager.register_pane("p", capabilities=Capability.DRAGGABLE)
        assert not manager.on_close_requested("p")


class TestViewport:

    def test_resize_contains_every_pane(self, manager):
        a = manager.register_pane("a", initial_rect=Rect(500, 100, 400, 300))
        b = manager.register_pane("b", initial_rect=Rect(10, 10, 100, 100))

        changed = manager.on_viewport_resized(600, 350)

        assert changed == 1
        assert a.rect == Rect(500, 100, 94, 244)
        assert b.rect == Rect(10, 10, 100, 100)

    def test_area_follows_viewport_by_default(self):
        manager = WindowManager(1000, 800)
        manager.on_viewport_resized(640, 480)
        assert manager.overflow.area_width == 640

    def test_explicit_area_width(self, manager):
        manager.on_viewport_resized(640, 480)
        assert manager.overflow.area_width == 300
        manager.on_viewport_resized(640, 480, minimize_area_width=200)
        assert manager.overflow.area_width == 200

    def test_resize_recomputes_overflow(self, manager):
        for i in range(3):
            manager.register_pane(f"p{i}")
            manager.on_minimize_requested(f"p{i}")

        manager.on_viewport_resized(1000, 800, minimize_area_width=100)

        assert manager.overflow.mode == OverflowMode.DROPDOWN

    def test_viewport_loaded(self, manager, pane):
        assert manager.on_viewport_loaded() == 0


class TestNotifications:

    def test_on_change(self, manager):
        events = []
        manager.set_on_change(lambda reason, pane_id: events.append((reason, pane_id)))

        manager.register_pane("p")
        manager.on_minimize_requested("p")
        manager.on_restore_requested(0)
        manager.toggle_minimized_dropdown()

        assert events == [
            ("register", "p"),
            ("minimize", "p"),
            ("restore_minimized", "p"),
            ("dropdown", None),
        ]

    def test_debug_event_on_rejection(self, manager, pane):
        events = []
        manager.set_on_debug_event(events.append)

        manager.on_restore_requested_for_pane("pane-1")

        assert events[-1]["result"] == "fail"
        assert events[-1]["reason"] == "no_rule_matched"
        assert events[-1]["signal"] == "restore"


class TestLayout:

    def test_to_dict(self, manager, pane):
        manager.register_pane("pane-2")
        manager.on_pointer_down("pane-1", Point(150, 105), handle=DRAG_HANDLE)

        data = manager.to_dict()

        assert data["viewport"] == {"width": 1000, "height": 800}
        assert [p["pane_id"] for p in data["panes"]] == ["pane-1", "pane-2"]
        assert data["front"] == "pane-1"
        assert data["stack"] == ["pane-2", "pane-1"]
        assert data["session"]["mode"] == "move"
        assert data["minimized"]["mode"] == "strip"
