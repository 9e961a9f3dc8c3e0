"""WindowManager - 窗口管理器

协调各组件，是所有可变状态的唯一持有者：
- 注册 pane，创建 Pane / PaneStateMachine，通知宿主挂载控件
- pointer 事件 → Z-Order Stack + Session Controller
- 生命周期触发 → PaneStateMachine → 副作用（最小化注册表 / 保存矩形 / 层级）
- 视口变化 → 所有 pane 的包含修正 + 最小化区域重新计算
"""

from typing import Any, Callable

from .telemetry import get_logger, metrics
from .config import DRAG_HANDLE, PRIMARY_BUTTON
from .errors import PaneExistsError, PaneNotFoundError
from .geometry import (
    Point,
    Rect,
    Viewport,
    ViewportProvider,
    Zone,
    contain_rect,
    maximized_rect,
)
from .overflow import ItemMeasurer, OverflowLayoutManager
from .pane import (
    SIGNAL_CLOSE,
    SIGNAL_MAXIMIZE,
    SIGNAL_MINIMIZE,
    SIGNAL_RESTORE,
    SIGNAL_RESTORE_MINIMIZED,
    AffordanceRole,
    Capability,
    LifecycleEvent,
    Pane,
    PaneStateMachine,
    StateChange,
    WindowState,
)
from .session import SessionController, SessionMode
from .zorder import ZOrderStack

logger = get_logger(__name__)

# 回调类型
AttachAffordanceCallback = Callable[[str, AffordanceRole, "Zone | None"], Any]
DetachCallback = Callable[[str], Any]
OnChangeCallback = Callable[[str, "str | None"], Any]
OnDebugEventCallback = Callable[[dict], Any]

# resize handle 的挂载顺序
RESIZE_ZONE_ORDER = [
    Zone.LEFT,
    Zone.UPPER_LEFT,
    Zone.TOP,
    Zone.UPPER_RIGHT,
    Zone.RIGHT,
    Zone.LOWER_RIGHT,
    Zone.BOTTOM,
    Zone.LOWER_LEFT,
]

Handle = Zone | str


def parse_handle(handle: Handle | None) -> Handle | None:
    """把宿主传来的 handle 名转换为 DRAG_HANDLE 或 Zone"""
    if handle is None or isinstance(handle, Zone):
        return handle
    if handle == DRAG_HANDLE:
        return DRAG_HANDLE
    return Zone(handle)


class WindowManager:
    """窗口管理器

    一个实例对应一个视口；实例之间互不影响。

    Attributes:
        viewport: 当前视口
        sessions: 拖拽/resize 会话控制器
        zorder: 层级栈
        overflow: 最小化区域布局管理器
    """

    def __init__(
        self,
        viewport_width: int,
        viewport_height: int,
        minimize_area_width: int | None = None,
        measure_item: ItemMeasurer | None = None,
    ):
        """初始化

        Args:
            viewport_width: 视口宽度
            viewport_height: 视口高度
            minimize_area_width: 最小化区域宽度，None 表示与视口同宽
            measure_item: 测量最小化 item 尺寸的函数
        """
        self._viewport = ViewportProvider(viewport_width, viewport_height)
        self._area_follows_viewport = minimize_area_width is None

        self._panes: dict[str, Pane] = {}
        self._machines: dict[str, PaneStateMachine] = {}

        self._sessions = SessionController(self._viewport)
        self._zorder = ZOrderStack()
        self._overflow = OverflowLayoutManager(
            area_width=viewport_width if minimize_area_width is None else minimize_area_width,
            measure_item=measure_item,
        )

        # 回调
        self._attach_affordance: AttachAffordanceCallback | None = None
        self._detach: DetachCallback | None = None
        self._on_change: OnChangeCallback | None = None
        self._on_debug_event: OnDebugEventCallback | None = None

    # === 配置 ===

    def set_attach_affordance(self, callback: AttachAffordanceCallback) -> None:
        """设置控件挂载回调 (pane_id, role, zone) -> None"""
        self._attach_affordance = callback

    def set_detach_callback(self, callback: DetachCallback) -> None:
        """设置关闭时分离 pane 的回调"""
        self._detach = callback

    def set_on_change(self, callback: OnChangeCallback | None) -> None:
        """设置变化回调 (reason, pane_id) -> None"""
        self._on_change = callback

    def set_on_debug_event(self, callback: OnDebugEventCallback | None) -> None:
        """设置调试事件回调

        Args:
            callback: 回调函数 (event_dict) -> None
                event_dict 包含: pane_id, signal, result, reason, state_id
        """
        self._on_debug_event = callback

    # === 属性 ===

    @property
    def viewport(self) -> Viewport:
        return self._viewport.viewport

    @property
    def sessions(self) -> SessionController:
        return self._sessions

    @property
    def zorder(self) -> ZOrderStack:
        return self._zorder

    @property
    def overflow(self) -> OverflowLayoutManager:
        return self._overflow

    @property
    def panes(self) -> list[Pane]:
        """未关闭的 pane（注册顺序）"""
        return [pane for pane in self._panes.values() if pane.state != WindowState.CLOSED]

    def get_pane(self, pane_id: str) -> Pane:
        """获取 pane

        Raises:
            PaneNotFoundError: pane_id 未注册
        """
        pane = self._panes.get(pane_id)
        if pane is None:
            raise PaneNotFoundError(pane_id)
        return pane

    def get_machine(self, pane_id: str) -> PaneStateMachine:
        """获取 pane 的状态机"""
        machine = self._machines.get(pane_id)
        if machine is None:
            raise PaneNotFoundError(pane_id)
        return machine

    # === 注册 ===

    def register_pane(
        self,
        pane_id: str,
        capabilities: Capability | None = None,
        initial_rect: Rect | None = None,
        title: str = "",
        *,
        min_max_icons: bool = True,
        min_double_click: bool = True,
        close_icon: bool = True,
    ) -> Pane:
        """注册 pane

        Args:
            pane_id: pane 标识
            capabilities: 能力集合，None 表示全部启用
            initial_rect: 初始矩形，None 或尺寸为 0 时使用默认尺寸
            title: 最小化条目标题
            min_max_icons: 是否挂载最小化/最大化按钮
            min_double_click: 是否支持双击最小化
            close_icon: 是否挂载关闭按钮

        Returns:
            新建的 Pane

        Raises:
            PaneExistsError: pane_id 已注册
        """
        if pane_id in self._panes:
            raise PaneExistsError(pane_id)

        caps = Capability.ALL if capabilities is None else capabilities
        pane = Pane(pane_id=pane_id, capabilities=caps, rect=initial_rect, title=title)
        pane.commit_rect(contain_rect(pane.rect, self.viewport, pane.edge_margin))

        self._panes[pane_id] = pane
        self._machines[pane_id] = PaneStateMachine(pane_id=pane_id, capabilities=caps)
        self._zorder.add(pane)

        self._attach_affordances(
            pane,
            min_max_icons=min_max_icons,
            min_double_click=min_double_click,
            close_icon=close_icon,
        )

        logger.info(
            f"[WindowManager:{pane_id[:8]}] Registered | caps={','.join(caps.names())} | "
            f"rect={pane.rect.to_dict()}"
        )
        self._notify("register", pane_id)
        return pane

    def _attach_affordances(
        self,
        pane: Pane,
        min_max_icons: bool,
        min_double_click: bool,
        close_icon: bool,
    ) -> None:
        """按能力通知宿主挂载控件"""
        if not self._attach_affordance:
            return

        attach = self._attach_affordance
        pane_id = pane.pane_id

        if pane.can(Capability.RESIZABLE):
            for zone in RESIZE_ZONE_ORDER:
                attach(pane_id, AffordanceRole.RESIZE_ZONE, zone)
        if pane.can(Capability.DRAGGABLE):
            attach(pane_id, AffordanceRole.DRAG_HANDLE, None)
        if pane.can(Capability.CLOSABLE) and close_icon:
            attach(pane_id, AffordanceRole.CLOSE_BUTTON, None)
        if pane.can(Capability.MINIMIZABLE):
            if min_max_icons:
                attach(pane_id, AffordanceRole.MAXIMIZE_BUTTON, None)
                attach(pane_id, AffordanceRole.MINIMIZE_BUTTON, None)
            if min_double_click:
                attach(pane_id, AffordanceRole.MINIMIZE_DOUBLE_CLICK, None)

    # === Pointer 事件 ===

    def on_pointer_down(
        self,
        pane_id: str,
        point: Point,
        handle: Handle | None = None,
        button: int = PRIMARY_BUTTON,
    ) -> bool:
        """处理 pane 上的 pointer-down

        任何按键都会把 pane 提到最前层；在拖拽把手 / resize 锚点上按下主按键时开始会话。

        Args:
            pane_id: pane 标识
            point: 指针位置
            handle: DRAG_HANDLE、Zone 或 None（pane 其他区域）
            button: 按键

        Returns:
            是否开始了会话
        """
        pane = self.get_pane(pane_id)
        if pane.state == WindowState.CLOSED:
            logger.debug(f"[WindowManager:{pane_id[:8]}] Ignored pointer-down on closed pane")
            return False

        self._zorder.promote(pane_id)

        handle = parse_handle(handle)
        started = False
        if handle is not None:
            if pane.state != WindowState.NORMAL:
                logger.debug(
                    f"[WindowManager:{pane_id[:8]}] No session in {pane.state.value} state"
                )
            elif handle == DRAG_HANDLE and pane.can(Capability.DRAGGABLE):
                started = self._sessions.begin(pane, SessionMode.MOVE, point, button=button)
            elif isinstance(handle, Zone) and pane.can(Capability.RESIZABLE):
                started = self._sessions.begin(
                    pane, SessionMode.RESIZE, point, zone=handle, button=button
                )
            else:
                logger.debug(
                    f"[WindowManager:{pane_id[:8]}] Handle {handle!r} not available"
                )

        self._notify("pointer_down", pane_id)
        return started

    def on_pointer_move(self, point: Point) -> Rect | None:
        """处理进程级 pointer-move

        Returns:
            提交后的矩形；无会话时返回 None
        """
        rect = self._sessions.move(point)
        if rect is not None:
            self._notify("geometry", self._sessions.session.pane_id)
        return rect

    def on_pointer_up(self) -> bool:
        """处理进程级 pointer-up，无条件结束会话

        Returns:
            是否结束了一个会话
        """
        session = self._sessions.end()
        if session is None:
            return False
        self._notify("pointer_up", session.pane_id)
        return True

    # === 生命周期 ===

    def _dispatch(self, pane_id: str, signal: str, trigger: str) -> StateChange | None:
        """把生命周期信号交给状态机，成功时同步到 Pane"""
        pane = self.get_pane(pane_id)
        machine = self.get_machine(pane_id)

        event = LifecycleEvent(pane_id=pane_id, signal=signal, trigger=trigger)
        logger.debug(event.format_log())

        change = machine.process(event, in_session=self._sessions.targets(pane_id))
        if change:
            pane.apply_state_change(change)
            if change.new_state != WindowState.NORMAL and self._sessions.targets(pane_id):
                # 离开 NORMAL 后会话不再有效
                self._sessions.end()
            self._emit_debug_event(pane_id, signal, "ok", state_id=machine.state_id)
        else:
            self._emit_debug_event(
                pane_id, signal, "fail",
                reason=self._get_last_fail_reason(machine),
                state_id=machine.state_id,
            )
        return change

    def on_minimize_requested(self, pane_id: str, trigger: str = "icon") -> bool:
        """最小化（NORMAL → MINIMIZED）

        矩形保持不变，重新显示即可恢复。

        Args:
            pane_id: pane 标识
            trigger: 触发来源（icon / dblclick）

        Returns:
            是否最小化
        """
        pane = self.get_pane(pane_id)
        was_minimized = pane.state == WindowState.MINIMIZED

        change = self._dispatch(pane_id, SIGNAL_MINIMIZE, trigger)
        if change is None:
            if was_minimized:
                # 双击 + 冒泡的单击
                metrics.inc("minimize.duplicate")
            return False

        self._overflow.enqueue(pane_id, pane.title)
        self._notify("minimize", pane_id)
        return True

    def on_maximize_requested(self, pane_id: str) -> bool:
        """最大化控件：NORMAL → MAXIMIZED，MAXIMIZED → NORMAL

        Returns:
            是否发生了切换
        """
        pane = self.get_pane(pane_id)

        change = self._dispatch(pane_id, SIGNAL_MAXIMIZE, "icon")
        if change is None:
            return False

        if change.new_state == WindowState.MAXIMIZED:
            pane.save_geometry()
            pane.commit_rect(maximized_rect(self.viewport, pane.edge_margin))
            self._notify("maximize", pane_id)
        else:
            self._restore_saved_geometry(pane)
            self._notify("restore", pane_id)
        return True

    def on_restore_requested_for_pane(self, pane_id: str) -> bool:
        """还原最大化的 pane（MAXIMIZED → NORMAL）

        Returns:
            是否还原
        """
        pane = self.get_pane(pane_id)

        change = self._dispatch(pane_id, SIGNAL_RESTORE, "api")
        if change is None:
            return False

        self._restore_saved_geometry(pane)
        self._notify("restore", pane_id)
        return True

    def _restore_saved_geometry(self, pane: Pane) -> None:
        """恢复最大化前的矩形（视口期间缩小过时再做包含修正）"""
        restored = pane.restore_geometry()
        if restored is None:
            logger.warning(f"[WindowManager:{pane.pane_id[:8]}] No saved geometry to restore")
            return
        pane.commit_rect(contain_rect(restored, self.viewport, pane.edge_margin))

    def on_close_requested(self, pane_id: str) -> bool:
        """关闭（终态）

        释放最小化条目和保存的矩形，从层级栈移除，通知宿主分离节点。

        Returns:
            是否关闭
        """
        pane = self.get_pane(pane_id)
        previous_state = pane.state

        change = self._dispatch(pane_id, SIGNAL_CLOSE, "icon")
        if change is None:
            return False

        if previous_state == WindowState.MINIMIZED:
            self._overflow.release(pane_id)
        pane.release_geometry()
        self._zorder.remove(pane_id)

        if self._detach:
            self._detach(pane_id)

        logger.info(f"[WindowManager:{pane_id[:8]}] Closed from {previous_state.value}")
        self._notify("close", pane_id)
        return True

    def on_restore_requested(self, minimized_index: int) -> Pane:
        """点击最小化条目：MINIMIZED → NORMAL

        Args:
            minimized_index: 条目显示 id（注册表下标）

        Returns:
            恢复的 Pane

        Raises:
            EmptySlotError: 槽位为空或越界
        """
        entry = self._overflow.restore(minimized_index)
        pane = self.get_pane(entry.pane_id)

        change = self._dispatch(entry.pane_id, SIGNAL_RESTORE_MINIMIZED, "entry")
        if change is None:
            logger.warning(
                f"[WindowManager:{entry.pane_id[:8]}] Entry restored but pane is "
                f"{pane.state.value}"
            )

        self._notify("restore_minimized", entry.pane_id)
        return pane

    def toggle_minimized_dropdown(self) -> bool:
        """展开/收起最小化下拉列表

        Returns:
            切换后是否展开
        """
        is_open = self._overflow.toggle_dropdown()
        self._notify("dropdown", None)
        return is_open

    # === 视口 ===

    def _contain_all(self) -> int:
        """对所有未关闭 pane 做一次包含修正

        Returns:
            被修正的 pane 数
        """
        viewport = self.viewport
        changed = 0
        for pane in self.panes:
            if pane.commit_rect(contain_rect(pane.rect, viewport, pane.edge_margin)):
                changed += 1
        if changed:
            metrics.inc("viewport.contained", value=changed)
        return changed

    def on_viewport_resized(
        self,
        width: int,
        height: int,
        minimize_area_width: int | None = None,
    ) -> int:
        """视口尺寸变化

        所有 pane 的包含修正完成后，再重新计算最小化区域。

        Args:
            width: 新视口宽度
            height: 新视口高度
            minimize_area_width: 新最小化区域宽度（None 时，若区域与视口同宽则跟随视口）

        Returns:
            被修正的 pane 数
        """
        self._viewport.update(width, height)
        changed = self._contain_all()

        if minimize_area_width is None and self._area_follows_viewport:
            minimize_area_width = width
        self._overflow.recompute(minimize_area_width)

        logger.debug(
            f"[WindowManager] Viewport {width}x{height} | contained={changed} | "
            f"overflow={self._overflow.mode.value}"
        )
        self._notify("viewport", None)
        return changed

    def on_viewport_loaded(self) -> int:
        """首次加载：只做包含修正"""
        changed = self._contain_all()
        self._notify("viewport", None)
        return changed

    # === 通知 ===

    def _notify(self, reason: str, pane_id: str | None) -> None:
        if self._on_change:
            self._on_change(reason, pane_id)

    def _emit_debug_event(
        self,
        pane_id: str,
        signal: str,
        result: str,
        reason: str = "",
        state_id: int = 0,
    ) -> None:
        """发送调试事件"""
        if not self._on_debug_event:
            return
        self._on_debug_event({
            "pane_id": pane_id,
            "signal": signal,
            "result": result,
            "reason": reason,
            "state_id": state_id,
        })

    def _get_last_fail_reason(self, machine: PaneStateMachine) -> str:
        """从状态机历史获取最后一次失败原因"""
        history = machine.history
        if history:
            last_entry = history[-1]
            if not last_entry.success:
                return last_entry.description
        return ""

    # === 序列化 ===

    def to_dict(self) -> dict:
        """布局快照（宿主渲染使用）"""
        session = self._sessions.session
        return {
            "viewport": self.viewport.to_dict(),
            "panes": [pane.to_dict() for pane in self.panes],
            "front": self._zorder.front,
            "stack": self._zorder.order,
            "session": session.to_dict() if session else None,
            "minimized": self._overflow.to_dict(),
        }
