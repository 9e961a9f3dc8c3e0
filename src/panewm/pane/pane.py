"""Pane - 被管理的窗口实体

职责：
- 持有能力集合、当前矩形、最大化前保存的矩形、层级
- 应用 PaneStateMachine 产生的 StateChange（state_id 防乱序）
- 序列化为宿主渲染所需的字典
"""

from dataclasses import replace

from ..telemetry import get_logger, metrics
from ..config import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    EDGE_MARGIN,
    MIN_HEIGHT,
    MIN_WIDTH,
    TIER_BACK_Z,
    TIER_FRONT_Z,
    TIER_INHERIT,
)
from ..geometry import Rect
from .types import Capability, StateChange, WindowState, ZTier

logger = get_logger(__name__)


def default_rect(initial: Rect | None = None) -> Rect:
    """补全初始矩形：未指定或尺寸为 0 时使用默认尺寸，不小于最小尺寸"""
    if initial is None:
        return Rect(x=0, y=0, width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT)
    return replace(
        initial,
        width=max(MIN_WIDTH, initial.width or DEFAULT_WIDTH),
        height=max(MIN_HEIGHT, initial.height or DEFAULT_HEIGHT),
    )


class Pane:
    """被管理的窗口

    Attributes:
        pane_id: pane 标识（注册时分配，不可变）
        capabilities: 能力集合
        title: 最小化条目显示的标题
        rect: 当前矩形
        saved_rect: 最大化前的矩形（非最大化时为 None）
        state: 生命周期状态
        tier: 层级
    """

    def __init__(
        self,
        pane_id: str,
        capabilities: Capability = Capability.ALL,
        rect: Rect | None = None,
        title: str = "",
    ):
        self.pane_id = pane_id
        self.capabilities = capabilities
        self.title = title or pane_id

        self._rect = default_rect(rect)
        self._saved_rect: Rect | None = None

        self._state = WindowState.NORMAL
        self._state_id = 0

        self._tier = ZTier.BACK
        self._z_index: int | str = self._back_z_index()

    # === 属性 ===

    @property
    def rect(self) -> Rect:
        return self._rect

    @property
    def saved_rect(self) -> Rect | None:
        return self._saved_rect

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def state_id(self) -> int:
        return self._state_id

    @property
    def visible(self) -> bool:
        return self._state.visible

    @property
    def tier(self) -> ZTier:
        return self._tier

    @property
    def z_index(self) -> int | str:
        return self._z_index

    @property
    def has_wrapper(self) -> bool:
        """resizable pane 被包在带 resize handle 的 wrapper 中"""
        return Capability.RESIZABLE in self.capabilities

    @property
    def edge_margin(self) -> int:
        """外框比内容多出的宽度"""
        return EDGE_MARGIN if self.has_wrapper else 0

    @property
    def stacking_target(self) -> str:
        """层级作用的节点：wrapper 或 pane 本身"""
        return "wrapper" if self.has_wrapper else "pane"

    @property
    def outer_rect(self) -> Rect:
        """外框矩形（含 resize handle）"""
        return Rect(
            x=self._rect.x,
            y=self._rect.y,
            width=self._rect.width + self.edge_margin,
            height=self._rect.height + self.edge_margin,
        )

    def can(self, capability: Capability) -> bool:
        """是否具备某能力"""
        return capability in self.capabilities

    # === 几何 ===

    def commit_rect(self, rect: Rect) -> bool:
        """提交新矩形

        Returns:
            是否有变化
        """
        if rect == self._rect:
            return False
        self._rect = rect
        return True

    def save_geometry(self) -> Rect:
        """保存当前矩形（进入最大化前调用，每次覆盖）"""
        self._saved_rect = self._rect
        return self._saved_rect

    def restore_geometry(self) -> Rect | None:
        """从保存的矩形恢复并清除快照

        Returns:
            恢复后的矩形；没有快照时返回 None
        """
        if self._saved_rect is None:
            return None
        self._rect = self._saved_rect
        self._saved_rect = None
        return self._rect

    def release_geometry(self) -> None:
        """丢弃保存的矩形（关闭时调用）"""
        self._saved_rect = None

    # === 状态 ===

    def apply_state_change(self, change: StateChange) -> bool:
        """应用状态变化

        Args:
            change: 状态变化记录

        Returns:
            是否已应用（旧 state_id 被拒绝）
        """
        if change.state_id < self._state_id:
            logger.debug(
                f"[Pane:{self.pane_id[:8]}] Rejected stale state_id: "
                f"{change.state_id} < {self._state_id}"
            )
            metrics.inc("pane.stale_state_id")
            return False

        self._state = change.new_state
        self._state_id = change.state_id
        return True

    # === 层级 ===

    def _back_z_index(self) -> int | str:
        return TIER_BACK_Z if self.has_wrapper else TIER_INHERIT

    def bring_to_front(self) -> None:
        """设为最前层"""
        self._tier = ZTier.FRONT
        self._z_index = TIER_FRONT_Z

    def send_to_back(self) -> None:
        """设为后层"""
        self._tier = ZTier.BACK
        self._z_index = self._back_z_index()

    # === 序列化 ===

    def to_dict(self) -> dict:
        """序列化为字典（宿主渲染使用）"""
        return {
            "pane_id": self.pane_id,
            "title": self.title,
            "capabilities": self.capabilities.names(),
            "state": self._state.value,
            "visible": self.visible,
            "rect": self._rect.to_dict(),
            "outer_rect": self.outer_rect.to_dict(),
            "saved_rect": self._saved_rect.to_dict() if self._saved_rect else None,
            "tier": self._tier.value,
            "z_index": self._z_index,
            "stacking_target": self.stacking_target,
        }
