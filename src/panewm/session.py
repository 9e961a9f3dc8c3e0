"""Drag/Resize Session Controller

职责：
- 持有进行中的指针会话（同一时刻最多一个）
- 每次 pointer-move 计算增量 delta = 上一次 - 当前，交给 Geometry Engine
- 把结果矩形提交给 pane，再把 last_pointer 更新为当前位置（增量，不累计）
- pointer-up 无条件结束会话

状态：IDLE ⇄ ACTIVE
"""

from dataclasses import dataclass
from enum import Enum

from .telemetry import get_logger, metrics
from .config import PRIMARY_BUTTON
from .geometry import (
    Delta,
    Point,
    Rect,
    ViewportProvider,
    Zone,
    compute_moved_rect,
    compute_resized_rect,
)
from .pane import Pane, WindowState

logger = get_logger(__name__)


class SessionMode(Enum):
    """会话模式"""
    MOVE = "move"
    RESIZE = "resize"


class SessionState(Enum):
    """控制器状态"""
    IDLE = "idle"
    ACTIVE = "active"


@dataclass
class DragSession:
    """进行中的指针会话

    Attributes:
        pane_id: 目标 pane
        mode: move / resize
        zone: resize 锚点（move 时为 None）
        last_pointer: 上一次指针位置
        steps: 已处理的 move 次数
    """
    pane_id: str
    mode: SessionMode
    last_pointer: Point
    zone: Zone | None = None
    steps: int = 0

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "pane_id": self.pane_id,
            "mode": self.mode.value,
            "zone": self.zone.value if self.zone else None,
            "last_pointer": {"x": self.last_pointer.x, "y": self.last_pointer.y},
            "steps": self.steps,
        }


class SessionController:
    """拖拽/resize 会话控制器

    pointer-move / pointer-up 是进程级的（不限定在元素上），
    由宿主转发给当前唯一的控制器。
    """

    def __init__(self, viewport: ViewportProvider):
        """初始化

        Args:
            viewport: 视口提供者（每一步读取当前边界）
        """
        self._viewport = viewport
        self._session: DragSession | None = None
        self._pane: Pane | None = None

    # === 属性 ===

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self._session else SessionState.IDLE

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> DragSession | None:
        return self._session

    def targets(self, pane_id: str) -> bool:
        """当前会话是否指向该 pane"""
        return self._session is not None and self._session.pane_id == pane_id

    # === 会话 ===

    def begin(
        self,
        pane: Pane,
        mode: SessionMode,
        point: Point,
        zone: Zone | None = None,
        button: int = PRIMARY_BUTTON,
    ) -> bool:
        """开始会话（IDLE → ACTIVE）

        Args:
            pane: 目标 pane
            mode: 会话模式
            point: pointer-down 位置
            zone: resize 锚点（RESIZE 模式必填）
            button: 按下的按键，只接受主按键

        Returns:
            是否开始了会话
        """
        if button != PRIMARY_BUTTON:
            logger.debug(f"[Session:{pane.pane_id[:8]}] Ignored button={button}")
            return False

        if mode == SessionMode.RESIZE and zone is None:
            raise ValueError("resize session requires a zone")

        if self._session is not None:
            # 丢失了 pointer-up：旧会话被新会话替换
            logger.warning(
                f"[Session:{self._session.pane_id[:8]}] Replaced by new session "
                f"on {pane.pane_id[:8]} (missing pointer-up)"
            )
            metrics.inc("session.replaced")

        self._pane = pane
        self._session = DragSession(
            pane_id=pane.pane_id,
            mode=mode,
            last_pointer=point,
            zone=zone if mode == SessionMode.RESIZE else None,
        )
        metrics.inc("session.started", {"mode": mode.value})
        logger.debug(
            f"[Session:{pane.pane_id[:8]}] Started {mode.value}"
            + (f" zone={zone.value}" if zone and mode == SessionMode.RESIZE else "")
        )
        return True

    def move(self, point: Point) -> Rect | None:
        """处理 pointer-move

        Args:
            point: 当前指针位置

        Returns:
            提交后的矩形；IDLE 时返回 None
        """
        session = self._session
        pane = self._pane
        if session is None or pane is None:
            return None
        if pane.state != WindowState.NORMAL:
            logger.debug(f"[Session:{pane.pane_id[:8]}] Ignored move in {pane.state.value} state")
            return None

        delta = Delta.between(session.last_pointer, point)
        viewport = self._viewport.viewport

        if session.mode == SessionMode.MOVE:
            rect = compute_moved_rect(pane.rect, delta, viewport, pane.edge_margin)
        else:
            rect = compute_resized_rect(pane.rect, delta, session.zone, viewport, pane.edge_margin)

        pane.commit_rect(rect)
        session.last_pointer = point
        session.steps += 1
        return rect

    def end(self) -> DragSession | None:
        """结束会话（ACTIVE → IDLE），与指针位置无关

        Returns:
            结束的会话；IDLE 时返回 None
        """
        session = self._session
        self._session = None
        self._pane = None

        if session is not None:
            logger.debug(
                f"[Session:{session.pane_id[:8]}] Ended {session.mode.value} "
                f"after {session.steps} steps"
            )
        return session
