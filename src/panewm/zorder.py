"""Z-Order Stack

任何 pane 上的 pointer-down 都会把该 pane 提到最前层（z 2），
其余已注册 pane 全部降到后层（wrapper 为 z 1，无 wrapper 为 "inherit"）。
"""

from .telemetry import get_logger
from .errors import PaneNotFoundError
from .pane import Pane, ZTier

logger = get_logger(__name__)


class ZOrderStack:
    """层级栈

    按交互顺序维护 pane（最后一个是最前层）。
    """

    def __init__(self):
        self._panes: dict[str, Pane] = {}
        self._order: list[str] = []

    def __contains__(self, pane_id: str) -> bool:
        return pane_id in self._panes

    def __len__(self) -> int:
        return len(self._order)

    @property
    def order(self) -> list[str]:
        """从后到前的 pane_id 列表"""
        return list(self._order)

    @property
    def front(self) -> str | None:
        """当前最前层的 pane_id"""
        for pane_id in reversed(self._order):
            if self._panes[pane_id].tier == ZTier.FRONT:
                return pane_id
        return None

    def add(self, pane: Pane) -> None:
        """注册 pane（初始为后层）"""
        self._panes[pane.pane_id] = pane
        self._order.append(pane.pane_id)
        pane.send_to_back()

    def remove(self, pane_id: str) -> None:
        """移除 pane（关闭时调用）"""
        if pane_id not in self._panes:
            return
        del self._panes[pane_id]
        self._order.remove(pane_id)

    def promote(self, pane_id: str) -> Pane:
        """把 pane 提到最前层，其余全部降到后层

        Args:
            pane_id: 被点击的 pane

        Returns:
            最前层 pane
        """
        target = self._panes.get(pane_id)
        if target is None:
            raise PaneNotFoundError(pane_id)

        for other_id, pane in self._panes.items():
            if other_id == pane_id:
                pane.bring_to_front()
            else:
                pane.send_to_back()

        self._order.remove(pane_id)
        self._order.append(pane_id)

        logger.debug(f"[ZOrder:{pane_id[:8]}] Promoted to front ({target.stacking_target})")
        return target
