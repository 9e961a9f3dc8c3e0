"""Minimize Overflow Layout Manager

职责：
- 维护有序的最小化注册表（下标即条目的显示 id）
- 事件冒泡导致的重复入队去重（比较最近两次入队，尽力而为）
- 根据最小化区域宽度计算容量，在 strip（横向排列）与 dropdown（下拉列表）之间切换
- 恢复时先原地置空槽位，再按模式压缩 / 重新编号

已知限制：去重只比较最近两次入队，中间夹着其他 pane 的重复请求无法识别。
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable

from .telemetry import get_logger, metrics
from .config import (
    DEFAULT_ITEM_MARGIN,
    DEFAULT_ITEM_WIDTH,
    DROPDOWN_GLYPH_CLOSED,
    DROPDOWN_GLYPH_OPEN,
    RESIZE_OVERFLOW_TOLERANCE,
)
from .errors import EmptySlotError

logger = get_logger(__name__)


class OverflowMode(Enum):
    """最小化条目的展示模式"""
    STRIP = "strip"
    DROPDOWN = "dropdown"


@dataclass
class MinimizedEntry:
    """最小化注册表条目"""
    pane_id: str
    title: str

    def to_dict(self) -> dict:
        """转换为字典"""
        return asdict(self)


@dataclass
class MinimizedItem:
    """已渲染的最小化表示（strip item 或 dropdown item）

    Attributes:
        item_id: 显示 id（对应注册表下标）
        pane_id: 对应 pane
        title: 标题
    """
    item_id: int
    pane_id: str
    title: str

    def to_dict(self) -> dict:
        """转换为字典"""
        return asdict(self)


@dataclass(frozen=True)
class ItemMetrics:
    """最小化 item 的渲染尺寸"""
    width: int
    margin_left: int = 0
    margin_right: int = 0

    @property
    def outer_width(self) -> int:
        return self.width + self.margin_left + self.margin_right


# 宿主提供的测量函数：测量第一个渲染出来的 strip item
ItemMeasurer = Callable[[MinimizedItem], ItemMetrics]


def default_item_measurer(item: MinimizedItem) -> ItemMetrics:
    """默认测量函数（宿主未提供时使用配置中的尺寸）"""
    return ItemMetrics(
        width=DEFAULT_ITEM_WIDTH,
        margin_left=DEFAULT_ITEM_MARGIN,
        margin_right=DEFAULT_ITEM_MARGIN,
    )


class OverflowLayoutManager:
    """最小化区域布局管理器

    Attributes:
        mode: 当前展示模式
        item_capacity: 最小化区域能横向容纳的 item 数（未测量时为 None）
        area_width: 最小化区域宽度
    """

    def __init__(self, area_width: int, measure_item: ItemMeasurer | None = None):
        """初始化

        Args:
            area_width: 最小化区域宽度
            measure_item: 测量 item 尺寸的函数
        """
        self._area_width = area_width
        self._measure_item = measure_item or default_item_measurer

        # 注册表，None 表示已恢复但尚未压缩的空槽位
        self._registry: list[MinimizedEntry | None] = []

        self._mode = OverflowMode.STRIP
        self._item_outer_width: int | None = None
        self._item_capacity: int | None = None

        # 渲染表示
        self._strip_items: list[MinimizedItem] = []
        self._dropdown_items: list[MinimizedItem] = []
        self._dropdown_open = False

    # === 属性 ===

    @property
    def mode(self) -> OverflowMode:
        return self._mode

    @property
    def item_capacity(self) -> int | None:
        return self._item_capacity

    @property
    def area_width(self) -> int:
        return self._area_width

    @property
    def registry(self) -> list[MinimizedEntry | None]:
        """注册表（包含空槽位）"""
        return list(self._registry)

    @property
    def entries(self) -> list[MinimizedEntry]:
        """有效条目（按顺序）"""
        return [entry for entry in self._registry if entry is not None]

    @property
    def live_count(self) -> int:
        return sum(1 for entry in self._registry if entry is not None)

    def __len__(self) -> int:
        return self.live_count

    @property
    def items(self) -> list[MinimizedItem]:
        """当前模式下渲染的表示"""
        if self._mode == OverflowMode.DROPDOWN:
            return list(self._dropdown_items)
        return list(self._strip_items)

    @property
    def dropdown_open(self) -> bool:
        return self._dropdown_open

    @property
    def toggle_glyph(self) -> str | None:
        """下拉按钮的字形（strip 模式为 None）"""
        if self._mode != OverflowMode.DROPDOWN:
            return None
        return DROPDOWN_GLYPH_OPEN if self._dropdown_open else DROPDOWN_GLYPH_CLOSED

    def index_of(self, pane_id: str) -> int | None:
        """查找 pane 的注册表下标"""
        for index, entry in enumerate(self._registry):
            if entry is not None and entry.pane_id == pane_id:
                return index
        return None

    # === 容量 ===

    def _capacity(self) -> int | None:
        """计算容量

        item 外宽只测量一次（第一个渲染出的 strip item），直到窗口 resize 重新计算。
        """
        if self._item_outer_width is None and self._strip_items:
            metrics_ = self._measure_item(self._strip_items[0])
            self._item_outer_width = metrics_.outer_width
            logger.debug(f"[Overflow] Measured item outer width: {self._item_outer_width}")

        if not self._item_outer_width:
            self._item_capacity = None
            return None

        self._item_capacity = self._area_width // self._item_outer_width
        metrics.gauge("overflow.capacity", self._item_capacity)
        return self._item_capacity

    # === 入队 ===

    def enqueue(self, pane_id: str, title: str) -> bool:
        """添加最小化条目

        顺序：入队 → 去重 → 容量检查 → 渲染。

        Args:
            pane_id: pane 标识
            title: 标题

        Returns:
            是否添加（重复入队返回 False）
        """
        self._registry.append(MinimizedEntry(pane_id=pane_id, title=title))

        if self._is_duplicate_push():
            self._registry.pop()
            logger.debug(f"[Overflow:{pane_id[:8]}] Dropped duplicated minimize")
            metrics.inc("overflow.dedup")
            return False

        index = len(self._registry) - 1

        if self._mode == OverflowMode.STRIP:
            capacity = self._capacity()
            if capacity is not None and self.live_count > capacity:
                self._to_dropdown()
            else:
                self._strip_items.append(MinimizedItem(index, pane_id, title))
        else:
            self._dropdown_items.append(MinimizedItem(index, pane_id, title))

        logger.info(
            f"[Overflow:{pane_id[:8]}] Minimized as #{index} | "
            f"mode={self._mode.value} | count={self.live_count}"
        )
        return True

    def _is_duplicate_push(self) -> bool:
        """最近两次入队是否为同一个 pane"""
        if len(self._registry) < 2:
            return False
        previous, latest = self._registry[-2], self._registry[-1]
        return previous is not None and latest is not None and previous.pane_id == latest.pane_id

    # === 恢复 ===

    def restore(self, index: int) -> MinimizedEntry:
        """从最小化恢复

        槽位先原地置空（保持与已渲染表示的下标对齐），之后：
        - strip: 剩余 item 重新编号 0..n-1，从尾部向前删除空槽位
        - dropdown: 容量足够时切回 strip（从压缩后的注册表重建）

        Args:
            index: 注册表下标（即显示 id）

        Returns:
            被恢复的条目

        Raises:
            EmptySlotError: 槽位为空或越界
        """
        if index < 0 or index >= len(self._registry) or self._registry[index] is None:
            raise EmptySlotError(index)

        entry = self._registry[index]
        self._remove_item(index)
        self._registry[index] = None

        if self._mode == OverflowMode.DROPDOWN:
            capacity = self._capacity()
            if capacity is None or self.live_count <= capacity:
                self._to_strip()
        else:
            self._compact_strip()

        logger.info(
            f"[Overflow:{entry.pane_id[:8]}] Restored #{index} | "
            f"mode={self._mode.value} | count={self.live_count}"
        )
        return entry

    def release(self, pane_id: str) -> MinimizedEntry | None:
        """按 pane_id 移除条目（关闭最小化的 pane 时调用）

        Returns:
            被移除的条目；不在注册表中时返回 None
        """
        index = self.index_of(pane_id)
        if index is None:
            return None
        return self.restore(index)

    def _remove_item(self, index: int) -> None:
        """删除 id 为 index 的渲染表示"""
        items = self._dropdown_items if self._mode == OverflowMode.DROPDOWN else self._strip_items
        for position, item in enumerate(items):
            if item.item_id == index:
                del items[position]
                return

    def _compact_strip(self) -> None:
        """strip 模式下的压缩：重新编号，删除空槽位"""
        if not self._strip_items:
            self._registry.clear()
            return

        for position, item in enumerate(self._strip_items):
            item.item_id = position

        for position in range(len(self._registry) - 1, -1, -1):
            if self._registry[position] is None:
                del self._registry[position]

    # === 模式切换 ===

    def _to_dropdown(self) -> None:
        """strip → dropdown：删除所有 strip item，用完整注册表构建下拉列表"""
        self._strip_items.clear()
        self._dropdown_items = [
            MinimizedItem(index, entry.pane_id, entry.title)
            for index, entry in enumerate(self._registry)
            if entry is not None
        ]
        self._mode = OverflowMode.DROPDOWN
        self._dropdown_open = False
        metrics.inc("overflow.mode_switch", {"to": "dropdown"})
        logger.info(
            f"[Overflow] strip → dropdown | count={self.live_count} capacity={self._item_capacity}"
        )

    def _to_strip(self) -> None:
        """dropdown → strip：删除下拉列表，压缩注册表并重建 strip item"""
        self._dropdown_items.clear()
        self._dropdown_open = False
        self._registry = [entry for entry in self._registry if entry is not None]
        self._strip_items = [
            MinimizedItem(index, entry.pane_id, entry.title)
            for index, entry in enumerate(self._registry)
        ]
        self._mode = OverflowMode.STRIP
        metrics.inc("overflow.mode_switch", {"to": "strip"})
        logger.info(
            f"[Overflow] dropdown → strip | count={self.live_count} capacity={self._item_capacity}"
        )

    def recompute(self, area_width: int | None = None) -> OverflowMode:
        """窗口 resize 后重新计算容量

        strip → dropdown 使用 capacity + RESIZE_OVERFLOW_TOLERANCE 作为阈值（防抖动），
        dropdown → strip 使用 capacity。

        Args:
            area_width: 新的最小化区域宽度（None 表示不变）

        Returns:
            重新计算后的模式
        """
        if area_width is not None:
            self._area_width = area_width

        if self._mode == OverflowMode.STRIP:
            # strip 模式下重新测量
            self._item_outer_width = None
            capacity = self._capacity()
            if capacity is not None and self.live_count > capacity + RESIZE_OVERFLOW_TOLERANCE:
                self._to_dropdown()
        else:
            capacity = self._capacity()
            if capacity is not None and self.live_count <= capacity:
                self._to_strip()

        return self._mode

    # === 下拉列表 ===

    def toggle_dropdown(self) -> bool:
        """展开/收起下拉列表

        Returns:
            切换后是否展开（strip 模式下始终为 False）
        """
        if self._mode != OverflowMode.DROPDOWN:
            return False
        self._dropdown_open = not self._dropdown_open
        return self._dropdown_open

    # === 序列化 ===

    def to_dict(self) -> dict:
        """序列化为字典（宿主渲染使用）"""
        return {
            "mode": self._mode.value,
            "item_capacity": self._item_capacity,
            "area_width": self._area_width,
            "registry": [entry.to_dict() if entry else None for entry in self._registry],
            "items": [item.to_dict() for item in self.items],
            "dropdown": {
                "open": self._dropdown_open,
                "glyph": self.toggle_glyph,
            } if self._mode == OverflowMode.DROPDOWN else None,
        }
