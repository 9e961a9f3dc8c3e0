"""几何数据类型

包含：
- Point / Delta: 指针坐标与增量
- Rect: pane 矩形（外框偏移 + 内容尺寸）
- Viewport / ViewportProvider: 视口边界
- Zone: 8 个 resize 锚点
"""

from dataclasses import asdict, dataclass
from enum import Enum


@dataclass(frozen=True)
class Point:
    """指针坐标（client 坐标系）"""

    x: int
    y: int


@dataclass(frozen=True)
class Delta:
    """指针增量

    delta = 上一次指针位置 - 当前指针位置，即拖拽方向的反向。
    """

    x: int
    y: int

    @classmethod
    def between(cls, previous: Point, current: Point) -> "Delta":
        """计算两个指针位置之间的增量"""
        return cls(x=previous.x - current.x, y=previous.y - current.y)


@dataclass(frozen=True)
class Rect:
    """Pane 矩形

    Attributes:
        x: 外框左偏移（resizable pane 为 wrapper 的偏移）
        y: 外框上偏移
        width: 内容宽度
        height: 内容高度
    """

    x: int
    y: int
    width: int
    height: int

    def right(self, edge_margin: int = 0) -> int:
        """外框右边界"""
        return self.x + self.width + edge_margin

    def bottom(self, edge_margin: int = 0) -> int:
        """外框下边界"""
        return self.y + self.height + edge_margin

    def to_dict(self) -> dict:
        """转换为字典"""
        return asdict(self)


@dataclass(frozen=True)
class Viewport:
    """视口尺寸（包含面的 width/height）"""

    width: int
    height: int

    def to_dict(self) -> dict:
        """转换为字典"""
        return asdict(self)


class ViewportProvider:
    """视口提供者

    报告当前的包含边界，宿主在窗口尺寸变化时更新。
    """

    def __init__(self, width: int, height: int):
        self._viewport = Viewport(width=width, height=height)

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def width(self) -> int:
        return self._viewport.width

    @property
    def height(self) -> int:
        return self._viewport.height

    def update(self, width: int, height: int) -> Viewport:
        """更新视口尺寸

        Returns:
            新的视口
        """
        self._viewport = Viewport(width=width, height=height)
        return self._viewport


class Horizontal(Enum):
    """Zone 的水平分量"""
    LEFT = "left"
    RIGHT = "right"


class Vertical(Enum):
    """Zone 的垂直分量"""
    TOP = "top"
    BOTTOM = "bottom"


class Zone(Enum):
    """Resize 锚点

    布局：
    | upperLeft |   top   | upperRight
    | left      |  pane   | right
    | lowerLeft | bottom  | lowerRight
    """
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    UPPER_LEFT = "upperLeft"
    UPPER_RIGHT = "upperRight"
    LOWER_LEFT = "lowerLeft"
    LOWER_RIGHT = "lowerRight"

    @property
    def horizontal(self) -> Horizontal | None:
        """水平分量，纯垂直锚点返回 None"""
        if self in {Zone.LEFT, Zone.UPPER_LEFT, Zone.LOWER_LEFT}:
            return Horizontal.LEFT
        if self in {Zone.RIGHT, Zone.UPPER_RIGHT, Zone.LOWER_RIGHT}:
            return Horizontal.RIGHT
        return None

    @property
    def vertical(self) -> Vertical | None:
        """垂直分量，纯水平锚点返回 None"""
        if self in {Zone.TOP, Zone.UPPER_LEFT, Zone.UPPER_RIGHT}:
            return Vertical.TOP
        if self in {Zone.BOTTOM, Zone.LOWER_LEFT, Zone.LOWER_RIGHT}:
            return Vertical.BOTTOM
        return None
