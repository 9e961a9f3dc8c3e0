"""Geometry Engine - 纯函数几何计算

职责：
- 拖拽：按指针增量移动矩形，越界的轴整体回退（不贴边）
- 8 方向 resize：水平/垂直分量独立计算，最小尺寸与视口边界校验
- 视口缩小时的包含修正
- 最大化矩形

所有函数都不修改入参，返回新的 Rect。约束违规只是让该轴本步无效，不抛异常。
"""

from dataclasses import replace

from ..config import EDGE_MARGIN, MIN_HEIGHT, MIN_WIDTH
from ..telemetry import get_logger, metrics
from .types import Delta, Horizontal, Rect, Vertical, Viewport, Zone

logger = get_logger(__name__)


def _reject(axis: str, reason: str) -> None:
    """记录一次被拒绝的轴向更新"""
    logger.debug(f"[Geometry] Rejected {axis} step: {reason}")
    metrics.inc("geometry.rejected", {"axis": axis})


# === 拖拽 ===

def compute_moved_rect(
    rect: Rect,
    delta: Delta,
    viewport: Viewport,
    edge_margin: int = 0,
) -> Rect:
    """计算拖拽后的矩形

    新位置 = 原位置 - delta。任一边越过视口边界时，对应轴整体回退到原值。

    Args:
        rect: 当前矩形
        delta: 指针增量（上一次 - 当前）
        viewport: 视口
        edge_margin: 外框比内容多出的宽度（resizable pane 为 6）

    Returns:
        新矩形
    """
    new_x = rect.x - delta.x
    new_y = rect.y - delta.y

    outer_width = rect.width + edge_margin
    outer_height = rect.height + edge_margin

    if new_x < 0 or new_x + outer_width > viewport.width:
        _reject("x", f"x={new_x} outside 0..{viewport.width}")
        new_x = rect.x
    if new_y < 0 or new_y + outer_height > viewport.height:
        _reject("y", f"y={new_y} outside 0..{viewport.height}")
        new_y = rect.y

    return replace(rect, x=new_x, y=new_y)


# === Resize ===

def _resize_start_edge(
    offset: int,
    size: int,
    drag: int,
    min_size: int,
    axis: str,
) -> tuple[int, int]:
    """从起始边（left/top）resize：尺寸增加 drag，偏移同步减少 drag"""
    new_size = size + drag
    if new_size < min_size:
        _reject(axis, f"size {new_size} < {min_size}")
        return offset, size

    new_offset = offset - drag
    if new_offset < 0:
        _reject(axis, f"offset {new_offset} < 0")
        return offset, size

    return new_offset, new_size


def _resize_end_edge(
    offset: int,
    size: int,
    drag: int,
    limit: int,
    edge_margin: int,
    min_size: int,
    axis: str,
) -> int:
    """从结束边（right/bottom）resize：尺寸增加 -drag，偏移不变"""
    new_size = size - drag
    if offset + new_size + edge_margin > limit:
        _reject(axis, f"{offset} + {new_size} + {edge_margin} > {limit}")
        return size
    if new_size < min_size:
        _reject(axis, f"size {new_size} < {min_size}")
        return size
    return new_size


def compute_resized_rect(
    rect: Rect,
    delta: Delta,
    zone: Zone,
    viewport: Viewport,
    edge_margin: int = EDGE_MARGIN,
) -> Rect:
    """计算 resize 后的矩形

    zone 拆成水平 (left/right) 和垂直 (top/bottom) 两个分量，各自独立计算；
    没有分量的轴保持不变。

    Args:
        rect: 当前矩形
        delta: 指针增量（上一次 - 当前）
        zone: resize 锚点
        viewport: 视口
        edge_margin: resize handle 总宽度

    Returns:
        新矩形
    """
    x, width = rect.x, rect.width
    y, height = rect.y, rect.height

    horizontal = zone.horizontal
    if horizontal == Horizontal.LEFT:
        x, width = _resize_start_edge(x, width, delta.x, MIN_WIDTH, "width")
    elif horizontal == Horizontal.RIGHT:
        width = _resize_end_edge(
            x, width, delta.x, viewport.width, edge_margin, MIN_WIDTH, "width"
        )

    vertical = zone.vertical
    if vertical == Vertical.TOP:
        y, height = _resize_start_edge(y, height, delta.y, MIN_HEIGHT, "height")
    elif vertical == Vertical.BOTTOM:
        height = _resize_end_edge(
            y, height, delta.y, viewport.height, edge_margin, MIN_HEIGHT, "height"
        )

    return Rect(x=x, y=y, width=width, height=height)


# === 视口包含 ===

def _contain_axis(offset: int, size: int, limit: int, edge_margin: int, min_size: int) -> tuple[int, int]:
    """单轴包含修正：先缩小尺寸，尺寸到下限后改为左移/上移偏移"""
    offset = max(0, offset)
    if offset + size + edge_margin <= limit:
        return offset, size

    fitted = limit - offset - edge_margin
    if fitted >= min_size:
        return offset, fitted

    # 保持下限尺寸，偏移不能小于 0
    return max(0, limit - min_size - edge_margin), min_size


def contain_rect(rect: Rect, viewport: Viewport, edge_margin: int = 0) -> Rect:
    """视口缩小后的包含修正

    Args:
        rect: 当前矩形
        viewport: 新视口
        edge_margin: 外框比内容多出的宽度

    Returns:
        修正后的矩形（未越界时原样返回）
    """
    x, width = _contain_axis(rect.x, rect.width, viewport.width, edge_margin, MIN_WIDTH)
    y, height = _contain_axis(rect.y, rect.height, viewport.height, edge_margin, MIN_HEIGHT)
    return Rect(x=x, y=y, width=width, height=height)


def is_contained(rect: Rect, viewport: Viewport, edge_margin: int = 0) -> bool:
    """外框是否完全在视口内"""
    return (
        rect.x >= 0
        and rect.y >= 0
        and rect.right(edge_margin) <= viewport.width
        and rect.bottom(edge_margin) <= viewport.height
    )


def maximized_rect(viewport: Viewport, edge_margin: int = 0) -> Rect:
    """填满视口的矩形（减去 resize handle 宽度）"""
    return Rect(
        x=0,
        y=0,
        width=max(MIN_WIDTH, viewport.width - edge_margin),
        height=max(MIN_HEIGHT, viewport.height - edge_margin),
    )
