"""Geometry 模块

- types: Point, Delta, Rect, Viewport, ViewportProvider, Zone
- engine: 拖拽 / resize / 包含修正的纯函数
"""

from .types import (
    Point,
    Delta,
    Rect,
    Viewport,
    ViewportProvider,
    Zone,
    Horizontal,
    Vertical,
)
from .engine import (
    compute_moved_rect,
    compute_resized_rect,
    contain_rect,
    is_contained,
    maximized_rect,
)

__all__ = [
    # Types
    "Point",
    "Delta",
    "Rect",
    "Viewport",
    "ViewportProvider",
    "Zone",
    "Horizontal",
    "Vertical",
    # Engine
    "compute_moved_rect",
    "compute_resized_rect",
    "contain_rect",
    "is_contained",
    "maximized_rect",
]
