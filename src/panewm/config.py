"""panewm 配置

配置分为以下几类：
- 几何配置：最小尺寸、默认尺寸、resize handle 宽度
- 指针配置：主按键
- 层级配置：front/back tier 的 z-index
- 最小化区域配置：item 默认尺寸、resize 容差
- 状态机配置：历史长度
- 日志 / Web 配置
"""

import os

# === 几何配置 ===
MIN_WIDTH = 5  # 最小宽度（px），不可配置的硬下限
MIN_HEIGHT = 5  # 最小高度（px）
DEFAULT_WIDTH = 200  # 未指定尺寸时的默认宽度（px）
DEFAULT_HEIGHT = 150  # 未指定尺寸时的默认高度（px）
RESIZE_HANDLE_THICKNESS = 3  # resize handle 厚度（px）
EDGE_MARGIN = RESIZE_HANDLE_THICKNESS * 2  # 左右/上下两个 handle 的总宽度

# === 指针配置 ===
PRIMARY_BUTTON = 1  # 只有主按键可以开启拖拽/resize 会话
DRAG_HANDLE = "drag"  # 拖拽把手的 handle 名

# === 层级配置 ===
TIER_FRONT_Z = 2  # 最前层
TIER_BACK_Z = 1  # 后层（带 resize wrapper 的 pane）
TIER_INHERIT = "inherit"  # 后层（无 wrapper 的 pane）

# === 最小化区域配置 ===
DEFAULT_ITEM_WIDTH = 150  # 最小化 item 默认宽度（px），宿主未提供测量函数时使用
DEFAULT_ITEM_MARGIN = 5  # 最小化 item 默认左右 margin（px）
RESIZE_OVERFLOW_TOLERANCE = 1  # 窗口 resize 时 strip → dropdown 的容差（防抖动）
DROPDOWN_GLYPH_CLOSED = "\u2bc5"  # 列表收起
DROPDOWN_GLYPH_OPEN = "\u2bc6"  # 列表展开

# === 状态机配置 ===
STATE_HISTORY_MAX_LENGTH = 30  # 内存中历史记录最大长度

# === 日志配置 ===
LOG_LEVEL = os.environ.get("PANEWM_LOG_LEVEL", "INFO")  # 日志级别

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集

# === Web 配置 ===
WEB_HOST = os.environ.get("PANEWM_HOST", "127.0.0.1")
WEB_PORT = int(os.environ.get("PANEWM_PORT", "8765"))
DEFAULT_VIEWPORT_WIDTH = 1280  # Web 模式下首次连接前的视口宽度
DEFAULT_VIEWPORT_HEIGHT = 800
