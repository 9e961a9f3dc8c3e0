"""生命周期流转规则表

规则表：
| #  | from_state                  | signal            | to_state  | 谓词 |
|----|-----------------------------|-------------------|-----------|------|
| L1 | NORMAL                      | minimize          | MINIMIZED | MINIMIZABLE |
| L2 | MINIMIZED                   | restore_minimized | NORMAL    | |
| L3 | NORMAL                      | maximize          | MAXIMIZED | MINIMIZABLE |
| L4 | MAXIMIZED                   | maximize          | NORMAL    | （同一控件切换）|
| L5 | MAXIMIZED                   | restore           | NORMAL    | |
| L6 | NORMAL|MINIMIZED|MAXIMIZED  | close             | CLOSED    | CLOSABLE + 无会话 |

未列出的组合（如 MAXIMIZED 下 minimize、CLOSED 之后的任何信号）都是被拒绝的流转。
"""

from .types import Capability, TransitionRule, WindowState
from .predicates import require_capability, require_no_active_session

# 信号
SIGNAL_MINIMIZE = "minimize"
SIGNAL_MAXIMIZE = "maximize"
SIGNAL_RESTORE = "restore"
SIGNAL_RESTORE_MINIMIZED = "restore_minimized"
SIGNAL_CLOSE = "close"

# 可关闭的状态
OPEN_STATES = {WindowState.NORMAL, WindowState.MINIMIZED, WindowState.MAXIMIZED}


# === 最小化规则 ===

L1_MINIMIZE = TransitionRule(
    name="L1",
    from_states={WindowState.NORMAL},
    signal=SIGNAL_MINIMIZE,
    to_state=WindowState.MINIMIZED,
    description="最小化",
    predicates=[require_capability(Capability.MINIMIZABLE)],
)

L2_RESTORE_MINIMIZED = TransitionRule(
    name="L2",
    from_states={WindowState.MINIMIZED},
    signal=SIGNAL_RESTORE_MINIMIZED,
    to_state=WindowState.NORMAL,
    description="从最小化恢复",
)


# === 最大化规则 ===

L3_MAXIMIZE = TransitionRule(
    name="L3",
    from_states={WindowState.NORMAL},
    signal=SIGNAL_MAXIMIZE,
    to_state=WindowState.MAXIMIZED,
    description="最大化",
    predicates=[require_capability(Capability.MINIMIZABLE)],
)

L4_MAXIMIZE_TOGGLE = TransitionRule(
    name="L4",
    from_states={WindowState.MAXIMIZED},
    signal=SIGNAL_MAXIMIZE,
    to_state=WindowState.NORMAL,
    description="还原（最大化控件切换）",
)

L5_RESTORE = TransitionRule(
    name="L5",
    from_states={WindowState.MAXIMIZED},
    signal=SIGNAL_RESTORE,
    to_state=WindowState.NORMAL,
    description="还原",
)


# === 关闭规则 ===

L6_CLOSE = TransitionRule(
    name="L6",
    from_states=OPEN_STATES,
    signal=SIGNAL_CLOSE,
    to_state=WindowState.CLOSED,
    description="关闭",
    predicates=[
        require_capability(Capability.CLOSABLE),
        require_no_active_session(),
    ],
)


# === 规则表 ===
# 按优先级排序：先匹配的规则优先

TRANSITION_RULES: list[TransitionRule] = [
    L1_MINIMIZE,
    L2_RESTORE_MINIMIZED,
    L3_MAXIMIZE,
    L4_MAXIMIZE_TOGGLE,
    L5_RESTORE,
    L6_CLOSE,
]


def find_matching_rules(signal: str, current_state: WindowState) -> list[TransitionRule]:
    """查找所有可能匹配的规则（不检查谓词）

    Args:
        signal: 事件信号
        current_state: 当前状态

    Returns:
        匹配的规则列表
    """
    result = []
    for rule in TRANSITION_RULES:
        if not rule.matches_signal(signal):
            continue
        if not rule.matches_from_state(current_state):
            continue
        result.append(rule)
    return result
