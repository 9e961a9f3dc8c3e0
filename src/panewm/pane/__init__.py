"""Pane 模块

提供生命周期管理的核心组件：
- types: 数据类型定义（Capability, WindowState, LifecycleEvent, StateChange 等）
- predicates: 流转规则谓词库
- transitions: 生命周期流转规则表
- state_machine: PaneStateMachine
- pane: Pane 实体
"""

from .types import (
    Capability,
    WindowState,
    ZTier,
    AffordanceRole,
    LifecycleEvent,
    StateChange,
    StateHistoryEntry,
    StateSnapshot,
    TransitionRule,
)
from .predicates import (
    require_capability,
    require_no_active_session,
    require_state_in,
)
from .transitions import (
    SIGNAL_MINIMIZE,
    SIGNAL_MAXIMIZE,
    SIGNAL_RESTORE,
    SIGNAL_RESTORE_MINIMIZED,
    SIGNAL_CLOSE,
)
from .state_machine import PaneStateMachine
from .pane import Pane

__all__ = [
    # Types
    "Capability",
    "WindowState",
    "ZTier",
    "AffordanceRole",
    "LifecycleEvent",
    "StateChange",
    "StateHistoryEntry",
    "StateSnapshot",
    "TransitionRule",
    # Predicates
    "require_capability",
    "require_no_active_session",
    "require_state_in",
    # Signals
    "SIGNAL_MINIMIZE",
    "SIGNAL_MAXIMIZE",
    "SIGNAL_RESTORE",
    "SIGNAL_RESTORE_MINIMIZED",
    "SIGNAL_CLOSE",
    # State Machine
    "PaneStateMachine",
    # Pane
    "Pane",
]
