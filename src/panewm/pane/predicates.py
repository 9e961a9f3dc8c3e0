"""内置谓词库

提供 TransitionRule 可用的谓词函数。
谓词函数签名: (event: LifecycleEvent, snapshot: StateSnapshot) -> bool

可用谓词：
- require_capability(cap): 检查 pane 是否具备某能力
- require_no_active_session(): 检查 pane 没有进行中的拖拽/resize 会话
- require_state_in(states): 检查状态是否在集合中
"""

from .types import Capability, LifecycleEvent, Predicate, StateSnapshot, WindowState


def require_capability(capability: Capability) -> Predicate:
    """创建检查能力的谓词

    Args:
        capability: 需要的能力

    Returns:
        谓词函数
    """
    def predicate(event: LifecycleEvent, snapshot: StateSnapshot) -> bool:
        return capability in snapshot.capabilities

    return predicate


def require_no_active_session() -> Predicate:
    """创建检查无进行中会话的谓词

    拖拽/resize 过程中关闭 pane 会让会话指向已分离的 pane，直接拒绝。

    Returns:
        谓词函数
    """
    def predicate(event: LifecycleEvent, snapshot: StateSnapshot) -> bool:
        return not snapshot.in_session

    return predicate


def require_state_in(states: set[WindowState]) -> Predicate:
    """创建检查状态是否在集合中的谓词

    Args:
        states: 允许的状态集合

    Returns:
        谓词函数
    """
    def predicate(event: LifecycleEvent, snapshot: StateSnapshot) -> bool:
        return snapshot.state in states

    return predicate


def always_true() -> Predicate:
    """总是返回 True 的谓词（用于测试）"""
    def predicate(event: LifecycleEvent, snapshot: StateSnapshot) -> bool:
        return True

    return predicate


def always_false() -> Predicate:
    """总是返回 False 的谓词（用于测试）"""
    def predicate(event: LifecycleEvent, snapshot: StateSnapshot) -> bool:
        return False

    return predicate
