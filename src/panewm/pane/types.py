"""Pane 模块数据类型定义

包含：
- Capability: pane 能力集合
- WindowState: 生命周期状态
- ZTier: 层级
- AffordanceRole: 交给宿主挂载的控件角色
- LifecycleEvent: 生命周期事件 DTO
- StateChange: 状态变更记录
- TransitionRule: 流转规则
- StateHistoryEntry: 历史记录条目
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, Flag
from typing import Callable


class Capability(Flag):
    """Pane 能力集合

    MINIMIZABLE 同时控制最小化和最大化控件。
    """
    NONE = 0
    DRAGGABLE = 1
    RESIZABLE = 2
    CLOSABLE = 4
    MINIMIZABLE = 8
    ALL = DRAGGABLE | RESIZABLE | CLOSABLE | MINIMIZABLE

    @classmethod
    def from_names(cls, names: list[str]) -> "Capability":
        """从名字列表构造（大小写不敏感）"""
        caps = cls.NONE
        for name in names:
            caps |= cls[name.upper()]
        return caps

    def names(self) -> list[str]:
        """拆成名字列表（用于序列化）"""
        return [
            cap.name.lower()
            for cap in (
                Capability.DRAGGABLE,
                Capability.RESIZABLE,
                Capability.CLOSABLE,
                Capability.MINIMIZABLE,
            )
            if cap in self
        ]


class WindowState(Enum):
    """生命周期状态

    - NORMAL: 正常显示，可拖拽/resize
    - MINIMIZED: 隐藏，在最小化区域中有一个条目
    - MAXIMIZED: 填满视口，保存了原矩形
    - CLOSED: 已关闭（终态）
    """
    NORMAL = "normal"
    MINIMIZED = "minimized"
    MAXIMIZED = "maximized"
    CLOSED = "closed"

    @property
    def visible(self) -> bool:
        """是否显示"""
        return self in {WindowState.NORMAL, WindowState.MAXIMIZED}

    @property
    def is_terminal(self) -> bool:
        """是否为终态"""
        return self == WindowState.CLOSED


class ZTier(Enum):
    """层级（粗粒度 z-order）"""
    FRONT = "front"
    BACK = "back"


class AffordanceRole(Enum):
    """由宿主创建并挂载的控件角色"""
    DRAG_HANDLE = "drag_handle"
    RESIZE_ZONE = "resize_zone"
    MINIMIZE_BUTTON = "minimize_button"
    MAXIMIZE_BUTTON = "maximize_button"
    CLOSE_BUTTON = "close_button"
    MINIMIZE_DOUBLE_CLICK = "minimize_double_click"


@dataclass
class LifecycleEvent:
    """生命周期事件 DTO

    Attributes:
        pane_id: pane 标识
        signal: 信号（minimize, maximize, restore, restore_minimized, close）
        trigger: 触发来源（icon, dblclick, entry, api）
        data: 事件数据
        timestamp: 事件时间
    """
    pane_id: str
    signal: str
    trigger: str = "api"
    data: dict = field(default_factory=dict)
    timestamp: float = 0.0

    def __post_init__(self):
        if self.timestamp == 0.0:
            self.timestamp = datetime.now().timestamp()

    def format_log(self) -> str:
        """格式化为日志字符串"""
        ts = datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S.%f")[:-3]
        return f"[LifecycleEvent] {ts} | {self.trigger:8} | {self.pane_id[:8]:8} | {self.signal}"


@dataclass
class StateHistoryEntry:
    """状态变化历史条目

    记录每一次流转尝试（成功或被拒绝），便于排查问题。
    """
    signal: str
    from_state: WindowState
    to_state: WindowState
    success: bool = True
    description: str = ""
    timestamp: float = field(default_factory=lambda: datetime.now().timestamp())

    def __str__(self) -> str:
        ts = datetime.fromtimestamp(self.timestamp).strftime("%H:%M:%S")
        mark = "✓" if self.success else "✗"
        return f"{ts} | {mark} {self.signal} → {self.to_state.value}"

    def to_dict(self) -> dict:
        """转换为可序列化的字典"""
        return {
            "signal": self.signal,
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "success": self.success,
            "description": self.description,
            "timestamp": self.timestamp,
        }


@dataclass
class StateChange:
    """状态变更记录

    由 PaneStateMachine 产生，交给 WindowManager 执行副作用。
    """
    pane_id: str
    old_state: WindowState
    new_state: WindowState
    signal: str
    description: str
    state_id: int


@dataclass
class StateSnapshot:
    """状态快照

    提供给谓词函数访问的当前状态信息。
    """
    state: WindowState
    capabilities: Capability
    state_id: int
    in_session: bool = False


# 谓词函数类型
Predicate = Callable[[LifecycleEvent, StateSnapshot], bool]


@dataclass
class TransitionRule:
    """状态流转规则

    Attributes:
        name: 规则编号
        from_states: 原状态集合，None 表示任意非终态
        signal: 信号
        to_state: 目标状态
        description: 描述
        predicates: 谓词函数列表，全部满足才匹配
    """
    name: str
    from_states: set[WindowState] | None
    signal: str
    to_state: WindowState
    description: str
    predicates: list[Predicate] = field(default_factory=list)

    def matches_signal(self, signal: str) -> bool:
        """检查信号是否匹配"""
        return signal == self.signal

    def matches_from_state(self, state: WindowState) -> bool:
        """检查原状态是否匹配"""
        if self.from_states is None:
            return not state.is_terminal
        return state in self.from_states

    def check_predicates(self, event: LifecycleEvent, snapshot: StateSnapshot) -> bool:
        """检查所有谓词"""
        for predicate in self.predicates:
            if not predicate(event, snapshot):
                return False
        return True
