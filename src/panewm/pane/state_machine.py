"""PaneStateMachine - 每个 pane 的生命周期状态机

职责：
- 维护 state/state_id/history
- 根据流转表匹配规则
- 匹配成功生成 StateChange，由 WindowManager 执行副作用
"""

import itertools
from collections import deque

from ..telemetry import get_logger, metrics
from ..config import STATE_HISTORY_MAX_LENGTH
from .types import (
    Capability,
    LifecycleEvent,
    StateChange,
    StateHistoryEntry,
    StateSnapshot,
    WindowState,
)
from .transitions import find_matching_rules

logger = get_logger(__name__)

# 全局 state_id 计数器
_state_id_counter = itertools.count(1)


def _next_state_id() -> int:
    """获取下一个 state_id（自增）"""
    return next(_state_id_counter)


class PaneStateMachine:
    """每个 Pane 的生命周期状态机

    Attributes:
        pane_id: pane 标识
        capabilities: pane 能力集合（谓词使用）
        state: 当前状态
        state_id: 状态唯一 ID（每次成功流转自增）
        history: 状态变化历史（环形队列）
    """

    def __init__(
        self,
        pane_id: str,
        capabilities: Capability = Capability.ALL,
        state: WindowState = WindowState.NORMAL,
    ):
        self.pane_id = pane_id
        self.capabilities = capabilities
        self._state = state
        self._state_id = _next_state_id()

        # 环形历史队列
        self._history: deque[StateHistoryEntry] = deque(maxlen=STATE_HISTORY_MAX_LENGTH)

    # === 属性 ===

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def state_id(self) -> int:
        return self._state_id

    @property
    def history(self) -> list[StateHistoryEntry]:
        return list(self._history)

    # === 核心方法 ===

    def process(self, event: LifecycleEvent, in_session: bool = False) -> StateChange | None:
        """处理事件

        根据流转表匹配规则，执行状态转换。

        Args:
            event: 生命周期事件
            in_session: pane 是否有进行中的拖拽/resize 会话

        Returns:
            StateChange 对象（发生转换时），或 None（被拒绝）
        """
        signal = event.signal
        pane_short = self.pane_id[:8]

        # 1. 查找所有可能匹配的规则
        rules = find_matching_rules(signal, self._state)

        if not rules:
            logger.debug(
                f"[SM:{pane_short}] No rule matched for {signal} in {self._state.value}"
            )
            self._add_history(signal, self._state, self._state, success=False,
                              description="no_rule_matched")
            metrics.inc("transition.rejected", {"reason": "no_rule"})
            return None

        # 2. 构建状态快照
        snapshot = StateSnapshot(
            state=self._state,
            capabilities=self.capabilities,
            state_id=self._state_id,
            in_session=in_session,
        )

        # 3. 检查每个规则的谓词，找到第一个满足的
        rule = None
        for candidate in rules:
            if candidate.check_predicates(event, snapshot):
                rule = candidate
                break

        if rule is None:
            logger.debug(f"[SM:{pane_short}] All predicates failed for {signal}")
            self._add_history(signal, self._state, self._state, success=False,
                              description="predicate_failed")
            metrics.inc("transition.rejected", {"reason": "predicate"})
            return None

        # 4. 执行状态转换
        old_state = self._state
        self._state = rule.to_state
        self._state_id = _next_state_id()

        self._add_history(signal, old_state, self._state, success=True,
                          description=rule.description)
        metrics.inc("transition.ok", {"rule": rule.name})

        logger.info(
            f"[SM:{pane_short}] {old_state.value} → {self._state.value} | "
            f"signal={signal} | trigger={event.trigger} | state_id={self._state_id}"
        )

        return StateChange(
            pane_id=self.pane_id,
            old_state=old_state,
            new_state=self._state,
            signal=signal,
            description=rule.description,
            state_id=self._state_id,
        )

    # === 历史 ===

    def _add_history(
        self,
        signal: str,
        from_state: WindowState,
        to_state: WindowState,
        success: bool,
        description: str = "",
    ) -> None:
        """添加历史记录"""
        entry = StateHistoryEntry(
            signal=signal,
            from_state=from_state,
            to_state=to_state,
            success=success,
            description=description,
        )
        self._history.append(entry)

    def get_history_log(self) -> str:
        """获取历史日志（调试用）"""
        if not self._history:
            return "  (no history)"
        return "\n".join(f"  {entry}" for entry in self._history)

    # === 便捷方法 ===

    def is_closed(self) -> bool:
        """是否已关闭"""
        return self._state.is_terminal

    def get_state_snapshot(self, in_session: bool = False) -> StateSnapshot:
        """获取状态快照"""
        return StateSnapshot(
            state=self._state,
            capabilities=self.capabilities,
            state_id=self._state_id,
            in_session=in_session,
        )
