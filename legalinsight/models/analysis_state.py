"""
Analysis State Machine
分析请求的显式状态机: Idle → Awaiting → Streaming → Normalizing → Done / Failed
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from legalinsight.models.legal_schemas import CaseAnalysis


class Phase(str, Enum):
    """分析阶段"""
    IDLE = "idle"
    AWAITING = "awaiting"
    STREAMING = "streaming"
    NORMALIZING = "normalizing"
    DONE = "done"
    FAILED = "failed"


class FailureReason(str, Enum):
    """失败原因（每种原因对应不同的用户提示）"""
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    TIMEOUT = "timeout"
    FAILED = "failed"


FAILURE_MESSAGES = {
    FailureReason.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    FailureReason.QUOTA_EXHAUSTED: "AI service quota reached. Please try again later.",
    FailureReason.TIMEOUT: "The analysis took too long. Please try again with a shorter input or retry.",
    FailureReason.FAILED: "Unable to complete the analysis. Please try again.",
}


class StateEvent(str, Enum):
    """驱动状态转换的事件"""
    SUBMIT = "submit"
    STREAM_OPENED = "stream_opened"
    STREAM_ENDED = "stream_ended"
    NORMALIZED = "normalized"
    FAIL = "fail"
    RESET = "reset"


class AnalysisState(BaseModel):
    """状态快照（不可变）"""
    phase: Phase = Phase.IDLE
    analysis: Optional[CaseAnalysis] = None
    reason: Optional[FailureReason] = None

    model_config = {"frozen": True}

    @property
    def is_busy(self) -> bool:
        return self.phase in (Phase.AWAITING, Phase.STREAMING, Phase.NORMALIZING)

    @property
    def message(self) -> Optional[str]:
        """失败时的用户提示"""
        if self.reason is None:
            return None
        return FAILURE_MESSAGES[self.reason]


class InvalidTransitionError(Exception):
    """非法状态转换"""

    def __init__(self, phase: Phase, event: StateEvent):
        self.phase = phase
        self.event = event
        super().__init__(f"Cannot apply '{event.value}' in phase '{phase.value}'")


# 合法转换: (当前阶段, 事件) -> 下一阶段
_TRANSITIONS = {
    (Phase.IDLE, StateEvent.SUBMIT): Phase.AWAITING,
    (Phase.DONE, StateEvent.SUBMIT): Phase.AWAITING,
    (Phase.FAILED, StateEvent.SUBMIT): Phase.AWAITING,
    (Phase.AWAITING, StateEvent.STREAM_OPENED): Phase.STREAMING,
    (Phase.STREAMING, StateEvent.STREAM_ENDED): Phase.NORMALIZING,
    (Phase.NORMALIZING, StateEvent.NORMALIZED): Phase.DONE,
    (Phase.AWAITING, StateEvent.FAIL): Phase.FAILED,
    (Phase.STREAMING, StateEvent.FAIL): Phase.FAILED,
    (Phase.NORMALIZING, StateEvent.FAIL): Phase.FAILED,
}


def transition(
    state: AnalysisState,
    event: StateEvent,
    analysis: Optional[CaseAnalysis] = None,
    reason: Optional[FailureReason] = None,
) -> AnalysisState:
    """
    纯函数状态转换

    Args:
        state: 当前状态
        event: 触发事件
        analysis: NORMALIZED 事件携带的分析结果
        reason: FAIL 事件携带的失败原因

    Returns:
        新的状态快照

    Raises:
        InvalidTransitionError: 当前阶段不接受该事件
    """
    if event == StateEvent.RESET:
        return AnalysisState()

    next_phase = _TRANSITIONS.get((state.phase, event))
    if next_phase is None:
        raise InvalidTransitionError(state.phase, event)

    if next_phase == Phase.DONE:
        if analysis is None:
            raise ValueError("NORMALIZED event requires an analysis")
        return AnalysisState(phase=next_phase, analysis=analysis)

    if next_phase == Phase.FAILED:
        return AnalysisState(phase=next_phase, reason=reason or FailureReason.FAILED)

    return AnalysisState(phase=next_phase)
