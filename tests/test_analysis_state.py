"""Tests for the analysis state machine."""

import pytest

from legalinsight.models.analysis_state import (
    FAILURE_MESSAGES,
    AnalysisState,
    FailureReason,
    InvalidTransitionError,
    Phase,
    StateEvent,
    transition,
)
from legalinsight.services.analysis_parser import AnalysisParser


@pytest.fixture
def analysis():
    return AnalysisParser().parse("", "case")


def test_happy_path(analysis):
    state = AnalysisState()
    assert state.phase == Phase.IDLE
    assert state.is_busy is False

    state = transition(state, StateEvent.SUBMIT)
    assert state.phase == Phase.AWAITING and state.is_busy
    state = transition(state, StateEvent.STREAM_OPENED)
    assert state.phase == Phase.STREAMING
    state = transition(state, StateEvent.STREAM_ENDED)
    assert state.phase == Phase.NORMALIZING
    state = transition(state, StateEvent.NORMALIZED, analysis=analysis)
    assert state.phase == Phase.DONE
    assert state.analysis is analysis
    assert state.is_busy is False
    assert state.message is None


@pytest.mark.parametrize("reason", list(FailureReason))
def test_failure_carries_reason_and_message(reason):
    state = transition(AnalysisState(), StateEvent.SUBMIT)
    state = transition(state, StateEvent.FAIL, reason=reason)
    assert state.phase == Phase.FAILED
    assert state.reason == reason
    assert state.message == FAILURE_MESSAGES[reason]


def test_failure_messages_are_distinct():
    assert len(set(FAILURE_MESSAGES.values())) == len(FailureReason)


def test_failed_and_done_can_resubmit(analysis):
    failed = AnalysisState(phase=Phase.FAILED, reason=FailureReason.TIMEOUT)
    assert transition(failed, StateEvent.SUBMIT).phase == Phase.AWAITING
    done = AnalysisState(phase=Phase.DONE, analysis=analysis)
    resubmitted = transition(done, StateEvent.SUBMIT)
    assert resubmitted.phase == Phase.AWAITING
    assert resubmitted.analysis is None


@pytest.mark.parametrize(
    "phase,event",
    [
        (Phase.IDLE, StateEvent.STREAM_OPENED),
        (Phase.IDLE, StateEvent.FAIL),
        (Phase.AWAITING, StateEvent.SUBMIT),
        (Phase.STREAMING, StateEvent.NORMALIZED),
        (Phase.DONE, StateEvent.FAIL),
    ],
)
def test_invalid_transitions(phase, event):
    with pytest.raises(InvalidTransitionError):
        transition(AnalysisState(phase=phase), event)


def test_normalized_requires_analysis():
    with pytest.raises(ValueError):
        transition(AnalysisState(phase=Phase.NORMALIZING), StateEvent.NORMALIZED)


def test_reset_from_any_phase():
    state = AnalysisState(phase=Phase.STREAMING)
    assert transition(state, StateEvent.RESET) == AnalysisState()
