"""Submission state and the reducer that moves it between states.

The reducer is pure: it takes the current :class:`WorkflowState`, an
:class:`Action` and its payload, and returns a new state. The workflow is
the only place that dispatches actions.
"""

from dataclasses import dataclass, replace
from enum import Enum


class SubmissionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class Action(str, Enum):
    INPUT_CHANGE = "INPUT_CHANGE"
    VALIDATE_FAIL = "VALIDATE_FAIL"
    SUBMIT_START = "SUBMIT_START"
    SUBMIT_SUCCESS = "SUBMIT_SUCCESS"
    SUBMIT_ERROR = "SUBMIT_ERROR"
    SUBMIT_CANCEL = "SUBMIT_CANCEL"
    CLEAR = "CLEAR"
    COPY = "COPY"
    COPY_EXPIRE = "COPY_EXPIRE"


@dataclass(frozen=True)
class WorkflowState:
    status: SubmissionState = SubmissionState.IDLE
    long_url: str = ""
    short_url: str = ""
    error: str = ""
    copied: bool = False

    @property
    def loading(self) -> bool:
        return self.status is SubmissionState.LOADING


def reduce(state: WorkflowState, action: Action, **payload) -> WorkflowState:
    if action is Action.INPUT_CHANGE:
        return replace(state, long_url=payload["long_url"])

    if action is Action.VALIDATE_FAIL:
        # the rejected input stays so it can be corrected
        return replace(
            state,
            status=SubmissionState.ERROR,
            short_url="",
            error=payload["error"],
            copied=False,
        )

    if action is Action.SUBMIT_START:
        return replace(state, status=SubmissionState.LOADING, short_url="", error="", copied=False)

    if action is Action.SUBMIT_SUCCESS:
        return replace(
            state,
            status=SubmissionState.SUCCESS,
            long_url="",
            short_url=payload["short_url"],
            error="",
        )

    if action is Action.SUBMIT_ERROR:
        return replace(state, status=SubmissionState.ERROR, short_url="", error=payload["error"])

    if action is Action.SUBMIT_CANCEL:
        return replace(state, status=SubmissionState.IDLE)

    if action is Action.CLEAR:
        status = SubmissionState.LOADING if state.loading else SubmissionState.IDLE
        return WorkflowState(status=status)

    if action is Action.COPY:
        if not state.short_url:
            return state
        return replace(state, copied=True)

    if action is Action.COPY_EXPIRE:
        return replace(state, copied=False)

    raise ValueError(f"Unknown action: {action!r}")
