"""The shorten workflow: validation, one request, and the result state.

:class:`ShortenWorkflow` owns a single :class:`WorkflowState` and moves it
through ``idle -> loading -> success | error`` by dispatching reducer
actions. It runs on the asyncio event loop; nothing here is thread-safe.
"""

import asyncio
import json
import logging
from typing import Callable, List, Optional

from prompt_toolkit.clipboard import Clipboard

from insta_short.client import HttpClient
from insta_short.errors import (
    ConnectivityError,
    MalformedResponseError,
    ServiceHttpError,
    ServiceReportedError,
    ServiceTimeoutError,
    ShortenError,
)
from insta_short.state import Action, WorkflowState, reduce
from insta_short.utils import COPY_WINDOW_SECONDS, SubmitResult
from insta_short.validators import validate_long_url

logger = logging.getLogger(__name__)

Listener = Callable[[WorkflowState], None]


def interpret_result(result: SubmitResult) -> str:
    """Turn a raw service reply into the short URL, or raise a ShortenError."""
    if result.status_code is None:
        if result.timed_out:
            raise ServiceTimeoutError(result.error)
        raise ConnectivityError(result.error)

    if not result.ok:
        raise ServiceHttpError(result.status_code)

    try:
        data = json.loads(result.text)
    except ValueError:
        raise MalformedResponseError()
    if not isinstance(data, dict):
        raise MalformedResponseError()

    status = data.get("status")
    if status == "error":
        message = data.get("message")
        if not isinstance(message, str) or not message:
            raise MalformedResponseError()
        raise ServiceReportedError(message)

    short_url = data.get("shortenedUrl")
    if status == "success" and isinstance(short_url, str) and short_url:
        return short_url

    raise MalformedResponseError()


class ShortenWorkflow:
    def __init__(
        self,
        http: HttpClient,
        clipboard: Clipboard,
        copy_window: float = COPY_WINDOW_SECONDS,
    ):
        self.http = http
        self.clipboard = clipboard
        self.copy_window = copy_window
        self.state = WorkflowState()
        self.last_error: Optional[ShortenError] = None

        self._listeners: List[Listener] = []
        self._inflight: Optional[asyncio.Future] = None
        self._copy_timer: Optional[asyncio.TimerHandle] = None

    # ========== State ==========
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, action: Action, **payload) -> WorkflowState:
        self.state = reduce(self.state, action, **payload)
        logger.debug("%s -> %s", action.value, self.state.status.value)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def set_input(self, long_url: str):
        self.dispatch(Action.INPUT_CHANGE, long_url=long_url)

    # ========== Operations ==========
    async def submit(self, long_url: Optional[str] = None) -> WorkflowState:
        """Validate the input and shorten it.

        Always returns with ``loading`` false unless a newer submission has
        taken over, in which case the newer one owns the state.
        """
        if long_url is not None:
            self.set_input(long_url)
        self._cancel_copy_timer()
        self._cancel_inflight()
        self.last_error = None

        try:
            target = validate_long_url(self.state.long_url)
        except ShortenError as e:
            self.last_error = e
            return self.dispatch(Action.VALIDATE_FAIL, error=e.user_message)

        self.dispatch(Action.SUBMIT_START)
        task = asyncio.ensure_future(self.http.shorten(target))
        self._inflight = task

        try:
            result = await task
            short_url = interpret_result(result)
        except asyncio.CancelledError:
            if self._inflight is not task:
                logger.debug("Submission for %s superseded", target)
                return self.state
            # the caller itself was cancelled
            self._inflight = None
            self.dispatch(Action.SUBMIT_CANCEL)
            raise
        except ShortenError as e:
            if isinstance(e, ConnectivityError):
                logger.warning("Shortening service unreachable: %s", e.detail)
            else:
                logger.info("Shortening failed: %s", e.user_message)
            self._finish(task, e)
        except Exception:
            logger.exception("Unexpected error while shortening %s", target)
            self._finish(task, ShortenError())
        else:
            logger.info("Shortened %s -> %s", target, short_url)
            if self._inflight is task:
                self._inflight = None
                self.dispatch(Action.SUBMIT_SUCCESS, short_url=short_url)
        return self.state

    def copy_result(self) -> bool:
        """Copy the short URL to the clipboard; ``False`` if there is none.

        Must be called from a running event loop, which hosts the timer that
        resets the copied flag.
        """
        if not self.state.short_url:
            return False
        self.clipboard.set_text(self.state.short_url)
        self._stop_copy_timer()
        self.dispatch(Action.COPY)
        loop = asyncio.get_running_loop()
        self._copy_timer = loop.call_later(self.copy_window, self._expire_copy)
        return True

    def clear(self) -> WorkflowState:
        self._cancel_copy_timer()
        self.last_error = None
        return self.dispatch(Action.CLEAR)

    def cancel(self) -> bool:
        """Abort the in-flight request, if any, and leave the loading state."""
        if self._inflight is None or self._inflight.done():
            return False
        self._cancel_inflight()
        self.dispatch(Action.SUBMIT_CANCEL)
        return True

    async def close(self):
        self.cancel()
        self._cancel_copy_timer()
        await self.http.aclose()

    # ========== Internal helpers ==========
    def _finish(self, task: asyncio.Future, error: ShortenError):
        if self._inflight is not task:
            return
        self._inflight = None
        self.last_error = error
        self.dispatch(Action.SUBMIT_ERROR, error=error.user_message)

    def _cancel_inflight(self):
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None

    def _expire_copy(self):
        self._copy_timer = None
        self.dispatch(Action.COPY_EXPIRE)

    def _stop_copy_timer(self):
        if self._copy_timer is not None:
            self._copy_timer.cancel()
            self._copy_timer = None

    def _cancel_copy_timer(self):
        self._stop_copy_timer()
        if self.state.copied:
            self.dispatch(Action.COPY_EXPIRE)
