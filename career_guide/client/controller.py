"""
client/controller.py — Request lifecycle for one form.

RequestController owns a single RequestState and at most one in-flight
request. Starting a new request cancels the previous one, and a result
that races past the cancellation is dropped by comparing generations, so
the state always reflects the most recent submit (last-submit-wins).

GuidanceRequestController adds free-text validation and retry on top, and
is what the career guidance, recommendations and interview pages use.

Usage:
    controller = GuidanceRequestController(CAREER_GUIDANCE)
    state = await controller.submit("Computer Science")
    if state.is_failed and state.can_retry:
        state = await controller.retry()
"""
import asyncio
from typing import Any

import httpx

from career_guide.client.classifier import classify_exception, classify_response, config_error
from career_guide.client.flows import Flow
from career_guide.client.state import ErrorInfo, RequestState
from career_guide.client.validation import validate_input
from career_guide.config import Settings, get_settings
from career_guide.observability.logger import Timer, get_logger

logger = get_logger(__name__)


class RequestController:
    """Dispatches JSON bodies for one flow and tracks the outcome."""

    def __init__(
        self,
        flow: Flow,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.flow = flow
        self.settings = settings or get_settings()
        self._transport = transport  # Tests swap in httpx.MockTransport
        self._state = RequestState.idle()
        self._inflight: asyncio.Task | None = None
        self._generation = 0

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state.is_pending

    def clear_error(self) -> None:
        """Failed → Idle, e.g. when the user starts editing the input again."""
        if self._state.is_failed:
            self._state = RequestState.idle()

    def cancel(self) -> None:
        """Abandon any in-flight request and return to Idle."""
        was_pending = self._supersede()
        self._state = RequestState.idle()
        if was_pending:
            logger.info("request_cancelled", extra={"flow": self.flow.name})

    def fail(self, error: ErrorInfo) -> RequestState:
        """Record a locally detected failure; supersedes anything in flight."""
        self._supersede()
        self._state = RequestState.failed(error)
        logger.info(
            "input_rejected",
            extra={"flow": self.flow.name, "error_kind": error.kind.value},
        )
        return self._state

    async def dispatch(self, body: dict[str, Any]) -> RequestState:
        """
        Send one request and wait for its final state.

        If a later dispatch supersedes this one, the returned state is
        whatever the controller holds at that point, never this call's result.
        """
        self._supersede()
        generation = self._generation

        if not self.settings.api_base_url:
            logger.error("config_missing", extra={"flow": self.flow.name, "setting": "API_BASE_URL"})
            self._state = RequestState.failed(config_error())
            return self._state

        self._state = RequestState.pending()
        task = asyncio.create_task(self._execute(body))
        self._inflight = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            # Caller went away; do not leave the request running.
            task.cancel()
            if generation == self._generation:
                self._inflight = None
                self._state = RequestState.idle()
                logger.info("request_cancelled", extra={"flow": self.flow.name})
            raise

        if self._inflight is task:
            self._inflight = None

        if task.cancelled() or generation != self._generation:
            logger.info("request_superseded", extra={"flow": self.flow.name})
            return self._state

        self._state = task.result()
        return self._state

    def _supersede(self) -> bool:
        """Invalidate the current request. Returns True if one was in flight."""
        self._generation += 1
        task, self._inflight = self._inflight, None
        if task is not None and not task.done():
            task.cancel()
            return True
        return False

    async def _post(self, url: str, body: dict[str, Any]) -> httpx.Response:
        # Client is scoped to the call so the connection is released on
        # success, timeout and cancellation alike.
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.settings.request_timeout_s,
        ) as client:
            return await client.post(
                url,
                json=body,
                headers={"Content-Type": "application/json"},
            )

    async def _execute(self, body: dict[str, Any]) -> RequestState:
        url = self.settings.endpoint_url(self.flow.endpoint)
        logger.info("request_dispatched", extra={"flow": self.flow.name, "endpoint": self.flow.endpoint})

        response: httpx.Response | None = None
        with Timer() as timer:
            try:
                response = await asyncio.wait_for(
                    self._post(url, body),
                    timeout=self.settings.request_timeout_s,
                )
                outcome = classify_response(response, self.flow)
            except (asyncio.TimeoutError, httpx.HTTPError) as e:
                outcome = RequestState.failed(classify_exception(e))
            except Exception as e:
                logger.error("request_error", extra={"flow": self.flow.name}, exc_info=True)
                outcome = RequestState.failed(classify_exception(e))

        extra = {
            "flow": self.flow.name,
            "latency_ms": timer.elapsed_ms,
            "status_code": response.status_code if response is not None else None,
        }
        if outcome.is_failed:
            logger.warning(
                "request_failed",
                extra={**extra, "error_kind": outcome.error.kind.value, "retryable": outcome.error.retryable},
            )
        else:
            logger.info("request_succeeded", extra=extra)
        return outcome


class GuidanceRequestController(RequestController):
    """Single free-text input → one endpoint, with validation and retry."""

    def __init__(
        self,
        flow: Flow,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if flow.field_name is None:
            raise ValueError(f"Flow '{flow.name}' has no input field; use RequestController")
        super().__init__(flow, settings=settings, transport=transport)
        self._last_input: str | None = None

    @property
    def last_input(self) -> str | None:
        return self._last_input

    async def submit(self, value: str | None) -> RequestState:
        error = validate_input(value, self.flow, self.settings)
        if error is not None:
            return self.fail(error)

        trimmed = value.strip()
        self._last_input = trimmed
        return await self.dispatch(self.flow.build_body(trimmed))

    async def retry(self) -> RequestState:
        """Re-submit the last valid input; no-op unless the last failure is retryable."""
        if not self._state.can_retry or self._last_input is None:
            return self._state
        logger.info("request_retry", extra={"flow": self.flow.name})
        return await self.submit(self._last_input)
