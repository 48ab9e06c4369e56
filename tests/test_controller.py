"""
tests/test_controller.py — Lifecycle tests for GuidanceRequestController.

Covers the full path of a submit: local validation, configuration check,
dispatch, outcome classification, retry, and the last-submit-wins ordering.
No real network; see FakeBackend in helpers.py.
"""
import asyncio
import json

import httpx
import pytest

from career_guide.client.controller import GuidanceRequestController
from career_guide.client.flows import CAREER_GUIDANCE, GENERATE_CV
from career_guide.client.state import ErrorKind, RequestStatus
from helpers import BASE_URL, GUIDANCE_BODY, FakeBackend, respond


# ── Helpers ────────────────────────────────────────────────────────────────────

def make_controller(settings, handler=None, flow=CAREER_GUIDANCE):
    backend = FakeBackend(handler or respond(200, GUIDANCE_BODY))
    controller = GuidanceRequestController(flow, settings=settings, transport=backend.transport)
    return controller, backend


# ── Local validation ───────────────────────────────────────────────────────────

class TestInputValidation:

    @pytest.mark.parametrize("value", ["", "   ", "\t\n", None])
    async def test_blank_input_is_rejected_without_network(self, settings, value):
        controller, backend = make_controller(settings)
        state = await controller.submit(value)
        assert state.status is RequestStatus.FAILED
        assert state.error.kind is ErrorKind.VALIDATION
        assert state.error.retryable is False
        assert backend.requests == []

    async def test_single_character_is_too_short(self, settings):
        controller, backend = make_controller(settings)
        state = await controller.submit("A")
        assert state.error.kind is ErrorKind.VALIDATION
        assert "at least 2 characters" in state.error.message
        assert backend.requests == []

    async def test_101_characters_is_too_long(self, settings):
        controller, backend = make_controller(settings)
        state = await controller.submit("x" * 101)
        assert state.error.kind is ErrorKind.VALIDATION
        assert "less than 100 characters" in state.error.message
        assert backend.requests == []

    @pytest.mark.parametrize("value", ["AI", "x" * 100, "  Computer Science  "])
    async def test_lengths_within_bounds_are_dispatched(self, settings, value):
        controller, backend = make_controller(settings)
        state = await controller.submit(value)
        assert state.is_succeeded
        assert len(backend.requests) == 1

    async def test_length_is_measured_after_trimming(self, settings):
        controller, backend = make_controller(settings)
        state = await controller.submit("   A   ")
        assert state.error.kind is ErrorKind.VALIDATION
        assert backend.requests == []


# ── Request shape ──────────────────────────────────────────────────────────────

class TestDispatch:

    async def test_posts_trimmed_input_as_json(self, settings):
        controller, backend = make_controller(settings)
        await controller.submit("  Computer Science  ")

        request = backend.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/career_guidance"
        assert request.headers["content-type"] == "application/json"
        assert backend.bodies == [{"program": "Computer Science"}]

    async def test_last_input_is_remembered(self, settings):
        controller, _ = make_controller(settings)
        await controller.submit("  Nursing ")
        assert controller.last_input == "Nursing"

    async def test_missing_base_url_fails_before_network(self, unconfigured_settings):
        controller, backend = make_controller(unconfigured_settings)
        state = await controller.submit("Computer Science")
        assert state.error.kind is ErrorKind.UNKNOWN
        assert state.error.retryable is False
        assert backend.requests == []

    def test_flow_without_input_field_is_refused(self, settings):
        with pytest.raises(ValueError):
            GuidanceRequestController(GENERATE_CV, settings=settings)


# ── Outcome classification ─────────────────────────────────────────────────────

class TestOutcomes:

    async def test_success_payload_equals_body(self, settings):
        controller, _ = make_controller(settings)
        state = await controller.submit("Computer Science")
        assert state.status is RequestStatus.SUCCEEDED
        assert state.payload == GUIDANCE_BODY
        assert state.error is None

    async def test_http_500_is_retryable_server_error(self, settings):
        controller, _ = make_controller(settings, respond(500, {"detail": "boom"}))
        state = await controller.submit("Computer Science")
        assert state.status is RequestStatus.FAILED
        assert state.error.kind is ErrorKind.SERVER
        assert state.error.retryable is True
        assert state.error.status_code == 500

    async def test_missing_fields_are_incomplete_data(self, settings):
        controller, _ = make_controller(settings, respond(200, {"keySkills": []}))
        state = await controller.submit("Computer Science")
        assert state.error.kind is ErrorKind.SERVER
        assert state.error.retryable is True
        assert "incomplete" in state.error.message.lower()

    async def test_one_empty_field_is_incomplete_data(self, settings):
        body = {**GUIDANCE_BODY, "certifications": []}
        controller, _ = make_controller(settings, respond(200, body))
        state = await controller.submit("Computer Science")
        assert "incomplete" in state.error.message.lower()

    async def test_non_json_body_is_invalid_format(self, settings):
        controller, _ = make_controller(settings, respond(200, text="<html>oops</html>"))
        state = await controller.submit("Computer Science")
        assert state.error.kind is ErrorKind.SERVER
        assert state.error.retryable is True
        assert "invalid response format" in state.error.message

    async def test_deeply_nested_body_is_invalid_format(self, settings):
        nested = "[" * 100_000 + "]" * 100_000
        controller, _ = make_controller(settings, respond(200, text=nested))
        state = await controller.submit("Computer Science")
        assert state.status is RequestStatus.FAILED
        assert state.error.kind is ErrorKind.SERVER
        assert state.error.retryable is True
        assert "invalid response format" in state.error.message

    async def test_bad_request_uses_server_message(self, settings):
        controller, _ = make_controller(settings, respond(400, {"message": "Unknown program name."}))
        state = await controller.submit("Computer Science")
        assert state.error.kind is ErrorKind.VALIDATION
        assert state.error.retryable is False
        assert state.error.message == "Unknown program name."

    async def test_connection_refused_is_network_error(self, settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        controller, _ = make_controller(settings, refuse)
        state = await controller.submit("Computer Science")
        assert state.error.kind is ErrorKind.NETWORK
        assert state.error.retryable is True

    async def test_unexpected_exception_is_unknown(self, settings):
        def explode(request):
            raise RuntimeError("handler bug")

        controller, _ = make_controller(settings, explode)
        state = await controller.submit("Computer Science")
        assert state.error.kind is ErrorKind.UNKNOWN
        assert state.error.retryable is False
        assert state.error.message


# ── Timeout ────────────────────────────────────────────────────────────────────

class TestTimeout:

    async def test_slow_backend_times_out_and_is_cancelled(self, fast_timeout_settings):
        async def stall(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json=GUIDANCE_BODY)

        controller, backend = make_controller(fast_timeout_settings, stall)
        state = await controller.submit("Computer Science")

        assert state.error.kind is ErrorKind.NETWORK
        assert state.error.retryable is True
        assert "timed out" in state.error.message
        assert backend.cancelled.is_set()


# ── Ordering ───────────────────────────────────────────────────────────────────

class TestLastSubmitWins:

    async def test_second_submit_supersedes_first(self, settings):
        alpha_started = asyncio.Event()
        beta_body = {**GUIDANCE_BODY, "keySkills": ["Beta only"]}

        async def handler(request):
            if json.loads(request.content)["program"] == "Alpha":
                alpha_started.set()
                await asyncio.sleep(5)
                return httpx.Response(200, json=GUIDANCE_BODY)
            return httpx.Response(200, json=beta_body)

        controller, backend = make_controller(settings, handler)
        first = asyncio.create_task(controller.submit("Alpha"))
        await alpha_started.wait()
        assert controller.state.is_pending

        await controller.submit("Beta")
        await first

        assert controller.state.payload == beta_body
        assert backend.cancelled.is_set()
        assert len(backend.requests) == 2

    async def test_late_result_of_superseded_request_is_discarded(self, settings):
        # Alpha's handler ignores cancellation and still answers; that answer
        # must never become the controller's state.
        alpha_started = asyncio.Event()
        beta_release = asyncio.Event()
        alpha_body = {**GUIDANCE_BODY, "keySkills": ["Alpha only"]}
        beta_body = {**GUIDANCE_BODY, "keySkills": ["Beta only"]}

        async def handler(request):
            if json.loads(request.content)["program"] == "Alpha":
                alpha_started.set()
                try:
                    await asyncio.sleep(5)
                except asyncio.CancelledError:
                    pass
                return httpx.Response(200, json=alpha_body)
            await beta_release.wait()
            return httpx.Response(200, json=beta_body)

        controller, _ = make_controller(settings, handler)
        first = asyncio.create_task(controller.submit("Alpha"))
        await alpha_started.wait()

        second = asyncio.create_task(controller.submit("Beta"))
        first_state = await first

        assert controller.state.is_pending
        assert first_state.payload != alpha_body
        assert controller.state.payload != alpha_body

        beta_release.set()
        await second

        assert controller.state.is_succeeded
        assert controller.state.payload == beta_body
        assert controller.last_input == "Beta"

    async def test_invalid_submit_also_supersedes_pending_request(self, settings):
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(5)
            return httpx.Response(200, json=GUIDANCE_BODY)

        controller, backend = make_controller(settings, handler)
        first = asyncio.create_task(controller.submit("Alpha"))
        await started.wait()

        await controller.submit("  ")
        await first

        assert controller.state.error.kind is ErrorKind.VALIDATION
        assert backend.cancelled.is_set()

    async def test_new_submit_clears_previous_error(self, settings):
        responses = iter([httpx.Response(503), httpx.Response(200, json=GUIDANCE_BODY)])
        controller, _ = make_controller(settings, lambda request: next(responses))

        assert (await controller.submit("Nursing")).is_failed
        state = await controller.submit("Economics")
        assert state.is_succeeded
        assert state.error is None


# ── Retry / clear / cancel ─────────────────────────────────────────────────────

class TestRetry:

    async def test_retry_when_idle_is_noop(self, settings):
        controller, backend = make_controller(settings)
        state = await controller.retry()
        assert state.is_idle
        assert backend.requests == []

    async def test_retry_after_validation_error_is_noop(self, settings):
        controller, backend = make_controller(settings)
        failed = await controller.submit("")
        state = await controller.retry()
        assert state == failed
        assert backend.requests == []

    async def test_retry_after_config_error_is_noop(self, unconfigured_settings):
        controller, backend = make_controller(unconfigured_settings)
        failed = await controller.submit("Computer Science")
        assert await controller.retry() == failed
        assert backend.requests == []

    async def test_retry_resubmits_same_input(self, settings):
        responses = iter([httpx.Response(503), httpx.Response(200, json=GUIDANCE_BODY)])
        controller, backend = make_controller(settings, lambda request: next(responses))

        failed = await controller.submit(" Economics ")
        assert failed.can_retry
        state = await controller.retry()

        assert state.is_succeeded
        assert backend.bodies == [{"program": "Economics"}, {"program": "Economics"}]


class TestClearAndCancel:

    async def test_clear_error_returns_to_idle(self, settings):
        controller, backend = make_controller(settings, respond(500))
        await controller.submit("Computer Science")
        controller.clear_error()
        assert controller.state.is_idle
        assert len(backend.requests) == 1

    async def test_clear_error_keeps_success(self, settings):
        controller, _ = make_controller(settings)
        await controller.submit("Computer Science")
        controller.clear_error()
        assert controller.state.is_succeeded

    async def test_cancel_aborts_inflight_request(self, settings):
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(5)
            return httpx.Response(200, json=GUIDANCE_BODY)

        controller, backend = make_controller(settings, handler)
        pending = asyncio.create_task(controller.submit("Computer Science"))
        await started.wait()

        controller.cancel()
        state = await pending

        assert state.is_idle
        assert controller.is_loading is False
        assert backend.cancelled.is_set()

    async def test_cancelled_caller_leaves_controller_idle(self, settings):
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(5)
            return httpx.Response(200, json=GUIDANCE_BODY)

        controller, backend = make_controller(settings, handler)
        pending = asyncio.create_task(controller.submit("Computer Science"))
        await started.wait()

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

        assert controller.state.is_idle
        assert controller.is_loading is False
        await asyncio.wait_for(backend.cancelled.wait(), timeout=1)
