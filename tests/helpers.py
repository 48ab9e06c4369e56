"""
tests/helpers.py — Backend test doubles.

The backend is never contacted: every controller gets an httpx.MockTransport
wrapped around a FakeBackend, which records requests and notices when an
in-flight request is cancelled.
"""
import asyncio
import inspect
import json
from typing import Callable

import httpx


BASE_URL = "http://backend.test"

GUIDANCE_BODY = {
    "keySkills": ["Python", "Statistics"],
    "careerPaths": ["Data Analyst", "ML Engineer"],
    "certifications": ["AWS Certified Cloud Practitioner"],
    "industryTrends": ["Generative AI adoption"],
}


class FakeBackend:
    """Callable handler for httpx.MockTransport that records what it sees."""

    def __init__(self, handler: Callable) -> None:
        self._handler = handler
        self.requests: list[httpx.Request] = []
        self.cancelled = asyncio.Event()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        try:
            result = self._handler(request)
            if inspect.isawaitable(result):
                result = await result
            return result
        except asyncio.CancelledError:
            self.cancelled.set()
            raise

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


def respond(status: int = 200, json_body=None, text: str | None = None) -> Callable:
    """Handler that always returns the same response."""
    def handler(request: httpx.Request) -> httpx.Response:
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)
    return handler


