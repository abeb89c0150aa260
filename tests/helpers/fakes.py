"""Test doubles for the upstream API, Redis and backoff sleeps."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

import httpx
import redis

from esigate.fetch.context import CallContext


Reply = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class ScriptedUpstream:
    """Replays a fixed sequence of replies and records every request.

    Each entry is a response, an exception to raise, or a callable taking
    the request. The last entry repeats once the script is exhausted.
    """

    def __init__(self, replies: Iterable[Reply]) -> None:
        self._replies = list(replies)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self._replies)) - 1
        reply = self._replies[index]
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            # Fresh copy so a repeated reply is never re-bound to a new request
            return httpx.Response(
                reply.status_code, headers=reply.headers, content=reply.content
            )
        return reply(request)

    @property
    def transport(self) -> httpx.MockTransport:
        """Transport that serves this script."""
        return httpx.MockTransport(self)


def json_response(
    status_code: int = 200,
    body: bytes = b"{}",
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build a JSON response with optional extra headers."""
    merged = {"Content-Type": "application/json"}
    merged.update(headers or {})
    return httpx.Response(status_code, content=body, headers=merged)


@dataclass
class RecordingSleeper:
    """Sleeper that records delays instead of waiting."""

    delays: list[float] = field(default_factory=list)

    def __call__(self, seconds: float, ctx: CallContext | None) -> None:
        self.delays.append(seconds)


class FakeRedis:
    """In-memory stand-in for the subset of ``redis.Redis`` the cache uses."""

    def __init__(self) -> None:
        self.store: dict[str, bytes] = {}
        self.px: dict[str, int] = {}
        self.deleted: list[str] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("connection refused")

    def get(self, key: str) -> bytes | None:
        self._check()
        return self.store.get(key)

    def set(self, key: str, value: str | bytes, px: int | None = None) -> bool:
        self._check()
        self.store[key] = value.encode("utf-8") if isinstance(value, str) else value
        if px is not None:
            self.px[key] = px
        return True

    def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            self.deleted.append(key)
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed
