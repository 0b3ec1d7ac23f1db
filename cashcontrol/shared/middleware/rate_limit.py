# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps

from flask import Request, jsonify, request

from cashcontrol.shared.config import load_config
from cashcontrol.shared.logging import logger


@dataclass
class Bucket:
    timestamps: deque[float]


class InMemoryRateLimiter:
    """Sliding-window limiter keyed by route and client address.

    State is per process; several workers each keep their own window.
    Buckets whose window has fully expired are swept at most once per window.
    """

    def __init__(self, limit: int, window_seconds: float) -> None:
        self._limit = max(1, int(limit))
        self._window = max(0.1, float(window_seconds))
        self._buckets: dict[str, Bucket] = {}
        self._lock = threading.Lock()
        self._last_sweep: float | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def allow(self, key: str, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        with self._lock:
            self._sweep(now)
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = Bucket(deque(maxlen=self._limit))
            self._prune(bucket, now)
            if len(bucket.timestamps) >= self._limit:
                return False
            bucket.timestamps.append(now)
            return True

    def _prune(self, bucket: Bucket, now: float) -> None:
        while bucket.timestamps and (now - bucket.timestamps[0]) > self._window:
            bucket.timestamps.popleft()

    def _sweep(self, now: float) -> None:
        if self._last_sweep is not None and now - self._last_sweep < self._window:
            return
        self._last_sweep = now
        for key in list(self._buckets):
            bucket = self._buckets[key]
            self._prune(bucket, now)
            if not bucket.timestamps:
                del self._buckets[key]


def client_key(req: Request, *, trust_forwarded: bool = False) -> str:
    # X-Forwarded-For is client-controlled unless a trusted proxy sets it.
    if trust_forwarded:
        forwarded = req.headers.get("X-Forwarded-For", "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return req.remote_addr or "unknown"


def rate_limit(limit: int | None = None, window_seconds: float | None = None):
    config = load_config()
    enabled = config.security.enable_rate_limit
    trust_forwarded = config.security.trust_proxy_headers
    limiter = InMemoryRateLimiter(
        limit or config.security.rate_limit_requests,
        window_seconds or config.security.rate_limit_window,
    )

    def decorator(f: Callable):
        if not enabled:
            return f

        @wraps(f)
        def wrapper(*args, **kwargs):
            key = f"{request.path}:{client_key(request, trust_forwarded=trust_forwarded)}"
            if not limiter.allow(key):
                logger.warning(f"rate_limit: rejected {request.method} {request.path}")
                return jsonify({"error": "rate_limited"}), 429
            return f(*args, **kwargs)

        return wrapper

    return decorator


__all__ = ["InMemoryRateLimiter", "client_key", "rate_limit"]
