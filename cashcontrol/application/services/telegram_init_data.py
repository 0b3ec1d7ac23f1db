# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Verification of Telegram mini-app ``initData`` payloads.

The payload is a URL query string signed by Telegram. The signature covers
every field except ``hash``, rendered as ``key=value`` lines sorted byte-wise
and joined with ``\\n``. The signing key is itself derived from the bot token
with the fixed ``WebAppData`` key, so a payload is only valid for one bot.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import re
from datetime import datetime, timedelta
from urllib.parse import unquote_plus

from cashcontrol.domain.users.entities import VerifiedIdentity
from cashcontrol.domain.users.exceptions import (
    CredentialExpiredError,
    InvalidSignatureError,
    MalformedCredentialError,
    MissingIdentityError,
    MissingSignatureError,
    MissingTimestampError,
)
from cashcontrol.domain.users.repositories import Clock

WEB_APP_DATA_KEY = b"WebAppData"
DEFAULT_MAX_AGE = timedelta(seconds=86_400)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def parse_init_data(raw: str) -> dict[str, list[str]]:
    """Parse a query string into ``key -> values`` keeping every occurrence.

    Rejects ``;`` separators, broken percent escapes and invalid UTF-8.
    """

    values: dict[str, list[str]] = {}
    for part in raw.split("&"):
        if not part:
            continue
        if ";" in part:
            raise MalformedCredentialError()
        key, _, value = part.partition("=")
        if _BAD_ESCAPE_RE.search(key) or _BAD_ESCAPE_RE.search(value):
            raise MalformedCredentialError()
        try:
            key = unquote_plus(key, errors="strict")
            value = unquote_plus(value, errors="strict")
        except UnicodeDecodeError as exc:
            raise MalformedCredentialError() from exc
        values.setdefault(key, []).append(value)
    return values


def data_check_string(values: dict[str, list[str]]) -> str:
    # Only the first occurrence of a key is signed.
    pairs = [f"{key}={items[0]}" for key, items in values.items() if items]
    pairs.sort(key=lambda pair: pair.encode("utf-8"))
    return "\n".join(pairs)


def compute_signature(check_string: str, bot_token: str) -> str:
    secret_key = hmac.new(WEB_APP_DATA_KEY, bot_token.encode("utf-8"), hashlib.sha256).digest()
    return hmac.new(secret_key, check_string.encode("utf-8"), hashlib.sha256).hexdigest()


def _first(values: dict[str, list[str]], key: str) -> str:
    items = values.get(key)
    return items[0] if items else ""


def _parse_int64(text: str) -> int | None:
    if not _DECIMAL_RE.fullmatch(text):
        return None
    number = int(text)
    if number < _INT64_MIN or number > _INT64_MAX:
        return None
    return number


def _resolve_user_id(values: dict[str, list[str]]) -> int:
    top_level = _parse_int64(_first(values, "id"))
    if top_level is not None:
        return top_level

    raw_user = _first(values, "user")
    if not raw_user:
        raise MissingIdentityError()
    try:
        user = json.loads(raw_user)
    except ValueError as exc:
        raise MissingIdentityError() from exc
    if not isinstance(user, dict):
        raise MissingIdentityError()
    user_id = user.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise MissingIdentityError()
    if user_id < _INT64_MIN or user_id > _INT64_MAX:
        raise MissingIdentityError()
    return user_id


def verify_init_data(
    raw: str,
    bot_token: str,
    *,
    now: datetime,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> VerifiedIdentity:
    """Check ``raw`` against ``bot_token`` and return the proven identity.

    Raises a ``VerificationError`` subclass naming the first failed check.
    Pure: no I/O, the clock is supplied by the caller.
    """

    values = parse_init_data(raw)

    received_hash = _first(values, "hash")
    if not received_hash:
        raise MissingSignatureError()
    values.pop("hash")

    auth_date = _parse_int64(_first(values, "auth_date"))
    if auth_date is None:
        raise MissingTimestampError()
    if int(now.timestamp()) - auth_date > int(max_age.total_seconds()):
        raise CredentialExpiredError()

    # An empty bot token would let anyone sign with the empty key.
    if not bot_token:
        raise InvalidSignatureError()
    expected = compute_signature(data_check_string(values), bot_token)
    if not hmac.compare_digest(expected.encode("ascii"), received_hash.encode("utf-8")):
        raise InvalidSignatureError()

    return VerifiedIdentity(
        platform_user_id=_resolve_user_id(values),
        issued_at=auth_date,
    )


class InitDataVerifier:
    def __init__(
        self,
        *,
        bot_token: str,
        clock: Clock,
        max_age: timedelta = DEFAULT_MAX_AGE,
    ) -> None:
        self._bot_token = bot_token
        self._clock = clock
        self._max_age = max_age

    def verify(self, raw: str) -> VerifiedIdentity:
        return verify_init_data(
            raw,
            self._bot_token,
            now=self._clock.now(),
            max_age=self._max_age,
        )
