"""
Pagination cursor codec.

Cursors are opaque to clients: a JSON payload tagged with its mode,
signed with HMAC-SHA256 and wrapped in URL-safe base64. A cursor issued in
one mode never decodes in the other.

Dependencies: base64, hashlib, hmac, json (stdlib)
System role: Serialization of listing continuation state
"""

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from management_api.core.exceptions import InvalidCursorError
from management_api.models.document import DocumentStatus

CURSOR_VERSION = 1

SINGLE_MODE = "single"
ALL_MODE = "all"


@dataclass(frozen=True)
class SinglePartitionCursor:
    """Continuation of a listing filtered to one status."""

    status: DocumentStatus
    start_key: dict[str, Any]

    mode = SINGLE_MODE


@dataclass(frozen=True)
class AllPartitionCursor:
    """
    Continuation of the merged all-status listing.

    Attributes:
        watermark: created_at of the last emitted item
        watermark_id: document_id of the last emitted item (tie-break)
        start_keys: Per-status store key to resume from; a status with no
            entry that is not exhausted is read from its beginning
        exhausted: Statuses with nothing left to emit
    """

    watermark: datetime | None
    watermark_id: str | None = None
    start_keys: dict[DocumentStatus, dict[str, Any]] = field(default_factory=dict)
    exhausted: frozenset[DocumentStatus] = frozenset()

    mode = ALL_MODE


Cursor = SinglePartitionCursor | AllPartitionCursor


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(payload: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()


def _to_payload(cursor: Cursor) -> dict[str, Any]:
    if isinstance(cursor, SinglePartitionCursor):
        return {
            "v": CURSOR_VERSION,
            "mode": SINGLE_MODE,
            "status": cursor.status.value,
            "key": cursor.start_key,
        }
    return {
        "v": CURSOR_VERSION,
        "mode": ALL_MODE,
        "watermark": cursor.watermark.isoformat() if cursor.watermark else None,
        "watermark_id": cursor.watermark_id,
        "keys": {status.value: key for status, key in cursor.start_keys.items()},
        "exhausted": sorted(status.value for status in cursor.exhausted),
    }


def encode_cursor(cursor: Cursor, secret: str) -> str:
    """
    Serialize a cursor into a signed, transport-safe token.

    Args:
        cursor: Cursor to encode
        secret: HMAC signing key

    Returns:
        str: Token of the form ``<payload>.<signature>``
    """
    payload = json.dumps(_to_payload(cursor), separators=(",", ":"), sort_keys=True).encode("utf-8")
    return f"{_b64encode(payload)}.{_b64encode(_sign(payload, secret))}"


def _status(value: Any) -> DocumentStatus:
    try:
        return DocumentStatus(value)
    except ValueError as e:
        raise InvalidCursorError(f"unknown status {value!r}") from e


def _from_payload(data: dict[str, Any]) -> Cursor:
    mode = data.get("mode")
    if mode == SINGLE_MODE:
        key = data.get("key")
        if not isinstance(key, dict):
            raise InvalidCursorError("missing start key")
        return SinglePartitionCursor(status=_status(data.get("status")), start_key=key)

    if mode == ALL_MODE:
        raw_watermark = data.get("watermark")
        watermark_id = data.get("watermark_id")
        keys = data.get("keys", {})
        exhausted = data.get("exhausted", [])
        if not isinstance(keys, dict) or not isinstance(exhausted, list):
            raise InvalidCursorError("malformed partition state")
        if watermark_id is not None and not isinstance(watermark_id, str):
            raise InvalidCursorError("malformed watermark id")
        try:
            watermark = datetime.fromisoformat(raw_watermark) if raw_watermark else None
        except (TypeError, ValueError) as e:
            raise InvalidCursorError("malformed watermark") from e

        start_keys = {}
        for status, key in keys.items():
            if not isinstance(key, dict):
                raise InvalidCursorError(f"malformed start key for {status!r}")
            start_keys[_status(status)] = key
        return AllPartitionCursor(
            watermark=watermark,
            watermark_id=watermark_id,
            start_keys=start_keys,
            exhausted=frozenset(_status(status) for status in exhausted),
        )

    raise InvalidCursorError(f"unknown mode {mode!r}")


def decode_cursor(token: str, expected_mode: str, secret: str) -> Cursor:
    """
    Verify and decode a cursor token.

    Args:
        token: Token previously returned by encode_cursor
        expected_mode: SINGLE_MODE or ALL_MODE, from the request's filter
        secret: HMAC signing key

    Returns:
        Cursor: The decoded cursor variant

    Raises:
        InvalidCursorError: On malformed, tampered, or wrong-mode tokens
    """
    encoded_payload, dot, encoded_signature = token.partition(".")
    if not dot or not encoded_payload or not encoded_signature:
        raise InvalidCursorError("malformed token")

    try:
        payload = _b64decode(encoded_payload)
        signature = _b64decode(encoded_signature)
    except (binascii.Error, ValueError) as e:
        raise InvalidCursorError("malformed token encoding") from e

    if not hmac.compare_digest(signature, _sign(payload, secret)):
        raise InvalidCursorError("signature mismatch")

    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidCursorError("malformed payload") from e

    if not isinstance(data, dict) or data.get("v") != CURSOR_VERSION:
        raise InvalidCursorError("unsupported cursor version")

    cursor = _from_payload(data)
    if cursor.mode != expected_mode:
        raise InvalidCursorError(
            f"cursor issued for '{cursor.mode}' listing cannot be used for '{expected_mode}'",
            details={"cursor_mode": cursor.mode, "expected_mode": expected_mode},
        )
    return cursor
