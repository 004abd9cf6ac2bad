"""
Test suite for the pagination cursor codec.

Covers encode/decode of both cursor variants, tamper detection, mode
mismatches and malformed payloads.

System role: Verification of listing continuation tokens
"""

import base64
import hashlib
import hmac
import json
from datetime import datetime, timezone

import pytest

from management_api.core.exceptions import InvalidCursorError
from management_api.core.pagination.cursor import (
    ALL_MODE,
    SINGLE_MODE,
    AllPartitionCursor,
    SinglePartitionCursor,
    decode_cursor,
    encode_cursor,
)
from management_api.models.document import DocumentStatus

SECRET = "test-secret"


def _forge(payload: dict, secret: str = SECRET) -> str:
    """Sign an arbitrary payload the same way the codec does."""
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), raw, hashlib.sha256).digest()

    def b64(data: bytes) -> str:
        return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")

    return f"{b64(raw)}.{b64(signature)}"


@pytest.fixture
def all_cursor() -> AllPartitionCursor:
    """Provide a populated all-status cursor."""
    return AllPartitionCursor(
        watermark=datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc),
        watermark_id="doc-42",
        start_keys={
            DocumentStatus.PENDING: {"document_id": "doc-42", "created_at": "2024-03-01T08:30:00+00:00"},
        },
        exhausted=frozenset({DocumentStatus.DELETED, DocumentStatus.FAILED}),
    )


class TestCursorRoundTrip:
    """Test suite for encode_cursor/decode_cursor round trips."""

    def test_single_cursor_should_decode_to_equal_value(self) -> None:
        """Test a single-status cursor survives encoding unchanged."""
        # Arrange
        cursor = SinglePartitionCursor(
            status=DocumentStatus.FINISHED,
            start_key={"documentId": {"S": "abc"}, "status": {"S": "finished"}},
        )

        # Act
        decoded = decode_cursor(encode_cursor(cursor, SECRET), SINGLE_MODE, SECRET)

        # Assert
        assert decoded == cursor

    def test_all_cursor_should_decode_to_equal_value(self, all_cursor: AllPartitionCursor) -> None:
        """Test an all-status cursor keeps watermark, keys and exhausted set."""
        # Act
        decoded = decode_cursor(encode_cursor(all_cursor, SECRET), ALL_MODE, SECRET)

        # Assert
        assert decoded == all_cursor
        assert decoded.watermark.tzinfo is not None

    def test_all_cursor_without_watermark_should_round_trip(self) -> None:
        """Test the initial empty state encodes and decodes."""
        # Arrange
        cursor = AllPartitionCursor(watermark=None)

        # Act
        decoded = decode_cursor(encode_cursor(cursor, SECRET), ALL_MODE, SECRET)

        # Assert
        assert decoded.watermark is None
        assert decoded.start_keys == {}
        assert decoded.exhausted == frozenset()

    def test_token_should_be_url_safe(self, all_cursor: AllPartitionCursor) -> None:
        """Test tokens can be passed as query parameters unescaped."""
        # Act
        token = encode_cursor(all_cursor, SECRET)

        # Assert
        assert all(c.isalnum() or c in "-_." for c in token)


class TestCursorModeChecks:
    """Test suite for cross-mode replay rejection."""

    def test_single_cursor_should_be_rejected_in_all_mode(self) -> None:
        """Test a single-status cursor cannot drive an all-status listing."""
        # Arrange
        token = encode_cursor(
            SinglePartitionCursor(status=DocumentStatus.PENDING, start_key={"document_id": "x"}),
            SECRET,
        )

        # Act & Assert
        with pytest.raises(InvalidCursorError, match="cannot be used"):
            decode_cursor(token, ALL_MODE, SECRET)

    def test_all_cursor_should_be_rejected_in_single_mode(self, all_cursor: AllPartitionCursor) -> None:
        """Test an all-status cursor cannot drive a single-status listing."""
        # Arrange
        token = encode_cursor(all_cursor, SECRET)

        # Act & Assert
        with pytest.raises(InvalidCursorError):
            decode_cursor(token, SINGLE_MODE, SECRET)


class TestCursorRejection:
    """Test suite for malformed and tampered tokens."""

    @pytest.mark.parametrize("token", ["", "no-dot", ".sig", "payload.", "!!!.???"])
    def test_malformed_token_should_raise(self, token: str) -> None:
        """Test structurally invalid tokens are rejected."""
        with pytest.raises(InvalidCursorError):
            decode_cursor(token, ALL_MODE, SECRET)

    def test_wrong_secret_should_raise(self, all_cursor: AllPartitionCursor) -> None:
        """Test tokens signed with another key are rejected."""
        # Arrange
        token = encode_cursor(all_cursor, "other-secret")

        # Act & Assert
        with pytest.raises(InvalidCursorError, match="signature"):
            decode_cursor(token, ALL_MODE, SECRET)

    def test_modified_payload_should_raise(self, all_cursor: AllPartitionCursor) -> None:
        """Test editing the payload invalidates the signature."""
        # Arrange
        _, signature = encode_cursor(all_cursor, SECRET).split(".")
        tampered = base64.urlsafe_b64encode(b'{"v":1,"mode":"all"}').rstrip(b"=").decode()

        # Act & Assert
        with pytest.raises(InvalidCursorError):
            decode_cursor(f"{tampered}.{signature}", ALL_MODE, SECRET)

    def test_unknown_version_should_raise(self) -> None:
        """Test payloads from another cursor version are rejected."""
        token = _forge({"v": 99, "mode": ALL_MODE})

        with pytest.raises(InvalidCursorError, match="version"):
            decode_cursor(token, ALL_MODE, SECRET)

    def test_unknown_status_should_raise(self) -> None:
        """Test a start key for an unknown partition is rejected."""
        token = _forge({"v": 1, "mode": ALL_MODE, "watermark": None, "keys": {"archived": {}}, "exhausted": []})

        with pytest.raises(InvalidCursorError, match="unknown status"):
            decode_cursor(token, ALL_MODE, SECRET)

    def test_malformed_watermark_should_raise(self) -> None:
        """Test a watermark that is not an ISO timestamp is rejected."""
        token = _forge({"v": 1, "mode": ALL_MODE, "watermark": "yesterday", "keys": {}, "exhausted": []})

        with pytest.raises(InvalidCursorError, match="watermark"):
            decode_cursor(token, ALL_MODE, SECRET)

    def test_single_cursor_without_key_should_raise(self) -> None:
        """Test a single-status cursor must carry a start key."""
        token = _forge({"v": 1, "mode": SINGLE_MODE, "status": "pending"})

        with pytest.raises(InvalidCursorError, match="start key"):
            decode_cursor(token, SINGLE_MODE, SECRET)

    def test_non_object_payload_should_raise(self) -> None:
        """Test a JSON payload that is not an object is rejected."""
        token = _forge([1, 2, 3])  # type: ignore[arg-type]

        with pytest.raises(InvalidCursorError):
            decode_cursor(token, ALL_MODE, SECRET)
