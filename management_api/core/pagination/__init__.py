"""
Document listing pagination.

Exports the cursor codec and the fan-out query engine.
"""

from management_api.core.pagination.cursor import (
    ALL_MODE,
    SINGLE_MODE,
    AllPartitionCursor,
    SinglePartitionCursor,
    decode_cursor,
    encode_cursor,
)
from management_api.core.pagination.fan_out import FanOutQueryEngine

__all__ = [
    "ALL_MODE",
    "SINGLE_MODE",
    "AllPartitionCursor",
    "SinglePartitionCursor",
    "decode_cursor",
    "encode_cursor",
    "FanOutQueryEngine",
]
