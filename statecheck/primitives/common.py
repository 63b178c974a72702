"""
StateCheck — Common Primitives

Shared base model, identifiers, time, and the small value helpers used by
every layer: chain-address normalisation and transcript stringification.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel
from ulid import ULID
from web3 import Web3


def new_id() -> str:
    """Generate a new ULID string. Time-sortable, globally unique."""
    return str(ULID())


def utc_now() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


# ─── Base Models ──────────────────────────────────────────────────


class StateCheckBaseModel(BaseModel):
    """Base model for parsed inventory values. Immutable once constructed."""

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}


# ─── Addresses ────────────────────────────────────────────────────


def is_address(value: Any) -> bool:
    """True for a syntactically valid chain address (mixed case must be a valid checksum)."""
    return isinstance(value, str) and Web3.is_address(value)


def to_checksum(value: str) -> str:
    """Checksum-encode an address. Raises ValueError for anything that is not an address."""
    if not is_address(value):
        raise ValueError(f"Invalid address: {value}")
    return Web3.to_checksum_address(value)


# ─── Stringification ─────────────────────────────────────────────


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


def stringify(value: Any) -> str:
    """
    Render a value for the transcript.

    Structured values become compact JSON (integers stay exact, no float
    rounding); scalars use their plain text form with JSON booleans.
    """
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(_jsonable(value), separators=(",", ":"), default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)
