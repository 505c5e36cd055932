"""Canonical hashing helpers for journal sealing and contract addressing."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def compute_entry_hash(entry_dict: dict[str, Any]) -> str:
    """SHA-256 of a journal entry (excluding the entry_hash field itself).

    This is the seal that makes each entry tamper-evident.
    """
    d = {k: v for k, v in entry_dict.items() if k != "entry_hash"}
    return sha256_hex(canonical_json_bytes(d))


def derive_contract_address(creator: str, nonce: int) -> str:
    """Deterministic ``0x`` address for the ``nonce``-th contract of ``creator``.

    The same (creator, nonce) pair always yields the same address, so an
    escrow address can be predicted and shared with funders in advance.
    """
    digest = sha256_hex(canonical_json_bytes({"creator": creator, "nonce": nonce}))
    return "0x" + digest[-40:]


def label_address(label: str) -> str:
    """Deterministic ``0x`` address for a human-readable principal label."""
    return "0x" + sha256_hex(label.encode("utf-8"))[-40:]
