"""Audit journal entry model (append-only, hash-chained).

The journal is the record of every settlement event that committed:
- Append-only (no update, no delete)
- Hash-chained (each entry links to the previous via SHA-256)
- One entry per emitted event, scoped to the emitting contract
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JournalEntry(BaseModel):
    """A single sealed entry in the audit journal."""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    sequence: int = 0
    contract: str
    event_name: str
    payload: dict[str, Any]
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    schema_version: str = "2026-10"
    previous_entry_hash: str = ""  # SHA-256 of previous entry's canonical bytes
    entry_hash: str = ""  # computed on append, seals this entry
