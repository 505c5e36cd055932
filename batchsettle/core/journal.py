"""Append-only, hash-chained audit journal of settlement events.

Design:
- Append-only: only ``append()`` writes; no update, no delete.
- Hash-chained: each entry includes the SHA-256 of the previous entry.
- In memory: entries live as long as the journal object does.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any

from batchsettle.core.hasher import canonical_json_bytes, compute_entry_hash, sha256_hex
from batchsettle.models.events import AuditEvent
from batchsettle.models.journal import JournalEntry


class JournalIntegrityError(RuntimeError):
    """Raised when the hash chain is broken."""


class AuditJournal:
    """Append-only, hash-chained record of committed settlement events."""

    def __init__(self) -> None:
        self._entries: list[JournalEntry] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    def append(self, event: AuditEvent) -> JournalEntry:
        """Seal ``event`` into a new entry linked to the previous one.

        This is the ONLY write method. There is no update or delete.
        """
        with self._lock:
            previous_hash = self._entries[-1].entry_hash if self._entries else ""
            entry = JournalEntry(
                sequence=len(self._entries),
                contract=event.contract,
                event_name=event.event,
                payload=event.model_dump(mode="json"),
                previous_entry_hash=previous_hash,
            )
            entry_hash = compute_entry_hash(entry.model_dump(mode="json"))
            sealed = entry.model_copy(update={"entry_hash": entry_hash})
            self._entries.append(sealed)
        return sealed

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def entries(
        self, *, contract: str | None = None, event_name: str | None = None
    ) -> list[JournalEntry]:
        """Return entries in append order, optionally filtered."""
        return [
            e
            for e in self._entries
            if (contract is None or e.contract == contract)
            and (event_name is None or e.event_name == event_name)
        ]

    def latest(self, *, contract: str | None = None) -> JournalEntry | None:
        matching = self.entries(contract=contract)
        return matching[-1] if matching else None

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self) -> bool:
        """Recompute every entry hash and check the previous-hash links.

        Returns True if the chain is valid, raises JournalIntegrityError otherwise.
        """
        prev_hash = ""
        for entry in self._entries:
            if entry.previous_entry_hash != prev_hash:
                raise JournalIntegrityError(
                    f"Chain broken at entry {entry.entry_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {entry.previous_entry_hash!r}"
                )
            expected_hash = compute_entry_hash(entry.model_dump(mode="json"))
            if entry.entry_hash != expected_hash:
                raise JournalIntegrityError(
                    f"Tampered entry {entry.entry_id}: "
                    f"expected hash={expected_hash!r}, "
                    f"got {entry.entry_hash!r}"
                )
            prev_hash = entry.entry_hash
        return True

    def export_anchor(self) -> dict[str, Any]:
        """Export a digest of the current chain head for external witnessing.

        Keys: ``entry_count``, ``root_hash`` (hash of the last entry),
        ``timestamp_utc`` and ``anchor_hash`` (SHA-256 of the anchor itself).
        """
        payload: dict[str, Any] = {
            "entry_count": len(self._entries),
            "root_hash": self._entries[-1].entry_hash if self._entries else "",
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
        payload["anchor_hash"] = sha256_hex(canonical_json_bytes(payload))
        return payload
