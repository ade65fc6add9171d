"""Append-only audit trail of commission calculations.

Every calculation the service runs, accepted or rejected, produces an
audit record. Records are immutable once created and each one carries a
SHA-256 hash of its canonical JSON chained to the previous record, so a
caller that persists the trail can later prove it was not edited.

The trail is held in memory. Storing it is the caller's concern.
"""

from __future__ import annotations

import copy
import enum
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

CHAIN_ROOT_HASH = "sha256:" + "0" * 64


class AuditKind(str, enum.Enum):
    """Classification of audit records."""
    COMMISSION_COMPUTED = "commission_computed"
    COMMISSION_REJECTED = "commission_rejected"
    LEADERSHIP_BONUS_RECORDED = "leadership_bonus_recorded"


@dataclass(frozen=True)
class AuditRecord:
    """A single immutable audit entry."""
    record_id: str
    kind: AuditKind
    timestamp_utc: str
    actor_id: str
    payload: dict[str, Any]
    previous_hash: str
    record_hash: str

    @staticmethod
    def create(
        record_id: str,
        kind: AuditKind,
        actor_id: str,
        payload: dict[str, Any],
        previous_hash: str = CHAIN_ROOT_HASH,
        timestamp_utc: Optional[datetime] = None,
    ) -> AuditRecord:
        """Create a new record with computed hash.

        The record keeps its own copy of payload; later edits to the
        caller's dict never reach the trail.
        """
        payload = copy.deepcopy(payload)
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        return AuditRecord(
            record_id=record_id,
            kind=kind,
            timestamp_utc=ts_str,
            actor_id=actor_id,
            payload=payload,
            previous_hash=previous_hash,
            record_hash=_hash(record_id, kind, ts_str, actor_id, payload, previous_hash),
        )

    def verify(self) -> bool:
        expected = _hash(
            self.record_id, self.kind, self.timestamp_utc,
            self.actor_id, self.payload, self.previous_hash,
        )
        return expected == self.record_hash


def _hash(
    record_id: str,
    kind: AuditKind,
    timestamp_utc: str,
    actor_id: str,
    payload: dict[str, Any],
    previous_hash: str,
) -> str:
    canonical = json.dumps(
        {
            "record_id": record_id,
            "kind": kind.value,
            "timestamp_utc": timestamp_utc,
            "actor_id": actor_id,
            "payload": payload,
            "previous_hash": previous_hash,
        },
        sort_keys=True,
        ensure_ascii=False,
    ).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


class AuditTrail:
    """In-memory, append-only, hash-chained audit trail.

    Records can only be appended, never modified or deleted.
    """

    def __init__(self) -> None:
        self._records: list[AuditRecord] = []
        self._record_ids: set[str] = set()

    def record(
        self,
        record_id: str,
        kind: AuditKind,
        actor_id: str,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> AuditRecord:
        """Create a record chained to the current head and append it."""
        entry = AuditRecord.create(
            record_id=record_id,
            kind=kind,
            actor_id=actor_id,
            payload=payload,
            previous_hash=self.head_hash,
            timestamp_utc=timestamp_utc,
        )
        self.append(entry)
        return entry

    def append(self, entry: AuditRecord) -> None:
        """Append a record.

        Raises ValueError on a duplicate record_id (replay protection) or
        a record that does not chain onto the current head.
        """
        if entry.record_id in self._record_ids:
            raise ValueError(f"Duplicate audit record ID: {entry.record_id}")
        if entry.previous_hash != self.head_hash:
            raise ValueError(
                f"Audit record {entry.record_id} does not chain onto head "
                f"{self.head_hash}"
            )
        self._records.append(entry)
        self._record_ids.add(entry.record_id)

    def records(self, kind: Optional[AuditKind] = None) -> list[AuditRecord]:
        if kind is None:
            return list(self._records)
        return [r for r in self._records if r.kind == kind]

    @property
    def head_hash(self) -> str:
        return self._records[-1].record_hash if self._records else CHAIN_ROOT_HASH

    @property
    def count(self) -> int:
        return len(self._records)

    def verify_chain(self) -> bool:
        """True when every record hashes correctly and links to its predecessor."""
        previous = CHAIN_ROOT_HASH
        for entry in self._records:
            if entry.previous_hash != previous or not entry.verify():
                return False
            previous = entry.record_hash
        return True
