"""Simple in-memory audit trail for cart and checkout events."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional


@dataclass
class AuditEntry:
    event: str
    subject: Optional[str]
    details: str
    at: datetime


class AuditLogger:
    def __init__(self) -> None:
        self._entries: List[AuditEntry] = []

    def log(self, event: str, subject: Optional[str], details: str = "") -> None:
        self._entries.append(
            AuditEntry(
                event=event,
                subject=subject,
                details=details,
                at=datetime.now(timezone.utc),
            )
        )

    def entries(self, event: Optional[str] = None) -> List[AuditEntry]:
        if event is None:
            return list(self._entries)
        return [entry for entry in self._entries if entry.event == event]
