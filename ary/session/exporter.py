"""Session exporter: answer-free JSON record of a finished conversation.

Captures what the reflection core is allowed to keep:
  - per-step evidence (question, category, keyword and competency tags)
  - derived signals (branch, trait, timestamp)
  - the selected profile and the ranking

There is no field for answer text.  Export only happens when
``ARY_EXPORT_SESSIONS`` is enabled.

Output directory: ``ARY_EXPORT_DIR`` (default ``data/sessions/``)
File format: {session_id}_{timestamp}.json
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from ary import settings
from ary.models.records import DerivedSignal, EvidenceRecord, RankedProfile

logger = logging.getLogger(__name__)


def _sessions_dir() -> Path:
    path = Path(settings.EXPORT_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


class SessionExporter:
    """Accumulates answer-free session data and writes it as JSON.

    Usage:
        exporter = SessionExporter(session_id="abc123")
        exporter.add_evidence(session.entries)
        exporter.add_signals(session.derived_signals())
        exporter.set_profile(ranked)
        exporter.save()
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.started_at = datetime.now(timezone.utc).isoformat()
        self.completed_at: str | None = None
        self.evidence: list[dict[str, Any]] = []
        self.signals: list[dict[str, Any]] = []
        self.profile: dict[str, Any] = {}

    def add_evidence(self, records: Iterable[EvidenceRecord | Mapping[str, Any]]) -> None:
        """Append evidence records (objects or their ``to_dict()`` form).

        Mappings are re-read through ``EvidenceRecord.from_dict`` so extra
        keys never reach the export.  ``to_dict()`` of a history entry
        already leaves the answer out.
        """
        for record in records:
            if not isinstance(record, EvidenceRecord):
                record = EvidenceRecord.from_dict(record)
            self.evidence.append(record.to_dict())

    def add_signals(self, signals: Iterable[DerivedSignal | Mapping[str, Any]]) -> None:
        for signal in signals:
            if isinstance(signal, DerivedSignal):
                self.signals.append(signal.to_dict())
            else:
                self.signals.append({
                    k: signal[k]
                    for k in ("id", "branch", "trait", "confidence", "timestamp")
                    if k in signal
                })

    def set_profile(self, ranked: RankedProfile | Mapping[str, Any]) -> None:
        """Record the final profile and mark the session completed."""
        self.profile = ranked.to_dict() if isinstance(ranked, RankedProfile) else dict(ranked)
        self.completed_at = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the export to a dictionary."""
        return {
            "session_id": self.session_id,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "total_entries": len(self.evidence),
            "evidence": self.evidence,
            "signals": self.signals,
            "profile": self.profile,
        }

    def save(self) -> Path:
        """Write the export to a JSON file.

        Returns
        -------
        Path
            Path of the written file.
        """
        directory = _sessions_dir()

        if self.completed_at is None:
            self.completed_at = datetime.now(timezone.utc).isoformat()

        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        filepath = directory / f"{self.session_id}_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

        logger.info("Exported session %s (%d entries)", self.session_id, len(self.evidence))
        return filepath


def load_session(filepath: str | Path) -> dict[str, Any]:
    """Load an exported session from a JSON file."""
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)


def list_sessions() -> list[Path]:
    """List all exported session files, newest first."""
    files = list(_sessions_dir().glob("*.json"))
    return sorted(files, key=lambda p: p.stat().st_mtime, reverse=True)
