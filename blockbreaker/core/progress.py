from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from blockbreaker.core.config import STORAGE_KEY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressRecord:
    cleared_stages: Tuple[bool, ...]
    last_saved: Optional[str] = None

    @classmethod
    def empty(cls, max_stage: int) -> "ProgressRecord":
        return cls(cleared_stages=(False,) * max_stage)

    @classmethod
    def stamped(cls, cleared_stages: Sequence[bool]) -> "ProgressRecord":
        """Record carrying the current UTC time as its save timestamp."""
        now = datetime.now(timezone.utc).isoformat()
        return cls(cleared_stages=tuple(bool(c) for c in cleared_stages), last_saved=now)

    def to_payload(self) -> Dict[str, Any]:
        return {"clearedStages": list(self.cleared_stages), "lastSaved": self.last_saved}


class JsonKeyValueFile:
    """A JSON object on disk used as a small key-value store.

    Errors are left to the caller: reads raise ``OSError`` or ``ValueError``,
    writes raise ``OSError``.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get(self, key: str) -> Any:
        if not self._file_path.exists():
            return None
        data = self._read_all()
        return data.get(key)

    def set(self, key: str, value: Any) -> None:
        data: Dict[str, Any] = {}
        if self._file_path.exists():
            try:
                data = self._read_all()
            except (OSError, ValueError) as e:
                logger.warning("Overwriting unreadable store %s: %s", self._file_path, e)
        data[key] = value
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _read_all(self) -> Dict[str, Any]:
        data = json.loads(self._file_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value is not an object")
        return data


class ProgressStore:
    """Stores which stages have been cleared. Persists to disk across app restarts.

    Default file: ~/.blockbreaker/progress.json. Nothing here raises on I/O
    trouble; a store that cannot be read behaves as if no stage was cleared.
    """

    def __init__(self, max_stage: int = 15, file_path: Optional[Path] = None) -> None:
        self._max_stage = max_stage
        self._backend = JsonKeyValueFile(file_path or Path.home() / ".blockbreaker" / "progress.json")
        self._record = self.load()

    @property
    def file_path(self) -> Path:
        return self._backend.file_path

    @property
    def max_stage(self) -> int:
        return self._max_stage

    @property
    def record(self) -> ProgressRecord:
        return self._record

    @property
    def cleared_stages(self) -> Tuple[bool, ...]:
        return self._record.cleared_stages

    def cleared_count(self) -> int:
        return sum(1 for cleared in self._record.cleared_stages if cleared)

    def is_cleared(self, stage_number: int) -> bool:
        if not 1 <= stage_number <= self._max_stage:
            return False
        return self._record.cleared_stages[stage_number - 1]

    def load(self) -> ProgressRecord:
        try:
            payload = self._backend.get(STORAGE_KEY)
        except (OSError, ValueError) as e:
            logger.warning("Could not load progress from %s: %s", self.file_path, e)
            return ProgressRecord.empty(self._max_stage)
        if payload is None:
            return ProgressRecord.empty(self._max_stage)
        if not isinstance(payload, dict) or not isinstance(payload.get("clearedStages"), list):
            logger.warning("Ignoring malformed progress entry in %s", self.file_path)
            return ProgressRecord.empty(self._max_stage)

        cleared = [c is True for c in payload["clearedStages"]]
        if len(cleared) != self._max_stage:
            logger.warning(
                "Progress in %s lists %d stages, expected %d; adjusting",
                self.file_path,
                len(cleared),
                self._max_stage,
            )
            cleared = (cleared + [False] * self._max_stage)[: self._max_stage]
        last_saved = payload.get("lastSaved")
        if not isinstance(last_saved, str):
            last_saved = None
        logger.info("Loaded progress: %d of %d stages cleared", sum(cleared), self._max_stage)
        return ProgressRecord(cleared_stages=tuple(cleared), last_saved=last_saved)

    def save(self, record: ProgressRecord) -> None:
        if len(record.cleared_stages) != self._max_stage:
            raise ValueError(
                f"progress record has {len(record.cleared_stages)} stages, expected {self._max_stage}"
            )
        self._record = record
        try:
            self._backend.set(STORAGE_KEY, record.to_payload())
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self.file_path, e)
            return
        logger.info("Saved progress: %d of %d stages cleared", self.cleared_count(), self._max_stage)

    def mark_cleared(self, stage_number: int) -> None:
        if not 1 <= stage_number <= self._max_stage:
            logger.warning("Cannot mark unknown stage %s as cleared", stage_number)
            return
        cleared = list(self._record.cleared_stages)
        cleared[stage_number - 1] = True
        self.save(ProgressRecord.stamped(cleared))

    def mark_all_cleared(self) -> None:
        self.save(ProgressRecord.stamped([True] * self._max_stage))

    def reset(self) -> None:
        """Forget every cleared stage. Only called after the player confirms."""
        self.save(ProgressRecord.stamped([False] * self._max_stage))

    def flush(self) -> None:
        """Persist the current record again (e.g. on app exit)."""
        self.save(self._record)
