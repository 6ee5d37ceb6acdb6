"""Flat-file JSON persistence used when no relational store is configured.

One file per domain under ``FALLBACK_DATA_DIR``. Writes replace the whole
file; the previous contents are kept as timestamped backups, newest
``backup_count`` retained.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class FallbackStore:
    def __init__(self, data_dir: str | Path, backup_count: int = 5):
        self.data_dir = Path(data_dir)
        self.backup_count = backup_count

    def path_for(self, filename: str) -> Path:
        return self.data_dir / filename

    def read(self, filename: str, empty_state: dict[str, Any]) -> dict[str, Any]:
        """Return the stored snapshot, or ``empty_state`` when there is none."""
        path = self.path_for(filename)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return dict(empty_state)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read fallback file %s: %s", path, exc)
            return dict(empty_state)
        if not isinstance(data, dict):
            logger.error("Fallback file %s does not hold an object", path)
            return dict(empty_state)
        return data

    def write(self, filename: str, data: dict[str, Any]) -> None:
        """Replace the stored snapshot, backing up the current file first."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(filename)
        if path.exists():
            self._backup(path)

        tmp = path.with_name(f".{path.name}.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
        logger.info("Wrote fallback snapshot %s", path)

    def backups(self, filename: str) -> list[Path]:
        """Backups of ``filename``, oldest first."""
        stem = Path(filename).stem
        return sorted(self.data_dir.glob(f"{stem}.*.bak.json"))

    def _backup(self, path: Path) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup = path.with_name(f"{path.stem}.{stamp}.bak.json")
        backup.write_bytes(path.read_bytes())

        existing = self.backups(path.name)
        keep = max(self.backup_count, 0)
        for old in existing[:len(existing) - keep]:
            old.unlink(missing_ok=True)
            logger.debug("Pruned fallback backup %s", old)
