"""Farm snapshot persistence

The whole farm (user, animals, habits, decorations) is stored as one JSON
document under a namespaced storage slot, so it always loads and saves as a
unit:

    {"cozy-habit-farm-storage": {"state": {...snapshot...}, "version": 0}}

Missing or unreadable data falls back to an empty snapshot. Stored levels are
re-derived from experience on load. Referential integrity is checked by the
repository, not here.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.config import DATA_PATH, STORAGE_KEY, snapshot_path
from src.exceptions import wrap_storage_exception
from src.gamification import reconcile_level
from src.models.farm import FarmSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 0


class SnapshotStore:
    """Load/save boundary for the farm snapshot"""

    def __init__(self, path: Optional[Path] = None, storage_key: str = STORAGE_KEY):
        self.storage_key = storage_key
        self.path = path or snapshot_path(DATA_PATH, storage_key)

    def load(self) -> FarmSnapshot:
        """Read the snapshot, or a fresh one if nothing usable is stored"""
        if not self.path.exists():
            logger.info(f"No farm snapshot at {self.path}, starting fresh")
            return FarmSnapshot()

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read farm snapshot at {self.path}, starting fresh: {e}")
            return FarmSnapshot()

        slot = document.get(self.storage_key) if isinstance(document, dict) else None
        if not isinstance(slot, dict) or not isinstance(slot.get("state"), dict):
            logger.warning(f"Storage slot '{self.storage_key}' missing in {self.path}, starting fresh")
            return FarmSnapshot()

        if slot.get("version", SNAPSHOT_VERSION) != SNAPSHOT_VERSION:
            logger.warning(
                f"Snapshot version {slot.get('version')} differs from {SNAPSHOT_VERSION}, loading anyway"
            )

        try:
            snapshot = FarmSnapshot.model_validate(slot["state"])
        except PydanticValidationError as e:
            logger.warning(f"Farm snapshot failed validation, starting fresh: {e}")
            return FarmSnapshot()

        animals = [reconcile_level(animal) for animal in snapshot.animals]
        snapshot = snapshot.model_copy(update={"animals": animals})

        logger.info(
            f"Loaded farm snapshot: {len(snapshot.animals)} animals, {len(snapshot.habits)} habits"
        )
        return snapshot

    def save(self, snapshot: FarmSnapshot) -> None:
        """Write the snapshot atomically (temp file + rename)"""
        document = {
            self.storage_key: {
                "state": snapshot.model_dump(mode="json", by_alias=True),
                "version": SNAPSHOT_VERSION,
            }
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.storage_key}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise wrap_storage_exception(e, operation="save_snapshot", path=str(self.path)) from e

        logger.debug(f"Saved farm snapshot to {self.path}")
