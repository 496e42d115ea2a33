import logging
import shutil
from pathlib import Path
from typing import Optional

from agent_keeper.constants import BACKUP_SUFFIX, MAX_BACKUPS
from agent_keeper.errors import BackupNotFoundError
from agent_keeper.utils import atomic_write


logger = logging.getLogger(__name__)


def backup_path(path: Path, slot: int) -> Path:
    return Path(f"{path}{BACKUP_SUFFIX}.{slot}")


class BackupService:
    """Numbered rolling backups kept beside the original file.

    Slot 1 is always the most recent copy; slot ``max_backups`` the oldest.
    All state lives in the filesystem.
    """

    def __init__(self, max_backups: int = MAX_BACKUPS) -> None:
        if max_backups < 1:
            raise ValueError("max_backups must be at least 1")
        self.max_backups = max_backups

    def create_backup(self, path: Path, base: Optional[Path] = None) -> Optional[Path]:
        """Copy ``path`` into slot 1 of ``base`` (defaults to ``path``).

        Returns ``None`` without touching anything when ``path`` is absent.
        """
        if not path.is_file():
            return None
        base = base or path

        oldest = backup_path(base, self.max_backups)
        if oldest.exists():
            oldest.unlink()
        for slot in range(self.max_backups - 1, 0, -1):
            current = backup_path(base, slot)
            if current.exists():
                current.replace(backup_path(base, slot + 1))

        target = backup_path(base, 1)
        shutil.copy2(path, target)
        logger.debug("Backed up %s to %s", path, target)
        return target

    def list_backups(self, path: Path) -> list[Path]:
        return [
            backup_path(path, slot)
            for slot in range(1, self.max_backups + 1)
            if backup_path(path, slot).is_file()
        ]

    def restore_backup(self, path: Path, slot: int = 1) -> Path:
        source = backup_path(path, slot)
        if slot < 1 or slot > self.max_backups or not source.is_file():
            raise BackupNotFoundError(path, slot)
        content = source.read_text(encoding="utf-8")
        self.create_backup(path)
        atomic_write(path, content)
        logger.info("Restored %s from backup slot %d", path, slot)
        return path
