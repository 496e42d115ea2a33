from pathlib import Path

import pytest

from agent_keeper.backup import BackupService, backup_path
from agent_keeper.errors import BackupNotFoundError


def test_missing_file_is_not_backed_up(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"

    assert BackupService().create_backup(target) is None
    assert list(tmp_path.iterdir()) == []


def test_backups_rotate_and_keep_five(tmp_path: Path) -> None:
    target = tmp_path / "settings.json"
    service = BackupService()

    for version in range(7):
        target.write_text(f"v{version}", encoding="utf-8")
        service.create_backup(target)

    backups = service.list_backups(target)
    assert len(backups) == 5
    assert backups[0] == backup_path(target, 1)
    assert backups[0].read_text(encoding="utf-8") == "v6"
    assert backups[-1].read_text(encoding="utf-8") == "v2"
    assert not backup_path(target, 6).exists()


def test_backup_into_custom_base(tmp_path: Path) -> None:
    skill_file = tmp_path / "demo" / "SKILL.md"
    skill_file.parent.mkdir()
    skill_file.write_text("body", encoding="utf-8")
    base = tmp_path / "demo.SKILL.md"

    created = BackupService().create_backup(skill_file, base=base)

    assert created == backup_path(base, 1)
    assert created.read_text(encoding="utf-8") == "body"


def test_restore_backs_up_current_then_replaces(tmp_path: Path) -> None:
    target = tmp_path / "config.toml"
    service = BackupService()
    target.write_text("old", encoding="utf-8")
    service.create_backup(target)
    target.write_text("new", encoding="utf-8")

    service.restore_backup(target)

    assert target.read_text(encoding="utf-8") == "old"
    assert backup_path(target, 1).read_text(encoding="utf-8") == "new"
    assert backup_path(target, 2).read_text(encoding="utf-8") == "old"


@pytest.mark.parametrize("slot", [0, 3, 6])
def test_restore_missing_slot_raises(tmp_path: Path, slot: int) -> None:
    target = tmp_path / "config.json"
    target.write_text("{}", encoding="utf-8")

    with pytest.raises(BackupNotFoundError):
        BackupService().restore_backup(target, slot)


def test_max_backups_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BackupService(max_backups=0)
