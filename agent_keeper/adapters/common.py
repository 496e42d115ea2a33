"""Markdown-backed tools shared by adapters: skill directories and prompt files."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterator, Optional

from agent_keeper.backup import BackupService
from agent_keeper.constants import DISABLED_SUFFIX, MARKDOWN_SUFFIX, SKILL_FILENAME
from agent_keeper.errors import AdapterConfigError, AdapterFileNotFoundError
from agent_keeper.fileio import FileIO
from agent_keeper.markdown import extract_frontmatter
from agent_keeper.models import ConfigScope, ToolEntity, ToolSource, ToolStatus, ToolType
from agent_keeper.schemas import SchemaRegistry
from agent_keeper.utils import atomic_write, strip_suffix


def is_disabled_name(name: str) -> bool:
    return name.endswith(DISABLED_SUFFIX)


def is_markdown_name(name: str) -> bool:
    return strip_suffix(name, DISABLED_SUFFIX).endswith(MARKDOWN_SUFFIX)


def markdown_stem(name: str) -> str:
    return strip_suffix(strip_suffix(name, DISABLED_SUFFIX), MARKDOWN_SUFFIX)


# --- skills ---


def parse_skill_directory(
    file_io: FileIO,
    schemas: SchemaRegistry,
    skill_dir: Path,
    scope: ConfigScope,
    schema_name: str,
    id_prefix: str = "skill",
) -> ToolEntity:
    dir_name = skill_dir.name
    disabled = is_disabled_name(dir_name)
    clean_name = strip_suffix(dir_name, DISABLED_SUFFIX)
    skill_md = skill_dir / SKILL_FILENAME
    entity_id = f"{id_prefix}:{scope.value}:{clean_name}"

    def _error(detail: str) -> ToolEntity:
        return ToolEntity.error(
            id=entity_id,
            type=ToolType.SKILL,
            name=clean_name,
            scope=scope,
            file_path=skill_md,
            detail=detail,
        )

    content = file_io.read_text(skill_md)
    if content is None:
        return _error(f"Missing {SKILL_FILENAME}")

    frontmatter = extract_frontmatter(content)
    if frontmatter is None:
        return _error(f"No frontmatter in {SKILL_FILENAME}")

    result = schemas.validate(schema_name, frontmatter.data)
    if not result.ok:
        return _error(f"Invalid frontmatter: {result.summary()}")

    data = result.document
    name = str(data["name"])
    return ToolEntity(
        id=f"{id_prefix}:{scope.value}:{name}",
        type=ToolType.SKILL,
        name=name,
        description=str(data["description"]),
        scope=scope,
        status=ToolStatus.DISABLED if disabled else ToolStatus.ENABLED,
        source=ToolSource(file_path=skill_md, directory_path=skill_dir, is_directory=True),
        metadata={
            "allowedTools": data.get("allowed-tools"),
            "model": data.get("model"),
            "body": frontmatter.body,
        },
    )


def parse_skills_dir(
    file_io: FileIO,
    schemas: SchemaRegistry,
    skills_dir: Path,
    scope: ConfigScope,
    schema_name: str,
    id_prefix: str = "skill",
) -> list[ToolEntity]:
    return [
        parse_skill_directory(
            file_io, schemas, skills_dir / name, scope, schema_name, id_prefix
        )
        for name in file_io.list_directories(skills_dir)
    ]


def skill_directory(tool: ToolEntity) -> Path:
    return tool.source.directory_path or tool.source.file_path.parent


def copy_skill(agent_name: str, source_dir: Path, target_dir: Path) -> None:
    if target_dir.exists():
        raise AdapterConfigError(agent_name, f"Target already exists: {target_dir}")
    target_dir.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source_dir, target_dir)


def remove_skill(agent_name: str, backups: BackupService, skill_dir: Path) -> None:
    if not skill_dir.is_dir():
        raise AdapterFileNotFoundError(agent_name, skill_dir)
    backups.create_backup(
        skill_dir / SKILL_FILENAME,
        base=skill_dir.parent / f"{skill_dir.name}.{SKILL_FILENAME}",
    )
    shutil.rmtree(skill_dir)


def write_files(target_dir: Path, files: dict[str, str]) -> None:
    for name, content in files.items():
        atomic_write(target_dir / name, content)


# --- markdown prompt files ---


def iter_markdown_files(root: Path, recursive: bool) -> Iterator[Path]:
    if not root.is_dir():
        return
    for item in sorted(root.iterdir()):
        if item.name.startswith("."):
            continue
        if item.is_dir() and recursive:
            yield from iter_markdown_files(item, recursive)
        elif item.is_file() and is_markdown_name(item.name):
            yield item


def disabled_parent(path: Path, root: Path) -> Optional[Path]:
    current = path.parent
    while current != root and root in current.parents:
        if is_disabled_name(current.name):
            return current
        current = current.parent
    return None


def parse_markdown_tool(
    file_io: FileIO,
    schemas: SchemaRegistry,
    path: Path,
    root: Path,
    scope: ConfigScope,
    tool_type: ToolType,
    id_prefix: str,
    schema_name: Optional[str] = None,
) -> ToolEntity:
    name = markdown_stem(path.name)
    entity_id = f"{id_prefix}:{scope.value}:{name}"
    content = file_io.read_text(path)
    if content is None:
        return ToolEntity.error(
            id=entity_id,
            type=tool_type,
            name=name,
            scope=scope,
            file_path=path,
            detail="File not readable",
        )

    parent = disabled_parent(path, root)
    disabled = is_disabled_name(path.name) or parent is not None
    source = ToolSource(
        file_path=path,
        directory_path=parent,
        is_directory=parent is not None,
    )
    status = ToolStatus.DISABLED if disabled else ToolStatus.ENABLED

    frontmatter = extract_frontmatter(content)
    if frontmatter is None:
        return ToolEntity(
            id=entity_id,
            type=tool_type,
            name=name,
            scope=scope,
            status=status,
            source=source,
            metadata={"body": content},
        )

    fields = frontmatter.scalars()
    if schema_name is not None and not schemas.validate(schema_name, frontmatter.data).ok:
        fields = {}
    return ToolEntity(
        id=entity_id,
        type=tool_type,
        name=name,
        description=fields.get("description"),
        scope=scope,
        status=status,
        source=source,
        metadata={
            "argumentHint": fields.get("argument-hint"),
            "model": fields.get("model"),
            "allowedTools": fields.get("allowed-tools"),
            "body": frontmatter.body,
        },
    )


def toggle_target(tool: ToolEntity) -> Path:
    """Path that is renamed to flip a markdown tool's enabled state."""
    if tool.source.is_directory and tool.source.directory_path is not None:
        return tool.source.directory_path
    if tool.type == ToolType.SKILL:
        return skill_directory(tool)
    return tool.source.file_path


def rename_toggle(agent_name: str, path: Path, disable: bool) -> Path:
    if not path.exists():
        raise AdapterFileNotFoundError(agent_name, path)
    if disable:
        target = path.with_name(path.name + DISABLED_SUFFIX)
    else:
        target = path.with_name(strip_suffix(path.name, DISABLED_SUFFIX))
    if target == path:
        return path
    if target.exists():
        raise AdapterConfigError(agent_name, f"Cannot rename {path}: {target} already exists")
    path.rename(target)
    return target


def copy_markdown_file(agent_name: str, tool: ToolEntity, target_dir: Path) -> Path:
    name = strip_suffix(tool.source.file_path.name, DISABLED_SUFFIX)
    if tool.status == ToolStatus.DISABLED:
        name += DISABLED_SUFFIX
    target = target_dir / name
    if target.exists():
        raise AdapterConfigError(agent_name, f"Target already exists: {target}")
    target_dir.mkdir(parents=True, exist_ok=True)
    shutil.copy2(tool.source.file_path, target)
    return target


def remove_markdown_file(agent_name: str, backups: BackupService, path: Path) -> None:
    if not path.is_file():
        raise AdapterFileNotFoundError(agent_name, path)
    backups.create_backup(path)
    path.unlink()
