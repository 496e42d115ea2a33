from pathlib import Path
from typing import Optional, Sequence


class KeeperError(Exception):
    """Base user-facing application error."""


class ProgrammingError(Exception):
    """Raised for wiring bugs; never converted into a soft result."""


class ConfigFileError(KeeperError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class ConfigReadError(ConfigFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Cannot read config file ({detail})")


class SchemaValidationError(ConfigFileError):
    def __init__(self, path: Path, schema_name: str, issues: Sequence) -> None:
        self.schema_name = schema_name
        self.issues = list(issues)
        detail = "; ".join(str(issue) for issue in self.issues) or "invalid document"
        super().__init__(
            path=path, message=f"Invalid {schema_name} document ({detail})"
        )


class FrontmatterError(KeeperError):
    def __init__(self, key: str, detail: str, path: Optional[Path] = None) -> None:
        self.key = key
        self.detail = detail
        self.path = path
        location = f": {path}" if path is not None else ""
        super().__init__(f"Cannot update frontmatter field '{key}' ({detail}){location}")


class BackupNotFoundError(ConfigFileError):
    def __init__(self, path: Path, slot: int) -> None:
        self.slot = slot
        super().__init__(path=path, message=f"No backup in slot {slot}")


class ProfileNotFoundError(KeeperError):
    def __init__(self, profile_id: str) -> None:
        self.profile_id = profile_id
        super().__init__(f"Profile not found: {profile_id}")


class ProfileExistsError(KeeperError):
    def __init__(self, name: str, agent_id: Optional[str] = None) -> None:
        self.name = name
        self.agent_id = agent_id
        owner = f" for {agent_id}" if agent_id else ""
        super().__init__(f"Profile already exists{owner}: {name}")


class AdapterError(KeeperError):
    def __init__(self, agent_name: str, message: str) -> None:
        self.agent_name = agent_name
        self.message = message
        super().__init__(f"{agent_name}: {message}")


class AdapterScopeError(AdapterError):
    def __init__(self, agent_name: str, scope: str, operation: str) -> None:
        self.scope = scope
        self.operation = operation
        super().__init__(
            agent_name, f"{operation} is not supported for scope '{scope}'"
        )


class AdapterConfigError(AdapterError):
    pass


class AdapterFileNotFoundError(AdapterError):
    def __init__(self, agent_name: str, path: Path) -> None:
        self.path = path
        super().__init__(agent_name, f"File not found: {path}")


class UnsupportedOperationError(AdapterError):
    def __init__(self, agent_name: str, operation: str) -> None:
        self.operation = operation
        super().__init__(agent_name, f"{operation} is not supported")


class UnknownSchemaError(ProgrammingError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Schema not registered: {name}")


class NoActiveAdapterError(ProgrammingError):
    def __init__(self) -> None:
        super().__init__("No active agent adapter")


class UnknownAdapterError(ProgrammingError):
    def __init__(self, adapter_id: str) -> None:
        self.adapter_id = adapter_id
        super().__init__(f"Unknown agent adapter: {adapter_id}")
