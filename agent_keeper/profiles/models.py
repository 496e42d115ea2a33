from dataclasses import dataclass, field
from typing import Any, Optional

from agent_keeper.constants import PROFILE_STORE_VERSION


PROFILE_STORE_SCHEMA_NAME = "profile-store"

PROFILE_STORE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "version": {"type": "number"},
        "profiles": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "agentId": {"type": "string"},
                    "tools": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "key": {"type": "string"},
                                "enabled": {"type": "boolean"},
                            },
                            "required": ["key", "enabled"],
                        },
                    },
                    "createdAt": {"type": "string"},
                    "updatedAt": {"type": "string"},
                },
                "required": ["id", "name", "tools", "createdAt", "updatedAt"],
                "additionalProperties": True,
            },
        },
        "activeProfileId": {"type": ["string", "null"]},
    },
    "required": ["profiles", "activeProfileId"],
    "additionalProperties": True,
}

_PROFILE_FIELDS = {"id", "name", "agentId", "tools", "createdAt", "updatedAt"}
_STORE_FIELDS = {"version", "profiles", "activeProfileId"}


@dataclass
class ProfileToolEntry:
    key: str
    enabled: bool

    def as_dict(self) -> dict[str, Any]:
        return {"key": self.key, "enabled": self.enabled}


@dataclass
class Profile:
    id: str
    name: str
    tools: list[ProfileToolEntry]
    created_at: str
    updated_at: str
    agent_id: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Profile":
        return cls(
            id=payload["id"],
            name=payload["name"],
            tools=[
                ProfileToolEntry(key=item["key"], enabled=item["enabled"])
                for item in payload["tools"]
            ],
            created_at=payload["createdAt"],
            updated_at=payload["updatedAt"],
            agent_id=payload.get("agentId"),
            extra={key: value for key, value in payload.items() if key not in _PROFILE_FIELDS},
        )

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.agent_id is not None:
            payload["agentId"] = self.agent_id
        payload["tools"] = [entry.as_dict() for entry in self.tools]
        payload["createdAt"] = self.created_at
        payload["updatedAt"] = self.updated_at
        payload.update(self.extra)
        return payload

    @property
    def enabled_count(self) -> int:
        return sum(1 for entry in self.tools if entry.enabled)


@dataclass
class ProfileStore:
    profiles: list[Profile] = field(default_factory=list)
    active_profile_id: Optional[str] = None
    version: int = PROFILE_STORE_VERSION
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ProfileStore":
        return cls(
            profiles=[Profile.from_dict(item) for item in payload["profiles"]],
            active_profile_id=payload.get("activeProfileId"),
            version=payload.get("version", PROFILE_STORE_VERSION),
            extra={key: value for key, value in payload.items() if key not in _STORE_FIELDS},
        )

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "version": self.version,
            "profiles": [profile.as_dict() for profile in self.profiles],
            "activeProfileId": self.active_profile_id,
        }
        payload.update(self.extra)
        return payload

    def find(self, profile_id: str) -> Optional[Profile]:
        return next((item for item in self.profiles if item.id == profile_id), None)


@dataclass(frozen=True)
class SwitchResult:
    success: bool
    toggled: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CloneResult:
    profile: Profile
    skipped: list[ProfileToolEntry] = field(default_factory=list)


@dataclass(frozen=True)
class ReconcileResult:
    valid: int
    removed: int
