from agent_keeper.profiles.models import (
    CloneResult,
    Profile,
    ProfileStore,
    ProfileToolEntry,
    ReconcileResult,
    SwitchResult,
)
from agent_keeper.profiles.service import ProfileService
from agent_keeper.profiles.workspace import WorkspaceProfileService

__all__ = [
    "CloneResult",
    "Profile",
    "ProfileService",
    "ProfileStore",
    "ProfileToolEntry",
    "ReconcileResult",
    "SwitchResult",
    "WorkspaceProfileService",
]
