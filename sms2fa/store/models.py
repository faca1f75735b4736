from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


def _parse_bool(value) -> bool:
    # Only a case-insensitive "true" enables a flag, anything else is false
    if isinstance(value, bool):
        return value
    return str(value or "").lower() == "true"


@dataclass(frozen=True)
class PolicyConfig:
    enabled: bool = False
    whitelistRole: Optional[str] = None

    @classmethod
    def from_config_map(cls, config: Dict[str, str]) -> "PolicyConfig":
        """
        Build from the raw authenticator config map:
          forceSecondFactor -> enabled
          whitelist         -> whitelistRole (present but empty is still a role reference)
        """
        config = config or {}
        return cls(
            enabled=_parse_bool(config.get("forceSecondFactor")),
            whitelistRole=config.get("whitelist"),
        )


@dataclass
class UserRecord:
    userId: str = ""
    username: str = ""
    roles: Set[str] = field(default_factory=set)
    credentialTypes: Set[str] = field(default_factory=set)
    # Account-level pending required actions
    requiredActions: Set[str] = field(default_factory=set)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def pending_required_actions(self) -> Set[str]:
        return set(self.requiredActions)

    def add_pending_required_action(self, action: str) -> None:
        # set semantics: re-adding is a no-op
        self.requiredActions.add(action)


@dataclass
class AuthSession:
    sessionId: str = ""
    userId: str = ""

    # Session-scoped required actions and notes
    requiredActions: Set[str] = field(default_factory=set)
    notes: Dict[str, str] = field(default_factory=dict)

    # Action currently being executed for this login attempt
    activeAction: Optional[str] = None
    completedActions: List[str] = field(default_factory=list)

    createdAtMs: int = 0
    lastUpdatedAtEpoch: Optional[int] = None

    def required_actions(self) -> Set[str]:
        return set(self.requiredActions)

    def add_required_action(self, action: str) -> None:
        self.requiredActions.add(action)

    def remove_required_action(self, action: str) -> None:
        self.requiredActions.discard(action)

    def set_note(self, key: str, value: str) -> None:
        self.notes[key] = value
