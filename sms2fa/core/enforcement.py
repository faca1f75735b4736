"""
Second-Factor Enforcement
-------------------------
Decides, once per evaluation tick, whether a user mid-login must be sent
through phone enrollment.

Order of precedence (first match wins):
  1) No authenticator config under the alias -> SKIP "config_missing" (+ config error)
  2) forceSecondFactor off                   -> SKIP "disabled"
  3) Whitelist role configured:
       a) role unknown in the realm          -> config error, keep evaluating
       b) user holds the role                -> SKIP "whitelisted"
  4) User has an accepted 2FA credential     -> SKIP "second_factor_present"
  5) Session already has a 2FA-related action -> SKIP "session_action_pending"
  6) Account already has a 2FA-related action -> SKIP "user_action_pending"
  7) Otherwise                               -> TRIGGER "no_second_factor"

Rule 6 makes repeated ticks idempotent: once PHONE_ENROLLMENT is queued on the
account, the next evaluation skips.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from sms2fa.core.errors import ConfigurationError
from sms2fa.core.required_actions import (
    SECOND_FACTOR_ACTIONS,
    SECOND_FACTOR_CREDENTIALS,
    SKIP,
    TRIGGER,
)
from sms2fa.observability.logging import log
from sms2fa.store.models import AuthSession, PolicyConfig, UserRecord

RoleResolver = Callable[[str], Optional[str]]


@dataclass
class EnforcementDecision:
    verdict: str
    reason: str
    configErrors: List[ConfigurationError] = field(default_factory=list)

    @property
    def triggered(self) -> bool:
        return self.verdict == TRIGGER


def _config_error(errors: List[ConfigurationError], kind: str, detail: str, ref: str = "") -> None:
    err = ConfigurationError(kind, detail, ref)
    errors.append(err)
    log(event="config_error", kind=kind, detail=detail, ref=ref)


def evaluate_enforcement(
    *,
    user: UserRecord,
    config: Optional[PolicyConfig],
    credential_types: Iterable[str],
    session: AuthSession,
    resolve_role: RoleResolver,
    config_alias: str = "",
) -> EnforcementDecision:
    errors: List[ConfigurationError] = []

    # 1) Enforcement cannot proceed without a policy
    if config is None:
        _config_error(
            errors,
            "config_missing",
            f"Failed to check 2FA enforcement, no config alias {config_alias} found",
            config_alias,
        )
        return EnforcementDecision(SKIP, "config_missing", errors)

    # 2)
    if not config.enabled:
        return EnforcementDecision(SKIP, "disabled", errors)

    # 3) An unresolvable whitelist role does not exempt anyone
    if config.whitelistRole is not None:
        role = None
        try:
            role = resolve_role(config.whitelistRole)
        except Exception as e:
            log(event="role_resolve_failed", role=config.whitelistRole, error=str(e))
        if role is None:
            _config_error(
                errors,
                "whitelist_role_unresolved",
                f"Failed configured whitelist role check [{config.whitelistRole}], make sure that the role exists",
                config.whitelistRole,
            )
        elif user.has_role(role):
            return EnforcementDecision(SKIP, "whitelisted", errors)

    # 4)
    if SECOND_FACTOR_CREDENTIALS & set(credential_types or ()):
        return EnforcementDecision(SKIP, "second_factor_present", errors)

    # 5)
    if SECOND_FACTOR_ACTIONS & session.required_actions():
        return EnforcementDecision(SKIP, "session_action_pending", errors)

    # 6)
    if SECOND_FACTOR_ACTIONS & user.pending_required_actions():
        return EnforcementDecision(SKIP, "user_action_pending", errors)

    return EnforcementDecision(TRIGGER, "no_second_factor", errors)
