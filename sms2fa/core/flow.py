from typing import Iterable, Optional, Tuple

import sms2fa.observability.metrics as metrics
import sms2fa.store.realm_repo as realm_repo
import sms2fa.store.user_repo as user_repo
from sms2fa.core.enforcement import EnforcementDecision, evaluate_enforcement
from sms2fa.core.enrollment import EnrollmentChallengeController, EnrollmentResult
from sms2fa.core.errors import ActionNotSupportedError, UserNotFoundError
from sms2fa.core.required_actions import (
    CONFIGURE_OTP,
    PHONE_ENROLLMENT,
    PHONE_VALIDATION,
    UPDATE_PASSWORD,
    WEBAUTHN_REGISTER,
)
from sms2fa.forms.renderer import Challenge
from sms2fa.observability.logging import log
from sms2fa.settings import settings
from sms2fa.store.models import AuthSession, PolicyConfig, UserRecord

# Execution order when several required actions are pending
ACTION_ORDER = (
    UPDATE_PASSWORD,
    PHONE_ENROLLMENT,
    PHONE_VALIDATION,
    CONFIGURE_OTP,
    WEBAUTHN_REGISTER,
)

INITIATED_ACTIONS = {PHONE_ENROLLMENT}


def _load_user(user_id: str) -> UserRecord:
    user = user_repo.load_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def _ordered(actions: Iterable[str]):
    rank = {a: i for i, a in enumerate(ACTION_ORDER)}
    return sorted(actions, key=lambda a: (rank.get(a, len(rank)), a))


def next_required_action(session: AuthSession, user: UserRecord) -> Optional[str]:
    """Pick the next pending action from the session and account queues."""
    pending = (session.required_actions() | user.pending_required_actions()) - set(session.completedActions)
    ordered = _ordered(pending)
    return ordered[0] if ordered else None


def activate_next_action(session: AuthSession, user: UserRecord) -> Optional[str]:
    if session.activeAction is None:
        session.activeAction = next_required_action(session, user)
        if session.activeAction:
            log(event="required_action_activated", sessionId=session.sessionId, action=session.activeAction)
    return session.activeAction


def _lookup_config(alias: str) -> Optional[PolicyConfig]:
    # A store failure reads as "no config": enforcement skips, login goes on
    try:
        return realm_repo.get_authenticator_config(alias)
    except Exception as e:
        log(event="config_lookup_failed", alias=alias, error=str(e))
        return None


def evaluate_triggers(session: AuthSession) -> Tuple[EnforcementDecision, Optional[str]]:
    """
    One evaluation tick: run the enforcement rules for the session's user and,
    on TRIGGER, queue PHONE_ENROLLMENT on the account. Safe to call repeatedly.
    Returns the decision and the session's active action afterwards.
    """
    user = _load_user(session.userId)
    alias = settings.POLICY_CONFIG_ALIAS
    decision = evaluate_enforcement(
        user=user,
        config=_lookup_config(alias),
        credential_types=user.credentialTypes,
        session=session,
        resolve_role=realm_repo.resolve_role,
        config_alias=alias,
    )

    for _ in decision.configErrors:
        metrics.increment_config_error()
    metrics.record_verdict(decision.verdict, decision.reason)

    if decision.triggered:
        log(
            event="enforcement_triggered",
            sessionId=session.sessionId,
            username=user.username,
            detail="No 2FA method configured for user, setting required action for SMS authenticator",
        )
        user_repo.add_required_action(user.userId, PHONE_ENROLLMENT)
        user.add_pending_required_action(PHONE_ENROLLMENT)
    else:
        log(event="enforcement_skipped", sessionId=session.sessionId, reason=decision.reason)

    return decision, activate_next_action(session, user)


def initiate_action(session: AuthSession, action: str) -> Optional[str]:
    """User-requested required action (e.g. adding a phone number from the account page)."""
    if not settings.INITIATED_ACTION_SUPPORTED or action not in INITIATED_ACTIONS:
        raise ActionNotSupportedError(action)
    user = _load_user(session.userId)
    session.add_required_action(action)
    log(event="required_action_initiated", sessionId=session.sessionId, action=action)
    return activate_next_action(session, user)


def issue_phone_challenge(session: AuthSession, controller: EnrollmentChallengeController = None) -> Challenge:
    controller = controller or EnrollmentChallengeController()
    challenge = controller.issue_challenge(session)
    metrics.increment_challenge()
    return challenge


def submit_mobile_number(
    session: AuthSession,
    raw_input: Optional[str],
    controller: EnrollmentChallengeController = None,
) -> Tuple[EnrollmentResult, Optional[str]]:
    """
    Hand the submission to the controller, then report success to the flow:
    the account-level PHONE_ENROLLMENT entry is cleared and the next action
    (PHONE_VALIDATION) becomes active.
    """
    controller = controller or EnrollmentChallengeController()
    result = controller.process_submission(session, raw_input)
    user_repo.remove_required_action(session.userId, PHONE_ENROLLMENT)
    metrics.increment_handoff()

    user = _load_user(session.userId)
    return result, activate_next_action(session, user)
