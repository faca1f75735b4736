import re
from dataclasses import dataclass
from typing import Optional

from sms2fa.core.errors import ActionNotActiveError
from sms2fa.core.required_actions import (
    MOBILE_NUMBER_NOTE,
    PHONE_ENROLLMENT,
    PHONE_VALIDATION,
)
from sms2fa.forms.renderer import Challenge, FormRenderer, form_renderer
from sms2fa.observability.logging import log
from sms2fa.settings import settings
from sms2fa.store.models import AuthSession

# Controller states
IDLE = "IDLE"
CHALLENGE_ISSUED = "CHALLENGE_ISSUED"
SUBMITTED = "SUBMITTED"
HANDED_OFF = "HANDED_OFF"

_NON_PHONE_CHARS = re.compile(r"[^0-9+]")


def normalize_mobile_number(raw: Optional[str]) -> str:
    """
    Keep ASCII digits and '+'. Anything else goes, and an empty result is allowed:
    format checks belong to the phone validation step.
    """
    return _NON_PHONE_CHARS.sub("", raw or "")


@dataclass
class EnrollmentResult:
    ok: bool
    mobileNumber: str = ""
    nextAction: Optional[str] = None


class EnrollmentChallengeController:
    """
    Phone number collection for PHONE_ENROLLMENT.

    IDLE -> CHALLENGE_ISSUED -> SUBMITTED -> HANDED_OFF

    Only usable while PHONE_ENROLLMENT is the session's active action. A
    submission stores the number as a session note, queues PHONE_VALIDATION
    on the session and completes the current action. Nothing is written to
    the user record.
    """

    action = PHONE_ENROLLMENT

    def __init__(self, renderer: FormRenderer = None, template: str = None):
        self.renderer = renderer or form_renderer
        self.template = template or settings.PHONE_FORM_TEMPLATE
        self.state = IDLE

    def _require_active(self, session: AuthSession) -> None:
        if session.activeAction != self.action:
            raise ActionNotActiveError(self.action, session.activeAction)

    def issue_challenge(self, session: AuthSession) -> Challenge:
        self._require_active(session)
        challenge = self.renderer.render(self.template, action=self.action)
        if self.state == IDLE:
            self.state = CHALLENGE_ISSUED
        return challenge

    def process_submission(self, session: AuthSession, raw_input: Optional[str]) -> EnrollmentResult:
        self._require_active(session)
        self.state = SUBMITTED

        mobile_number = normalize_mobile_number(raw_input)
        # Overwrite on retry; the validation step reads the latest value
        session.set_note(MOBILE_NUMBER_NOTE, mobile_number)
        session.add_required_action(PHONE_VALIDATION)
        log(
            event="phone_validation_requested",
            sessionId=session.sessionId,
            userId=session.userId,
            mobile_number=mobile_number,
        )

        complete_active_action(session)
        self.state = HANDED_OFF
        return EnrollmentResult(ok=True, mobileNumber=mobile_number, nextAction=PHONE_VALIDATION)


def complete_active_action(session: AuthSession) -> Optional[str]:
    """Clear the active-action pointer and record the action as done for this login."""
    done = session.activeAction
    if done is None:
        return None
    session.activeAction = None
    session.remove_required_action(done)
    if done not in session.completedActions:
        session.completedActions.append(done)
    return done
