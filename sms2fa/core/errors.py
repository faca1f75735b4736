class ConfigurationError(Exception):
    """
    Missing authenticator config or unresolvable whitelist role.
    Recorded as an observation on the enforcement decision and logged;
    never raised through the login flow.
    """

    def __init__(self, kind: str, detail: str, ref: str = ""):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.ref = ref

    def as_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.detail, "ref": self.ref}


class ValidationError(Exception):
    """Reserved for the phone validation step. Not raised by this service."""


class ActionNotActiveError(Exception):
    """A required-action handler was invoked while another action is active."""

    def __init__(self, expected: str, active):
        super().__init__(f"required action {expected} is not active (active={active})")
        self.expected = expected
        self.active = active


class SessionNotFoundError(Exception):
    def __init__(self, session_id: str):
        super().__init__(f"login session {session_id} not found or expired")
        self.session_id = session_id


class UserNotFoundError(Exception):
    def __init__(self, user_id: str):
        super().__init__(f"user {user_id} not found")
        self.user_id = user_id


class ActionNotSupportedError(Exception):
    """The required action cannot be started by the user."""

    def __init__(self, action: str):
        super().__init__(f"required action {action} cannot be initiated")
        self.action = action
