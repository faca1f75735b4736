# Required-action and credential identifiers, as stored on the identity server.

# Required Action: Phone Number Collection
# Hands off to: PHONE_VALIDATION
PHONE_ENROLLMENT = "mobile_number_config"

# Required Action: SMS Code Validation (downstream step, not handled here)
# Consumes session note: mobile_number
PHONE_VALIDATION = "phone_validation_config"

# Required Action: Authenticator App Setup
CONFIGURE_OTP = "CONFIGURE_TOTP"

# Required Action: Security Key Registration
WEBAUTHN_REGISTER = "webauthn-register"

# Required Action: Password Update (prerequisite to any 2FA setup)
UPDATE_PASSWORD = "UPDATE_PASSWORD"

# Any of these pending means a second-factor flow is already underway
SECOND_FACTOR_ACTIONS = frozenset({
    PHONE_ENROLLMENT,
    PHONE_VALIDATION,
    CONFIGURE_OTP,
    WEBAUTHN_REGISTER,
    UPDATE_PASSWORD,
})


# Credential Types

SMS_OTP = "mobile-number"
WEBAUTHN_2FA = "webauthn"
TOTP = "otp"
PASSWORD = "password"
WEBAUTHN_PASSWORDLESS = "webauthn-passwordless"

# Accepted 2FA alternatives
SECOND_FACTOR_CREDENTIALS = frozenset({SMS_OTP, WEBAUTHN_2FA, TOTP})


# Enforcement Verdicts

SKIP = "SKIP"
TRIGGER = "TRIGGER"


# Session note written by phone collection, read by phone validation
MOBILE_NUMBER_NOTE = "mobile_number"
