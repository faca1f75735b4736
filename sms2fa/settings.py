import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    API_KEY: str = os.getenv("API_KEY", "")

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Authenticator config holding forceSecondFactor / whitelist
    POLICY_CONFIG_ALIAS: str = os.getenv("POLICY_CONFIG_ALIAS", "sms-2fa")

    # Form used for the phone number prompt
    PHONE_FORM_TEMPLATE: str = os.getenv("PHONE_FORM_TEMPLATE", "mobile_number_form.ftl")

    # Login attempts expire with their Redis key (seconds)
    SESSION_TTL_SEC: int = int(os.getenv("SESSION_TTL_SEC", "1800"))
    SESSION_LOCK_TTL_MS: int = int(os.getenv("SESSION_LOCK_TTL_MS", "5000"))

    # Users may start the phone enrollment action themselves
    INITIATED_ACTION_SUPPORTED: bool = os.getenv("INITIATED_ACTION_SUPPORTED", "true").lower() == "true"

    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"
    ADMIN_RBAC_ENABLED: bool = os.getenv("ADMIN_RBAC_ENABLED", "true").lower() == "true"
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

settings = Settings()
