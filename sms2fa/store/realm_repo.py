from typing import Optional
from sms2fa.store.redis_conn import get_redis
from sms2fa.store.models import PolicyConfig

CONFIG_KEY = "realm:authenticator-config:{alias}"
ROLES_KEY = "realm:roles"


def get_authenticator_config(alias: str) -> Optional[PolicyConfig]:
    """
    Returns None when no config exists under `alias`; that is not the same as a disabled policy.
    """
    r = get_redis()
    raw = r.hgetall(CONFIG_KEY.format(alias=alias)) or {}
    if not raw:
        return None
    return PolicyConfig.from_config_map(raw)


def resolve_role(name: str) -> Optional[str]:
    if not name:
        return None
    r = get_redis()
    return name if r.sismember(ROLES_KEY, name) else None
