from typing import Optional, Set
from sms2fa.store.redis_conn import get_redis
from sms2fa.store.models import UserRecord

PREFIX = "user:"


def _key(user_id: str, suffix: str = "") -> str:
    return f"{PREFIX}{user_id}{(':' + suffix) if suffix else ''}"


def load_user(user_id: str) -> Optional[UserRecord]:
    """Read-only view of the account: profile, role mappings, credentials, pending actions."""
    r = get_redis()
    profile = r.hgetall(_key(user_id)) or {}
    if not profile:
        return None
    return UserRecord(
        userId=user_id,
        username=profile.get("username") or user_id,
        roles=set(r.smembers(_key(user_id, "roles")) or []),
        credentialTypes=stored_credential_types(user_id),
        requiredActions=pending_required_actions(user_id),
    )


def stored_credential_types(user_id: str) -> Set[str]:
    r = get_redis()
    return set(r.smembers(_key(user_id, "credentials")) or [])


def pending_required_actions(user_id: str) -> Set[str]:
    r = get_redis()
    return set(r.smembers(_key(user_id, "required_actions")) or [])


def add_required_action(user_id: str, action: str) -> bool:
    """
    Idempotent append (SADD). Returns True only when the action was not already queued.
    """
    r = get_redis()
    return bool(r.sadd(_key(user_id, "required_actions"), action))


def remove_required_action(user_id: str, action: str) -> None:
    r = get_redis()
    r.srem(_key(user_id, "required_actions"), action)
