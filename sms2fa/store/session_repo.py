import json
import time
import inspect
from typing import Optional
from sms2fa.settings import settings
from sms2fa.store.redis_conn import get_redis
from sms2fa.store.models import AuthSession
from sms2fa.core.errors import SessionNotFoundError
from sms2fa.utils.time import now_ms

PREFIX = "authsession:"

SET_FIELDS = {"requiredActions"}


def _key(session_id: str) -> str:
    return f"{PREFIX}{session_id}"


def _json_safe(obj):
    if isinstance(obj, set):
        return sorted(obj)
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_json_safe(v) for v in obj]
    return obj


def _rehydrate_sets(data: dict) -> dict:
    for name in SET_FIELDS:
        if name in data and isinstance(data[name], list):
            data[name] = set(data[name])
    return data


def _filter_session_kwargs(data: dict) -> dict:
    """
    Drop unknown fields so AuthSession(**kwargs) never explodes
    """
    sig = inspect.signature(AuthSession)
    allowed = set(sig.parameters.keys())
    return {k: v for k, v in data.items() if k in allowed}


def create_session(session_id: str, user_id: str) -> AuthSession:
    s = AuthSession(sessionId=session_id, userId=user_id, createdAtMs=now_ms())
    save_session(s)
    return s


def find_session(session_id: str) -> Optional[AuthSession]:
    r = get_redis()
    raw = r.get(_key(session_id))
    if not raw:
        return None

    data = json.loads(raw)
    data = _rehydrate_sets(data)
    data = _filter_session_kwargs(data)
    return AuthSession(**data)


def load_session(session_id: str) -> AuthSession:
    s = find_session(session_id)
    if s is None:
        raise SessionNotFoundError(session_id)
    return s


def save_session(session: AuthSession) -> None:
    r = get_redis()
    session.lastUpdatedAtEpoch = int(time.time())
    safe_data = _json_safe(session.__dict__.copy())
    # TTL is refreshed on every write; an abandoned login simply expires
    r.set(_key(session.sessionId), json.dumps(safe_data), ex=int(settings.SESSION_TTL_SEC))


def delete_session(session_id: str) -> None:
    r = get_redis()
    r.delete(_key(session_id))
