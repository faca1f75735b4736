from contextlib import contextmanager
import time
import uuid
from sms2fa.settings import settings
from sms2fa.store.redis_conn import get_redis

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

@contextmanager
def session_lock(session_id: str, ttl_ms: int = None, retries: int = 5):
    """
    Single writer per login session across workers.
    """
    ttl_ms = int(ttl_ms or settings.SESSION_LOCK_TTL_MS)
    r = get_redis()
    key = f"lock:authsession:{session_id}"
    token = uuid.uuid4().hex
    acquired = r.set(key, token, px=ttl_ms, nx=True)

    try:
        if not acquired:
            # Short spin; a form double-submit resolves within a few hundred ms
            for _ in range(retries):
                time.sleep(0.1)
                if r.set(key, token, px=ttl_ms, nx=True):
                    acquired = True
                    break

            if not acquired:
                raise RuntimeError(f"Could not acquire lock for session {session_id}")

        yield
    finally:
        if acquired:
            try:
                r.eval(_RELEASE_SCRIPT, 1, key, token)
            except Exception:
                pass
