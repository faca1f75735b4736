"""
Seed the realm side of Redis for local/dev/CI: the sms-2fa authenticator
config, the role catalog and a couple of demo users.
Idempotent; existing keys are overwritten with the same values.
"""
import os
from redis import Redis

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
ALIAS = os.getenv("POLICY_CONFIG_ALIAS", "sms-2fa")
CONFIG_KEY = f"realm:authenticator-config:{ALIAS}"
ROLES_KEY = "realm:roles"

POLICY_CONFIG = {
    "forceSecondFactor": "true",
    "whitelist": "2fa-exempt",
}

ROLES = ["2fa-exempt", "offline_access", "uma_authorization"]

USERS = {
    # no second factor yet -> gets PHONE_ENROLLMENT
    "u-alice": {"username": "alice", "roles": ["offline_access"], "credentials": ["password"]},
    # already has TOTP -> skipped
    "u-bob": {"username": "bob", "roles": ["offline_access"], "credentials": ["password", "otp"]},
    # exempt via whitelist role
    "u-svc": {"username": "service-desk", "roles": ["2fa-exempt"], "credentials": ["password"]},
}

def main():
    r = Redis.from_url(REDIS_URL, decode_responses=True)
    assert "forceSecondFactor" in POLICY_CONFIG, "config needs forceSecondFactor"
    r.hset(CONFIG_KEY, mapping=POLICY_CONFIG)
    r.sadd(ROLES_KEY, *ROLES)
    for user_id, u in USERS.items():
        r.hset(f"user:{user_id}", mapping={"username": u["username"]})
        r.delete(f"user:{user_id}:roles", f"user:{user_id}:credentials")
        if u["roles"]:
            r.sadd(f"user:{user_id}:roles", *u["roles"])
        if u["credentials"]:
            r.sadd(f"user:{user_id}:credentials", *u["credentials"])
    print(f"OK: wrote {CONFIG_KEY}, {ROLES_KEY} and {len(USERS)} users into {REDIS_URL}")

if __name__ == "__main__":
    main()
