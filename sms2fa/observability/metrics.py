"""
Enforcement Metrics
-------------------
Redis-backed counters for the enforcement and enrollment paths, plus a
snapshot consumed by /admin/metrics. Writes are best-effort: a Redis hiccup
here must never break a login.
"""
from __future__ import annotations
from typing import Dict
from sms2fa.store.redis_conn import get_redis
from sms2fa.observability.logging import log
from sms2fa.utils.time import now_s

K_VERDICT = "metrics:enforcement:verdict:{verdict}"     # INCR
K_REASON  = "metrics:enforcement:reason:{reason}"       # INCR
K_CFG_ERR = "metrics:enforcement:config_errors"         # INCR
K_HANDOFF = "metrics:enrollment:handoffs"               # INCR
K_CHALLENGE = "metrics:enrollment:challenges"           # INCR

VERDICTS = ("SKIP", "TRIGGER")
REASONS = (
    "config_missing",
    "disabled",
    "whitelisted",
    "second_factor_present",
    "session_action_pending",
    "user_action_pending",
    "no_second_factor",
)


def _incr(key: str) -> None:
    try:
        r = get_redis()
        r.incr(key, 1)
    except Exception as e:
        log(event="metrics_write_failed", key=key, error=str(e))


def record_verdict(verdict: str, reason: str) -> None:
    _incr(K_VERDICT.format(verdict=verdict))
    _incr(K_REASON.format(reason=reason))


def increment_config_error() -> None:
    _incr(K_CFG_ERR)


def increment_handoff() -> None:
    _incr(K_HANDOFF)


def increment_challenge() -> None:
    _incr(K_CHALLENGE)


def _read_int(r, key: str) -> int:
    try:
        return int(r.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def get_metrics_snapshot() -> Dict:
    r = get_redis()
    verdicts = {v: _read_int(r, K_VERDICT.format(verdict=v)) for v in VERDICTS}
    reasons = {x: _read_int(r, K_REASON.format(reason=x)) for x in REASONS}
    evaluations = sum(verdicts.values())
    triggered = verdicts.get("TRIGGER", 0)
    return {
        "evaluations": evaluations,
        "verdicts": verdicts,
        "reasons": reasons,
        "trigger_rate": round((triggered / evaluations) * 100.0, 3) if evaluations else 0.0,
        "config_errors": _read_int(r, K_CFG_ERR),
        "challenges_issued": _read_int(r, K_CHALLENGE),
        "handoffs": _read_int(r, K_HANDOFF),
        "snapshot_at": now_s(),
    }
