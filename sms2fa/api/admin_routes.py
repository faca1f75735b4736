from fastapi import APIRouter, Depends, HTTPException, Header
from sms2fa.settings import settings
from sms2fa.store.session_repo import load_session
from sms2fa.core.required_actions import MOBILE_NUMBER_NOTE
import sms2fa.observability.metrics as metrics

router = APIRouter(prefix="/admin", tags=["admin"])

def require_admin(x_admin_key: str = Header(default="", alias="x-admin-key")):
    if not settings.ADMIN_RBAC_ENABLED:
        return
    # Secure default: if enabled but no key configured, reject all.
    if not settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Admin access disabled (no key configured)")
    if x_admin_key != settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid admin key")

@router.get("/session/{session_id}")
def get_session_snapshot(session_id: str, _=Depends(require_admin)):
    """Compact login-session snapshot. Note values are not exposed."""
    s = load_session(session_id)
    return {
        "sessionId": s.sessionId,
        "userId": s.userId,
        "activeAction": s.activeAction,
        "requiredActions": sorted(s.requiredActions),
        "completedActions": list(s.completedActions),
        "noteKeys": sorted(s.notes.keys()),
        "hasMobileNumber": bool(s.notes.get(MOBILE_NUMBER_NOTE)),
        "createdAtMs": s.createdAtMs,
        "lastUpdatedAtEpoch": s.lastUpdatedAtEpoch,
    }

@router.get("/metrics")
def get_metrics(_=Depends(require_admin)):
    """Enforcement and enrollment counters backed by Redis."""
    return metrics.get_metrics_snapshot()
