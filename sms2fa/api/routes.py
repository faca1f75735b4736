from typing import Callable, TypeVar

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from sms2fa.api.auth import require_api_key
from sms2fa.api.schemas import (
    ChallengeResponse,
    EvaluationResponse,
    LoginSessionResponse,
    MobileNumberSubmission,
    StartLoginRequest,
    SubmissionResponse,
)
from sms2fa.core import flow
from sms2fa.store import session_repo, user_repo
from sms2fa.store.models import AuthSession
from sms2fa.core.errors import UserNotFoundError
from sms2fa.observability.logging import log
from sms2fa.utils.lock import session_lock

router = APIRouter(prefix="/login", dependencies=[Depends(require_api_key)])

T = TypeVar("T")


def _locked(session_id: str, fn: Callable[[AuthSession], T]) -> T:
    """Load, mutate and persist one login session under its lock."""
    with session_lock(session_id):
        session = session_repo.load_session(session_id)
        out = fn(session)
        session_repo.save_session(session)
        return out


def _session_view(s: AuthSession) -> LoginSessionResponse:
    return LoginSessionResponse(
        sessionId=s.sessionId,
        userId=s.userId,
        requiredActions=sorted(s.requiredActions),
        activeAction=s.activeAction,
        completedActions=list(s.completedActions),
    )


def _start(session_id: str, user_id: str) -> AuthSession:
    if user_repo.load_user(user_id) is None:
        raise UserNotFoundError(user_id)
    s = session_repo.create_session(session_id, user_id)
    log(event="login_started", sessionId=session_id, userId=user_id)
    return s


@router.post("/{session_id}", response_model=LoginSessionResponse)
async def start_login(session_id: str, req: StartLoginRequest):
    s = await run_in_threadpool(_start, session_id, req.userId)
    return _session_view(s)


@router.get("/{session_id}", response_model=LoginSessionResponse)
async def get_login(session_id: str):
    s = await run_in_threadpool(session_repo.load_session, session_id)
    return _session_view(s)


@router.delete("/{session_id}")
async def end_login(session_id: str):
    await run_in_threadpool(session_repo.delete_session, session_id)
    log(event="login_ended", sessionId=session_id)
    return {"status": "ok", "sessionId": session_id}


@router.post("/{session_id}/evaluate", response_model=EvaluationResponse)
async def evaluate(session_id: str):
    decision, active = await run_in_threadpool(_locked, session_id, flow.evaluate_triggers)
    return EvaluationResponse(
        sessionId=session_id,
        verdict=decision.verdict,
        reason=decision.reason,
        configErrors=[e.as_dict() for e in decision.configErrors],
        activeAction=active,
    )


@router.post("/{session_id}/actions/{action_id}", response_model=LoginSessionResponse)
async def initiate_action(session_id: str, action_id: str):
    def _run(s: AuthSession) -> AuthSession:
        flow.initiate_action(s, action_id)
        return s

    s = await run_in_threadpool(_locked, session_id, _run)
    return _session_view(s)


@router.get("/{session_id}/mobile-number", response_model=ChallengeResponse)
async def mobile_number_challenge(session_id: str):
    # Rendering never mutates the session, so no lock or save
    s = await run_in_threadpool(session_repo.load_session, session_id)
    challenge = await run_in_threadpool(flow.issue_phone_challenge, s)
    return ChallengeResponse(
        sessionId=session_id,
        template=challenge.template,
        action=challenge.action,
        fields=challenge.fields,
    )


@router.post("/{session_id}/mobile-number", response_model=SubmissionResponse)
async def mobile_number_submit(session_id: str, body: MobileNumberSubmission):
    result, active = await run_in_threadpool(
        _locked, session_id, lambda s: flow.submit_mobile_number(s, body.mobile_number)
    )
    return SubmissionResponse(
        status="success" if result.ok else "error",
        sessionId=session_id,
        nextAction=result.nextAction,
        activeAction=active,
    )
