import contextlib
import pytest
from unittest.mock import patch, MagicMock
from fastapi.testclient import TestClient
from sms2fa.main import app
from sms2fa.core.required_actions import PHONE_ENROLLMENT, PHONE_VALIDATION, MOBILE_NUMBER_NOTE
from sms2fa.core.errors import SessionNotFoundError
from sms2fa.store.models import AuthSession, PolicyConfig, UserRecord

client = TestClient(app)

USER = UserRecord(userId="u1", username="alice", roles={"offline_access"}, credentialTypes={"password"})


@pytest.fixture
def backend():
    """Sessions and account state kept in dicts instead of Redis."""
    sessions = {}
    pending = set()

    def create_session(sid, uid):
        sessions[sid] = AuthSession(sessionId=sid, userId=uid, createdAtMs=1)
        return sessions[sid]

    def load_session(sid):
        if sid not in sessions:
            raise SessionNotFoundError(sid)
        return sessions[sid]

    def load_user(uid):
        if uid != USER.userId:
            return None
        return UserRecord(userId=uid, username=USER.username, roles=set(USER.roles),
                          credentialTypes=set(USER.credentialTypes), requiredActions=set(pending))

    with patch("sms2fa.api.routes.session_lock", lambda sid: contextlib.nullcontext()), \
         patch("sms2fa.store.session_repo.create_session", side_effect=create_session), \
         patch("sms2fa.store.session_repo.load_session", side_effect=load_session), \
         patch("sms2fa.store.session_repo.save_session"), \
         patch("sms2fa.store.session_repo.delete_session", side_effect=lambda sid: sessions.pop(sid, None)), \
         patch("sms2fa.store.user_repo.load_user", side_effect=load_user), \
         patch("sms2fa.store.user_repo.stored_credential_types", side_effect=lambda uid: set(USER.credentialTypes)), \
         patch("sms2fa.store.user_repo.add_required_action", side_effect=lambda uid, a: pending.add(a)), \
         patch("sms2fa.store.user_repo.remove_required_action", side_effect=lambda uid, a: pending.discard(a)), \
         patch("sms2fa.store.realm_repo.get_authenticator_config", return_value=PolicyConfig(enabled=True)) as cfg, \
         patch("sms2fa.store.realm_repo.resolve_role", return_value=None), \
         patch("sms2fa.core.flow.metrics"):
        yield {"sessions": sessions, "pending": pending, "config": cfg}


def test_enrollment_flow_end_to_end(backend):
    resp = client.post("/login/s1", json={"userId": "u1"})
    assert resp.status_code == 200
    assert resp.json()["activeAction"] is None

    resp = client.post("/login/s1/evaluate")
    assert resp.status_code == 200
    data = resp.json()
    assert data["verdict"] == "TRIGGER"
    assert data["activeAction"] == PHONE_ENROLLMENT
    assert backend["pending"] == {PHONE_ENROLLMENT}

    # repeated tick does not queue again
    resp = client.post("/login/s1/evaluate")
    assert resp.json()["verdict"] == "SKIP"
    assert resp.json()["reason"] == "user_action_pending"

    resp = client.get("/login/s1/mobile-number")
    assert resp.status_code == 200
    assert resp.json()["template"] == "mobile_number_form.ftl"
    assert resp.json()["fields"][0]["name"] == "mobile_number"

    resp = client.post("/login/s1/mobile-number", json={"mobile_number": "+1 (555) 123-4567"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "success"
    assert data["nextAction"] == PHONE_VALIDATION
    assert data["activeAction"] == PHONE_VALIDATION

    s = backend["sessions"]["s1"]
    assert s.notes[MOBILE_NUMBER_NOTE] == "+15551234567"
    assert PHONE_ENROLLMENT not in backend["pending"]

    # a replayed submit is a conflict, the stored number is untouched
    resp = client.post("/login/s1/mobile-number", json={"mobile_number": "999"})
    assert resp.status_code == 409
    assert resp.json()["activeAction"] == PHONE_VALIDATION
    assert s.notes[MOBILE_NUMBER_NOTE] == "+15551234567"

    resp = client.delete("/login/s1")
    assert resp.status_code == 200
    assert client.get("/login/s1").status_code == 404


def test_missing_config_reports_error_without_failing(backend):
    backend["config"].return_value = None
    client.post("/login/s2", json={"userId": "u1"})
    resp = client.post("/login/s2/evaluate")
    assert resp.status_code == 200
    data = resp.json()
    assert data["verdict"] == "SKIP"
    assert data["reason"] == "config_missing"
    assert data["configErrors"][0]["kind"] == "config_missing"
    assert backend["pending"] == set()


def test_challenge_requires_active_enrollment(backend):
    client.post("/login/s3", json={"userId": "u1"})
    resp = client.get("/login/s3/mobile-number")
    assert resp.status_code == 409


def test_initiated_action(backend):
    client.post("/login/s4", json={"userId": "u1"})
    resp = client.post(f"/login/s4/actions/{PHONE_ENROLLMENT}")
    assert resp.status_code == 200
    assert resp.json()["activeAction"] == PHONE_ENROLLMENT

    resp = client.post("/login/s4/actions/CONFIGURE_TOTP")
    assert resp.status_code == 400


def test_unknown_user_and_session(backend):
    assert client.post("/login/s5", json={"userId": "ghost"}).status_code == 404
    assert client.post("/login/nope/evaluate").status_code == 404


def test_api_key_enforced():
    with patch("sms2fa.api.auth.settings") as mock_settings:
        mock_settings.API_KEY = "k"
        resp = client.get("/login/anything")
        assert resp.status_code == 401
