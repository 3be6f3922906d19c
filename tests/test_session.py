"""Tests for sessions, identity and sign-in."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import JWTError, jwt

from interview_studio.config.settings import settings
from interview_studio.middleware.error_handler import APIError, AuthenticationError
from interview_studio.services import session as session_module
from interview_studio.services.session import Identity, SessionManager
from interview_studio.services.sso_token import load_public_key, validate_sso_token
from interview_studio.services.token import create_token, decode_token, should_refresh_token


def test_identity_from_email():
    identity = Identity.from_email("  Jordan.Lee@Acme.COM ", "Jordan Lee")

    assert identity.email == "jordan.lee@acme.com"
    assert identity.company == "acme.com"
    assert identity.display_name == "Jordan Lee"
    assert Identity.from_email("sam@acme.com").display_name == "sam@acme.com"


def test_issued_token_round_trips(identity):
    manager = SessionManager()
    payload = manager.get_session(manager.issue_token(identity))

    assert payload["email"] == identity.email
    assert manager.identity_from_session(payload) == identity


def test_missing_or_garbage_token_has_no_session():
    manager = SessionManager()
    assert manager.get_session(None) is None
    assert manager.get_session("not-a-token") is None


def test_expired_token_has_no_session(identity):
    token = create_token({"email": identity.email, "epoch": 0}, expires_delta=timedelta(seconds=-5))
    assert SessionManager().get_session(token) is None


def test_sign_out_everywhere_revokes_old_tokens(identity):
    manager = SessionManager()
    old = manager.issue_token(identity)

    manager.sign_out_everywhere(identity)

    assert manager.get_session(old) is None
    assert manager.get_session(manager.issue_token(identity)) is not None


def test_sign_out_only_affects_that_identity(identity):
    manager = SessionManager()
    other = Identity.from_email("sam@acme.com")
    token = manager.issue_token(other)

    manager.sign_out_everywhere(identity)
    assert manager.get_session(token) is not None


def test_listeners_receive_events_until_unsubscribed(identity):
    manager = SessionManager()
    events = []
    unsubscribe = manager.subscribe(events.append)

    manager.sign_out_everywhere(identity)
    unsubscribe()
    manager.sign_out_everywhere(identity)

    assert len(events) == 1
    assert events[0].kind == "signed_out"
    assert events[0].present is False
    assert events[0].identity == identity


def test_failing_listener_does_not_block_others(identity):
    manager = SessionManager()
    events = []

    def broken(event):
        raise RuntimeError("boom")

    manager.subscribe(broken)
    manager.subscribe(events.append)
    manager.sign_out_everywhere(identity)

    assert len(events) == 1


def test_teardown_clears_listeners(identity):
    manager = SessionManager()
    manager.init()
    events = []
    manager.subscribe(events.append)

    manager.teardown()
    manager.sign_out_everywhere(identity)

    assert manager.started is False
    assert events == []


def test_begin_sign_in_points_at_provider():
    url = SessionManager().begin_sign_in("/results")
    assert url.startswith("http://localhost:9000/api/auth/login?")
    assert "app=interview-studio" in url


def test_foreign_token_is_not_a_session():
    foreign = jwt.encode({"email": "a@b.com"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(JWTError):
        decode_token(foreign)
    assert SessionManager().get_session(foreign) is None


def test_refresh_window():
    fresh = decode_token(create_token({"email": "a@b.com"}))
    assert should_refresh_token(fresh) is False

    stale = {"iat": 0, "exp": 10}
    assert should_refresh_token(stale) is True


def mock_client_factory(handler):
    def factory():
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return factory


def test_complete_sign_in(monkeypatch):
    monkeypatch.setattr(
        session_module,
        "validate_sso_token",
        lambda token: {"email": "Jordan.Lee@Acme.com", "name": "Jordan Lee"},
    )

    def handler(request):
        assert request.url.path == "/api/sso/exchange-token"
        return httpx.Response(200, json={"token": "provider-token"})

    manager = SessionManager(http_client_factory=mock_client_factory(handler))
    events = []
    manager.subscribe(events.append)

    token, identity = asyncio.run(manager.complete_sign_in("auth-code"))

    assert identity.email == "jordan.lee@acme.com"
    assert manager.get_session(token)["email"] == "jordan.lee@acme.com"
    assert events[0].kind == "signed_in"


def test_complete_sign_in_rejected_code():
    manager = SessionManager(
        http_client_factory=mock_client_factory(lambda request: httpx.Response(400, json={})),
    )
    with pytest.raises(AuthenticationError):
        asyncio.run(manager.complete_sign_in("bad-code"))


def test_complete_sign_in_provider_down():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    manager = SessionManager(http_client_factory=mock_client_factory(handler))
    with pytest.raises(APIError) as exc:
        asyncio.run(manager.complete_sign_in("code"))
    assert exc.value.code == "SSO_UNAVAILABLE"


def test_complete_sign_in_without_public_key():
    manager = SessionManager(
        http_client_factory=mock_client_factory(
            lambda request: httpx.Response(200, json={"token": "provider-token"})
        ),
    )
    with pytest.raises(AuthenticationError):
        asyncio.run(manager.complete_sign_in("code"))


@pytest.fixture(scope="module")
def provider_keys():
    """A throwaway RS256 key pair standing in for the identity provider's."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


def provider_token(private_pem, **claims):
    now = datetime.now(timezone.utc)
    payload = {
        "aud": settings.SSO_APP_ID,
        "iss": settings.SSO_ISSUER,
        "iat": now,
        "exp": now + timedelta(minutes=5),
        **claims,
    }
    return jwt.encode(payload, private_pem, algorithm="RS256")


def test_provider_token_yields_email_and_name(provider_keys):
    private_pem, public_pem = provider_keys
    token = provider_token(private_pem, email="Jordan.Lee@Acme.com", given_name="Jordan", family_name="Lee")

    assert validate_sso_token(token, public_pem) == {"email": "Jordan.Lee@Acme.com", "name": "Jordan Lee"}


def test_provider_token_without_email_is_rejected(provider_keys):
    private_pem, public_pem = provider_keys
    with pytest.raises(JWTError):
        validate_sso_token(provider_token(private_pem, name="No Email"), public_pem)


def test_provider_token_for_another_app_is_rejected(provider_keys):
    private_pem, public_pem = provider_keys
    token = provider_token(private_pem, email="a@b.com", aud="some-other-app")
    with pytest.raises(JWTError):
        validate_sso_token(token, public_pem)


def test_public_key_is_read_from_file(tmp_path, provider_keys):
    _, public_pem = provider_keys
    key_file = tmp_path / "sso_public.pem"
    key_file.write_text(public_pem)

    assert load_public_key(str(key_file)) == public_pem
    assert load_public_key(str(tmp_path / "missing.pem")) is None
