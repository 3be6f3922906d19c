"""Process-wide session manager for the external identity provider.

The manager is created once at startup (``init``), torn down at shutdown
(``teardown``) and handed to endpoints through ``get_session_manager``.
Screens never look it up globally.
"""

from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional
from urllib.parse import urlencode

import httpx
import structlog
from fastapi import Request
from jose import JWTError

from interview_studio.config.settings import Settings, settings as default_settings
from interview_studio.middleware.error_handler import APIError, AuthenticationError
from interview_studio.services.sso_token import validate_sso_token
from interview_studio.services.token import create_token, decode_token

logger = structlog.get_logger()


@dataclass(frozen=True)
class Identity:
    """The signed-in user, derived solely from the session email."""

    email: str
    name: Optional[str] = None

    @classmethod
    def from_email(cls, email: str, name: Optional[str] = None) -> "Identity":
        return cls(email=email.strip().lower(), name=name)

    @property
    def company(self) -> str:
        return self.email.rsplit("@", 1)[-1]

    @property
    def display_name(self) -> str:
        return self.name or self.email


@dataclass(frozen=True)
class SessionEvent:
    """Delivered to subscribers whenever a session appears or goes away."""

    kind: Literal["signed_in", "signed_out"]
    identity: Identity

    @property
    def present(self) -> bool:
        return self.kind == "signed_in"


SessionListener = Callable[[SessionEvent], None]


class SessionManager:
    """Issues, validates and revokes sessions; notifies subscribers."""

    def __init__(
        self,
        config: Settings = default_settings,
        http_client_factory: Callable[..., httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self.config = config
        self._http_client_factory = http_client_factory
        self._listeners: list[SessionListener] = []
        # Bumped by sign_out_everywhere; tokens carrying an older epoch are dead
        self._epochs: dict[str, int] = {}
        self.started = False

    def init(self) -> None:
        self.started = True
        logger.info("Session manager started")

    def teardown(self) -> None:
        self._listeners.clear()
        self.started = False
        logger.info("Session manager stopped")

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(
                    "Session listener failed",
                    kind=event.kind,
                    email=event.identity.email,
                    error=str(e),
                )

    def begin_sign_in(self, return_url: str = "/") -> str:
        """URL of the provider's login page (redirect-based flow)."""
        params = {
            "app": self.config.SSO_APP_ID,
            "return_url": f"{self.config.FRONTEND_URL}/auth/callback?return_url={return_url}",
        }
        return f"{self.config.SSO_URL}/api/auth/login?{urlencode(params)}"

    async def complete_sign_in(self, code: str) -> tuple[str, Identity]:
        """
        Exchange the provider's auth code for an internal session token.

        Raises:
            AuthenticationError: If the provider rejects the code or token
            APIError: If the provider cannot be reached
        """
        logger.info("Exchanging auth code", sso_url=self.config.SSO_URL)
        try:
            async with self._http_client_factory() as client:
                response = await client.post(
                    f"{self.config.SSO_URL}/api/sso/exchange-token",
                    json={"auth_code": code},
                    timeout=self.config.SSO_TIMEOUT_SECONDS,
                )
        except httpx.RequestError as e:
            logger.error("SSO request failed", error=str(e))
            raise APIError(
                "Sign-in service unavailable",
                code="SSO_UNAVAILABLE",
                status_code=503,
            ) from e

        if response.status_code != 200:
            logger.warning(
                "SSO token exchange failed",
                status=response.status_code,
                body=response.text,
            )
            raise AuthenticationError("Failed to exchange auth code")

        provider_token = response.json().get("token")
        if not provider_token:
            raise AuthenticationError("No token in sign-in response")

        try:
            payload = validate_sso_token(provider_token)
        except JWTError as e:
            raise AuthenticationError(str(e)) from e

        identity = Identity.from_email(payload["email"], payload.get("name"))
        token = self.issue_token(identity)

        logger.info("Sign-in successful", email=identity.email)
        self._emit(SessionEvent("signed_in", identity))
        return token, identity

    def issue_token(self, identity: Identity) -> str:
        """Mint a session token bound to the identity's current epoch."""
        return create_token({
            "email": identity.email,
            "name": identity.name,
            "epoch": self._epochs.get(identity.email, 0),
        })

    def get_session(self, token: Optional[str]) -> Optional[dict[str, Any]]:
        """Decoded session payload, or None if absent, invalid or revoked."""
        if not token:
            return None
        try:
            payload = decode_token(token)
        except JWTError as e:
            logger.debug("Session token rejected", error=str(e))
            return None

        email = payload.get("email")
        if not email:
            return None
        if payload.get("epoch", 0) != self._epochs.get(email, 0):
            logger.debug("Session token revoked", email=email)
            return None
        return payload

    @staticmethod
    def identity_from_session(payload: dict[str, Any]) -> Identity:
        return Identity.from_email(payload["email"], payload.get("name"))

    def sign_out_everywhere(self, identity: Identity) -> None:
        """Revoke every token issued to this identity."""
        self._epochs[identity.email] = self._epochs.get(identity.email, 0) + 1
        logger.info("Signed out everywhere", email=identity.email)
        self._emit(SessionEvent("signed_out", identity))


def get_session_manager(request: Request) -> SessionManager:
    """Dependency returning the app's session manager."""
    return request.app.state.session_manager


def get_current_identity(request: Request) -> Identity:
    """
    Dependency returning the authenticated identity.

    Usage:
        @router.get("/me")
        def get_me(identity: Identity = Depends(get_current_identity)):
            return identity.email
    """
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise AuthenticationError()
    return identity
