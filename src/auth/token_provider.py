import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

import jwt

from src.shared.config import Settings
from src.shared.logging_utils import current_trace_id, info as log_info, warning as log_warning
from src.specs.auth.session import Identity

SessionListener = Callable[[Optional[Identity]], None]


class BearerTokenProvider:
    """Identity provider adapter over OIDC id/access tokens.

    When a JWKS URL is configured, token signatures are verified against the
    issuer's keys. Otherwise signature checks are left to the platform
    authentication in front of the app and tokens are only decoded; the
    identity gate then reads only the header that platform injects.
    """

    def __init__(
        self,
        *,
        jwks_url: Optional[str] = None,
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        algorithms: Sequence[str] = ("RS256",),
    ) -> None:
        self._jwks_url = jwks_url
        self._audience = audience
        self._issuer = issuer
        self._algorithms = list(algorithms)
        self._jwk_client: Optional[jwt.PyJWKClient] = None
        self._listeners: List[SessionListener] = []
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "BearerTokenProvider":
        return cls(jwks_url=settings.auth_jwks_url, audience=settings.auth_audience, issuer=settings.auth_issuer)

    @property
    def verifies_signatures(self) -> bool:
        return bool(self._jwks_url)

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, user: Optional[Identity]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(user)

    def decode(self, token: str) -> Dict[str, Any]:
        """Return the token's claims, verifying the signature when keys are configured."""
        if not self._jwks_url:
            return jwt.decode(token, options={"verify_signature": False})
        if self._jwk_client is None:
            self._jwk_client = jwt.PyJWKClient(self._jwks_url)
        signing_key = self._jwk_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=self._algorithms,
            audience=self._audience,
            issuer=self._issuer,
            options={"verify_aud": self._audience is not None, "verify_iss": self._issuer is not None},
        )

    def observe(self, token: Optional[str]) -> None:
        """Push the session token seen on the current request to subscribers."""
        user: Optional[Identity] = None
        if token:
            try:
                claims = self.decode(token)
            except jwt.PyJWTError as exc:
                log_warning(current_trace_id(), "identity:token:rejected", error=str(exc))
            else:
                uid = claims.get("oid") or claims.get("sub")
                if uid:
                    user = Identity(
                        uid=str(uid),
                        name=claims.get("name"),
                        email=claims.get("email") or claims.get("preferred_username"),
                        token=token,
                    )
                else:
                    log_warning(current_trace_id(), "identity:token:no_subject")
        self._notify(user)

    def get_claims(self, user: Identity) -> Dict[str, Any]:
        return self.decode(user.token)

    def sign_out(self) -> None:
        log_info(current_trace_id(), "identity:sign_out")
        self._notify(None)

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
        self._jwk_client = None
