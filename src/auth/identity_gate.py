"""
Process-wide view of the identity provider's session.

The gate subscribes to the provider once per process and turns each session
notification into a `SessionState`: who is signed in, whether the first
notification has arrived, and whether the `admin` claim is present. State is
kept per execution context so concurrent invocations stay isolated.
"""
import atexit
import threading
from contextvars import ContextVar
from functools import lru_cache
from http.cookies import CookieError, SimpleCookie
from typing import Any, Callable, Dict, List, Optional, Protocol

import azure.functions as func

from src.auth.token_provider import BearerTokenProvider, SessionListener
from src.shared.config import get_settings
from src.shared.logging_utils import current_trace_id, info as log_info, error as log_error
from src.specs.auth.session import AdminStatus, Identity, SessionState

_SESSION: ContextVar[SessionState] = ContextVar("blog_session_state", default=SessionState())

StateListener = Callable[[SessionState], None]


class IdentityProvider(Protocol):
    @property
    def verifies_signatures(self) -> bool: ...

    def subscribe(self, listener: SessionListener) -> Callable[[], None]: ...

    def observe(self, token: Optional[str]) -> None: ...

    def get_claims(self, user: Identity) -> Dict[str, Any]: ...

    def sign_out(self) -> None: ...

    def close(self) -> None: ...


def _admin_claim(claims: Dict[str, Any]) -> bool:
    value = claims.get("admin")
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def session_token(req: func.HttpRequest, cookie_name: str, *, client_tokens: bool = True) -> Optional[str]:
    """Find the provider token on a request: bearer header, App Service header, then cookie.

    With `client_tokens` off only the header injected by App Service
    Authentication is read; the bearer header and the cookie are set by the
    caller and are ignored.
    """
    auth = req.headers.get("Authorization") or ""
    if client_tokens and auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    platform_token = req.headers.get("X-MS-TOKEN-AAD-ID-TOKEN")
    if platform_token:
        return platform_token
    if not client_tokens:
        return None
    raw_cookie = req.headers.get("Cookie")
    if raw_cookie:
        jar = SimpleCookie()
        try:
            jar.load(raw_cookie)
        except CookieError:
            return None
        morsel = jar.get(cookie_name)
        if morsel is not None and morsel.value:
            return morsel.value
    return None


class IdentityGate:
    def __init__(self, provider: IdentityProvider, *, cookie_name: str = "blog_session") -> None:
        self._provider = provider
        self._cookie_name = cookie_name
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._listeners: List[StateListener] = []
        self._lock = threading.Lock()

    @property
    def accepts_client_tokens(self) -> bool:
        """Tokens from the bearer header or cookie are only trusted when signatures are checked."""
        return bool(getattr(self._provider, "verifies_signatures", False))

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        with self._lock:
            if self._unsubscribe is not None:
                log_info(current_trace_id(), "identity:start:already_started")
                return
            self._unsubscribe = self._provider.subscribe(self._on_auth_state_changed)
        log_info(current_trace_id(), "identity:started", provider=type(self._provider).__name__)

    def stop(self) -> None:
        with self._lock:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is None:
            return
        unsubscribe()
        self._provider.close()
        log_info(current_trace_id(), "identity:stopped")

    # Observable session fields

    @property
    def state(self) -> SessionState:
        return _SESSION.get()

    @property
    def current_user(self) -> Optional[Identity]:
        return self.state.currentUser

    @property
    def resolved(self) -> bool:
        return self.state.resolved

    @property
    def admin_status(self) -> AdminStatus:
        return self.state.adminStatus

    @property
    def is_admin(self) -> bool:
        return self.state.is_admin

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return remove

    def observe_token(self, token: Optional[str]) -> SessionState:
        if not self.started:
            raise RuntimeError("IdentityGate.start() must be called before observing sessions")
        self._provider.observe(token)
        return self.state

    def observe_request(self, req: func.HttpRequest) -> SessionState:
        """Resolve the session carried by `req` and return the resulting state."""
        token = session_token(req, self._cookie_name, client_tokens=self.accepts_client_tokens)
        return self.observe_token(token)

    def sign_out(self) -> None:
        self._provider.sign_out()

    def _on_auth_state_changed(self, user: Optional[Identity]) -> None:
        admin = AdminStatus.NOT_ADMIN
        if user is not None:
            try:
                claims = self._provider.get_claims(user)
            except Exception as exc:
                log_error(current_trace_id(), "identity:claims:failed", uid=user.uid, error=str(exc))
            else:
                if _admin_claim(claims):
                    admin = AdminStatus.ADMIN
        state = SessionState(currentUser=user, resolved=True, adminStatus=admin)
        _SESSION.set(state)
        log_info(
            current_trace_id(),
            "identity:session",
            signedIn=user is not None,
            adminStatus=admin.value,
        )
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(state)


@lru_cache(maxsize=1)
def get_identity_gate() -> IdentityGate:
    """Create and start the process-wide gate on first use; stopped at interpreter exit."""
    settings = get_settings()
    gate = IdentityGate(BearerTokenProvider.from_settings(settings), cookie_name=settings.session_cookie_name)
    gate.start()
    atexit.register(gate.stop)
    return gate
