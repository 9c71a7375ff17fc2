from contextvars import ContextVar
from enum import Enum
from functools import lru_cache
from typing import Optional, Tuple

import azure.functions as func

from src.auth.identity_gate import IdentityGate, get_identity_gate
from src.shared.config import get_settings
from src.shared.logging_utils import current_trace_id, info as log_info
from src.specs.auth.session import SessionState


class GateState(str, Enum):
    PENDING = "pending"
    DENIED = "denied"
    GRANTED = "granted"


_GATE_STATE: ContextVar[GateState] = ContextVar("blog_admin_gate_state", default=GateState.PENDING)


def derive_gate_state(session: SessionState) -> GateState:
    """Admin views need a signed-in session; the admin claim is checked by the views themselves."""
    if not session.resolved:
        return GateState.PENDING
    if session.currentUser is None:
        return GateState.DENIED
    return GateState.GRANTED


class AdminGate:
    def __init__(self, identity: IdentityGate, login_url: str) -> None:
        self._identity = identity
        self._login_url = login_url
        self._remove_listener = identity.add_listener(self._on_session_changed)

    @property
    def identity(self) -> IdentityGate:
        return self._identity

    @property
    def state(self) -> GateState:
        return _GATE_STATE.get()

    def _on_session_changed(self, session: SessionState) -> None:
        _GATE_STATE.set(derive_gate_state(session))

    def close(self) -> None:
        self._remove_listener()

    def enter(self, req: func.HttpRequest) -> Tuple[SessionState, Optional[func.HttpResponse]]:
        """Resolve the request's session.

        Returns the session and None when the view may render, otherwise the
        response to send instead (a redirect to the login entry point, or a
        loading response while the session is unresolved).
        """
        session = self._identity.observe_request(req)
        state = self.state
        log_info(current_trace_id(), "admin_gate:decision", state=state.value, route=req.url)
        if state is GateState.GRANTED:
            return session, None
        if state is GateState.DENIED:
            return session, func.HttpResponse(status_code=302, headers={"Location": self._login_url})
        return session, func.HttpResponse(
            body='{"loading": true}',
            mimetype="application/json",
            status_code=503,
            headers={"Retry-After": "1"},
        )


@lru_cache(maxsize=1)
def get_admin_gate() -> AdminGate:
    return AdminGate(get_identity_gate(), get_settings().login_url)
