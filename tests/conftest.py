"""Shared fixtures: an in-memory Cosmos container and a scriptable identity provider."""

import copy
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import azure.functions as func
import pytest
from azure.cosmos import exceptions

from src.auth.admin_gate import _GATE_STATE, AdminGate, GateState
from src.auth.identity_gate import _SESSION, IdentityGate
from src.repository.content_repository import ContentRepository
from src.specs.auth.session import Identity, SessionState


class FakeContainer:
    """Just enough of ContainerProxy for the repository's queries.

    Query parameters are applied as equality filters on the field of the same
    name, and `ORDER BY c.createdAt DESC` sorts newest first.
    """

    def __init__(self, partition_key: str = "id"):
        self.pk_field = partition_key
        self.items: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.calls: List[str] = []
        self.deny_writes = False
        self.fail_deletes: set = set()
        self._ts = 1_700_000_000

    def _stamp(self, doc: Dict[str, Any]) -> None:
        self._ts += 1
        doc["_ts"] = self._ts

    def _check_write(self) -> None:
        if self.deny_writes:
            raise exceptions.CosmosHttpResponseError(status_code=403, message="Forbidden by access rules")

    def _missing(self, item: str) -> exceptions.CosmosResourceNotFoundError:
        return exceptions.CosmosResourceNotFoundError(status_code=404, message=f"Entity {item} not found")

    def create_item(self, body: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self.calls.append("create_item")
        self._check_write()
        key = (body[self.pk_field], body["id"])
        if key in self.items:
            raise exceptions.CosmosResourceExistsError(status_code=409, message="Conflict")
        doc = copy.deepcopy(body)
        self._stamp(doc)
        self.items[key] = doc
        return copy.deepcopy(doc)

    def read_item(self, item: str, partition_key: str, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append("read_item")
        try:
            return copy.deepcopy(self.items[(partition_key, item)])
        except KeyError:
            raise self._missing(item)

    def query_items(self, query: str, parameters: Optional[List[Dict[str, Any]]] = None,
                    partition_key: Optional[str] = None, **kwargs: Any):
        self.calls.append("query_items")
        docs = list(self.items.values())
        if partition_key is not None:
            docs = [d for d in docs if d.get(self.pk_field) == partition_key]
        for param in parameters or []:
            name = param["name"].lstrip("@")
            docs = [d for d in docs if d.get(name) == param["value"]]
        if "ORDER BY c.createdAt DESC" in query:
            docs.sort(key=lambda d: d.get("createdAt", ""), reverse=True)
        return iter(copy.deepcopy(docs))

    def patch_item(self, item: str, partition_key: str, patch_operations: List[Dict[str, Any]], **kwargs: Any):
        self.calls.append("patch_item")
        self._check_write()
        doc = self.items.get((partition_key, item))
        if doc is None:
            raise self._missing(item)
        for op in patch_operations:
            field = op["path"].lstrip("/")
            if op["op"] == "set":
                doc[field] = op["value"]
            elif op["op"] == "incr":
                doc[field] = doc.get(field, 0) + op["value"]
        self._stamp(doc)
        return copy.deepcopy(doc)

    def delete_item(self, item: str, partition_key: str, **kwargs: Any) -> None:
        self.calls.append("delete_item")
        self._check_write()
        if item in self.fail_deletes:
            raise exceptions.CosmosHttpResponseError(status_code=503, message="Service unavailable")
        if (partition_key, item) not in self.items:
            raise self._missing(item)
        del self.items[(partition_key, item)]


class FakeIdentityProvider:
    """Maps opaque tokens to users and claims; a claims value that is an exception is raised."""

    verifies_signatures = True

    def __init__(self, sessions: Optional[Dict[str, Tuple[Identity, Any]]] = None):
        self.sessions = sessions or {}
        self.listeners: List[Callable[[Optional[Identity]], None]] = []
        self.subscribe_calls = 0
        self.closed = False

    def subscribe(self, listener):
        self.subscribe_calls += 1
        self.listeners.append(listener)

        def unsubscribe():
            self.listeners.remove(listener)

        return unsubscribe

    def _notify(self, user: Optional[Identity]) -> None:
        for listener in list(self.listeners):
            listener(user)

    def observe(self, token: Optional[str]) -> None:
        entry = self.sessions.get(token or "")
        self._notify(entry[0] if entry else None)

    def get_claims(self, user: Identity) -> Dict[str, Any]:
        claims = self.sessions[user.token][1]
        if isinstance(claims, Exception):
            raise claims
        return claims

    def sign_out(self) -> None:
        self._notify(None)

    def close(self) -> None:
        self.closed = True


ADMIN_TOKEN = "admin-token"
EDITOR_TOKEN = "editor-token"


@pytest.fixture(autouse=True)
def fresh_session():
    """Each test starts in an unresolved session, as a new invocation would."""
    session_token = _SESSION.set(SessionState())
    gate_token = _GATE_STATE.set(GateState.PENDING)
    yield
    _GATE_STATE.reset(gate_token)
    _SESSION.reset(session_token)


@pytest.fixture
def posts_container() -> FakeContainer:
    return FakeContainer(partition_key="id")


@pytest.fixture
def comments_container() -> FakeContainer:
    return FakeContainer(partition_key="postId")


@pytest.fixture
def repo(posts_container: FakeContainer, comments_container: FakeContainer) -> ContentRepository:
    return ContentRepository(posts_container, comments_container)


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider({
        ADMIN_TOKEN: (Identity(uid="admin-1", name="Ada", token=ADMIN_TOKEN), {"admin": True}),
        EDITOR_TOKEN: (Identity(uid="editor-1", name="Eve", token=EDITOR_TOKEN), {}),
    })


@pytest.fixture
def identity_gate(identity_provider: FakeIdentityProvider) -> IdentityGate:
    gate = IdentityGate(identity_provider)
    gate.start()
    yield gate
    gate.stop()


@pytest.fixture
def admin_gate(identity_gate: IdentityGate) -> AdminGate:
    gate = AdminGate(identity_gate, "/api/admin/login")
    yield gate
    gate.close()


def make_request(
    method: str = "GET",
    url: str = "/api/posts",
    *,
    token: Optional[str] = None,
    params: Optional[Dict[str, str]] = None,
    route_params: Optional[Dict[str, str]] = None,
    json_body: Any = None,
    body: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
) -> func.HttpRequest:
    hdrs = dict(headers or {})
    if token:
        hdrs["Authorization"] = f"Bearer {token}"
    if json_body is not None:
        body = json.dumps(json_body).encode("utf-8")
        hdrs.setdefault("Content-Type", "application/json")
    return func.HttpRequest(
        method=method,
        url=url,
        headers=hdrs,
        params=params or {},
        route_params=route_params or {},
        body=body,
    )


def body_of(resp: func.HttpResponse) -> Dict[str, Any]:
    return json.loads(resp.get_body().decode("utf-8"))
