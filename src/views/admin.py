"""Admin pages behind the AdminGate: dashboard, editor, publishing and cover uploads."""
from http.cookies import SimpleCookie
from typing import List

import azure.functions as func

from src.auth.admin_gate import AdminGate
from src.auth.identity_gate import IdentityGate
from src.media.image_probe import probe_image
from src.media.uploader import MediaUploader
from src.repository.content_repository import ContentRepository
from src.repository.search import filter_posts
from src.shared.config import Settings
from src.shared.logging_utils import current_trace_id, info as log_info
from src.specs.auth.session import SessionState
from src.specs.common.errors import AccessDenied, BlogError, NotFound, ValidationError
from src.specs.documents.post_document_spec import PostCreate, PostUpdate
from src.specs.http.admin import (
    CreatePostRequest,
    DashboardStats,
    DashboardView,
    EditorDraft,
    EditorView,
    LoginView,
    PostMutationResponse,
    SetPublishedRequest,
    StartSessionRequest,
    UpdatePostRequest,
    UploadResponse,
)
from src.specs.http.posts import SessionView
from src.specs.media.upload_events import UploadEvent, UploadFailed, UploadProgress
from src.views.http_utils import begin_request, error_response, json_response, notice, parse_body

DASHBOARD_PATH = "/api/admin/dashboard"


def _session_view(session: SessionState) -> SessionView:
    return SessionView(signedIn=session.currentUser is not None, adminStatus=session.adminStatus)


def dashboard(req: func.HttpRequest, repo: ContentRepository, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    session, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    query = (req.params.get("q") or "").strip()
    shows_drafts = session.is_admin
    try:
        posts = repo.list_posts(published_only=not shows_drafts)
    except BlogError as exc:
        view = DashboardView(query=query, showsDrafts=shows_drafts, error=str(exc), session=_session_view(session))
        return json_response(view, status_code=exc.http_status)

    published = sum(1 for p in posts if p.published)
    stats = DashboardStats(total=len(posts), published=published, drafts=len(posts) - published)
    matches = filter_posts(posts, query)
    view = DashboardView(
        posts=matches,
        stats=stats,
        query=query,
        matchCount=len(matches),
        showsDrafts=shows_drafts,
        session=_session_view(session),
    )
    return json_response(view)


def new_post_form(req: func.HttpRequest, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    return json_response(EditorView(mode="create", draft=EditorDraft()))


def edit_post_form(req: func.HttpRequest, repo: ContentRepository, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    post_id = req.route_params.get("post_id", "")
    try:
        post = repo.get_post(post_id)
        if post is None:
            raise NotFound("Post", post_id)
    except BlogError as exc:
        return error_response(exc, title="Blog post not found" if isinstance(exc, NotFound) else "Error")
    draft = EditorDraft(
        title=post.title,
        excerpt=post.excerpt,
        content=post.content,
        coverImage=post.coverImage or "",
        author=post.author,
        published=post.published,
    )
    return json_response(EditorView(mode="edit", postId=post.id, draft=draft))


def create_post(req: func.HttpRequest, repo: ContentRepository, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    try:
        body = parse_body(req, CreatePostRequest)
        post_id = repo.create_post(PostCreate(**body.model_dump()))
    except BlogError as exc:
        return error_response(exc, title="Validation Error" if isinstance(exc, ValidationError) else "Error")
    resp = PostMutationResponse(
        postId=post_id,
        notice=notice("Success!", "Blog post created successfully."),
        redirectTo=DASHBOARD_PATH,
    )
    return json_response(resp, status_code=201)


def update_post(req: func.HttpRequest, repo: ContentRepository, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    post_id = req.route_params.get("post_id", "")
    try:
        body = parse_body(req, UpdatePostRequest)
        repo.update_post(post_id, PostUpdate(**body.model_dump(exclude_unset=True)))
    except BlogError as exc:
        return error_response(exc, title="Validation Error" if isinstance(exc, ValidationError) else "Error")
    resp = PostMutationResponse(
        postId=post_id,
        notice=notice("Success!", "Blog post updated successfully."),
        redirectTo=DASHBOARD_PATH,
    )
    return json_response(resp)


def set_published(req: func.HttpRequest, repo: ContentRepository, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    post_id = req.route_params.get("post_id", "")
    try:
        body = parse_body(req, SetPublishedRequest)
        repo.set_published(post_id, body.published)
    except BlogError as exc:
        return error_response(exc)
    message = "Blog post published." if body.published else "Blog post moved to drafts."
    return json_response(PostMutationResponse(postId=post_id, notice=notice("Success", message)))


def delete_post(req: func.HttpRequest, repo: ContentRepository, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    post_id = req.route_params.get("post_id", "")
    try:
        repo.delete_post(post_id)
    except BlogError as exc:
        return error_response(exc)
    return json_response(PostMutationResponse(postId=post_id, notice=notice("Success", "Blog post deleted successfully.")))


def upload_cover(req: func.HttpRequest, uploader: MediaUploader, gate: AdminGate) -> func.HttpResponse:
    begin_request(req)
    _, blocked = gate.enter(req)
    if blocked is not None:
        return blocked
    upload = req.files.get("file")
    if upload is not None:
        data = upload.read()
        filename = upload.filename or ""
    else:
        data = req.get_body() or b""
        filename = req.params.get("filename") or req.headers.get("X-File-Name") or ""
    try:
        if not filename:
            raise ValidationError("A file name is required.", details={"fields": ["filename"]})
        if not data:
            raise ValidationError("File is empty.", details={"fields": ["file"]})
        content_type = probe_image(data).mimeType
    except BlogError as exc:
        return error_response(exc, title="Upload Error")

    events: List[UploadEvent] = list(uploader.upload(data, filename, content_type=content_type))
    progress = [e for e in events if isinstance(e, UploadProgress)]
    result = events[-1]
    log_info(current_trace_id(), "view:upload", filename=filename, outcome=result.kind)
    if isinstance(result, UploadFailed):
        resp = UploadResponse(progress=progress, result=result,
                              notice=notice("Upload Error", result.reason, destructive=True))
        return json_response(resp, status_code=502)
    resp = UploadResponse(progress=progress, result=result,
                          notice=notice("Upload Complete", "Image uploaded and applied to cover."))
    return json_response(resp)


# Session entry points


def _session_cookie(settings: Settings, value: str, max_age: int) -> str:
    jar = SimpleCookie()
    jar[settings.session_cookie_name] = value
    morsel = jar[settings.session_cookie_name]
    morsel["path"] = "/"
    morsel["httponly"] = True
    morsel["secure"] = True
    morsel["samesite"] = "Lax"
    morsel["max-age"] = max_age
    return morsel.OutputString()


def login(req: func.HttpRequest, identity: IdentityGate, settings: Settings) -> func.HttpResponse:
    begin_request(req)
    session = identity.observe_request(req)
    return json_response(LoginView(signInUrl=settings.provider_signin_url, session=_session_view(session)))


def start_session(req: func.HttpRequest, identity: IdentityGate, settings: Settings) -> func.HttpResponse:
    begin_request(req)
    try:
        if not identity.accepts_client_tokens:
            raise AccessDenied("Sign in through the platform login; session tokens cannot be verified here.")
        body = parse_body(req, StartSessionRequest)
        session = identity.observe_token(body.token)
        if session.currentUser is None:
            raise AccessDenied("The sign-in token was rejected. Please sign in again.")
    except BlogError as exc:
        return error_response(exc, title="Sign-in failed")
    cookie = _session_cookie(settings, body.token, max_age=8 * 60 * 60)
    return json_response(_session_view(session), headers={"Set-Cookie": cookie})


def logout(req: func.HttpRequest, identity: IdentityGate, settings: Settings) -> func.HttpResponse:
    begin_request(req)
    identity.sign_out()
    return func.HttpResponse(
        status_code=302,
        headers={
            "Location": settings.login_url,
            "Set-Cookie": _session_cookie(settings, "", max_age=0),
        },
    )
