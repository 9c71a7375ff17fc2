"""Public pages: home listing, search, post detail and the comment thread."""
from typing import List, Optional

import azure.functions as func

from src.auth.identity_gate import IdentityGate
from src.repository.content_repository import ContentRepository, validate_comment_fields
from src.repository.search import filter_posts
from src.shared.logging_utils import current_trace_id, info as log_info
from src.specs.common.errors import AccessDenied, BlogError, NotFound, ValidationError
from src.specs.documents.comment_document_spec import Comment
from src.specs.http.posts import (
    CommentMutationResponse,
    CreateCommentRequest,
    HomeView,
    PostDetailView,
    SetCommentHiddenRequest,
)
from src.views.http_utils import begin_request, error_response, json_response, notice, parse_body

COMMENTS_LOAD_ERROR = "Failed to load comments. Please refresh the page."


def _listing(req: func.HttpRequest, repo: ContentRepository, query: str) -> func.HttpResponse:
    try:
        posts = repo.list_posts(published_only=True)
    except BlogError as exc:
        return json_response(HomeView(query=query, error=str(exc)), status_code=exc.http_status)
    matches = filter_posts(posts, query, include_content=True)
    log_info(current_trace_id(), "view:home", query=query, matches=len(matches))
    return json_response(HomeView(posts=matches, query=query, matchCount=len(matches)))


def home(req: func.HttpRequest, repo: ContentRepository) -> func.HttpResponse:
    begin_request(req)
    return _listing(req, repo, (req.params.get("q") or "").strip())


def search(req: func.HttpRequest, repo: ContentRepository) -> func.HttpResponse:
    begin_request(req)
    query = (req.params.get("q") or "").strip()
    if not query:
        return error_response(ValidationError("Enter something to search for."), title="Search")
    return _listing(req, repo, query)


def post_detail(req: func.HttpRequest, repo: ContentRepository, identity: IdentityGate) -> func.HttpResponse:
    begin_request(req)
    post_id = req.route_params.get("post_id", "")
    session = identity.observe_request(req)
    try:
        post = repo.get_post(post_id)
    except BlogError as exc:
        return error_response(exc)
    if post is None or (not post.published and not session.is_admin):
        return error_response(NotFound("Post", post_id), title="Blog post not found")

    comments: List[Comment] = []
    comments_error: Optional[str] = None
    try:
        comments = repo.list_comments(post_id, include_hidden=session.is_admin)
    except BlogError:
        comments_error = COMMENTS_LOAD_ERROR
    view = PostDetailView(
        post=post,
        comments=comments,
        commentCount=len(comments),
        commentsError=comments_error,
        canModerate=session.is_admin,
    )
    return json_response(view)


def create_comment(req: func.HttpRequest, repo: ContentRepository, identity: IdentityGate) -> func.HttpResponse:
    begin_request(req)
    post_id = req.route_params.get("post_id", "")
    session = identity.observe_request(req)
    try:
        body = parse_body(req, CreateCommentRequest)
        author, content = validate_comment_fields(body.author, body.content)
        post = repo.get_post(post_id)
        if post is None or (not post.published and not session.is_admin):
            raise NotFound("Post", post_id)
        comment_id = repo.create_comment(post_id, author, content)
    except BlogError as exc:
        return error_response(exc)
    resp = CommentMutationResponse(
        commentId=comment_id,
        hidden=False,
        notice=notice("Success", "Your comment has been posted."),
    )
    return json_response(resp, status_code=201)


def _require_moderator(identity: IdentityGate, req: func.HttpRequest, action: str) -> None:
    session = identity.observe_request(req)
    if not session.is_admin:
        raise AccessDenied(f"Only admins can {action}.")


def set_comment_hidden(req: func.HttpRequest, repo: ContentRepository, identity: IdentityGate) -> func.HttpResponse:
    begin_request(req)
    post_id = req.route_params.get("post_id", "")
    comment_id = req.route_params.get("comment_id", "")
    try:
        _require_moderator(identity, req, "change comment visibility")
        body = parse_body(req, SetCommentHiddenRequest)
        repo.set_comment_hidden(post_id, comment_id, body.hidden)
    except BlogError as exc:
        return error_response(exc, title="Failed to update comment visibility")
    resp = CommentMutationResponse(
        commentId=comment_id,
        hidden=body.hidden,
        notice=notice("Success", f"Comment {'hidden' if body.hidden else 'shown'} successfully."),
    )
    return json_response(resp)


def delete_comment(req: func.HttpRequest, repo: ContentRepository, identity: IdentityGate) -> func.HttpResponse:
    begin_request(req)
    post_id = req.route_params.get("post_id", "")
    comment_id = req.route_params.get("comment_id", "")
    try:
        _require_moderator(identity, req, "delete comments")
        repo.delete_comment(post_id, comment_id)
    except BlogError as exc:
        return error_response(exc, title="Failed to delete comment")
    resp = CommentMutationResponse(
        commentId=comment_id,
        notice=notice("Success", "Comment deleted successfully."),
    )
    return json_response(resp)
