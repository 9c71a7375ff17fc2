from __future__ import annotations

from typing import Dict, Type

from pydantic import BaseModel

from src.specs.common.error_response_spec import ErrorResponse
from src.specs.documents.comment_document_spec import Comment
from src.specs.documents.post_document_spec import Post
from src.specs.http.admin import (
    CreatePostRequest,
    DashboardView,
    EditorView,
    LoginView,
    PostMutationResponse,
    SetPublishedRequest,
    StartSessionRequest,
    UpdatePostRequest,
    UploadResponse,
)
from src.specs.http.posts import (
    CommentMutationResponse,
    CreateCommentRequest,
    HomeView,
    PostDetailView,
    SessionView,
    SetCommentHiddenRequest,
)


# Registry mapping output schema filenames to models for generation
SCHEMA_MODELS: Dict[str, Type[BaseModel]] = {
    "post.document.schema.json": Post,
    "comment.document.schema.json": Comment,
    "error.response.schema.json": ErrorResponse,
    "home.view.schema.json": HomeView,
    "post_detail.view.schema.json": PostDetailView,
    "create_comment.request.schema.json": CreateCommentRequest,
    "set_comment_hidden.request.schema.json": SetCommentHiddenRequest,
    "comment_mutation.response.schema.json": CommentMutationResponse,
    "session.view.schema.json": SessionView,
    "login.view.schema.json": LoginView,
    "start_session.request.schema.json": StartSessionRequest,
    "dashboard.view.schema.json": DashboardView,
    "editor.view.schema.json": EditorView,
    "create_post.request.schema.json": CreatePostRequest,
    "update_post.request.schema.json": UpdatePostRequest,
    "set_published.request.schema.json": SetPublishedRequest,
    "post_mutation.response.schema.json": PostMutationResponse,
    "upload.response.schema.json": UploadResponse,
}

__all__ = [
    "Post",
    "Comment",
    "ErrorResponse",
    "HomeView",
    "PostDetailView",
    "CreateCommentRequest",
    "SetCommentHiddenRequest",
    "CommentMutationResponse",
    "SessionView",
    "LoginView",
    "StartSessionRequest",
    "DashboardView",
    "EditorView",
    "CreatePostRequest",
    "UpdatePostRequest",
    "SetPublishedRequest",
    "PostMutationResponse",
    "UploadResponse",
    "SCHEMA_MODELS",
]
