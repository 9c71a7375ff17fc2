from pydantic import BaseModel, Field
from typing import List, Optional

from src.specs.auth.session import AdminStatus
from src.specs.common.error_response_spec import Notice
from src.specs.documents.comment_document_spec import Comment, CommentCreate
from src.specs.documents.post_document_spec import Post


class HomeView(BaseModel):
    """Public listing of published posts, optionally narrowed by a search query."""
    posts: List[Post] = Field(default_factory=list)
    query: str = ""
    matchCount: int = 0
    error: Optional[str] = Field(None, description="Persistent banner shown when loading failed")


class PostDetailView(BaseModel):
    post: Post
    comments: List[Comment] = Field(default_factory=list)
    commentCount: int = 0
    commentsError: Optional[str] = None
    canModerate: bool = False


class CreateCommentRequest(CommentCreate):
    pass


class SetCommentHiddenRequest(BaseModel):
    hidden: bool


class CommentMutationResponse(BaseModel):
    success: bool = True
    commentId: str
    hidden: Optional[bool] = None
    notice: Notice


class SessionView(BaseModel):
    signedIn: bool
    adminStatus: AdminStatus
