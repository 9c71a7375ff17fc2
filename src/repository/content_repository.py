"""
Data access for posts and their comments in Cosmos DB.

Posts live in a container partitioned by `/id`; comments live in a
container partitioned by `/postId`, so every post's thread is a single
partition.
"""
import uuid
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from azure.cosmos.container import ContainerProxy

from src.shared.cosmos_client import get_cosmos_client, translate_cosmos_errors
from src.shared.logging_utils import current_trace_id, debug as log_debug, info as log_info, error as log_error
from src.specs.common.datetime_utils import format_iso_datetime, from_server_ts, parse_iso_datetime, utc_now
from src.specs.common.errors import BlogError, NotFound, ValidationError
from src.specs.documents.comment_document_spec import Comment
from src.specs.documents.post_document_spec import Post, PostCreate, PostUpdate

_REQUIRED_POST_FIELDS = ("title", "excerpt", "content")
_TEXT_POST_FIELDS = _REQUIRED_POST_FIELDS + ("author",)


def _blank_fields(values: Dict[str, Any], names) -> List[str]:
    return [n for n in names if n in values and not str(values[n] or "").strip()]


def validate_comment_fields(author: str, content: str) -> Tuple[str, str]:
    """Trim a visitor's name and comment; both must be non-empty."""
    author = (author or "").strip()
    content = (content or "").strip()
    blank = [name for name, value in (("author", author), ("content", content)) if not value]
    if blank:
        raise ValidationError("Name and comment are both required.", details={"fields": blank})
    return author, content


def _to_post(item: Dict[str, Any]) -> Post:
    now = utc_now()
    return Post(
        id=item["id"],
        title=item.get("title", ""),
        excerpt=item.get("excerpt", ""),
        content=item.get("content", ""),
        coverImage=item.get("coverImage") or None,
        author=item.get("author") or "",
        published=bool(item.get("published", False)),
        createdAt=parse_iso_datetime(item.get("createdAt") or "") or now,
        updatedAt=from_server_ts(item.get("_ts")) or now,
    )


def _to_comment(item: Dict[str, Any], post_id: str) -> Comment:
    return Comment(
        id=item["id"],
        postId=item.get("postId", post_id),
        author=item.get("author", ""),
        content=item.get("content", ""),
        hidden=bool(item.get("hidden", False)),
        createdAt=parse_iso_datetime(item.get("createdAt") or "") or utc_now(),
    )


class ContentRepository:
    """CRUD over posts and comments. Authorization is enforced by the backend, not here."""

    def __init__(self, posts: ContainerProxy, comments: ContainerProxy):
        self._posts = posts
        self._comments = comments

    # Posts

    def list_posts(self, published_only: bool = True) -> List[Post]:
        """Return posts newest first; drafts are excluded when `published_only`."""
        if published_only:
            query = "SELECT * FROM c WHERE c.published = @published ORDER BY c.createdAt DESC"
            parameters = [{"name": "@published", "value": True}]
        else:
            query = "SELECT * FROM c ORDER BY c.createdAt DESC"
            parameters = []
        try:
            with translate_cosmos_errors("Post"):
                items = list(self._posts.query_items(
                    query=query,
                    parameters=parameters,
                    enable_cross_partition_query=True,
                ))
        except BlogError as exc:
            log_error(current_trace_id(), "repo:posts:list_failed", publishedOnly=published_only, code=exc.code)
            raise
        log_info(current_trace_id(), "repo:posts:list", publishedOnly=published_only, count=len(items))
        return [_to_post(i) for i in items]

    def get_post(self, post_id: str) -> Optional[Post]:
        """Return the post, or None when no post has that id."""
        try:
            with translate_cosmos_errors("Post", post_id):
                item = self._posts.read_item(item=post_id, partition_key=post_id)
        except NotFound:
            log_info(current_trace_id(), "repo:posts:not_found", postId=post_id)
            return None
        except BlogError as exc:
            log_error(current_trace_id(), "repo:posts:get_failed", postId=post_id, code=exc.code)
            raise
        return _to_post(item)

    def create_post(self, fields: PostCreate) -> str:
        values = fields.model_dump()
        blank = _blank_fields(values, _REQUIRED_POST_FIELDS)
        if blank:
            raise ValidationError("Please fill in all required fields.", details={"fields": blank})

        post_id = uuid.uuid4().hex
        body = {
            "id": post_id,
            **values,
            "createdAt": format_iso_datetime(utc_now()),
            "revision": 0,
        }
        try:
            with translate_cosmos_errors("Post", post_id):
                self._posts.create_item(body=body)
        except BlogError as exc:
            log_error(current_trace_id(), "repo:posts:create_failed", code=exc.code)
            raise
        log_info(current_trace_id(), "repo:posts:created", postId=post_id, published=fields.published)
        return post_id

    def update_post(self, post_id: str, fields: PostUpdate) -> None:
        """
        Patch the supplied fields onto an existing post.

        A revision counter is always incremented, so the write happens (and the
        server timestamp behind `updatedAt` moves) even when nothing else changed.

        Raises:
            ValidationError: A supplied text field is blank, or published is null
            NotFound: No post with that id
            AccessDenied: The backend rejected the write
        """
        values = fields.model_dump(exclude_unset=True)
        blank = _blank_fields(values, _TEXT_POST_FIELDS)
        if "published" in values and values["published"] is None:
            blank.append("published")
        if blank:
            raise ValidationError("Please fill in all required fields.", details={"fields": blank})

        operations = [{"op": "set", "path": f"/{name}", "value": value} for name, value in values.items()]
        operations.append({"op": "incr", "path": "/revision", "value": 1})
        try:
            with translate_cosmos_errors("Post", post_id):
                self._posts.patch_item(item=post_id, partition_key=post_id, patch_operations=operations)
        except BlogError as exc:
            log_error(current_trace_id(), "repo:posts:update_failed", postId=post_id, code=exc.code)
            raise
        log_info(current_trace_id(), "repo:posts:updated", postId=post_id, fields=sorted(values))

    def set_published(self, post_id: str, published: bool) -> None:
        self.update_post(post_id, PostUpdate(published=published))

    def delete_post(self, post_id: str) -> None:
        """
        Delete every comment of the post, then the post itself.

        The steps are not transactional. If the post delete fails after its
        comments are gone the error propagates and calling again is safe.
        """
        comments = self._query_comments(post_id)
        for item in comments:
            self.delete_comment(post_id, item["id"])
        try:
            with translate_cosmos_errors("Post", post_id):
                self._posts.delete_item(item=post_id, partition_key=post_id)
        except NotFound:
            log_info(current_trace_id(), "repo:posts:delete_missing", postId=post_id)
            return
        except BlogError as exc:
            log_error(current_trace_id(), "repo:posts:delete_failed", postId=post_id, code=exc.code,
                      commentsDeleted=len(comments))
            raise
        log_info(current_trace_id(), "repo:posts:deleted", postId=post_id, commentsDeleted=len(comments))

    # Comments

    def _query_comments(self, post_id: str) -> List[Dict[str, Any]]:
        try:
            with translate_cosmos_errors("Comment"):
                return list(self._comments.query_items(
                    query="SELECT * FROM c WHERE c.postId = @postId ORDER BY c.createdAt DESC",
                    parameters=[{"name": "@postId", "value": post_id}],
                    partition_key=post_id,
                ))
        except BlogError as exc:
            log_error(current_trace_id(), "repo:comments:list_failed", postId=post_id, code=exc.code)
            raise

    def list_comments(self, post_id: str, include_hidden: bool = False) -> List[Comment]:
        comments = [_to_comment(i, post_id) for i in self._query_comments(post_id)]
        if not include_hidden:
            comments = [c for c in comments if not c.hidden]
        log_info(current_trace_id(), "repo:comments:list", postId=post_id, includeHidden=include_hidden,
                 count=len(comments))
        return comments

    def create_comment(self, post_id: str, author: str, content: str) -> str:
        author, content = validate_comment_fields(author, content)
        comment_id = uuid.uuid4().hex
        body = {
            "id": comment_id,
            "postId": post_id,
            "author": author,
            "content": content,
            "hidden": False,
            "createdAt": format_iso_datetime(utc_now()),
        }
        try:
            with translate_cosmos_errors("Comment", comment_id):
                self._comments.create_item(body=body)
        except BlogError as exc:
            log_error(current_trace_id(), "repo:comments:create_failed", postId=post_id, code=exc.code)
            raise
        log_info(current_trace_id(), "repo:comments:created", postId=post_id, commentId=comment_id)
        return comment_id

    def set_comment_hidden(self, post_id: str, comment_id: str, hidden: bool) -> None:
        try:
            with translate_cosmos_errors("Comment", comment_id):
                self._comments.patch_item(
                    item=comment_id,
                    partition_key=post_id,
                    patch_operations=[{"op": "set", "path": "/hidden", "value": hidden}],
                )
        except BlogError as exc:
            log_error(current_trace_id(), "repo:comments:visibility_failed", postId=post_id,
                      commentId=comment_id, code=exc.code)
            raise
        log_info(current_trace_id(), "repo:comments:visibility", postId=post_id, commentId=comment_id, hidden=hidden)

    def delete_comment(self, post_id: str, comment_id: str) -> None:
        try:
            with translate_cosmos_errors("Comment", comment_id):
                self._comments.delete_item(item=comment_id, partition_key=post_id)
        except NotFound:
            # Item doesn't exist, treat as success
            log_debug(current_trace_id(), "repo:comments:delete_missing", postId=post_id, commentId=comment_id)
            return
        except BlogError as exc:
            log_error(current_trace_id(), "repo:comments:delete_failed", postId=post_id,
                      commentId=comment_id, code=exc.code)
            raise
        log_info(current_trace_id(), "repo:comments:deleted", postId=post_id, commentId=comment_id)


@lru_cache(maxsize=1)
def get_content_repository() -> ContentRepository:
    """Get or create the repository bound to the configured Cosmos containers"""
    client = get_cosmos_client()
    return ContentRepository(client.posts_container(), client.comments_container())
