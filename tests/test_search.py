"""Tests for the in-memory post filter."""

from datetime import datetime, timezone

from src.repository.search import filter_posts
from src.specs.documents.post_document_spec import Post

_NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _post(post_id, title, excerpt="", content="", author="Admin"):
    return Post(
        id=post_id,
        title=title,
        excerpt=excerpt,
        content=content,
        author=author,
        published=True,
        createdAt=_NOW,
        updatedAt=_NOW,
    )


POSTS = [
    _post("1", "AI Reverse Image Search", excerpt="Find where a picture came from"),
    _post("2", "Gardening notes", excerpt="Tomatoes again", author="Ai Lin"),
    _post("3", "Weekly digest", content="Mostly about retrieval and ai tooling"),
]


class TestFilterPosts:
    def test_blank_query_returns_all(self):
        assert filter_posts(POSTS, "   ") == POSTS

    def test_case_insensitive_title_match(self):
        assert [p.id for p in filter_posts(POSTS, "reverse image")] == ["1"]

    def test_matches_author(self):
        assert [p.id for p in filter_posts(POSTS, "lin")] == ["2"]

    def test_content_ignored_by_default(self):
        assert [p.id for p in filter_posts(POSTS, "ai")] == ["1", "2"]

    def test_content_included_when_requested(self):
        assert [p.id for p in filter_posts(POSTS, "AI", include_content=True)] == ["1", "2", "3"]

    def test_no_match(self):
        assert filter_posts(POSTS, "quantum") == []

    def test_preserves_input_order(self):
        reversed_posts = list(reversed(POSTS))
        assert [p.id for p in filter_posts(reversed_posts, "a")] == ["3", "2", "1"]
