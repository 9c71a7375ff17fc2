from typing import List, Sequence

from src.specs.documents.post_document_spec import Post


def filter_posts(posts: Sequence[Post], query: str, *, include_content: bool = False) -> List[Post]:
    """Case-insensitive substring search over already-fetched posts.

    Matches title, excerpt and author; the full article text too when
    `include_content` is set. A blank query returns every post.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(posts)

    def matches(post: Post) -> bool:
        fields = [post.title, post.excerpt, post.author]
        if include_content:
            fields.append(post.content)
        return any(needle in (f or "").lower() for f in fields)

    return [p for p in posts if matches(p)]
