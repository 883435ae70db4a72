from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .content import Post


class PostCollection(Sequence[Post]):
    """Lightweight helper for working with lists of Posts in templates and code."""

    def __init__(self, posts: Iterable[Post]):
        self._posts = list(posts)
        self._sorted_cache: PostCollection | None = None

    def __iter__(self) -> Iterator[Post]:
        return iter(self._posts)

    def __len__(self) -> int:
        return len(self._posts)

    def __getitem__(self, item):
        return self._posts[item]

    def published(self) -> PostCollection:
        return PostCollection(p for p in self._posts if not p.draft)

    def drafts(self) -> PostCollection:
        return PostCollection(p for p in self._posts if p.draft)

    def sorted(self) -> PostCollection:
        """Sort posts newest first.

        Posts with the same date are ordered by slug so the listing is
        stable across builds. Each post appears once; the collection never
        merges or drops entries.

        Returns:
            A new PostCollection in listing order.
        """
        if self._sorted_cache is None:
            by_slug = sorted(self._posts, key=lambda p: p.slug)
            self._sorted_cache = PostCollection(
                sorted(by_slug, key=lambda p: p.date, reverse=True)
            )
        return self._sorted_cache

    def latest(self, count: int = 5) -> PostCollection:
        return PostCollection(self.sorted()[:count])

    def neighbours(self, post: Post) -> tuple[Post | None, Post | None]:
        """Return the (newer, older) posts around ``post`` in listing order.

        Args:
            post: A post in this collection.

        Returns:
            Tuple of the next newer and next older post; either may be None.
        """
        ordered = list(self.sorted())
        index = next(i for i, p in enumerate(ordered) if p is post)
        newer = ordered[index - 1] if index > 0 else None
        older = ordered[index + 1] if index + 1 < len(ordered) else None
        return newer, older

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PostCollection({len(self._posts)} posts)"
