"""
Slug generation and per-site deduplication.

Auto-derived slugs are made unique within a target site by appending
-2, -3, ... to the candidate. Explicit slugs are used as given.

The lookup is a single read before the insert, with no uniqueness
constraint behind it, so two concurrent creates with the same title can
still pick the same suffix. That window is accepted.
"""
import re
from typing import Awaitable, Callable, Iterable, Optional

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")

# (target_site, prefix) -> slugs on that site starting with prefix
SlugLookup = Callable[[str, str], Awaitable[Iterable[str]]]


def slugify(title: str) -> str:
    """
    Lower-case the title, collapse every run of characters outside [a-z0-9]
    into one hyphen and strip hyphens from both ends.

    >>> slugify("Hello, World!")
    'hello-world'
    """
    return _NON_SLUG_CHARS.sub("-", title.lower()).strip("-")


def first_free_slug(candidate: str, taken: Iterable[str]) -> str:
    """Return candidate, or candidate-N for the smallest N >= 2 not in taken."""
    taken = set(taken)
    if candidate not in taken:
        return candidate

    suffix = 2
    while f"{candidate}-{suffix}" in taken:
        suffix += 1
    return f"{candidate}-{suffix}"


async def resolve_slug(
    title: str,
    explicit_slug: Optional[str],
    target_site: str,
    lookup: SlugLookup,
) -> str:
    """Pick the slug for a new post on target_site."""
    if explicit_slug and explicit_slug.strip():
        return explicit_slug

    # A title with no letters or digits gives an empty candidate; it is
    # deduplicated like any other.
    candidate = slugify(title)
    existing = await lookup(target_site, candidate)
    return first_free_slug(candidate, existing)
