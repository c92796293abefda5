import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from blogbuild.errors import (
    DuplicateSlugError,
    InvalidDateError,
    MissingFieldError,
    PostError,
)
from blogbuild.schemas.post import Post, Rejection

logger = logging.getLogger(__name__)


class SlugRegistry:
    """
    Accumulates claimed slugs for one build. The first post to claim a slug
    owns it; it is passed explicitly through validation rather than kept
    as module state.
    """

    def __init__(self, reserved: Iterable[str] = ()):
        self._owners: Dict[str, str] = {slug: "<reserved>" for slug in reserved}

    def claim(self, post: Post) -> None:
        owner = self._owners.get(post.slug)
        if owner is not None:
            raise DuplicateSlugError(post.source_path, post.slug, owner)
        self._owners[post.slug] = post.source_path

    def owner_of(self, slug: str) -> Optional[str]:
        return self._owners.get(slug)

    def __contains__(self, slug: str) -> bool:
        return slug in self._owners

    def __len__(self) -> int:
        return len(self._owners)


@dataclass
class ValidationResult:
    valid: List[Post] = field(default_factory=list)
    rejected: List[Rejection] = field(default_factory=list)


def validate_posts(
    posts: Iterable[Post],
    *,
    registry: Optional[SlugRegistry] = None,
    require_categories: bool = True,
    require_tags: bool = False,
) -> ValidationResult:
    """Apply corpus-wide checks. A failing post is rejected; the rest carry on."""
    registry = registry if registry is not None else SlugRegistry()
    result = ValidationResult()

    for post in posts:
        try:
            registry.claim(post)
            check_date(post)
            check_collections(
                post,
                require_categories=require_categories,
                require_tags=require_tags,
            )
        except PostError as e:
            logger.warning(f"Rejected {post.source_path}: {e.reason}")
            result.rejected.append(to_rejection(e))
            continue
        result.valid.append(post)

    return result


def check_date(post: Post) -> None:
    if post.publish_date is None:
        raise InvalidDateError(
            post.source_path, f"unparseable date '{post.raw_date}'", slug=post.slug
        )


def check_collections(
    post: Post, *, require_categories: bool, require_tags: bool
) -> None:
    if require_categories and not post.categories:
        raise MissingFieldError(post.source_path, "categories", slug=post.slug)
    if require_tags and not post.tags:
        raise MissingFieldError(post.source_path, "tags", slug=post.slug)


def to_rejection(error: PostError) -> Rejection:
    return Rejection(
        source_path=error.source_path,
        slug=error.slug,
        error=type(error).__name__,
        reason=error.reason,
    )


def unexpected_rejection(
    source_path: str, error: Exception, slug: Optional[str] = None
) -> Rejection:
    return Rejection(
        source_path=source_path,
        slug=slug,
        error=type(error).__name__,
        reason=str(error) or "unexpected error",
    )
