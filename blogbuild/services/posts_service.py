import logging
from typing import List, Optional

from blogbuild.schemas.blog import PostDetail, PostSummary, RejectedPost
from blogbuild.schemas.post import BuildManifest, ManifestEntry

logger = logging.getLogger(__name__)


class PostsService:
    """Read side of the built site, backed by the manifest of the last build."""

    def __init__(self, repo):
        self.repo = repo

    def list_posts(self) -> List[PostSummary]:
        manifest = self._manifest()
        return [to_summary(entry) for entry in manifest.posts]

    def get_post(self, slug: str) -> Optional[PostDetail]:
        entry = self._manifest().get(slug)
        if not entry:
            return None
        content = self.repo.read_page(entry.fragment_path)
        if content is None:
            logger.warning(
                f"Manifest lists {slug} but {entry.fragment_path} is missing"
            )
            return None
        return PostDetail(**to_summary(entry).model_dump(), content=content)

    def list_rejected(self) -> List[RejectedPost]:
        return [
            RejectedPost(**rejection.model_dump())
            for rejection in self._manifest().rejected
        ]

    def _manifest(self) -> BuildManifest:
        manifest = self.repo.load()
        if manifest is None:
            logger.info("No manifest found; site has not been built yet")
            return BuildManifest()
        return manifest


def to_summary(entry: ManifestEntry) -> PostSummary:
    return PostSummary(
        slug=entry.slug,
        title=entry.title,
        summary=entry.description,
        publishedAt=entry.publishedAt,
        categories=entry.categories,
        tags=entry.tags,
        readingTime=entry.readingTime,
    )
