import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PostFlags(BaseModel):
    """Rendering options recognized in front matter. Anything else is ignored."""

    model_config = ConfigDict(frozen=True)

    mermaid: bool = False
    toc: bool = False


class Post(BaseModel):
    model_config = ConfigDict(frozen=True)

    slug: str
    source_path: str
    title: str
    publish_date: Optional[datetime.datetime] = None
    raw_date: str = ""
    categories: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    flags: PostFlags = Field(default_factory=PostFlags)
    body: str = ""
    extra: Dict[str, Any] = Field(default_factory=dict)


class Rejection(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_path: str
    slug: Optional[str] = None
    error: str
    reason: str


class RenderedPost(BaseModel):
    model_config = ConfigDict(frozen=True)

    post: Post
    html: str
    body_html: str
    toc_html: Optional[str] = None
    reading_time: str


class ManifestEntry(BaseModel):
    slug: str
    source_path: str
    title: str
    publishedAt: str
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    readingTime: str
    output_path: str
    fragment_path: str
    description: Optional[str] = None


class BuildManifest(BaseModel):
    posts: List[ManifestEntry] = Field(default_factory=list)
    rejected: List[Rejection] = Field(default_factory=list)

    @property
    def rendered_count(self) -> int:
        return len(self.posts)

    @property
    def skipped_count(self) -> int:
        return len(self.rejected)

    def get(self, slug: str) -> Optional[ManifestEntry]:
        return next((entry for entry in self.posts if entry.slug == slug), None)
