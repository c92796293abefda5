from typing import List, Optional

from pydantic import BaseModel, Field


class PostSummary(BaseModel):
    slug: str
    title: str
    summary: Optional[str] = None
    publishedAt: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    readingTime: Optional[str] = None


class PostDetail(PostSummary):
    content: str


class RejectedPost(BaseModel):
    source_path: str
    slug: Optional[str] = None
    error: str
    reason: str


class BuildResult(BaseModel):
    rendered: int
    skipped: int
    rejected: List[RejectedPost] = Field(default_factory=list)
