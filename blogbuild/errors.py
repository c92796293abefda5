from typing import Optional


class BlogBuildError(Exception):
    """Base class for every error raised by the build pipeline."""


class ContentRootError(BlogBuildError):
    """The content root cannot be read. This is the only fatal build error."""

    def __init__(self, root: str, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Cannot read content root {root}: {reason}")


class PostError(BlogBuildError):
    """An error scoped to a single post. The post is skipped, the batch goes on."""

    def __init__(self, source_path: str, reason: str, slug: Optional[str] = None):
        self.source_path = source_path
        self.reason = reason
        self.slug = slug
        super().__init__(f"{source_path}: {reason}")


class MalformedFrontMatterError(PostError):
    pass


class MissingFieldError(PostError):
    def __init__(self, source_path: str, field: str, slug: Optional[str] = None):
        self.field = field
        super().__init__(
            source_path, f"missing required field '{field}'", slug=slug
        )


class DuplicateSlugError(PostError):
    def __init__(self, source_path: str, slug: str, owner: str):
        self.owner = owner
        super().__init__(
            source_path, f"slug '{slug}' already used by {owner}", slug=slug
        )


class InvalidDateError(PostError):
    pass


class RenderError(PostError):
    pass
