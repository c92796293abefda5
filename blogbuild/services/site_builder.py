import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Tuple, Union

from blogbuild.errors import PostError
from blogbuild.repos.content_repo import FileContentRepo
from blogbuild.repos.manifest_repo import ManifestRepo
from blogbuild.schemas.post import (
    BuildManifest,
    ManifestEntry,
    Post,
    Rejection,
    RenderedPost,
)
from blogbuild.services.content_parser import parse_post
from blogbuild.services.post_renderer import PostRenderer, get_environment
from blogbuild.services.post_validator import (
    SlugRegistry,
    to_rejection,
    unexpected_rejection,
    validate_posts,
)
from blogbuild.settings import Settings

logger = logging.getLogger(__name__)

RESERVED_SLUGS = ("categories", "tags")


class SiteBuilder:
    """
    Runs one batch build: discover -> parse -> validate -> render -> write.

    Parsing and rendering fan out over a thread pool. Validation is the
    barrier between them: every post is parsed and its slug registered
    before any post is rendered. Per-post failures become Rejection
    records; only an unreadable content root escapes as an exception.
    """

    def __init__(
        self,
        repo: FileContentRepo,
        output: ManifestRepo,
        *,
        renderer: PostRenderer | None = None,
        max_workers: int = 4,
        require_categories: bool = True,
        require_tags: bool = False,
    ):
        self.repo = repo
        self.output = output
        self.renderer = renderer or PostRenderer()
        self.max_workers = max(1, max_workers)
        self.require_categories = require_categories
        self.require_tags = require_tags

    @classmethod
    def from_settings(cls, settings: Settings) -> "SiteBuilder":
        return cls(
            FileContentRepo(settings.content_path),
            ManifestRepo(settings.output_path),
            renderer=PostRenderer(
                site_title=settings.SITE_TITLE, site_root=settings.site_root
            ),
            max_workers=settings.MAX_WORKERS,
            require_categories=settings.REQUIRE_CATEGORIES,
            require_tags=settings.REQUIRE_TAGS,
        )

    def build(self) -> BuildManifest:
        paths = self.repo.discover()
        logger.info(f"Building {len(paths)} posts from {self.repo.root}")

        parsed, rejected = self.parse_all(paths)

        validation = validate_posts(
            parsed,
            registry=SlugRegistry(reserved=RESERVED_SLUGS),
            require_categories=self.require_categories,
            require_tags=self.require_tags,
        )
        rejected.extend(validation.rejected)

        rendered, render_rejects = self.render_all(validation.valid)
        rejected.extend(render_rejects)

        manifest = self.write_site(rendered, rejected)
        logger.info(
            f"Build finished: {manifest.rendered_count} rendered, "
            f"{manifest.skipped_count} skipped"
        )
        return manifest

    def parse_all(self, paths: List[str]) -> Tuple[List[Post], List[Rejection]]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            results = list(pool.map(self._parse_one, paths))
        return _partition(results)

    def render_all(
        self, posts: List[Post]
    ) -> Tuple[List[RenderedPost], List[Rejection]]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            results = list(pool.map(self._render_one, posts))
        return _partition(results)

    def _parse_one(self, source_path: str) -> Union[Post, Rejection]:
        try:
            return parse_post(self.repo.read(source_path), source_path)
        except PostError as e:
            logger.warning(f"Skipped {source_path}: {e.reason}")
            return to_rejection(e)
        except Exception as e:
            logger.error(f"Unexpected error parsing {source_path}: {e}")
            return unexpected_rejection(source_path, e)

    def _render_one(self, post: Post) -> Union[RenderedPost, Rejection]:
        try:
            return self.renderer.render(post)
        except PostError as e:
            logger.warning(f"Failed to render {post.source_path}: {e.reason}")
            return to_rejection(e)
        except Exception as e:
            logger.error(f"Unexpected error rendering {post.source_path}: {e}")
            return unexpected_rejection(post.source_path, e, slug=post.slug)

    def write_site(
        self, rendered: List[RenderedPost], rejected: List[Rejection]
    ) -> BuildManifest:
        ordered = sort_newest_first(rendered)
        entries = []
        for item in ordered:
            entry = to_manifest_entry(item)
            self.output.write_page(entry.output_path, item.html)
            self.output.write_page(entry.fragment_path, item.body_html)
            entries.append(entry)

        context = {
            "site_title": self.renderer.site_title,
            "site_root": self.renderer.site_root,
        }
        env = get_environment()
        self.output.write_page(
            "index.html",
            env.get_template("index.html").render(entries=entries, **context),
        )
        self.output.write_page(
            "categories/index.html",
            env.get_template("taxonomy.html").render(
                heading="Categories",
                groups=group_entries(entries, "categories"),
                **context,
            ),
        )
        self.output.write_page(
            "tags/index.html",
            env.get_template("taxonomy.html").render(
                heading="Tags", groups=group_entries(entries, "tags"), **context
            ),
        )

        manifest = BuildManifest(
            posts=entries,
            rejected=sorted(rejected, key=lambda r: r.source_path),
        )
        self.output.save(manifest)
        return manifest


def build_site(settings: Settings) -> BuildManifest:
    return SiteBuilder.from_settings(settings).build()


def sort_newest_first(rendered: Iterable[RenderedPost]) -> List[RenderedPost]:
    by_slug = sorted(rendered, key=lambda r: r.post.slug)
    return sorted(by_slug, key=lambda r: r.post.publish_date, reverse=True)


def to_manifest_entry(item: RenderedPost) -> ManifestEntry:
    post = item.post
    description = post.extra.get("description")
    return ManifestEntry(
        slug=post.slug,
        source_path=post.source_path,
        title=post.title,
        publishedAt=post.publish_date.isoformat(),
        categories=list(post.categories),
        tags=list(post.tags),
        readingTime=item.reading_time,
        output_path=f"{post.slug}/index.html",
        fragment_path=f"{post.slug}/content.html",
        description=str(description) if description else None,
    )


def group_entries(
    entries: List[ManifestEntry], attribute: str
) -> List[Tuple[str, List[ManifestEntry]]]:
    groups: Dict[str, List[ManifestEntry]] = defaultdict(list)
    for entry in entries:
        for name in getattr(entry, attribute):
            groups[name].append(entry)
    return sorted(groups.items(), key=lambda item: item[0].lower())


def _partition(results):
    done, rejected = [], []
    for result in results:
        (rejected if isinstance(result, Rejection) else done).append(result)
    return done, rejected
