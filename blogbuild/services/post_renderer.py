import html
import logging
import math
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

import markdown
from jinja2 import Environment, FileSystemLoader, select_autoescape

from blogbuild.errors import RenderError
from blogbuild.schemas.post import Post, RenderedPost
from blogbuild.services.content_parser import slugify

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
BASE_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]

# fenced_code only honours fences at column 0 closed by the identical marker
FENCE_OPEN = re.compile(r"^(?P<marker>`{3,}|~{3,})[ ]*(?P<info>[^`]*?)\s*$")
MERMAID_PLACEHOLDER = "BLOGBUILDMERMAID{}END"


@dataclass(frozen=True)
class Fence:
    start: int  # line index of the opening marker
    end: int  # line index of the closing marker
    info: str

    @property
    def language(self) -> str:
        if not self.info:
            return ""
        return self.info.split()[0].lstrip(".{").rstrip("}").lower()


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )
    env.filters["slugify"] = slugify
    return env


class PostRenderer:
    """
    Render a validated Post to a standalone HTML page.

    Every call builds a fresh markdown.Markdown instance, so the table of
    contents is recomputed from the headings of the post being rendered.
    """

    def __init__(self, site_title: str = "", site_root: str = "/"):
        self.site_title = site_title
        self.site_root = site_root

    def render(self, post: Post) -> RenderedPost:
        lines = post.body.splitlines(keepends=True)
        fences = scan_fences(lines, post.source_path, slug=post.slug)

        mermaid_blocks: List[str] = []
        source = post.body
        if post.flags.mermaid:
            source, mermaid_blocks = extract_mermaid(lines, fences)

        body_html, toc_html = self._convert(source, post)
        for i, block in enumerate(mermaid_blocks):
            body_html = body_html.replace(
                f"<p>{MERMAID_PLACEHOLDER.format(i)}</p>",
                f'<pre class="mermaid">{html.escape(block, quote=False)}</pre>',
            )

        logger.debug(f"Rendered {post.slug} with {len(mermaid_blocks)} diagrams")
        reading_time = calculate_reading_time(post.body)
        page = get_environment().get_template("post.html").render(
            post=post,
            body_html=body_html,
            toc_html=toc_html,
            reading_time=reading_time,
            description=post.extra.get("description"),
            site_title=self.site_title,
            site_root=self.site_root,
        )
        return RenderedPost(
            post=post,
            html=page,
            body_html=body_html,
            toc_html=toc_html,
            reading_time=reading_time,
        )

    def _convert(self, source: str, post: Post) -> Tuple[str, Optional[str]]:
        extensions = list(BASE_EXTENSIONS)
        if post.flags.toc:
            extensions.append("toc")

        try:
            md = markdown.Markdown(extensions=extensions, output_format="html")
            body_html = md.convert(source)
        except Exception as e:
            raise RenderError(
                post.source_path, f"markdown conversion failed: {e}", slug=post.slug
            ) from e

        toc_html = None
        if post.flags.toc and getattr(md, "toc_tokens", None):
            toc_html = md.toc
        return body_html, toc_html


def render_post(post: Post, site_title: str = "", site_root: str = "/") -> RenderedPost:
    return PostRenderer(site_title=site_title, site_root=site_root).render(post)


def scan_fences(
    lines: List[str], source_path: str = "", slug: Optional[str] = None
) -> List[Fence]:
    """Locate fenced code blocks. Raises RenderError on an unterminated fence."""
    fences: List[Fence] = []
    opened: Optional[Tuple[int, str, str]] = None

    for i, line in enumerate(lines):
        if opened is None:
            match = FENCE_OPEN.match(line.rstrip("\r\n"))
            if match:
                opened = (i, match.group("marker"), match.group("info"))
            continue

        start, marker, info = opened
        if line.rstrip("\r\n").rstrip(" ") == marker:
            fences.append(Fence(start=start, end=i, info=info))
            opened = None

    if opened is not None:
        raise RenderError(
            source_path,
            f"unterminated code fence opened on line {opened[0] + 1}",
            slug=slug,
        )
    return fences


def extract_mermaid(lines: List[str], fences: List[Fence]) -> Tuple[str, List[str]]:
    """Swap mermaid fences for placeholders; returns (new source, diagram texts)."""
    out: List[str] = []
    blocks: List[str] = []
    cursor = 0

    for fence in fences:
        if fence.language != "mermaid":
            continue
        out.extend(lines[cursor : fence.start])
        blocks.append("".join(lines[fence.start + 1 : fence.end]).rstrip("\r\n"))
        out.append(f"\n{MERMAID_PLACEHOLDER.format(len(blocks) - 1)}\n\n")
        cursor = fence.end + 1

    out.extend(lines[cursor:])
    return "".join(out), blocks


def calculate_reading_time(text: str) -> str:
    words = text.split()
    minutes = math.ceil(len(words) / 200) or 1
    return f"{minutes} min"
