import datetime
import logging
import re
from pathlib import PurePosixPath
from typing import Any, Optional, Tuple

import frontmatter
import yaml
from pydantic import ValidationError

from blogbuild.errors import (
    InvalidDateError,
    MalformedFrontMatterError,
    MissingFieldError,
)
from blogbuild.schemas.post import Post, PostFlags

logger = logging.getLogger(__name__)

FLAG_KEYS = ("mermaid", "toc")
KNOWN_KEYS = ("title", "date", "categories", "tags", "slug") + FLAG_KEYS

_SLUG_UNSAFE = re.compile(r"[^a-z0-9]+")
_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

_yaml_handler = frontmatter.YAMLHandler()


def parse_post(raw: str, source_path: str) -> Post:
    """
    Turn the raw text of one content file into a Post.

    Raises MalformedFrontMatterError when the front-matter block is missing,
    unterminated or not a YAML mapping (or no slug can be derived),
    MissingFieldError when title, date or categories are absent, and
    InvalidDateError when YAML itself cannot build the date.
    """
    fm_text, body = split_front_matter(raw, source_path)

    try:
        metadata = _yaml_handler.load(fm_text) if fm_text.strip() else {}
    except yaml.YAMLError as e:
        raise MalformedFrontMatterError(source_path, f"invalid YAML: {e}")
    except ValueError as e:
        # PyYAML builds date objects itself, so 2023-02-30 fails while loading
        raise InvalidDateError(source_path, f"invalid date: {e}")

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MalformedFrontMatterError(
            source_path, "front matter must be a mapping of key: value pairs"
        )

    title = metadata.get("title")
    if title is None or not str(title).strip():
        raise MissingFieldError(source_path, "title")
    if metadata.get("date") is None:
        raise MissingFieldError(source_path, "date")
    if metadata.get("categories") is None:
        raise MissingFieldError(source_path, "categories")

    declared_slug = metadata.get("slug")
    slug = derive_slug(str(declared_slug) if declared_slug else source_path)
    if not slug:
        slug = slugify(str(title))
    if not slug:
        raise MalformedFrontMatterError(
            source_path, "cannot derive a slug from the path or title"
        )

    try:
        flags = PostFlags.model_validate(
            {
                key: metadata[key]
                for key in FLAG_KEYS
                if metadata.get(key) is not None
            }
        )
    except ValidationError as e:
        raise MalformedFrontMatterError(
            source_path, f"invalid flag value: {e.errors()[0]['msg']}"
        )

    raw_date = metadata["date"]
    post = Post(
        slug=slug,
        source_path=source_path,
        title=str(title).strip(),
        publish_date=coerce_date(raw_date),
        raw_date=convert_date_to_string(raw_date),
        categories=normalize_list(metadata["categories"]),
        tags=normalize_tags(metadata.get("tags")),
        flags=flags,
        body=body,
        extra={k: v for k, v in metadata.items() if k not in KNOWN_KEYS},
    )
    logger.debug(f"Parsed {source_path} as slug '{slug}'")
    return post


def split_front_matter(raw: str, source_path: str) -> Tuple[str, str]:
    """Split raw text into (front matter, body) around the --- delimiter lines."""
    text = raw.lstrip("\ufeff")
    if not _yaml_handler.detect(text):
        raise MalformedFrontMatterError(source_path, "missing front-matter block")

    try:
        fm_text, body = _yaml_handler.split(text)
    except ValueError:
        raise MalformedFrontMatterError(
            source_path, "unterminated front-matter block"
        )
    return _drop_line_break(fm_text), _drop_line_break(body)


def _drop_line_break(text: str) -> str:
    # the delimiter match stops before its own line break
    if text.startswith("\r\n"):
        return text[2:]
    return text[1:] if text.startswith("\n") else text


def slugify(text: str) -> str:
    return _SLUG_UNSAFE.sub("-", text.lower()).strip("-")


def derive_slug(value: str) -> str:
    """Build a path-like slug, e.g. 'aws/Route53 Errors.md' -> 'aws/route53-errors'."""
    path = PurePosixPath(value.replace("\\", "/"))
    if path.suffix.lower() in (".md", ".markdown"):
        path = path.with_suffix("")
    parts = [slugify(part) for part in path.parts if part not in ("/", ".", "..")]
    return "/".join(part for part in parts if part)


def normalize_list(value) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set)):
        items = (str(item).strip() for item in value if item is not None)
        return tuple(item for item in items if item)
    text = str(value).strip()
    return (text,) if text else ()


def normalize_tags(value) -> Tuple[str, ...]:
    """Tags behave like a set; keep the first occurrence so output stays stable."""
    return tuple(dict.fromkeys(normalize_list(value)))


def coerce_date(value: Any) -> Optional[datetime.datetime]:
    """Best-effort conversion of a front-matter date to an aware datetime."""
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime.combine(value, datetime.time())
    elif isinstance(value, str):
        parsed = _parse_date_string(value.strip())
        if parsed is None:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def _parse_date_string(text: str) -> Optional[datetime.datetime]:
    if not text:
        return None
    try:
        return datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def convert_date_to_string(value) -> str:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return str(value)
