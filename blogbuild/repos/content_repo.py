import logging
from pathlib import Path
from typing import List

from blogbuild.errors import ContentRootError, PostError

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")


class FileContentRepo:
    def __init__(self, root):
        self.root = Path(root)

    def discover(self) -> List[str]:
        """Relative posix paths of every Markdown file under the root, sorted."""
        if not self.root.is_dir():
            raise ContentRootError(str(self.root), "not a readable directory")
        try:
            paths = [
                path.relative_to(self.root).as_posix()
                for path in self.root.rglob("*")
                if path.is_file()
                and path.suffix.lower() in MARKDOWN_SUFFIXES
                and not _is_hidden(path.relative_to(self.root))
            ]
        except OSError as e:
            raise ContentRootError(str(self.root), str(e)) from e

        logger.debug(f"Discovered {len(paths)} content files under {self.root}")
        return sorted(paths)

    def read(self, source_path: str) -> str:
        try:
            return (self.root / source_path).read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise PostError(source_path, "file is not valid UTF-8")
        except OSError as e:
            raise PostError(source_path, f"cannot read file: {e.strerror or e}")


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith((".", "_drafts")) for part in relative.parts)
