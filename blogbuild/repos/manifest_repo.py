import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from blogbuild.schemas.post import BuildManifest

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class ManifestRepo:
    """Reads and writes the built site: pages plus manifest.json."""

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_NAME

    def load(self) -> Optional[BuildManifest]:
        try:
            raw = self.manifest_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return BuildManifest.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Corrupt manifest at {self.manifest_path}: {e}")
            return None

    def save(self, manifest: BuildManifest) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.manifest_path.write_text(
            manifest.model_dump_json(indent=2) + "\n", encoding="utf-8"
        )
        return self.manifest_path

    def write_page(self, relative: str, html: str) -> Path:
        target = self._resolve(relative)
        if target is None:
            raise ValueError(
                f"Refusing to write {relative!r} outside {self.output_dir}"
            )
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        return target

    def read_page(self, relative: str) -> Optional[str]:
        target = self._resolve(relative)
        if target is None:
            return None
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _resolve(self, relative: str) -> Optional[Path]:
        target = (self.output_dir / relative).resolve()
        if self.output_dir.resolve() not in target.parents:
            return None
        return target
