import logging
import sys

from blogbuild.errors import ContentRootError
from blogbuild.services.site_builder import build_site
from blogbuild.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    try:
        manifest = build_site(settings)
    except ContentRootError as e:
        logger.error(f"Build failed: {e}")
        sys.exit(1)

    logger.info(
        f"Build completed: {manifest.rendered_count} rendered, "
        f"{manifest.skipped_count} skipped"
    )
    for rejection in manifest.rejected:
        logger.info(
            f"  skipped {rejection.source_path} [{rejection.error}] {rejection.reason}"
        )
