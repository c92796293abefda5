import logging

from fastapi import APIRouter, Depends, HTTPException

from blogbuild import dependencies as deps
from blogbuild.errors import ContentRootError
from blogbuild.schemas.blog import BuildResult, RejectedPost
from blogbuild.services.site_builder import SiteBuilder

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/build", response_model=BuildResult)
def build_site(builder: SiteBuilder = Depends(deps.get_site_builder)):
    """Rebuild the whole site from the content directory."""
    try:
        manifest = builder.build()
    except ContentRootError as e:
        logger.error(f"Build aborted: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error during build: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Build failed")

    return BuildResult(
        rendered=manifest.rendered_count,
        skipped=manifest.skipped_count,
        rejected=[RejectedPost(**r.model_dump()) for r in manifest.rejected],
    )
