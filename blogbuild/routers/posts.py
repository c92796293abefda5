import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from blogbuild import dependencies as deps
from blogbuild.schemas.blog import PostDetail, PostSummary, RejectedPost
from blogbuild.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts", response_model=List[PostSummary])
def list_posts(service: PostsService = Depends(deps.get_posts_service)):
    """Get all rendered posts, newest first."""
    try:
        return service.list_posts()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug:path}", response_model=PostDetail)
def get_post(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single rendered post by slug."""
    try:
        post = service.get_post(slug)
        if not post:
            raise HTTPException(status_code=404, detail="Post not found")
        return post
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.get("/rejected", response_model=List[RejectedPost])
def list_rejected(service: PostsService = Depends(deps.get_posts_service)):
    """Get the files skipped by the last build and why."""
    try:
        return service.list_rejected()
    except Exception as e:
        logger.error(f"Unexpected error listing rejected posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve rejections")
