import logging

from fastapi import Depends, FastAPI

from blogbuild.routers import build, posts
from blogbuild.security import get_api_key
from blogbuild.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="blogbuild API", description="Markdown post build and preview")

app.include_router(posts.router)
app.include_router(build.router, dependencies=[Depends(get_api_key)])


@app.get("/")
async def root():
    return {"message": "blogbuild API is running"}
