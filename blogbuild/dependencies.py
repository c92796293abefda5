from fastapi import Depends

from blogbuild.repos.manifest_repo import ManifestRepo
from blogbuild.security import get_settings
from blogbuild.services.posts_service import PostsService
from blogbuild.services.site_builder import SiteBuilder


def get_manifest_repo(current_settings=Depends(get_settings)):
    return ManifestRepo(current_settings.output_path)


def get_posts_service(repo=Depends(get_manifest_repo)):
    return PostsService(repo=repo)


def get_site_builder(current_settings=Depends(get_settings)):
    return SiteBuilder.from_settings(current_settings)
