from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Content
    CONTENT_DIR: str = "content/posts"
    OUTPUT_DIR: str = "public"

    # Site
    SITE_TITLE: str = "AWS Exceptions Explained"
    BASE_URL: str = "/"

    # Validation
    REQUIRE_CATEGORIES: bool = True
    REQUIRE_TAGS: bool = False

    # Build
    MAX_WORKERS: int = 4

    # Logging
    LOG_LEVEL: str = "INFO"

    # Our own API Key
    BLOGBUILD_API_KEY: str = ""

    @property
    def content_path(self) -> Path:
        return Path(self.CONTENT_DIR)

    @property
    def output_path(self) -> Path:
        return Path(self.OUTPUT_DIR)

    @property
    def site_root(self) -> str:
        return self.BASE_URL if self.BASE_URL.endswith("/") else f"{self.BASE_URL}/"


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
