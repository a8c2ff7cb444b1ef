import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from src.infrastructure.github_client import DEFAULT_API_URL


class Settings(BaseModel):
    """
    Runtime settings read from the environment (and a .env file, loaded by main).
    """
    model_config = ConfigDict(frozen=True)

    github_token: Optional[str] = Field(default=None, description="Bearer token; absent means sample data")
    github_api_url: str = DEFAULT_API_URL
    host: str = "0.0.0.0"
    port: int = Field(default=8080, gt=0, lt=65536)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_api_url=os.getenv("GITHUB_API_URL", DEFAULT_API_URL),
            host=os.getenv("HOST", "0.0.0.0"),
            port=os.getenv("PORT", "8080"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
