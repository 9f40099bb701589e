from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    supabase_url: str = ""
    supabase_key: str = ""
    hf_api_key: str = ""

    # Fetch defaults
    robots_timeout: float = 4.0  # seconds
    fetch_timeout: float = 10.0  # seconds
    user_agent: str = "inspired2site-bot/1.0"

    # Image generation
    hf_model: str = "stabilityai/stable-diffusion-xl-base-1.0"
    image_timeout: float = 60.0  # seconds

    analyses_table: str = "analyses"

    class Config:
        # Look for .env in the repo root (two levels up from backend/inspired2site/)
        # In production env vars are injected directly, .env is optional
        _env_path = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
        env_file = _env_path if os.path.exists(_env_path) else None
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()


# ---------------------------------------------------------------------------
# Capabilities: which optional backends this process runs with
# ---------------------------------------------------------------------------

class Persistence(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class ImageBackend(str, Enum):
    EXTERNAL = "external"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Capabilities:
    persistence: Persistence = Persistence.DISABLED
    image_backend: ImageBackend = ImageBackend.FALLBACK

    @property
    def persistence_enabled(self) -> bool:
        return self.persistence is Persistence.ENABLED

    @property
    def external_images(self) -> bool:
        return self.image_backend is ImageBackend.EXTERNAL


def resolve_capabilities(settings: Settings | None = None) -> Capabilities:
    """
    Decide once, from credential presence, which optional backends are live.
    Missing credentials select the no-op / demo paths instead of failing.
    """
    settings = settings or get_settings()
    persistence = (
        Persistence.ENABLED
        if settings.supabase_url and settings.supabase_key
        else Persistence.DISABLED
    )
    image_backend = ImageBackend.EXTERNAL if settings.hf_api_key else ImageBackend.FALLBACK
    return Capabilities(persistence=persistence, image_backend=image_backend)
