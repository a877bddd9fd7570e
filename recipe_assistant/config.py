from enum import Enum
import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler


PLACEHOLDER_API_KEYS = frozenset({"your_openai_api_key_here", "sk-..."})


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class FallbackStrategy(Enum):
    placeholder = "placeholder"
    line_split = "line_split"


class RecipesBackend(Enum):
    supabase = "supabase"
    sql = "sql"


class Config(BaseSettings):
    env: Env = Env.local
    log_level: str = "INFO"
    html_dir: Path = Path(__file__).resolve().parent.parent / "recipe_web" / "html"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1/"
    completion_model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    max_tokens: int = 1000
    request_timeout: float = 60
    fallback_strategy: FallbackStrategy = FallbackStrategy.placeholder

    supabase_url: str = ""
    supabase_anon_key: str = ""
    recipes_backend: RecipesBackend = RecipesBackend.supabase
    db_url: str = "sqlite+aiosqlite:///recipes.db"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def auth_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def api_key_usable(key: str | None) -> bool:
    if key is None:
        return False
    key = key.strip()
    return bool(key) and key not in PLACEHOLDER_API_KEYS


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
    for noisy in ("httpx", "httpcore", "hpack"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
