"""
Settings loaded from the environment and an optional .env file.
"""

import logging
import os
import pathlib
from dataclasses import dataclass

from dotenv import load_dotenv

from .chunking import DEFAULT_MAX_CHUNK_SIZE
from .errors import ConfigurationError
from .srt_utils import DEFAULT_OUTPUT_SUFFIX

logger = logging.getLogger("romanizer")

# Project root (parent of the src directory)
PROJECT_ROOT = pathlib.Path(__file__).parent.parent.parent


@dataclass
class Settings:
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.1
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    request_timeout: float = 120.0
    max_tool_rounds: int = 8

    def __post_init__(self) -> None:
        if self.max_chunk_size < 1:
            raise ConfigurationError(f"max_chunk_size must be >= 1, got {self.max_chunk_size}")
        if self.request_timeout <= 0:
            raise ConfigurationError(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.max_tool_rounds < 0:
            raise ConfigurationError(f"max_tool_rounds must be >= 0, got {self.max_tool_rounds}")


def _env(name: str, default, cast=str):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"Invalid value for {name}: {raw!r}") from None


def load_settings(env_file: str | os.PathLike | None = None) -> Settings:
    """Load .env (explicit file, project root, or current directory) and build settings."""
    if env_file is not None:
        load_dotenv(env_file)
    elif (PROJECT_ROOT / ".env").exists():
        load_dotenv(PROJECT_ROOT / ".env")
    else:
        load_dotenv()

    settings = Settings(
        openai_api_key=_env("OPENAI_API_KEY", None),
        openai_base_url=_env("OPENAI_BASE_URL", None),
        model=_env("ROMANIZER_MODEL", "gpt-4o-mini"),
        temperature=_env("ROMANIZER_TEMPERATURE", 0.1, float),
        max_chunk_size=_env("ROMANIZER_MAX_CHUNK_SIZE", DEFAULT_MAX_CHUNK_SIZE, int),
        output_suffix=_env("ROMANIZER_OUTPUT_SUFFIX", DEFAULT_OUTPUT_SUFFIX),
        request_timeout=_env("ROMANIZER_REQUEST_TIMEOUT", 120.0, float),
        max_tool_rounds=_env("ROMANIZER_MAX_TOOL_ROUNDS", 8, int),
    )
    logger.debug(f"Loaded settings: model={settings.model}, max_chunk_size={settings.max_chunk_size}")
    return settings
