"""Configuration management for heypanel.

Loads configuration from ~/.config/heypanel/config.toml.
Priority chain: CLI flags > env vars > config file > built-in defaults.
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .paths import get_config_dir

logger = logging.getLogger(__name__)

ENGINE_VARIANTS = ("simplified", "structured")

DEFAULT_CONFIG = """\
# heypanel configuration

[api]
# Remote JSON API and binary upload endpoint
base_url = "https://api.heygen.com"
upload_url = "https://upload.heygen.com/v1/asset"

# Per-request timeout in seconds
timeout = 60.0

[library]
# How long a discovered library stays valid before it is fetched again
cache_ttl_minutes = 30

# Maximum number of assets returned by discovery
max_results = 50

# Assets whose name contains one of these (case-insensitive) are listed first
priority_keywords = []

[generation]
# Default voice ID (use `heypanel voices` to list)
voice = "d2499bfa8e0d471d8a623377958f75f0"

# Speaking speed multiplier
speed = 1.25

# Engine: "simplified" (Avatar IV) or "structured" (Avatar III)
engine = "simplified"

# Orientation for the simplified engine: "portrait" or "landscape"
orientation = "portrait"

motion_prompt = ""

# The API key is never stored in this file. Use `heypanel unlock KEY --remember`.
"""


class ConfigError(ValueError):
    """Raised when a configuration value is present but invalid."""


@dataclass(frozen=True)
class APIConfig:
    """Remote endpoint configuration."""

    base_url: str = "https://api.heygen.com"
    upload_url: str = "https://upload.heygen.com/v1/asset"
    timeout: float = 60.0


@dataclass(frozen=True)
class LibraryConfig:
    """Library discovery configuration."""

    cache_ttl_minutes: float = 30
    max_results: int = 50
    priority_keywords: tuple[str, ...] = ()

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_minutes * 60


@dataclass(frozen=True)
class GenerationConfig:
    """Defaults applied to new generation jobs."""

    voice: str = "d2499bfa8e0d471d8a623377958f75f0"
    speed: float = 1.25
    engine: str = "simplified"
    orientation: str = "portrait"
    motion_prompt: str = ""


@dataclass(frozen=True)
class PanelConfig:
    """Top-level heypanel configuration."""

    api: APIConfig = field(default_factory=APIConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)


_cached_config: PanelConfig | None = None


def get_config_path() -> Path:
    """Return the path of the config file."""
    return get_config_dir() / "config.toml"


def generate_config(path: Path | None = None) -> Path:
    """Write the default config file and return its path."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def parse_config(data: dict) -> PanelConfig:
    """Build a validated PanelConfig from parsed TOML data.

    Environment variables override file values.

    Args:
        data: Parsed TOML document

    Returns:
        Validated configuration

    Raises:
        ConfigError: If a value is out of range or of the wrong type
    """
    api = data.get("api", {})
    library = data.get("library", {})
    generation = data.get("generation", {})
    defaults = PanelConfig()

    try:
        timeout = float(os.getenv("HEYPANEL_TIMEOUT", api.get("timeout", defaults.api.timeout)))
        ttl = float(library.get("cache_ttl_minutes", defaults.library.cache_ttl_minutes))
        max_results = int(library.get("max_results", defaults.library.max_results))
        speed = float(generation.get("speed", defaults.generation.speed))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric config value: {e}") from e

    keywords = library.get("priority_keywords", [])
    if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
        raise ConfigError("library.priority_keywords must be a list of strings")

    engine = os.getenv("HEYPANEL_ENGINE", generation.get("engine", defaults.generation.engine))

    problems = []
    if timeout <= 0:
        problems.append("api.timeout must be positive")
    if ttl <= 0:
        problems.append("library.cache_ttl_minutes must be positive")
    if max_results <= 0:
        problems.append("library.max_results must be positive")
    if engine not in ENGINE_VARIANTS:
        problems.append(f"generation.engine must be one of {', '.join(ENGINE_VARIANTS)}")
    if problems:
        raise ConfigError("; ".join(problems))

    return PanelConfig(
        api=APIConfig(
            base_url=os.getenv("HEYPANEL_BASE_URL", api.get("base_url", defaults.api.base_url)).rstrip("/"),
            upload_url=os.getenv("HEYPANEL_UPLOAD_URL", api.get("upload_url", defaults.api.upload_url)),
            timeout=timeout,
        ),
        library=LibraryConfig(
            cache_ttl_minutes=ttl,
            max_results=max_results,
            priority_keywords=tuple(k for k in keywords if k.strip()),
        ),
        generation=GenerationConfig(
            voice=os.getenv("HEYPANEL_VOICE", generation.get("voice", defaults.generation.voice)),
            speed=speed,
            engine=engine,
            orientation=generation.get("orientation", defaults.generation.orientation),
            motion_prompt=generation.get("motion_prompt", defaults.generation.motion_prompt),
        ),
    )


def load_config(path: Path | None = None) -> PanelConfig:
    """Load configuration from the config file with env var overrides.

    On first run the default config file is generated and its values used.

    Args:
        path: Explicit config file location (defaults to the XDG config dir)

    Returns:
        Loaded and validated PanelConfig.

    Raises:
        ConfigError: If the file is not valid TOML or holds invalid values.
    """
    global _cached_config
    if path is None and _cached_config is not None:
        return _cached_config

    config_path = path or get_config_path()
    if not config_path.exists():
        generate_config(config_path)
        logger.info(f"No config found. Generated {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Could not parse {config_path}: {e}") from e

    config = parse_config(data)
    if path is None:
        _cached_config = config
    return config
