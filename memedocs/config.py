"""
Configuration management for memedocs.

Handles loading and saving user configuration from:
- XDG config directory: ~/.config/memedocs/config.json
- Fallback: ~/.memedocs/config.json
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class AssetsConfig:
    """Where the documents come from."""
    path: Optional[str] = None
    root_id: str = "Memes"
    title: str = "Memes"


@dataclass
class RecentsConfig:
    """Recently opened documents."""
    prefs_path: Optional[str] = None
    capacity: int = 64


@dataclass
class StreamConfig:
    """Content streaming."""
    chunk_size: int = 8192


@dataclass
class ServerConfig:
    """Web server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class CLIConfig:
    """CLI default options."""
    verbose: bool = False
    color: bool = True
    search_limit: int = 50


@dataclass
class MemedocsConfig:
    """Main memedocs configuration."""
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    recents: RecentsConfig = field(default_factory=RecentsConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "assets": asdict(self.assets),
            "recents": asdict(self.recents),
            "stream": asdict(self.stream),
            "server": asdict(self.server),
            "cli": asdict(self.cli),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MemedocsConfig':
        """Create from dictionary, ignoring unknown keys."""
        return cls(
            assets=_section(AssetsConfig, data.get("assets", {})),
            recents=_section(RecentsConfig, data.get("recents", {})),
            stream=_section(StreamConfig, data.get("stream", {})),
            server=_section(ServerConfig, data.get("server", {})),
            cli=_section(CLIConfig, data.get("cli", {})),
        )


def _section(section_cls, values: Dict[str, Any]):
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in (values or {}).items() if k in known})


def get_config_path() -> Path:
    """
    Get configuration file path.

    Follows XDG Base Directory specification:
    1. ~/.config/memedocs/config.json
    2. Fallback: ~/.memedocs/config.json

    Returns:
        Path to config file
    """
    xdg_config_home = Path.home() / ".config"
    if xdg_config_home.exists():
        config_dir = xdg_config_home / "memedocs"
    else:
        config_dir = Path.home() / ".memedocs"

    return config_dir / "config.json"


def get_prefs_path(config: MemedocsConfig) -> Path:
    """
    Get the preferences file used to persist recents.

    Defaults to prefs.json next to the config file.
    """
    if config.recents.prefs_path:
        return Path(config.recents.prefs_path).expanduser()
    return get_config_path().parent / "prefs.json"


def load_config() -> MemedocsConfig:
    """
    Load configuration from file.

    Returns:
        MemedocsConfig instance with loaded values or defaults
    """
    config_path = get_config_path()

    if not config_path.exists():
        return MemedocsConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        return MemedocsConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}. Using default configuration")
        return MemedocsConfig()


def save_config(config: MemedocsConfig) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save

    Returns:
        Path the configuration was written to
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.debug(f"Configuration saved to {config_path}")
    return config_path


def ensure_config_exists() -> Path:
    """
    Ensure configuration file exists, creating with defaults if not.

    Returns:
        Path to config file
    """
    config_path = get_config_path()

    if not config_path.exists():
        save_config(MemedocsConfig())
        logger.info(f"Created default configuration at {config_path}")

    return config_path


def update_config(
    # Asset settings
    assets_path: Optional[str] = None,
    root_id: Optional[str] = None,
    title: Optional[str] = None,
    # Recents settings
    prefs_path: Optional[str] = None,
    recents_capacity: Optional[int] = None,
    # Stream settings
    chunk_size: Optional[int] = None,
    # Server settings
    server_host: Optional[str] = None,
    server_port: Optional[int] = None,
    # CLI settings
    cli_verbose: Optional[bool] = None,
    cli_color: Optional[bool] = None,
    cli_search_limit: Optional[int] = None,
) -> MemedocsConfig:
    """
    Update configuration.

    Only updates provided values, leaving others unchanged.
    """
    config = load_config()

    if assets_path is not None:
        config.assets.path = assets_path
    if root_id is not None:
        config.assets.root_id = root_id
    if title is not None:
        config.assets.title = title

    if prefs_path is not None:
        config.recents.prefs_path = prefs_path
    if recents_capacity is not None:
        config.recents.capacity = recents_capacity

    if chunk_size is not None:
        config.stream.chunk_size = chunk_size

    if server_host is not None:
        config.server.host = server_host
    if server_port is not None:
        config.server.port = server_port

    if cli_verbose is not None:
        config.cli.verbose = cli_verbose
    if cli_color is not None:
        config.cli.color = cli_color
    if cli_search_limit is not None:
        config.cli.search_limit = cli_search_limit

    save_config(config)
    return config
