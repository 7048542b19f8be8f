"""Configuration management for extasset.

Handles loading, saving, and validating TOML configuration stored in:
- macOS: ~/.config/extasset/config.toml
- Linux: ~/.config/extasset/config.toml (XDG_CONFIG_HOME)
- Windows: %APPDATA%\\extasset\\config.toml
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import tomllib
import tomli_w

from extasset import __version__
from extasset.models import AssetDefinition

# Keys settable through ``config set``; assets are edited in the file
SCALAR_KEYS = (
    "concurrency",
    "disk",
    "timeout",
    "user_agent",
    "metadata_path",
    "local_root",
    "local_base_url",
    "r2_bucket",
    "r2_endpoint_url",
    "r2_region",
    "r2_public_url",
    "r2_cache_control",
    "log_dir",
)


class ConfigError(ValueError):
    """Invalid extasset configuration."""

    pass


@dataclass
class ExtassetConfig:
    """Configuration for extasset.

    Attributes:
        concurrency: Maximum simultaneous fetches per pass
        disk: Blob store backend identifier (local, r2, memory)
        timeout: Per-request HTTP timeout in seconds
        user_agent: User-Agent sent to asset sources
        metadata_path: SQLite database holding asset records
        local_root: Directory for the local blob store
        local_base_url: URL prefix under which local_root is served
        r2_bucket: Cloudflare R2 bucket name
        r2_endpoint_url: R2 endpoint URL
        r2_region: R2 region (usually "auto")
        r2_public_url: Public domain serving the bucket
        r2_cache_control: Cache-Control header for uploaded objects
        log_dir: Directory for extasset.log
        assets: Asset definitions keyed by name
    """

    concurrency: int = 5
    disk: str = "local"

    # HTTP
    timeout: float = 30.0
    user_agent: str = f"extasset/{__version__}"

    # Metadata
    metadata_path: Path = field(default_factory=lambda: get_config_dir() / "metadata.db")

    # Local disk
    local_root: Path = field(default_factory=lambda: get_config_dir() / "assets")
    local_base_url: str = "/assets"

    # Cloudflare R2
    r2_bucket: str = "extasset"
    r2_endpoint_url: str = ""
    r2_region: str = "auto"
    r2_public_url: str = ""
    r2_cache_control: str = "public, max-age=31536000, immutable"

    log_dir: Path = field(default_factory=lambda: get_config_dir() / "logs")

    assets: Dict[str, AssetDefinition] = field(default_factory=dict)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ExtassetConfig":
        """Load configuration from TOML file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            ExtassetConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigError: If the file contains invalid values
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {path}: {e}")

        config = cls()

        if "extasset" in data:
            section = data["extasset"]
            config.concurrency = section.get("concurrency", config.concurrency)
            config.disk = section.get("disk", config.disk)

        if "http" in data:
            config.timeout = data["http"].get("timeout", config.timeout)
            config.user_agent = data["http"].get("user_agent", config.user_agent)

        if "metadata" in data:
            metadata_path = data["metadata"].get("path")
            if metadata_path:
                config.metadata_path = Path(metadata_path).expanduser()

        storage = data.get("storage", {})
        if "local" in storage:
            local = storage["local"]
            if local.get("root"):
                config.local_root = Path(local["root"]).expanduser()
            config.local_base_url = local.get("base_url", config.local_base_url)

        if "r2" in storage:
            r2 = storage["r2"]
            config.r2_bucket = r2.get("bucket", config.r2_bucket)
            config.r2_endpoint_url = r2.get("endpoint_url", config.r2_endpoint_url)
            config.r2_region = r2.get("region", config.r2_region)
            config.r2_public_url = r2.get("public_url", config.r2_public_url)
            config.r2_cache_control = r2.get("cache_control", config.r2_cache_control)

        if "logging" in data:
            log_dir = data["logging"].get("dir")
            if log_dir:
                config.log_dir = Path(log_dir).expanduser()

        config.assets = parse_assets(data.get("assets", {}))

        config.apply_env_overrides()
        config.validate()
        return config

    def apply_env_overrides(self) -> None:
        """Override values from environment variables (they take precedence)."""
        env_disk = os.environ.get("EXTASSET_DISK")
        if env_disk:
            self.disk = env_disk

        env_concurrency = os.environ.get("EXTASSET_CONCURRENCY")
        if env_concurrency:
            try:
                self.concurrency = int(env_concurrency)
            except ValueError:
                raise ConfigError(f"EXTASSET_CONCURRENCY must be an integer, got {env_concurrency!r}")

        for attr in ("r2_bucket", "r2_endpoint_url", "r2_region", "r2_public_url"):
            value = os.environ.get(get_env_var_name(attr))
            if value:
                setattr(self, attr, value)

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If a value is out of range
        """
        if not isinstance(self.concurrency, int) or isinstance(self.concurrency, bool) or self.concurrency < 1:
            raise ConfigError(f"concurrency must be a positive integer, got {self.concurrency!r}")

        if not isinstance(self.timeout, (int, float)) or self.timeout <= 0:
            raise ConfigError(f"timeout must be a positive number, got {self.timeout!r}")

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        assets: Dict[str, Dict[str, Any]] = {}
        for name, asset in self.assets.items():
            entry: Dict[str, Any] = {"source": asset.source_url}
            if asset.check_interval_minutes is not None:
                entry["check_interval"] = asset.check_interval_minutes
            assets[name] = entry

        data = {
            "extasset": {"concurrency": self.concurrency, "disk": self.disk},
            "http": {"timeout": self.timeout, "user_agent": self.user_agent},
            "metadata": {"path": str(self.metadata_path)},
            "storage": {
                "local": {
                    "root": str(self.local_root),
                    "base_url": self.local_base_url,
                },
                "r2": {
                    "bucket": self.r2_bucket,
                    "endpoint_url": self.r2_endpoint_url,
                    "region": self.r2_region,
                    "public_url": self.r2_public_url,
                    "cache_control": self.r2_cache_control,
                },
            },
            "logging": {"dir": str(self.log_dir)},
            "assets": assets,
        }

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def set(self, key: str, value: str) -> None:
        """Set a scalar configuration value by key.

        Args:
            key: Configuration key
            value: Configuration value as text

        Raises:
            ConfigError: If the key is unknown or the value has the wrong type
        """
        if key not in SCALAR_KEYS:
            raise ConfigError(f"Invalid config key: {key}")

        # Try to preserve type
        current = getattr(self, key)
        try:
            if isinstance(current, bool):
                new_value: Any = value.lower() in ("true", "1", "yes")
            elif isinstance(current, int):
                new_value = int(value)
            elif isinstance(current, float):
                new_value = float(value)
            elif isinstance(current, Path):
                new_value = Path(value).expanduser()
            else:
                new_value = value
        except ValueError:
            raise ConfigError(f"Invalid value for {key}: {value!r}")

        setattr(self, key, new_value)
        self.validate()


def parse_assets(raw: Dict[str, Any]) -> Dict[str, AssetDefinition]:
    """Build asset definitions from the ``[assets]`` TOML table.

    Args:
        raw: Mapping of asset name to ``{source, check_interval}`` tables

    Returns:
        AssetDefinitions keyed by name, in file order

    Raises:
        ConfigError: If an entry is malformed
    """
    if not isinstance(raw, dict):
        raise ConfigError("[assets] must be a table of asset entries")

    assets: Dict[str, AssetDefinition] = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ConfigError(f"Asset {name!r} must be a table")

        source = entry.get("source")
        if not source or not isinstance(source, str):
            raise ConfigError(f"Asset {name!r} has no source URL")

        interval = entry.get("check_interval")
        if interval is not None and (
            not isinstance(interval, int) or isinstance(interval, bool) or interval <= 0
        ):
            raise ConfigError(
                f"Asset {name!r} check_interval must be a positive integer (minutes), got {interval!r}"
            )

        assets[name] = AssetDefinition(name=name, source_url=source, check_interval_minutes=interval)

    return assets


def get_config_dir() -> Path:
    """Get the platform-specific config directory.

    Returns:
        Path to the config directory for extasset.
    """
    if sys.platform == "darwin" or sys.platform == "linux":
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "extasset"
        return Path.home() / ".config" / "extasset"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "extasset"
        return Path.home() / "AppData" / "Roaming" / "extasset"
    else:
        return Path.home() / ".config" / "extasset"


def get_config_path() -> Path:
    """Get the path to the config.toml file.

    Returns:
        Path to config.toml
    """
    return get_config_dir() / "config.toml"


def ensure_config_exists(path: Optional[Path] = None) -> ExtassetConfig:
    """Load the config file, creating a default one if it is missing.

    Args:
        path: Path to config file (defaults to standard location)

    Returns:
        ExtassetConfig instance
    """
    config_path = path or get_config_path()

    if config_path.exists():
        return ExtassetConfig.load(config_path)

    config = ExtassetConfig()
    config.save(config_path)
    return config


def get_env_var_name(key: str) -> str:
    """Get the environment variable name for a config key.

    Args:
        key: Configuration key

    Returns:
        Environment variable name
    """
    return f"EXTASSET_{key.upper().replace('.', '_')}"
