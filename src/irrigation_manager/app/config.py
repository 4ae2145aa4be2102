"""Configuration management for irrigation-app.

Settings are kept in a TOML file in the platform config directory. The
database auth token is never written to the file; it is read from the
IRRIGATION_DB_AUTH_TOKEN environment variable.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import tomllib
import tomli_w

AUTH_TOKEN_ENV = "IRRIGATION_DB_AUTH_TOKEN"

STORE_BACKENDS = ("firebase", "memory")


def get_app_config_dir() -> Path:
    """Get the platform-specific config directory for irrigation-app.

    Returns:
        Path to the config directory for irrigation-app.
    """
    if sys.platform == "darwin" or sys.platform == "linux":
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "irrigation-manager"
        return Path.home() / ".config" / "irrigation-manager"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "irrigation-manager"
        return Path.home() / "AppData" / "Roaming" / "irrigation-manager"
    else:
        return Path.home() / ".config" / "irrigation-manager"


def get_app_config_path() -> Path:
    """Get the path to the app config.toml file.

    Returns:
        Path to config.toml
    """
    return get_app_config_dir() / "config.toml"


@dataclass
class AppConfig:
    """Configuration for irrigation-app.

    Attributes:
        store_backend: "firebase" for the realtime database, "memory" for
            a throwaway in-process store
        database_url: Base URL of the realtime database
        timeout_seconds: Store request timeout
        user_id: Owner of the sections shown in the app
        tick_interval_seconds: Interval between manual timer ticks
        log_dir: Directory for session logs
    """

    store_backend: str = "firebase"
    database_url: str = ""
    timeout_seconds: float = 10.0

    user_id: str = ""
    tick_interval_seconds: float = 1.0
    log_dir: Path = field(default_factory=lambda: get_app_config_dir() / "logs")

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppConfig":
        """Load configuration from TOML file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            AppConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the store backend is unknown
        """
        if path is None:
            path = get_app_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()

        if "store" in data:
            store_data = data["store"]
            config.store_backend = store_data.get("backend", config.store_backend)
            config.database_url = store_data.get("database_url", config.database_url)
            config.timeout_seconds = float(store_data.get("timeout_seconds", config.timeout_seconds))

        if "app" in data:
            app_data = data["app"]
            config.user_id = app_data.get("user_id", config.user_id)
            config.tick_interval_seconds = float(
                app_data.get("tick_interval_seconds", config.tick_interval_seconds)
            )
            if "log_dir" in app_data:
                config.log_dir = Path(app_data["log_dir"]).expanduser()

        if config.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend '{config.store_backend}' "
                f"(expected one of: {', '.join(STORE_BACKENDS)})"
            )

        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_app_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "store": {
                "backend": self.store_backend,
                "database_url": self.database_url,
                "timeout_seconds": self.timeout_seconds,
            },
            "app": {
                "user_id": self.user_id,
                "tick_interval_seconds": self.tick_interval_seconds,
                "log_dir": str(self.log_dir),
            },
        }

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    @property
    def auth_token(self) -> Optional[str]:
        """Database auth token from the environment, if set."""
        return os.environ.get(AUTH_TOKEN_ENV) or None


def ensure_app_config_exists() -> AppConfig:
    """Ensure config file exists, creating default if needed.

    Returns:
        AppConfig instance
    """
    config_path = get_app_config_path()

    if config_path.exists():
        return AppConfig.load(config_path)

    config = AppConfig()
    config.save(config_path)
    return config
