"""
Configuration Loader for the app launcher

Reads from config.json and provides a simple interface for accessing settings.
Defaults to sensible values if config.json is missing.

Usage:
    from launcher.config import get_config
    config = get_config()
    schemes = config.get("delivery.deep_link_schemes")
"""

# ============================================================================
# 1) IMPORTS
# ============================================================================
import copy
import json
import os
import logging
import hashlib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

# ============================================================================
# 2) MODULE LOGGER
# ============================================================================
logger = logging.getLogger(__name__)

load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)

# ============================================================================
# 3) CONSTANTS
# ============================================================================
CONFIG_ENV_VAR = "LAUNCHER_CONFIG"
DEFAULT_CONFIG_PATH = "config.json"

DEFAULT_URL_CHOOSER_TITLE = "Choose an application"
DEFAULT_BANK_CHOOSER_TITLE = "Choose a banking application"
DEFAULT_TEXT_CHOOSER_TITLE = "Choose an application"

# Order matters: earlier schemes are tried first.
DEEP_LINK_SCHEMES = ["vietqr", "napas", "tpbank", "bank", "payment"]


# ============================================================================
# 4) CONFIG WRAPPER (DOT-NOTATION ACCESS)
# ============================================================================
class Config:
    """Simple config wrapper with dot-notation access."""

    def __init__(self, data: dict):
        self._data = data
        self._hash = config_hash(self._data)

    # 4.1) Dot-notation getter
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation.

        Examples:
            config.get("delivery.data_uri")
            config.get("host.apps")
            config.get("nonexistent.key", "default_value")
        """
        keys = key.split(".")
        value = self._data

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    # 4.2) Dict-style getter
    def __getitem__(self, key: str) -> Any:
        """Allow dict-style access."""
        return self.get(key)

    # 4.3) Config hash
    @property
    def hash(self) -> str:
        return self._hash


# ============================================================================
# 5) DEFAULT CONFIGURATION (FALLBACK)
# ============================================================================
_DEFAULT_CONFIG = {
    "system": {
        "log_level": "INFO",
    },
    "chooser": {
        "url_title": DEFAULT_URL_CHOOSER_TITLE,
        "bank_title": DEFAULT_BANK_CHOOSER_TITLE,
        "text_title": DEFAULT_TEXT_CHOOSER_TITLE,
    },
    "delivery": {
        "deep_link_schemes": list(DEEP_LINK_SCHEMES),
        "deep_link_template": "{scheme}://transfer?qr={qr}",
        "data_uri": "bankqr://data?qr={qr}",
        "content_uri": "content://qr?data={qr}",
    },
    "host": {
        "extra_env_prefix": "LAUNCH_EXTRA_",
        "apps": {
            "msedge": {
                "launch": "msedge.exe",
                "display": "Microsoft Edge",
                "schemes": ["http", "https", "microsoft-edge"],
            },
            "chrome": {
                "launch": "chrome.exe",
                "display": "Google Chrome",
                "schemes": ["http", "https"],
            },
            "firefox": {
                "launch": "firefox.exe",
                "display": "Firefox",
                "schemes": ["http", "https"],
            },
            "notepad": {
                "launch": "notepad.exe",
                "display": "Notepad",
                "schemes": [],
            },
        },
    },
    "server": {
        "host": "127.0.0.1",
        "port": 8765,
    },
}

# ============================================================================
# 6) CONFIG SINGLETON
# ============================================================================
_config_instance: Optional[Config] = None


# ============================================================================
# 7) LOAD / GET CONFIG
# ============================================================================
def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from JSON file.

    Falls back to defaults if file not found or on error.

    Args:
        config_path: Path to config.json (defaults to $LAUNCHER_CONFIG)

    Returns:
        Config instance
    """
    global _config_instance

    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)

    config_data = copy.deepcopy(_DEFAULT_CONFIG)

    if os.path.exists(config_path):
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)
            # Deep merge user config over defaults
            _merge_dicts(config_data, user_config)
            logger.info(f"[Config] Loaded from {config_path}")
        except Exception as e:
            logger.warning(f"[Config] Failed to load {config_path}: {e}, using defaults")
    else:
        logger.debug(f"[Config] No config file at {config_path}, using defaults")

    _config_instance = Config(config_data)
    return _config_instance


def get_config() -> Config:
    """Get current config instance (lazy load if needed)."""
    global _config_instance
    if _config_instance is None:
        load_config()
    return _config_instance


def reset_config() -> None:
    global _config_instance
    _config_instance = None


# ============================================================================
# 8) HELPERS
# ============================================================================
def config_hash(cfg: dict) -> str:
    return hashlib.sha256(json.dumps(cfg, sort_keys=True).encode()).hexdigest()


def _merge_dicts(base: dict, override: dict) -> None:
    """
    Deep merge override dict into base dict (modifies base in place).

    Args:
        base: Base dict to merge into
        override: Dict with values to override
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _merge_dicts(base[key], value)
        else:
            base[key] = value
