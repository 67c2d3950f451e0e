import os
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import tomli_w

from insta_short.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV = "INSTA_SHORT_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".insta-short.toml"
KNOWN_KEYS = {
    "api_key": (str,),
    "api_url": (str,),
    "timeout": (int, float),
}


# ========== Saved settings ==========
class ConfigStore:
    """Settings saved between runs in a small TOML file."""

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            env_path = os.environ.get(CONFIG_ENV)
            path = Path(env_path).expanduser() if env_path else DEFAULT_CONFIG_PATH
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Cannot parse {self.path}: {e}")
        unknown = set(data) - set(KNOWN_KEYS)
        if unknown:
            logger.warning("Ignoring unknown keys in %s: %s", self.path, ", ".join(sorted(unknown)))
        values = {k: data[k] for k in KNOWN_KEYS if k in data}
        for key, value in values.items():
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, KNOWN_KEYS[key]):
                expected = " or ".join(t.__name__ for t in KNOWN_KEYS[key])
                raise ConfigError(f"{key} in {self.path} must be {expected}, got {value!r}")
        return values

    def save(self, **values) -> Dict[str, Any]:
        data = self.load()
        data.update({k: v for k, v in values.items() if v is not None})
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("wb") as f:
            tomli_w.dump(data, f)
        # the file holds a credential
        self.path.chmod(0o600)
        logger.debug("Saved %s to %s", ", ".join(sorted(data)), self.path)
        return data
