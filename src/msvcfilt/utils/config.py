import json
from pathlib import Path
from typing import Any, Optional

DEFAULT_CONFIG = {
    "keep": False,
    "decoder": "auto",
    "undname": "llvm-undname",
    "log_file": "",
}


class ConfigManager:
    """
    Loads ~/.msvcfilt/config.json on top of DEFAULT_CONFIG.
    A missing or unreadable file just means the defaults are used.
    """
    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".msvcfilt"
        self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> dict:
        config = DEFAULT_CONFIG.copy()
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            return config

        if not self.config_file.exists():
            return config

        try:
            user_config = json.loads(self.config_file.read_text())
        except (OSError, ValueError):
            return config

        if isinstance(user_config, dict):
            config.update(user_config)
        return config

    def save_config(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(self.config, indent=4))

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        self.config[key] = value
        self.save_config()
