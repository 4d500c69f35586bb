"""
Configuration Module for the Invoice Capture Engine.

Settings live in config/settings.yaml: the OCR fallback threshold,
render scale and language, line-item tolerance, channel extension
lists, logging and export options. Callers always pass a code default
to `get_config`, so a trimmed or custom settings file never breaks
extraction.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional

# Settings holding filesystem paths, resolved against the project root
PATH_KEYS = (
    ('paths', 'output_dir'),
    ('paths', 'log_dir'),
    ('logging', 'file', 'path'),
)


class ConfigurationManager:
    """
    Process-wide settings loaded from YAML.

    The first construction loads the file; later constructions return
    the same instance. Passing a different path switches files, which is
    how `main.py --config` takes effect.

    Attributes:
        config_path (Path): Settings file in use.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("input.pdf.min_text_chars")
        50
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load settings on first use, or switch to another settings file.

        Args:
            config_path: YAML file; config/settings.yaml when None.
        """
        if self._initialized:
            if config_path is not None and Path(config_path) != self.config_path:
                self.config_path = Path(config_path)
                self._load_config()
            return

        self.config_path = Path(config_path) if config_path else Path(__file__).parent / "settings.yaml"
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Read and parse the settings file.

        Raises:
            FileNotFoundError: If the settings file is missing.
            yaml.YAMLError: If it is not valid YAML.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """Make relative output and log paths absolute, based at the project root."""
        project_root = Path(__file__).parent.parent

        for key_path in PATH_KEYS:
            *parents, leaf = key_path
            section = self._config
            for key in parents:
                section = section.get(key) if isinstance(section, dict) else None
            if not isinstance(section, dict):
                continue

            value = section.get(leaf)
            if value and not Path(value).is_absolute():
                section[leaf] = str(project_root / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a setting by dot path.

        Missing keys and explicit nulls both return the default.

        Example:
            >>> config.get("extraction.line_items.tolerance_ratio")
            0.1
            >>> config.get("ocr.tesseract.dpi", 300)
            300
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
        except (KeyError, TypeError):
            return default

        return default if value is None else value

    def get_all(self) -> Dict[str, Any]:
        """Shallow copy of every loaded setting."""
        return self._config.copy()

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next construction reloads."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Shortcut for `ConfigurationManager().get(key, default)`.

    Example:
        >>> get_config("ocr.language", "eng")
        'eng'
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
