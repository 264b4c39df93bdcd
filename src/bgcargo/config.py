# src/bgcargo/config.py
import copy
import os
import sys
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from dotenv import load_dotenv

load_dotenv()

DEFAULT_SETTINGS = {
    'archive': {
        'base_url': 'https://data-argo.ifremer.fr',
        'dac_dir': 'dac',
        'index_file': 'ar_index_global_meta.txt',
    },
    'data': {
        'cache_dir': 'data/argo',
        'index_dir': 'data/argo/Index',
    },
    'download': {
        'timeout': 30,
        'retries': 0,
        'max_workers': 1,
        'chunk_size': 8192,
        'traj_suffix': '_Rtraj.nc',
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'file': None,
    },
}


class Config:
    """Configuration manager for the BGC Argo toolkit"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else self._find_config_file()
        self.settings = self._load_settings()

    def _find_config_file(self) -> Optional[Path]:
        """Find the configuration file in various locations"""
        possible_paths = [
            Path('config/settings.yaml'),
            Path('../config/settings.yaml'),
            Path('./settings.yaml')
        ]

        for path in possible_paths:
            if path.exists():
                return path
        return None

    def _load_settings(self) -> Dict[str, Any]:
        """Load settings from YAML file on top of the built-in defaults"""
        settings = copy.deepcopy(DEFAULT_SETTINGS)
        if self.config_path is None:
            return settings

        with open(self.config_path, 'r') as f:
            overrides = yaml.safe_load(f) or {}
        if not isinstance(overrides, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")

        for section, values in overrides.items():
            if isinstance(values, dict) and isinstance(settings.get(section), dict):
                settings[section].update(values)
            else:
                settings[section] = values
        return settings

    def load_config(self, config_path: str):
        """Reload settings from an explicit file"""
        self.config_path = Path(config_path)
        self.settings = self._load_settings()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        keys = key.split('.')
        value = self.settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        # Environment variable override
        env_key = f"ARGO_{key.replace('.', '_').upper()}"
        env_value = os.getenv(env_key)
        if env_value is None:
            return value
        return self._coerce(env_value, value)

    def set(self, key: str, value: Any):
        """Set a configuration value using dot notation"""
        keys = key.split('.')
        target = self.settings
        for k in keys[:-1]:
            target = target.setdefault(k, {})
        target[keys[-1]] = value

    @staticmethod
    def _coerce(raw: str, current: Any) -> Any:
        if isinstance(current, bool):
            return raw.strip().lower() in ('1', 'true', 'yes', 'on')
        if isinstance(current, int):
            try:
                return int(raw)
            except ValueError:
                return float(raw)
        if isinstance(current, float):
            return float(raw)
        return raw

    def setup_logging(self):
        """Setup logging configuration"""
        log_level = getattr(logging, str(self.get('logging.level', 'INFO')).upper())
        log_format = self.get('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        log_file = self.get('logging.file')

        handlers = [logging.StreamHandler(sys.stdout)]
        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

        logging.basicConfig(level=log_level, format=log_format, handlers=handlers)


# Global configuration instance
config = Config()
