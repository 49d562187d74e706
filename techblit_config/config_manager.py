"""
Configuration Management System

Loads the pipeline's YAML configuration with environment-specific overrides.
"""

import os
import yaml
import logging
from typing import Any, Dict, List, Optional
from pathlib import Path

logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigManager:
    """Configuration manager with environment override support."""

    CONFIG_FILES = [
        "services.yaml",
        "limits.yaml",
        "algorithms.yaml",
    ]

    def __init__(self, config_dir: Optional[Path] = None, environment: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_dir: Path to config directory (defaults to TECHBLIT_CONFIG_DIR,
                /app/config in containers, or the repository's config/)
            environment: Environment name (defaults to ENVIRONMENT env var or 'development')
        """
        if config_dir is None:
            env_dir = os.getenv("TECHBLIT_CONFIG_DIR")
            if env_dir:
                config_dir = Path(env_dir)
            elif Path("/app/config").exists():
                config_dir = Path("/app/config")
            else:
                project_root = Path(__file__).resolve().parent.parent
                config_dir = project_root / "config"

        self.config_dir = Path(config_dir)
        self.environment = environment or os.getenv("ENVIRONMENT", "development")
        self._config_cache: Dict[str, Any] = {}

        self._load_config()

    def _load_config(self) -> None:
        """Load base configuration files and apply environment overrides."""
        logger.info(f"Loading configuration from {self.config_dir} for environment '{self.environment}'")

        for config_file in self.CONFIG_FILES:
            file_path = self.config_dir / config_file
            if file_path.exists():
                try:
                    with open(file_path, 'r') as f:
                        content = yaml.safe_load(f)
                        if content:
                            self._merge_config(self._config_cache, content)
                            logger.debug(f"Loaded config from {config_file}")
                except Exception as e:
                    logger.error(f"Error loading {config_file}: {e}")
                    raise
            else:
                logger.warning(f"Config file not found: {file_path}")

        env_config_path = self.config_dir / "environments" / f"{self.environment}.yaml"
        if env_config_path.exists():
            try:
                with open(env_config_path, 'r') as f:
                    env_config = yaml.safe_load(f)
                    if env_config:
                        self._merge_config(self._config_cache, env_config)
                        logger.info(f"Applied {self.environment} environment overrides")
            except Exception as e:
                logger.error(f"Error loading environment config: {e}")
                raise
        else:
            logger.info(f"No environment config found for '{self.environment}'")

        self._config_cache = self._expand_env_vars(self._config_cache)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge override config into base config."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand ${VAR} references in string values."""
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            return os.path.expandvars(obj)
        return obj

    def get(self, key_path: str, default: Any = _MISSING) -> Any:
        """
        Get configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path like 'llm.xai.model'
            default: Value returned when the key is absent

        Returns:
            Configuration value or default

        Raises:
            KeyError: If the key is absent and no default was given

        Examples:
            >>> config.get('llm.xai.model')
            'grok-3'
        """
        value = self._config_cache
        try:
            for key in key_path.split('.'):
                value = value[key]
            return value
        except (KeyError, TypeError):
            if default is not _MISSING:
                return default
            raise KeyError(f"Configuration key '{key_path}' not found")

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire top-level configuration section."""
        return self.get(section, {})

    def has(self, key_path: str) -> bool:
        """Check if configuration key exists."""
        try:
            self.get(key_path)
            return True
        except KeyError:
            return False

    def reload(self) -> None:
        """Reload configuration from files."""
        self._config_cache.clear()
        self._load_config()
        logger.info("Configuration reloaded")

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration as dictionary (for debugging)."""
        return self._config_cache.copy()

    def validate_required_keys(self, required_keys: List[str]) -> None:
        """
        Validate that required configuration keys exist.

        Raises:
            KeyError: If any required key is missing
        """
        missing_keys = [key for key in required_keys if not self.has(key)]
        if missing_keys:
            raise KeyError(f"Missing required configuration keys: {missing_keys}")


# Global configuration instance
_config_instance: Optional[ConfigManager] = None


def get_config(config_dir: Optional[Path] = None, environment: Optional[str] = None) -> ConfigManager:
    """
    Get global configuration instance.

    Args:
        config_dir: Config directory (only used on first call)
        environment: Environment name (only used on first call)
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = ConfigManager(config_dir, environment)

    return _config_instance


def reset_config() -> None:
    """Reset global configuration instance (mainly for testing)."""
    global _config_instance
    _config_instance = None
