#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path

import pytz

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Persistent store configuration."""
    data_dir: str = "~/.verdict"
    analyses_cap: int = 100
    templates_cap: int = 20
    draft_ttl_hours: int = 24


@dataclass
class QuotaConfig:
    """Free tier quota configuration."""
    timezone: str = "UTC"
    free_analyses_per_week: int = 5
    free_max_sides: int = 3
    pro_max_sides: int = 5


@dataclass
class VerdictConfig:
    """Constants of the verdict computation."""
    clear_win_margin: float = 3.0
    base_confidence: float = 60.0
    confidence_per_point: float = 5.0
    tie_confidence_low: float = 45.0
    tie_confidence_high: float = 55.0
    emotional_penalty: float = 0.5
    escalation_threshold: float = 6.0
    evidence_threshold: float = 5.0


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    app_version: str = "1.0.0"
    simulated_delay_ms: int = 0

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    quota: QuotaConfig = field(default_factory=QuotaConfig)
    verdict: VerdictConfig = field(default_factory=VerdictConfig)
    app: ApplicationConfig = field(default_factory=ApplicationConfig)

    @property
    def data_path(self) -> Path:
        """Resolved directory for the file-backed store."""
        return Path(self.storage.data_dir).expanduser()


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
        """
        self._config: Optional[Config] = None
        self._env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self) -> None:
        """Load environment variables from .env file."""
        project_root = Path(__file__).resolve().parents[2]
        env_path = project_root / self._env_file_path

        if env_path.exists():
            self._load_env_file(env_path)
        else:
            logger.debug(f"No .env file found at {env_path}")

    def _load_env_file(self, env_path: Path) -> None:
        """Load variables from .env file."""
        try:
            with open(env_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()

            loaded_count = 0
            for line_num, line in enumerate(lines, 1):
                line = line.strip()

                if not line or line.startswith('#'):
                    continue

                if '=' not in line:
                    logger.warning(f"Invalid .env format at line {line_num}: {line}")
                    continue

                key, value = line.split('=', 1)
                key = key.strip()
                value = value.strip()

                if value.startswith('"') and value.endswith('"'):
                    value = value[1:-1]
                elif value.startswith("'") and value.endswith("'"):
                    value = value[1:-1]

                # Environment variables take precedence
                if key not in os.environ:
                    os.environ[key] = value
                    loaded_count += 1
                    logger.debug(f"Loaded {key} from .env")
                else:
                    logger.debug(f"Skipped {key} (already in environment)")

            logger.info(f"Loaded {loaded_count} variables from {env_path}")

        except OSError as e:
            logger.error(f"Error loading .env file {env_path}: {e}")

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        storage_config = StorageConfig(
            data_dir=os.getenv('VERDICT_DATA_DIR', '~/.verdict'),
            analyses_cap=int(os.getenv('ANALYSES_CAP', '100')),
            templates_cap=int(os.getenv('TEMPLATES_CAP', '20')),
            draft_ttl_hours=int(os.getenv('DRAFT_TTL_HOURS', '24'))
        )

        quota_config = QuotaConfig(
            timezone=os.getenv('QUOTA_TIMEZONE', 'UTC'),
            free_analyses_per_week=int(os.getenv('FREE_ANALYSES_PER_WEEK', '5')),
            free_max_sides=int(os.getenv('FREE_MAX_SIDES', '3')),
            pro_max_sides=int(os.getenv('PRO_MAX_SIDES', '5'))
        )

        verdict_config = VerdictConfig(
            clear_win_margin=float(os.getenv('CLEAR_WIN_MARGIN', '3.0')),
            base_confidence=float(os.getenv('BASE_CONFIDENCE', '60')),
            confidence_per_point=float(os.getenv('CONFIDENCE_PER_POINT', '5'))
        )

        app_config = ApplicationConfig(
            app_version=os.getenv('APP_VERSION', '1.0.0'),
            simulated_delay_ms=int(os.getenv('SIMULATED_DELAY_MS', '0')),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true'
        )

        config = Config(
            storage=storage_config,
            quota=quota_config,
            verdict=verdict_config,
            app=app_config
        )

        self._validate_config(config)
        return config

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if config.storage.analyses_cap < 1:
            errors.append("ANALYSES_CAP must be at least 1")

        if config.storage.templates_cap < 1:
            errors.append("TEMPLATES_CAP must be at least 1")

        if config.storage.draft_ttl_hours < 1:
            errors.append("DRAFT_TTL_HOURS must be at least 1")

        if config.quota.timezone not in pytz.all_timezones_set:
            errors.append(f"QUOTA_TIMEZONE '{config.quota.timezone}' is not a known timezone")

        if config.quota.free_analyses_per_week < 0:
            errors.append("FREE_ANALYSES_PER_WEEK must not be negative")

        if not 2 <= config.quota.free_max_sides <= config.quota.pro_max_sides <= 5:
            errors.append("Max sides must satisfy 2 <= FREE_MAX_SIDES <= PRO_MAX_SIDES <= 5")

        if config.verdict.clear_win_margin < 0:
            errors.append("CLEAR_WIN_MARGIN must not be negative")

        if config.app.simulated_delay_ms < 0:
            errors.append("SIMULATED_DELAY_MS must not be negative")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.info("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            formatter = logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S')
            handler.setFormatter(formatter)

    def get_summary(self) -> Dict[str, Any]:
        """Get a printable summary of the active configuration."""
        config = self.get_config()
        return {
            'environment': config.environment,
            'data_dir': str(config.data_path),
            'analyses_cap': config.storage.analyses_cap,
            'templates_cap': config.storage.templates_cap,
            'draft_ttl_hours': config.storage.draft_ttl_hours,
            'quota_timezone': config.quota.timezone,
            'free_analyses_per_week': config.quota.free_analyses_per_week,
            'app_version': config.app.app_version
        }


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
