"""Configuration management for gc-summary."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from ..core.logging import get_logger
from ..core.watermark import DEFAULT_TIMEZONE, load_timezone

logger = get_logger(__name__)

DELIVERY_CHOICES = ("log", "post", "github")
DEFAULT_EMPTY_DIGEST_MESSAGE = "No change...\nWhy don't play GrooveCoaster?\n"


@dataclass(frozen=True)
class Config:
    """Immutable configuration object for the application."""

    # Record source
    source_base_url: str = "https://mypage.groovecoaster.jp"
    source_cookie: str = ""
    source_timeout_seconds: float = 30.0

    # Snapshot store
    store_path: str = "data/gc-summary-store.json"
    timezone: str = DEFAULT_TIMEZONE

    # Delivery
    delivery: str = "log"
    post_url: str = ""
    post_chunk_length: int = 140
    post_hashtag: str = ""
    github_repo_url: str = ""
    github_token: str = ""
    github_issue_number: int = 0
    empty_digest_message: str = DEFAULT_EMPTY_DIGEST_MESSAGE

    # HTTP server
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    log_max_file_size_mb: int = 100
    log_backup_count: int = 10

    # Internal tracking
    _loaded_config_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.source_base_url:
            raise ValueError("SOURCE_BASE_URL is required")
        if not self.store_path:
            raise ValueError("STORE_PATH is required")
        if self.source_timeout_seconds <= 0:
            raise ValueError("SOURCE_TIMEOUT_SECONDS must be positive")
        if self.post_chunk_length <= 0:
            raise ValueError("POST_CHUNK_LENGTH must be positive")

        load_timezone(self.timezone)

        if self.delivery not in DELIVERY_CHOICES:
            raise ValueError(f"DELIVERY must be one of {', '.join(DELIVERY_CHOICES)}, got: {self.delivery}")
        if self.delivery == "post" and not self.post_url:
            raise ValueError("POST_URL is required when DELIVERY is post")
        if self.delivery == "github":
            if not self.github_repo_url or not self.github_token:
                raise ValueError("GITHUB_REPO_URL and GITHUB_TOKEN are required when DELIVERY is github")
            if self.github_issue_number <= 0:
                raise ValueError("GITHUB_ISSUE_NUMBER is required when DELIVERY is github")

        if self.github_repo_url.startswith("https://"):
            object.__setattr__(self, 'github_repo_url',
                               self.github_repo_url[len("https://"):])

    def log_config(self) -> None:
        """Log the current configuration (without secrets)."""
        if self._loaded_config_file:
            logger.info(f"Configuration loaded from: {self._loaded_config_file}")
        else:
            logger.warning("Configuration loaded from: hardcoded defaults (no config file found)")
        logger.info(f"  SOURCE_BASE_URL: {self.source_base_url}")
        logger.info(f"  SOURCE_COOKIE: {'*' * len(self.source_cookie)} ({len(self.source_cookie)} chars)")
        logger.info(f"  STORE_PATH: {self.store_path}")
        logger.info(f"  TIMEZONE: {self.timezone}")
        logger.info(f"  DELIVERY: {self.delivery}")
        if self.delivery == "post":
            logger.info(f"  POST_URL: {self.post_url}")
            logger.info(f"  POST_CHUNK_LENGTH: {self.post_chunk_length}")
        if self.delivery == "github":
            logger.info(f"  GITHUB_REPO_URL: {self.github_repo_url}")
            logger.info(f"  GITHUB_TOKEN: {'*' * len(self.github_token)} ({len(self.github_token)} chars)")
            logger.info(f"  GITHUB_ISSUE_NUMBER: {self.github_issue_number}")
        logger.info(f"  LOG_LEVEL: {self.log_level}")
        logger.info(f"  LOG_FORMAT: {self.log_format}")


class ConfigLoader:
    """Loads configuration from multiple sources with precedence."""

    INT_KEYS = ('post_chunk_length', 'github_issue_number', 'api_port',
                'log_max_file_size_mb', 'log_backup_count')
    FLOAT_KEYS = ('source_timeout_seconds',)

    def __init__(self):
        self.logger = get_logger(__name__)

    def load_config(self,
                    config_file: Optional[str] = None,
                    cli_args: Optional[Dict[str, Any]] = None) -> Config:
        """Load configuration from all sources with precedence.

        Precedence order (highest to lowest):
        1. CLI arguments
        2. Environment variables
        3. YAML config file
        4. Defaults

        Args:
            config_file: Path to YAML config file
            cli_args: Dictionary of CLI arguments

        Returns:
            Immutable Config object
        """
        load_dotenv()

        config_data: Dict[str, Any] = {}
        loaded_config_file = None

        if config_file:
            config_data.update(self._load_yaml_config(config_file))
            loaded_config_file = config_file
        else:
            default_config_path = Path("config.yaml")
            if default_config_path.exists():
                config_data.update(self._load_yaml_config(str(default_config_path)))
                loaded_config_file = str(default_config_path)

        config_data.update(self._load_env_config())

        if cli_args:
            config_data.update(self._process_cli_args(cli_args))

        config_data = self._coerce_types(config_data)
        config_data['_loaded_config_file'] = loaded_config_file

        if not loaded_config_file:
            self.logger.warning("No configuration file found - using hardcoded defaults. Consider creating a config.yaml file.")

        return Config(**config_data)

    def _load_yaml_config(self, config_file: str) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Raises:
            ValueError: If the file exists but is not valid YAML
        """
        config_path = Path(config_file)
        if not config_path.exists():
            self.logger.warning(f"Config file not found: {config_file}")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                yaml_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_file}: {e}") from e
        return self._normalize_keys(yaml_data)

    def _load_env_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_mapping = {
            'SOURCE_BASE_URL': 'source_base_url',
            'SOURCE_COOKIE': 'source_cookie',
            'SOURCE_TIMEOUT_SECONDS': 'source_timeout_seconds',
            'STORE_PATH': 'store_path',
            'TIMEZONE': 'timezone',
            'DELIVERY': 'delivery',
            'POST_URL': 'post_url',
            'POST_CHUNK_LENGTH': 'post_chunk_length',
            'POST_HASHTAG': 'post_hashtag',
            'GITHUB_REPO_URL': 'github_repo_url',
            'GITHUB_TOKEN': 'github_token',
            'GITHUB_ISSUE_NUMBER': 'github_issue_number',
            'EMPTY_DIGEST_MESSAGE': 'empty_digest_message',
            'API_HOST': 'api_host',
            'PORT': 'api_port',
            'LOG_LEVEL': 'log_level',
            'LOG_FORMAT': 'log_format',
            'LOG_FILE': 'log_file',
            'LOG_MAX_FILE_SIZE_MB': 'log_max_file_size_mb',
            'LOG_BACKUP_COUNT': 'log_backup_count'
        }

        config = {}
        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                config[config_key] = value
        return config

    def _coerce_types(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert string values from env/YAML to the types Config expects."""
        coerced = dict(config_data)
        for key in self.INT_KEYS:
            if key in coerced and not isinstance(coerced[key], int):
                try:
                    coerced[key] = int(coerced[key])
                except (TypeError, ValueError):
                    self.logger.warning(f"Invalid integer value for {key}: {coerced[key]}")
                    del coerced[key]
        for key in self.FLOAT_KEYS:
            if key in coerced and not isinstance(coerced[key], (int, float)):
                try:
                    coerced[key] = float(coerced[key])
                except (TypeError, ValueError):
                    self.logger.warning(f"Invalid number value for {key}: {coerced[key]}")
                    del coerced[key]
        return coerced

    def _process_cli_args(self, cli_args: Dict[str, Any]) -> Dict[str, Any]:
        """Process CLI arguments into config format."""
        cli_mapping = {
            'base_url': 'source_base_url',
            'store': 'store_path',
            'timezone': 'timezone',
            'delivery': 'delivery',
            'post_url': 'post_url',
            'chunk_length': 'post_chunk_length',
            'host': 'api_host',
            'port': 'api_port',
            'log_level': 'log_level',
            'log_format': 'log_format'
        }

        config = {}
        for cli_key, config_key in cli_mapping.items():
            if cli_key in cli_args and cli_args[cli_key] is not None:
                config[config_key] = cli_args[cli_key]
        return config

    def _normalize_keys(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize nested YAML sections to flat config field names."""
        sections = {
            'source': {
                'base-url': 'source_base_url',
                'cookie': 'source_cookie',
                'timeout-seconds': 'source_timeout_seconds',
            },
            'store': {
                'path': 'store_path',
                'timezone': 'timezone',
            },
            'delivery': {
                'sink': 'delivery',
                'post-url': 'post_url',
                'chunk-length': 'post_chunk_length',
                'hashtag': 'post_hashtag',
                'empty-message': 'empty_digest_message',
            },
            'github': {
                'repo-url': 'github_repo_url',
                'token': 'github_token',
                'issue-number': 'github_issue_number',
            },
            'server': {
                'host': 'api_host',
                'port': 'api_port',
            },
            'logging': {
                'level': 'log_level',
                'format': 'log_format',
                'file': 'log_file',
                'max_file_size_mb': 'log_max_file_size_mb',
                'backup_count': 'log_backup_count',
            },
        }

        normalized = {}
        for section, mapping in sections.items():
            section_data = data.get(section)
            if not isinstance(section_data, dict):
                continue
            for yaml_key, config_key in mapping.items():
                if yaml_key in section_data:
                    normalized[config_key] = section_data[yaml_key]

        # Flat keys such as "store-path" are accepted as well
        known_fields = set(Config.__dataclass_fields__) - {'_loaded_config_file'}
        for key, value in data.items():
            if isinstance(value, dict):
                continue
            normalized_key = key.replace('-', '_').lower()
            if normalized_key in known_fields and normalized_key not in normalized:
                normalized[normalized_key] = value
            elif normalized_key not in known_fields:
                self.logger.warning(f"Ignoring unknown config key: {key}")

        return normalized
