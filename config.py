#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - Configuration
Centralised environment-driven configuration with validation

Version: 1.0.0
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from enum import Enum

class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Habit store configuration"""
    path: Path
    backup_dir: Path
    max_backups: int = 10
    auto_backup: bool = True

@dataclass
class AIConfig:
    """Insight generator configuration"""
    openai_api_key: Optional[str]
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 300
    temperature: float = 0.7
    request_timeout: int = 30
    enabled: bool = False

@dataclass
class ServerConfig:
    """Dashboard server configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    debug_mode: bool = False
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

def _env_flag(key: str, default: str = 'false') -> bool:
    return os.getenv(key, default).lower() == 'true'

class AppConfig:
    """Main configuration object"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Load configuration from environment variables"""

        # Directories
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Storage
        self.storage = StorageConfig(
            path=self.data_dir / os.getenv('DATA_FILE', 'habits.json'),
            backup_dir=self.backup_dir,
            max_backups=int(os.getenv('MAX_BACKUPS', 10)),
            auto_backup=_env_flag('AUTO_BACKUP', 'true')
        )

        # AI
        openai_key = os.getenv('OPENAI_API_KEY') or None
        self.ai = AIConfig(
            openai_api_key=openai_key,
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', 300)),
            temperature=float(os.getenv('AI_TEMPERATURE', 0.7)),
            request_timeout=int(os.getenv('AI_TIMEOUT', 30)),
            enabled=bool(openai_key) and _env_flag('AI_ENABLED', 'true')
        )

        # Server
        origins = os.getenv('ALLOWED_ORIGINS', '*')
        self.server = ServerConfig(
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', 8000)),
            debug_mode=_env_flag('DEBUG_MODE'),
            allowed_origins=[o.strip() for o in origins.split(',') if o.strip()]
        )

        # "Today" is resolved in this timezone
        self.timezone = os.getenv('TIMEZONE', 'UTC')

        # Logging
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = _env_flag('LOG_TO_FILE', 'true')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Validate configuration"""
        errors = []

        if not 1024 <= self.server.port <= 65535:
            errors.append(f"Port {self.server.port} is outside the allowed range (1024-65535)")

        if self.storage.max_backups <= 0:
            errors.append("MAX_BACKUPS must be a positive number")

        if self.ai.openai_max_tokens <= 0:
            errors.append("OPENAI_MAX_TOKENS must be a positive number")

        if not 0.0 <= self.ai.temperature <= 2.0:
            errors.append("AI_TEMPERATURE must be between 0 and 2")

        if not self.ai.openai_api_key and _env_flag('AI_ENABLED', 'true'):
            logging.getLogger(__name__).info("OPENAI_API_KEY not set - insights use fallback tips")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Create required directories"""
        directories = [
            self.data_dir,
            self.backup_dir,
            self.log_dir
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Build a logging.config.dictConfig mapping"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'httpx': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'openai': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"zenhabit_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def to_dict(self) -> Dict[str, Any]:
        """Serialise configuration (secrets masked)"""
        return {
            'environment': self.environment.value,
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug_mode': self.server.debug_mode
            },
            'storage': {
                'path': str(self.storage.path),
                'backup_dir': str(self.storage.backup_dir),
                'max_backups': self.storage.max_backups,
                'auto_backup': self.storage.auto_backup
            },
            'ai': {
                'enabled': self.ai.enabled,
                'model': self.ai.openai_model,
                'api_key': (self.ai.openai_api_key[:6] + "...") if self.ai.openai_api_key else None
            },
            'timezone': self.timezone,
            'log_level': self.log_level.value
        }

# Global configuration instance
config = AppConfig()
