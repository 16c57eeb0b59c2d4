"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class ReplayConfig(BaseSettings):
    """Ledger replay configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Output configuration
    output_precision: int = 4  # Fractional digits in the account summary

    # Input configuration
    input_base_dir: Optional[str] = None  # If None, relative paths resolve against the program directory

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_REPLAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global configuration instance
config = ReplayConfig()


def get_config() -> ReplayConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> ReplayConfig:
    """Reload configuration from environment"""
    global config
    config = ReplayConfig()
    return config
