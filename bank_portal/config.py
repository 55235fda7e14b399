"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class PortalConfig(BaseSettings):
    """Bank portal configuration"""

    # Database configuration
    database_url: str = "sqlite:///bank_portal.db"  # "memory://" for in-memory storage

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api"
    cors_origins: str = "*"  # Comma separated

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules configuration
    default_currency: str = "ETB"
    max_account_balance: str = "1000000.00"
    loan_interest_rate: str = "0.07"  # Annual rate as a fraction
    loan_eligibility_ratio: str = "0.10"  # Balance must cover this share of the loan
    reminder_window_days: int = 31

    # Scheduler configuration
    scheduler_enabled: bool = True
    overdue_check_hour: int = 0
    overdue_check_minute: int = 0
    reminder_interval_hours: int = 2

    class Config:
        env_prefix = "PORTAL_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = PortalConfig()


def get_config() -> PortalConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> PortalConfig:
    """Reload configuration from environment"""
    global config
    config = PortalConfig()
    return config
