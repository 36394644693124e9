"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./budget.db"

    # Service
    service_name: str = "bill-planner"
    log_level: str = "INFO"

    # Calculation bounds
    payoff_max_months: int = 600  # 50 years
    pay_schedule_max_iterations: int = 1000

    # Month navigation and dashboard windows
    navigation_window_months: int = 12
    due_soon_days: int = 14

    # Rotating pre-rollover backups
    backup_slots: int = 2

    default_theme: str = "dark"


settings = Settings()
