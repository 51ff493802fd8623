"""
Planner Settings and Configuration Management

Uses pydantic-settings for type-safe configuration from environment variables.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from energy_planner.optimization.device_models import OptimizationConfig


class Settings(BaseSettings):
    """Planner settings loaded from environment variables"""

    # Application
    app_name: str = "Energy Planner"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Planning engine
    horizon_days: int = Field(default=30, validation_alias="PLANNER_HORIZON_DAYS")
    max_trim_iterations: int = Field(
        default=100, validation_alias="PLANNER_MAX_TRIM_ITERATIONS"
    )
    reserved_min_hours: float = Field(
        default=4.0, validation_alias="PLANNER_RESERVED_MIN_HOURS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid"""
        allowed = ["development", "staging", "production", "test"]
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the log level name"""
        level = v.upper()
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if level not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return level

    @field_validator("horizon_days", "max_trim_iterations")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("reserved_min_hours")
    @classmethod
    def validate_reserved_hours(cls, v: float) -> float:
        if not 0 <= v <= 24:
            raise ValueError("reserved_min_hours must be between 0 and 24")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    def to_optimization_config(self) -> OptimizationConfig:
        """Build the engine configuration from these settings."""
        return OptimizationConfig(
            horizon_days=self.horizon_days,
            max_trim_iterations=self.max_trim_iterations,
            reserved_min_hours=self.reserved_min_hours,
        )


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
