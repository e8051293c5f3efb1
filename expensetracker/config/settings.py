"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The two things the core cannot run without, the installation secret and
the ledger directory, are validated at startup rather than at first use.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from expensetracker.models.ledger import CategoryPolicy


class StorageSettings(BaseSettings):
    """Where encrypted ledgers are kept."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data/ledgers"),
        description="Directory holding one encrypted blob per user"
    )
    load_workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Threads used to decrypt ledgers at startup"
    )


class EncryptionSettings(BaseSettings):
    """Installation-wide encryption configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_ENCRYPTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    secret: SecretStr = Field(
        ...,
        description="Installation secret that ledger keys are derived from"
    )
    kdf_iterations: int = Field(
        default=390_000,
        ge=1_000,
        le=10_000_000,
        description="PBKDF2 iterations for newly written ledgers"
    )

    @field_validator('secret')
    @classmethod
    def validate_secret_length(cls, v: SecretStr) -> SecretStr:
        """Refuse trivially short secrets."""
        if len(v.get_secret_value()) < 8:
            raise ValueError("Encryption secret must be at least 8 characters")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG level instead of INFO"
    )

    # Ledger behaviour
    unknown_category_policy: CategoryPolicy = Field(
        default=CategoryPolicy.PERMIT,
        description="Accept or reject expenses whose category has no budget"
    )
    seed_sample_user: bool = Field(
        default=False,
        description="Create a 'sample' user with example data if it is missing"
    )

    # Validation thresholds
    max_expense_amount: Decimal = Field(
        default=Decimal("100000.00"),
        gt=0,
        description="Expenses above this amount are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=0,
        ge=0,
        description="How many days in the future an expense date can be"
    )

    # Audit
    audit_buffer_size: int = Field(
        default=1000,
        ge=1,
        description="Most recent audit events a session keeps in memory"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def encryption(self) -> EncryptionSettings:
        return EncryptionSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "encryption", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
