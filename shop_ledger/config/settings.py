"""
Configuration Management for Shop Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: The choice of store is made ONCE, here, and handed to the
ledger engine as an explicit StoreConfig value. Nothing else in the
package looks at the environment to decide where entries go.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STORAGE_KEY = "shop_ledger.finance_rows.v1"


class ConfigurationError(Exception):
    """A remote-only action was attempted without a remote store configured."""
    pass


class UnsupportedOperationError(ConfigurationError):
    """The active store cannot perform this operation (e.g. remote delete)."""
    pass


class RemoteSettings(BaseSettings):
    """HTTP endpoint store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_REMOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    endpoint: Optional[str] = Field(
        default=None,
        description="URL answering GET (list entries) and POST (append entry)"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Per-request timeout"
    )
    fetch_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a GET is tried before falling back"
    )

    @field_validator('endpoint')
    @classmethod
    def blank_endpoint_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """An empty LEDGER_REMOTE_ENDPOINT means local mode."""
        if v is None or not v.strip():
            return None
        return v.strip()


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    spreadsheet_id: Optional[str] = Field(
        default=None,
        description="ID of the spreadsheet holding the ledger"
    )
    credentials_path: Optional[str] = Field(
        default=None,
        description="Path to Google service account credentials JSON"
    )
    worksheet_name: str = Field(
        default="Ledger",
        description="Name of the worksheet holding ledger rows"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.spreadsheet_id and self.credentials_path)


class LocalStoreSettings(BaseSettings):
    """Local durable storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_LOCAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_path: Path = Field(
        default=Path.home() / ".shop_ledger" / "storage.json",
        description="File backing the local key-value store"
    )
    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        min_length=1,
        description="Namespaced key the ledger is stored under"
    )


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

    debug_mode: bool = Field(
        default=False,
        description="Enable debug logging"
    )
    currency_symbol: str = Field(
        default="₹",
        description="Shown next to amounts in confirmations"
    )
    export_filename: str = Field(
        default="finance-tracker.csv",
        description="Default name of the CSV export"
    )


# =============================================================================
# STORE SELECTION
# =============================================================================

class RemoteStoreConfig(BaseModel):
    """Entries live behind an HTTP endpoint."""
    kind: Literal["remote"] = "remote"
    endpoint: str


class SheetsStoreConfig(BaseModel):
    """Entries live in a Google Sheets worksheet."""
    kind: Literal["sheets"] = "sheets"
    spreadsheet_id: str
    credentials_path: str
    worksheet_name: str = "Ledger"


class LocalStoreConfig(BaseModel):
    """Entries live only in local storage."""
    kind: Literal["local"] = "local"


StoreConfig = Annotated[
    Union[RemoteStoreConfig, SheetsStoreConfig, LocalStoreConfig],
    Field(discriminator="kind"),
]

_store_config_adapter = TypeAdapter(StoreConfig)


def parse_store_config(data: dict) -> Union[RemoteStoreConfig, SheetsStoreConfig, LocalStoreConfig]:
    """Build a StoreConfig from a plain dict such as {"kind": "local"}."""
    return _store_config_adapter.validate_python(data)


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

    @property
    def remote(self) -> RemoteSettings:
        return RemoteSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def local(self) -> LocalStoreSettings:
        return LocalStoreSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    def resolve_store_config(self) -> Union[RemoteStoreConfig, SheetsStoreConfig, LocalStoreConfig]:
        """
        Pick the active store.

        An HTTP endpoint wins over a spreadsheet; with neither, the ledger
        runs in local-only mode.
        """
        remote = self.remote
        if remote.endpoint:
            return RemoteStoreConfig(endpoint=remote.endpoint)

        sheets = self.google_sheets
        if sheets.is_configured:
            return SheetsStoreConfig(
                spreadsheet_id=sheets.spreadsheet_id,
                credentials_path=sheets.credentials_path,
                worksheet_name=sheets.worksheet_name,
            )

        return LocalStoreConfig()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()
