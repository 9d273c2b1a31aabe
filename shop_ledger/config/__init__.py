"""Configuration package."""

from shop_ledger.config.settings import (
    DEFAULT_STORAGE_KEY,
    AppSettings,
    ConfigurationError,
    GoogleSheetsSettings,
    LocalStoreConfig,
    LocalStoreSettings,
    RemoteSettings,
    RemoteStoreConfig,
    Settings,
    SheetsStoreConfig,
    StoreConfig,
    UnsupportedOperationError,
    get_settings,
    parse_store_config,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "AppSettings",
    "ConfigurationError",
    "GoogleSheetsSettings",
    "LocalStoreConfig",
    "LocalStoreSettings",
    "RemoteSettings",
    "RemoteStoreConfig",
    "Settings",
    "SheetsStoreConfig",
    "StoreConfig",
    "UnsupportedOperationError",
    "get_settings",
    "parse_store_config",
]
