"""Tests for configuration and store selection."""

import pytest
from pydantic import ValidationError

from shop_ledger.config import (
    LocalStoreConfig,
    RemoteStoreConfig,
    Settings,
    SheetsStoreConfig,
    parse_store_config,
)
from shop_ledger.config.settings import AppSettings, DEFAULT_STORAGE_KEY, RemoteSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "LEDGER_REMOTE_ENDPOINT",
        "LEDGER_REMOTE_TIMEOUT_SECONDS",
        "LEDGER_REMOTE_FETCH_ATTEMPTS",
        "LEDGER_SHEETS_SPREADSHEET_ID",
        "LEDGER_SHEETS_CREDENTIALS_PATH",
        "LEDGER_SHEETS_WORKSHEET_NAME",
        "LEDGER_LOCAL_STORAGE_PATH",
        "LEDGER_LOCAL_STORAGE_KEY",
    ):
        monkeypatch.delenv(var, raising=False)


class TestResolveStoreConfig:
    """Tests for Settings.resolve_store_config()."""

    def test_no_configuration_is_local(self):
        """Test that nothing configured means local-only mode."""
        assert Settings().resolve_store_config() == LocalStoreConfig()

    def test_endpoint_selects_remote(self, monkeypatch):
        """Test that an endpoint selects the HTTP store."""
        monkeypatch.setenv("LEDGER_REMOTE_ENDPOINT", " https://ledger.example.test/exec ")
        config = Settings().resolve_store_config()
        assert config == RemoteStoreConfig(endpoint="https://ledger.example.test/exec")

    def test_blank_endpoint_is_local(self, monkeypatch):
        """Test that an empty endpoint variable is treated as unset."""
        monkeypatch.setenv("LEDGER_REMOTE_ENDPOINT", "   ")
        assert Settings().resolve_store_config().kind == "local"

    def test_sheets_selected(self, monkeypatch, tmp_path):
        """Test that a spreadsheet is used when there is no endpoint."""
        credentials = tmp_path / "service-account.json"
        credentials.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("LEDGER_SHEETS_SPREADSHEET_ID", "sheet-123")
        monkeypatch.setenv("LEDGER_SHEETS_CREDENTIALS_PATH", str(credentials))

        config = Settings().resolve_store_config()

        assert isinstance(config, SheetsStoreConfig)
        assert config.spreadsheet_id == "sheet-123"
        assert config.worksheet_name == "Ledger"

    def test_endpoint_wins_over_sheets(self, monkeypatch, tmp_path):
        """Test the precedence between the two remote variants."""
        credentials = tmp_path / "service-account.json"
        credentials.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("LEDGER_SHEETS_SPREADSHEET_ID", "sheet-123")
        monkeypatch.setenv("LEDGER_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("LEDGER_REMOTE_ENDPOINT", "https://ledger.example.test/exec")

        assert Settings().resolve_store_config().kind == "remote"


class TestSettingsValues:
    """Tests for individual settings groups."""

    def test_app_settings_fields(self):
        """Test that app settings only carry values the ledger reads."""
        assert set(AppSettings.model_fields) == {
            "debug_mode",
            "currency_symbol",
            "export_filename",
        }

    def test_local_defaults(self):
        """Test the default storage key."""
        assert Settings().local.storage_key == DEFAULT_STORAGE_KEY

    def test_local_path_from_env(self, monkeypatch, tmp_path):
        """Test that the storage path can be overridden."""
        monkeypatch.setenv("LEDGER_LOCAL_STORAGE_PATH", str(tmp_path / "s.json"))
        assert Settings().local.storage_path == tmp_path / "s.json"

    def test_fetch_attempts_bounds(self, monkeypatch):
        """Test that a nonsensical retry count is rejected."""
        monkeypatch.setenv("LEDGER_REMOTE_FETCH_ATTEMPTS", "0")
        with pytest.raises(ValidationError):
            RemoteSettings()


class TestParseStoreConfig:
    """Tests for parse_store_config()."""

    def test_parse_each_kind(self):
        """Test that the kind tag picks the variant."""
        assert parse_store_config({"kind": "local"}) == LocalStoreConfig()
        remote = parse_store_config({"kind": "remote", "endpoint": "https://x.test"})
        assert isinstance(remote, RemoteStoreConfig)
        sheets = parse_store_config({
            "kind": "sheets",
            "spreadsheet_id": "abc",
            "credentials_path": "/secrets/sa.json",
        })
        assert isinstance(sheets, SheetsStoreConfig)

    def test_unknown_kind(self):
        """Test that an unknown kind is rejected."""
        with pytest.raises(ValidationError):
            parse_store_config({"kind": "ftp"})

    def test_remote_requires_endpoint(self):
        """Test that a remote config without an endpoint is rejected."""
        with pytest.raises(ValidationError):
            parse_store_config({"kind": "remote"})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
