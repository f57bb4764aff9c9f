"""
Tests for configuration loading and component wiring.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pfm.clock import FixedClock
from pfm.config import (
    AppSettings,
    SecuritySettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)
from pfm.models.records import BudgetRecord, Category, ExpenseRecord
from pfm.orchestrator import create_app_components, create_record_store
from pfm.security import BcryptPasswordHasher
from pfm.services.storage import InMemoryRecordStore


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("PFM_STORAGE_BACKEND", "GOOGLE_SHEETS_CREDENTIALS_PATH", "GOOGLE_SHEETS_SPREADSHEET_ID"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for pydantic-settings models."""

    def test_security_defaults(self, monkeypatch):
        for name in ("MAX_FAILED_ATTEMPTS", "LOCKOUT_DURATION_MINUTES", "MIN_PASSWORD_LENGTH"):
            monkeypatch.delenv(f"PFM_SECURITY_{name}", raising=False)

        settings = SecuritySettings()
        assert settings.max_failed_attempts == 3
        assert settings.lockout_duration_minutes == 1
        assert settings.min_password_length == 8
        assert settings.reset_all_attempts_on_logout is True

    def test_security_from_environment(self, monkeypatch):
        monkeypatch.setenv("PFM_SECURITY_MAX_FAILED_ATTEMPTS", "5")
        monkeypatch.setenv("PFM_SECURITY_RESET_ALL_ATTEMPTS_ON_LOGOUT", "false")

        settings = SecuritySettings()
        assert settings.max_failed_attempts == 5
        assert settings.reset_all_attempts_on_logout is False

    def test_lockout_duration_is_bounded(self):
        """Test that the lockout window stays within 1-5 minutes."""
        with pytest.raises(ValidationError):
            SecuritySettings(lockout_duration_minutes=0)
        with pytest.raises(ValidationError):
            SecuritySettings(lockout_duration_minutes=6)

    def test_app_settings_only_carry_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert AppSettings().log_level == "DEBUG"
        assert set(AppSettings.model_fields) == {"log_level"}

        with pytest.raises(ValidationError):
            AppSettings(log_level="LOUD")

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StorageSettings(backend="postgres")

    def test_validate_all_settings_memory_backend(self):
        results = validate_all_settings()
        assert results["security"] is True
        assert results["storage"] is True
        assert "google_sheets" not in results

    def test_validate_all_settings_reports_missing_sheets_config(self, monkeypatch):
        monkeypatch.setenv("PFM_STORAGE_BACKEND", "google_sheets")
        results = validate_all_settings()
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


class TestOrchestrator:
    """Tests for component wiring."""

    def test_create_record_store(self):
        assert isinstance(create_record_store("memory"), InMemoryRecordStore)
        assert isinstance(create_record_store(), InMemoryRecordStore)

    def test_create_record_store_unknown_backend(self):
        with pytest.raises(ValueError):
            create_record_store("postgres")

    def test_components_share_store_and_bus(self):
        components = create_app_components(
            store=InMemoryRecordStore(),
            clock=FixedClock(),
            hasher=BcryptPasswordHasher(rounds=4),
        )
        assert components.records.bus is components.bus

    def test_end_to_end_flow(self):
        """Register, sign in, record spend and read the summary back."""
        clock = FixedClock()
        components = create_app_components(
            store=InMemoryRecordStore(),
            clock=clock,
            hasher=BcryptPasswordHasher(rounds=4),
        )
        guard, records, ledger = components.guard, components.records, components.ledger

        user_id = guard.register("bob", "longenough1").user_id
        assert guard.authenticate("bob", "longenough1").success

        today = clock.today()
        records.add_budget(
            BudgetRecord(user_id=user_id, category=Category.ENTERTAINMENT,
                         limit=Decimal("50"), period_start=today)
        )
        records.add_expense(
            ExpenseRecord(user_id=user_id, amount=Decimal("65"),
                          category=Category.ENTERTAINMENT, date=today)
        )

        [summary] = ledger.compute_summary(user_id)
        assert summary.over_amount == Decimal("15")
        assert ledger.get_total_expense_for_month(user_id, today.year, today.month) == Decimal("65")
        assert today == date(2024, 1, 15)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
