"""Unit tests for Settings.

Tests cover:
- Comma-separated list parsing from environment variables
- Rate limit backend validation
- Positive-number validation
- Development secrets rejected in production
- Environment convenience properties
"""

import pytest
from pydantic import ValidationError

from src.core.config import DEVELOPMENT_SECRET, Settings
from src.core.enums import Environment


@pytest.mark.unit
class TestSettingsParsing:
    """Test environment parsing."""

    def test_comma_separated_lists(self, monkeypatch):
        """List settings accept comma-separated strings."""
        monkeypatch.setenv("RATE_LIMIT_WHITELIST", " 10.0.0.1, 10.0.0.2 ,")
        monkeypatch.setenv("CSRF_EXEMPT_PATHS", "/a,/b/")

        settings = Settings()

        assert settings.rate_limit_whitelist == ["10.0.0.1", "10.0.0.2"]
        assert settings.csrf_exempt_paths == ["/a", "/b/"]

    def test_lists_accept_python_values(self):
        settings = Settings(csrf_trusted_origins=["https://app.example.com"])

        assert settings.csrf_trusted_origins == ["https://app.example.com"]

    def test_api_base_url_trailing_slash_removed(self):
        assert Settings(api_base_url="https://api.example.com/").api_base_url == (
            "https://api.example.com"
        )


@pytest.mark.unit
class TestSettingsValidation:
    """Test field and model validators."""

    @pytest.mark.parametrize("backend", ["memory", "REDIS", " redis "])
    def test_valid_backends_normalized(self, backend):
        settings = Settings(rate_limit_backend=backend)

        assert settings.rate_limit_backend == backend.strip().lower()

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(rate_limit_backend="memcached")

    @pytest.mark.parametrize(
        "field", ["lockout_threshold", "lockout_duration_seconds", "sweep_batch_size"]
    )
    def test_non_positive_values_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_bcrypt_rounds_range(self):
        with pytest.raises(ValidationError):
            Settings(bcrypt_rounds=4)

    def test_production_rejects_development_secrets(self):
        """Production must set its own secrets."""
        with pytest.raises(ValidationError, match="idempotency_secret"):
            Settings(environment=Environment.PRODUCTION)

    def test_production_with_real_secrets(self):
        settings = Settings(
            environment=Environment.PRODUCTION,
            idempotency_secret="a",
            admin_api_key="b",
            webhook_secret="c",
        )

        assert settings.is_production is True
        assert DEVELOPMENT_SECRET not in (
            settings.idempotency_secret,
            settings.admin_api_key,
            settings.webhook_secret,
        )


@pytest.mark.unit
class TestSettingsEnvironment:
    """Test environment properties."""

    def test_testing_environment_from_conftest(self):
        """The suite runs with ENVIRONMENT=testing."""
        settings = Settings()

        assert settings.is_testing is True
        assert settings.is_development is False
        assert settings.is_ci is False
