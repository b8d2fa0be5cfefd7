"""
Unit Tests: startup configuration validation (utils/config_validator.py)
"""

from types import SimpleNamespace

import pytest

from enums.runtime_environment import RuntimeEnvironment
from utils.config_validator import (
    ConfigValidationError,
    validate_callback_secret,
    validate_jwt_secret,
    validate_or_exit,
    validate_startup_config,
)


def valid_config(**overrides) -> SimpleNamespace:
    values = dict(
        RUNTIME_ENVIRONMENT=RuntimeEnvironment.DEV,
        JWT_SECRET="a" * 32,
        MPESA_CALLBACK_SECRET=None,
        PAGE_ENTRIES=10,
        PAYMENT_TIMEOUT_MINUTES=5,
        LOGIN_MAX_ATTEMPTS=5,
        COMMISSION_PERCENTAGE=10.0,
        MPESA_CONSUMER_KEY=None,
        MPESA_CONSUMER_SECRET=None,
        MPESA_SHORTCODE=None,
        MPESA_PASSKEY=None,
        MPESA_CALLBACK_URL=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestSecrets:

    @pytest.mark.parametrize("secret", [None, "", "   ", "short"])
    def test_weak_jwt_secret(self, secret):
        with pytest.raises(ConfigValidationError):
            validate_jwt_secret(secret)

    def test_strong_jwt_secret(self):
        validate_jwt_secret("x" * 32)

    def test_callback_secret_optional_but_strong_when_set(self):
        validate_callback_secret(None)
        validate_callback_secret("s" * 32)
        with pytest.raises(ConfigValidationError):
            validate_callback_secret("short")


class TestStartupConfig:

    def test_valid_dev_config(self):
        validate_startup_config(valid_config())

    @pytest.mark.parametrize("overrides", [
        {"PAGE_ENTRIES": 0},
        {"PAYMENT_TIMEOUT_MINUTES": -1},
        {"COMMISSION_PERCENTAGE": 100},
        {"COMMISSION_PERCENTAGE": -5},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigValidationError):
            validate_startup_config(valid_config(**overrides))

    def test_production_requires_gateway_credentials(self):
        with pytest.raises(ConfigValidationError, match="MPESA_CONSUMER_KEY"):
            validate_startup_config(valid_config(RUNTIME_ENVIRONMENT=RuntimeEnvironment.PROD))

    def test_production_with_credentials(self):
        validate_startup_config(valid_config(
            RUNTIME_ENVIRONMENT=RuntimeEnvironment.PROD,
            MPESA_CONSUMER_KEY="key", MPESA_CONSUMER_SECRET="secret", MPESA_SHORTCODE="174379",
            MPESA_PASSKEY="passkey", MPESA_CALLBACK_URL="https://shop.example.com/api/v1/payments/mpesa/callback",
        ))

    def test_validate_or_exit(self):
        with pytest.raises(SystemExit) as exc_info:
            validate_or_exit(valid_config(JWT_SECRET=None))
        assert exc_info.value.code == 1
