"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional

from enums.runtime_environment import RuntimeEnvironment


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_jwt_secret(secret: Optional[str]) -> None:
    """
    Validate the secret used to sign access tokens.

    Raises:
        ConfigValidationError: If secret is missing or too weak
    """
    if not secret or len(secret.strip()) == 0:
        raise ConfigValidationError(
            "JWT_SECRET is required for signing access tokens!\n"
            "Generate a secure secret with: openssl rand -hex 32\n"
            "Add to .env: JWT_SECRET=<your-generated-secret>"
        )

    if len(secret) < 32:
        raise ConfigValidationError(
            f"JWT_SECRET must be at least 32 characters long (currently: {len(secret)})\n"
            "Generate a secure secret with: openssl rand -hex 32"
        )


def validate_callback_secret(callback_secret: Optional[str]) -> None:
    """
    Validate the optional M-Pesa callback signing secret.

    Unset means callbacks are accepted unsigned; a set but short secret is rejected.
    """
    if callback_secret and len(callback_secret) < 32:
        raise ConfigValidationError(
            f"MPESA_CALLBACK_SECRET is too weak (length: {len(callback_secret)}, minimum: 32)!\n"
            "Generate a secure secret with: openssl rand -hex 32\n"
            "Leave it empty to accept unsigned callbacks."
        )


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_positive(value, name: str) -> None:
    if value is None or value <= 0:
        raise ConfigValidationError(f"{name} must be positive (got: {value})")


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_jwt_secret(getattr(config_module, 'JWT_SECRET', None))
    validate_callback_secret(getattr(config_module, 'MPESA_CALLBACK_SECRET', None))

    validate_positive(getattr(config_module, 'PAGE_ENTRIES', None), 'PAGE_ENTRIES')
    validate_positive(getattr(config_module, 'PAYMENT_TIMEOUT_MINUTES', None), 'PAYMENT_TIMEOUT_MINUTES')
    validate_positive(getattr(config_module, 'LOGIN_MAX_ATTEMPTS', None), 'LOGIN_MAX_ATTEMPTS')

    commission = getattr(config_module, 'COMMISSION_PERCENTAGE', None)
    if commission is None or not 0 <= commission < 100:
        raise ConfigValidationError(f"COMMISSION_PERCENTAGE must be in [0, 100) (got: {commission})")

    # Gateway credentials are only mandatory in production
    if getattr(config_module, 'RUNTIME_ENVIRONMENT', None) == RuntimeEnvironment.PROD:
        validate_required_config(getattr(config_module, 'MPESA_CONSUMER_KEY', None), 'MPESA_CONSUMER_KEY')
        validate_required_config(getattr(config_module, 'MPESA_CONSUMER_SECRET', None), 'MPESA_CONSUMER_SECRET')
        validate_required_config(getattr(config_module, 'MPESA_SHORTCODE', None), 'MPESA_SHORTCODE', '174379')
        validate_required_config(getattr(config_module, 'MPESA_PASSKEY', None), 'MPESA_PASSKEY')
        validate_required_config(getattr(config_module, 'MPESA_CALLBACK_URL', None), 'MPESA_CALLBACK_URL',
                                 'https://example.com/api/v1/payments/mpesa/callback')


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
