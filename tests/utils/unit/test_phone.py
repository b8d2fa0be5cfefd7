"""
Unit Tests: phone number helpers (utils/phone.py)
"""

import pytest

from exceptions.payment import InvalidPhoneNumberException
from utils.phone import mask_phone_numbers, normalize_mpesa_phone


class TestNormalizeMpesaPhone:

    @pytest.mark.parametrize("raw", [
        "0712345678",
        "712345678",
        "254712345678",
        "+254712345678",
        "+254 712 345 678",
        "0712-345-678",
    ])
    def test_safaricom_formats(self, raw):
        assert normalize_mpesa_phone(raw) == "254712345678"

    def test_new_01_prefix(self):
        assert normalize_mpesa_phone("0112345678") == "254112345678"

    @pytest.mark.parametrize("raw", ["", "12345", "0612345678", "25571234567", "+1 555 123 4567", "07123456789"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidPhoneNumberException):
            normalize_mpesa_phone(raw)


class TestMaskPhoneNumbers:

    def test_masks_long_digit_runs(self):
        assert mask_phone_numbers("Call me on 0712345678 or +254712345678") == "Call me on [hidden] or [hidden]"

    def test_keeps_short_numbers(self):
        assert mask_phone_numbers("Order 1234 ships in 3 days") == "Order 1234 ships in 3 days"

    def test_empty(self):
        assert mask_phone_numbers("") == ""
        assert mask_phone_numbers(None) is None
