import re

from exceptions.payment import InvalidPhoneNumberException

PHONE_MASK_PATTERN = re.compile(r'(\+?\d{10,15})')
PHONE_MASK_REPLACEMENT = "[hidden]"


def normalize_mpesa_phone(phone: str) -> str:
    """
    Normalise a Kenyan mobile number to the 2547XXXXXXXX form M-Pesa expects.

    Accepts 07XXXXXXXX, 7XXXXXXXX, 2547XXXXXXXX and +2547XXXXXXXX
    (spaces and dashes are ignored).
    """
    cleaned = re.sub(r'[\s\-]', '', phone or '')
    if cleaned.startswith('+'):
        cleaned = cleaned[1:]
    if cleaned.startswith('0'):
        cleaned = '254' + cleaned[1:]
    elif cleaned.startswith('7') or cleaned.startswith('1'):
        cleaned = '254' + cleaned
    if not re.fullmatch(r'254[17]\d{8}', cleaned):
        raise InvalidPhoneNumberException(phone)
    return cleaned


def mask_phone_numbers(text: str | None) -> str | None:
    """Replace phone-number-like digit runs with [hidden] so buyers and suppliers can't move off-platform."""
    if not text:
        return text
    return PHONE_MASK_PATTERN.sub(PHONE_MASK_REPLACEMENT, text)
