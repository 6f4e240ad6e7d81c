import re

from hoot.core.errors import ValidationAppError

_NON_ALNUM = re.compile(r"[^A-Z0-9]")

MIN_CODE_LENGTH = 3
MAX_CODE_LENGTH = 20


def normalize_referral_code(code: str) -> str:
    """Trim, uppercase and strip everything but A-Z and 0-9.

    >>> normalize_referral_code("  summer-24 ")
    'SUMMER24'
    """
    return _NON_ALNUM.sub("", code.strip().upper())


def validate_new_referral_code(code: str) -> str:
    """Normalize a code for creation and enforce its length bounds.

    Raises:
        ValidationAppError: If the normalized code is too short or too long.
    """
    normalized = normalize_referral_code(code)
    if len(normalized) < MIN_CODE_LENGTH:
        raise ValidationAppError(
            code="referral_code_too_short",
            message=f"Referral code must be at least {MIN_CODE_LENGTH} characters",
        )
    if len(normalized) > MAX_CODE_LENGTH:
        raise ValidationAppError(
            code="referral_code_too_long",
            message=f"Referral code must be {MAX_CODE_LENGTH} characters or less",
        )
    return normalized
