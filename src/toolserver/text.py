"""String helpers for display and secret masking."""

from typing import Optional

MASK_CHAR = "*"
VISIBLE_CHARS = 4


def capitalize_words(value: str) -> str:
    """Capitalize the first letter of each space-separated word.

    The remainder of each word is lower-cased. Runs of spaces are kept as-is.

    >>> capitalize_words("aDA  lovelace")
    'Ada  Lovelace'
    """
    if not value:
        return value
    return " ".join(
        word[0].upper() + word[1:].lower() if word else word
        for word in value.split(" ")
    )


def partial_mask(value: Optional[str], visible_chars: int = VISIBLE_CHARS) -> str:
    """Keep the first few characters of a secret and star out the rest.

    Values no longer than ``visible_chars`` are fully masked.
    """
    if not value:
        return ""
    if len(value) <= visible_chars:
        return MASK_CHAR * len(value)
    return value[:visible_chars] + MASK_CHAR * (len(value) - visible_chars)


def mask_secret_tail(value: Optional[str], visible_chars: int = VISIBLE_CHARS) -> str:
    """Star out a secret except for its last few characters.

    Values no longer than ``visible_chars`` are fully masked.
    """
    if not value:
        return value or ""
    if len(value) <= visible_chars:
        return MASK_CHAR * len(value)
    return MASK_CHAR * (len(value) - visible_chars) + value[-visible_chars:]
