"""Demo tools that echo secrets back only in partially masked form."""

from src.toolserver.text import capitalize_words, partial_mask


def set_a_secret_for_demo_purposes(username: str, secret: str) -> str:
    """Set a secret for a user. #sensitive"""
    return f"{capitalize_words(username)} new secret is {partial_mask(secret)}!"


def set_an_api_key_for_demo_purposes(url: str, key: str) -> str:
    """Set the key used to access an API. #sensitive"""
    return f"To access {url.lower()} use this {partial_mask(key)}!"
