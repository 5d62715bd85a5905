"""Helpers for keeping personal data out of log events."""

from typing import Optional


def mask_email(email: Optional[str]) -> Optional[str]:
    """Masks the local part of an email, e.g. ``jo***@example.com``."""
    if not email:
        return email
    local, _, domain = email.partition("@")
    return f"{local[:2]}***@{domain}" if domain else f"{local[:2]}***"


def mask_username(username: Optional[str]) -> Optional[str]:
    if not username:
        return username
    return username[:3] + "***" if len(username) > 3 else username
