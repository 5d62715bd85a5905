"""Response Pydantic model for token data."""

# flake8: noqa: F401 – re-export
from chatauth.domain.value_objects.token import TokenPair

__all__ = ["TokenPair"]
