"""Adapter exception hierarchy.

Store failures are ``pymongo.errors.PyMongoError`` instances and are
propagated unchanged; ``StoreError`` is re-exported for callers that want to
catch them without importing pymongo.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any

from pymongo.errors import PyMongoError as StoreError


class AdapterError(Exception):
    """Root exception for the collection adapter."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ConfigurationError(AdapterError):
    """Raised at construction when a collection definition is unusable."""


class CriteriaError(AdapterError):
    """Caller-supplied criteria could not be translated.

    When the offending token is known, close matches among the accepted
    tokens are offered as suggestions.
    """

    def __init__(
        self,
        message: str,
        *,
        token: str | None = None,
        valid_tokens: list[str] | None = None,
    ) -> None:
        self.message = message
        self.token = token
        self.suggestions: list[str] = []
        if token is not None and valid_tokens:
            self.suggestions = get_close_matches(token, valid_tokens, n=3, cutoff=0.6)
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "CRITERIA_ERROR",
            "message": self.message,
            "token": self.token,
            "suggestions": self.suggestions,
        }


class DocumentError(AdapterError):
    """Raised when a value bag cannot be coerced into a document."""


class NotFoundError(AdapterError):
    """Raised when the lookup stage of an update fails."""


class RefetchError(AdapterError):
    """The update was applied but the updated documents could not be read back."""

    def __init__(self, identity: str, updated_ids: list[Any]) -> None:
        self.identity = identity
        self.updated_ids = updated_ids
        super().__init__(
            f"update on {identity!r} applied to {len(updated_ids)} document(s) "
            "but re-fetching them failed"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "REFETCH_ERROR",
            "identity": self.identity,
            "updated_ids": [str(i) for i in self.updated_ids],
        }


class MongoConnectionError(AdapterError):
    """Raised when connection to MongoDB fails or is used before connecting."""


__all__ = [
    "AdapterError",
    "ConfigurationError",
    "CriteriaError",
    "DocumentError",
    "MongoConnectionError",
    "NotFoundError",
    "RefetchError",
    "StoreError",
]
