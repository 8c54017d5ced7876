"""
nstackgen Error Hierarchy — Structured exceptions for build-pass diagnostics.

Every error carries the context needed to explain a failed pass: which input
asset was being built and which pipeline stage failed. The builder catches
these at the pass boundary, logs ``to_dict()`` and writes no output.

Hierarchy:
    NStackGenError
    ├── ConfigError              — nstack.json / nstackgen.yaml value missing or invalid
    ├── RetrievalError           — language list or payload could not be fetched
    ├── MalformedDocumentError   — default localization is not section → key → string
    │   └── InvalidIdentifierError — key cannot become a valid identifier
    ├── InvariantViolationError  — no language flagged as default
    └── EscapeOverflowError      — value cannot be embedded as a literal
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class NStackGenError(Exception):
    """
    Base error for all generation failures.
    All context is serializable to JSON for the structured build log.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.asset: Optional[str] = context.get("asset")
        self.stage: Optional[str] = context.get("stage")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def with_context(self, **context: Any) -> "NStackGenError":
        """Attach pass context (asset, stage) without overwriting what is set."""
        for key, value in context.items():
            if self.context.get(key) is None:
                self.context[key] = value
        self.asset = self.context.get("asset")
        self.stage = self.context.get("stage")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "asset": self.asset,
            "stage": self.stage,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("asset", "stage")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.asset:
            parts.append(f"asset={self.asset}")
        if self.stage:
            parts.append(f"stage={self.stage}")
        return " | ".join(parts)


class ConfigError(NStackGenError):
    """Required configuration value missing, blank or invalid."""

    def __init__(self, message: str, **context: Any):
        self.field: Optional[str] = context.get("field")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["field"] = self.field
        return d


class RetrievalError(NStackGenError):
    """
    The resolver could not produce the language list or a language payload
    (network, auth, transport, unparseable index).
    """

    def __init__(self, message: str, **context: Any):
        self.status_code: Optional[int] = context.get("status_code")
        self.url: Optional[str] = context.get("url")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["status_code"] = self.status_code
        d["url"] = self.url
        return d


class MalformedDocumentError(NStackGenError):
    """Default-language content does not have the section → key → string shape."""
    pass


class InvalidIdentifierError(MalformedDocumentError):
    """A section or translation key cannot be turned into a valid identifier."""

    def __init__(self, message: str, **context: Any):
        self.key: Optional[str] = context.get("key")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["key"] = self.key
        return d


class InvariantViolationError(NStackGenError):
    """The resolved language list has no entry flagged as default."""
    pass


class EscapeOverflowError(NStackGenError):
    """A value contains a sequence no escaping rule of the target dialect covers."""
    pass
