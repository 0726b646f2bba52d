from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PROFILE_NOT_FOUND = "profile_not_found"
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    PHOTO = "photo"
    STORAGE = "storage"
    UNEXPECTED = "unexpected"


class ServiceResult(BaseModel):
    """
    Outcome of a service call.

    Success carries a payload keyed by entity name (``report``, ``reports``,
    ``user`` ...); failure carries a message and an ``ErrorKind``.
    """
    success: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ok(cls, **payload: Any) -> "ServiceResult":
        return cls(success=True, payload=payload)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.UNEXPECTED) -> "ServiceResult":
        return cls(success=False, error=error, error_kind=kind)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.payload[key]

    def to_envelope(self) -> Dict[str, Any]:
        """Flat ``{success, error?, <entity fields>}`` dict used by API responses."""
        envelope: Dict[str, Any] = {"success": self.success}
        if not self.success:
            envelope["error"] = self.error
            envelope["error_kind"] = self.error_kind.value if self.error_kind else None
        envelope.update(self.payload)
        return envelope
