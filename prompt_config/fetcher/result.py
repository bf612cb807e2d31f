"""
Fetch Result

Outcome of a single remote config fetch: a payload or a failure reason.
"""

from dataclasses import dataclass
from typing import Any

# Failure reasons
REASON_HTTP_STATUS = "http_status"
REASON_TRANSPORT = "transport"
REASON_INVALID_JSON = "invalid_json"


@dataclass(frozen=True)
class FetchResult:
    """Success payload vs. failure reason"""
    ok: bool
    payload: Any = None
    status_code: int | None = None
    reason: str | None = None
    error: str | None = None

    @classmethod
    def success(cls, payload: Any, status_code: int | None = None) -> "FetchResult":
        return cls(ok=True, payload=payload, status_code=status_code)

    @classmethod
    def failure(
        cls,
        reason: str,
        error: str | None = None,
        status_code: int | None = None,
    ) -> "FetchResult":
        return cls(ok=False, reason=reason, error=error, status_code=status_code)

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary (payload omitted)"""
        return {
            "ok": self.ok,
            "status_code": self.status_code,
            "reason": self.reason,
            "error": self.error,
        }
