"""
Proxy API Models

Pydantic models for the ``/proxy`` relay endpoint.
"""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ProxyRequest(BaseModel):
    """Description of an outbound request the browser wants relayed."""
    model_config = ConfigDict(extra="ignore")

    method: Optional[str] = None
    url: Optional[str] = None
    headers: Dict[str, str] = {}
    body: Any = None

    @field_validator("headers", mode="before")
    @classmethod
    def stringify_headers(cls, v):
        """Header values are opaque; scalars are sent in their JSON text form."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            return v
        return {
            str(key): value if isinstance(value, str) else json.dumps(value)
            for key, value in v.items()
            if value is not None
        }


class ErrorResponse(BaseModel):
    """Error body returned by every JSON endpoint."""
    error: str


__all__ = [
    "ProxyRequest",
    "ErrorResponse",
]
