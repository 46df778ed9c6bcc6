"""
Editor API Models

Request bodies accepted by the endpoint editor's persistence routes.
Required fields are optional here so that a missing value is reported with
the editor's own error message instead of a validation dump.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class SaveApiRequest(BaseModel):
    """Body of ``POST /save-api``."""
    model_config = ConfigDict(extra="ignore")

    fileName: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class SaveApiResponse(BaseModel):
    ok: bool = True
    file: str


class UpdateIndexRequest(BaseModel):
    """Body of ``POST /update-index``."""
    model_config = ConfigDict(extra="ignore")

    file: Optional[str] = None


class UpdateIndexResponse(BaseModel):
    ok: bool = True
    index: List[str]


__all__ = [
    "SaveApiRequest",
    "SaveApiResponse",
    "UpdateIndexRequest",
    "UpdateIndexResponse",
]
