"""
Endpoint documentation models.

An endpoint group is one JSON file under the apis directory holding a display
label and an ordered list of documented endpoints. Fields the editor does not
know about are kept so that a load/save cycle never drops data.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_endpoint_id(method: str, path: str) -> str:
    """
    Derive the stable slug id of an endpoint from its method and path.

    Example:
        generate_endpoint_id("POST", "/users/:id")  # "post-users-id"
    """
    slug = _NON_ALNUM.sub("-", f"{method}-{path}".lower())
    return slug.strip("-")


class HeaderSpec(BaseModel):
    """A documented request header."""
    model_config = ConfigDict(extra="allow")

    key: str
    value: str = ""
    required: bool = False
    description: Optional[str] = None


class ParamSpec(BaseModel):
    """A documented query parameter."""
    model_config = ConfigDict(extra="allow")

    key: str
    value: Any = ""
    required: bool = False
    encode: bool = False
    description: Optional[str] = None


class ResponseExample(BaseModel):
    """Example response shown next to an endpoint."""
    model_config = ConfigDict(extra="allow")

    # The editor sends null when its status field is left empty
    status: Optional[int] = 200
    example: Any = None


class Endpoint(BaseModel):
    """A single documented endpoint."""
    model_config = ConfigDict(extra="allow")

    id: str = Field(default="", description="Slug id, stable once assigned")
    method: str = Field(default="GET")
    path: str = Field(default="/")
    summary: Optional[str] = None
    description: Optional[str] = None
    headers: Optional[List[HeaderSpec]] = None
    params: Optional[List[ParamSpec]] = None
    body: Any = None
    response: Optional[ResponseExample] = None

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v):
        return v.upper()

    def model_post_init(self, __context: Any) -> None:
        # Only new endpoints get a derived id; an existing id is never rewritten
        if not self.id:
            self.id = generate_endpoint_id(self.method, self.path)


class EndpointGroup(BaseModel):
    """A named collection of endpoints persisted as one file."""
    model_config = ConfigDict(extra="allow")

    group: str
    description: Optional[str] = None
    endpoints: List[Endpoint] = Field(default_factory=list)

    def get_endpoint(self, endpoint_id: str) -> Optional[Endpoint]:
        for endpoint in self.endpoints:
            if endpoint.id == endpoint_id:
                return endpoint
        return None

    def upsert_endpoint(self, endpoint: Endpoint) -> None:
        """Replace the endpoint sharing ``endpoint.id`` in place, or append it."""
        for index, existing in enumerate(self.endpoints):
            if existing.id == endpoint.id:
                self.endpoints[index] = endpoint
                return
        self.endpoints.append(endpoint)

    def remove_endpoint(self, endpoint_id: str) -> bool:
        """Drop an endpoint by id. The group itself stays, even when emptied."""
        remaining = [e for e in self.endpoints if e.id != endpoint_id]
        removed = len(remaining) != len(self.endpoints)
        self.endpoints = remaining
        return removed

    def to_document(self) -> Dict[str, Any]:
        """Plain JSON document as written to disk."""
        return self.model_dump(mode="json", exclude_none=True)


__all__ = [
    "generate_endpoint_id",
    "HeaderSpec",
    "ParamSpec",
    "ResponseExample",
    "Endpoint",
    "EndpointGroup",
]
