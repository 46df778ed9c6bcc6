"""
File-backed storage for documented endpoint groups and their index.
"""

from .endpoint_store import EndpointStore, sanitize_file_name
from .exceptions import InvalidFileNameError, StoreError, StoreWriteError
from .models import (
    Endpoint,
    EndpointGroup,
    HeaderSpec,
    ParamSpec,
    ResponseExample,
    generate_endpoint_id,
)

__all__ = [
    "EndpointStore",
    "sanitize_file_name",
    "StoreError",
    "InvalidFileNameError",
    "StoreWriteError",
    "Endpoint",
    "EndpointGroup",
    "HeaderSpec",
    "ParamSpec",
    "ResponseExample",
    "generate_endpoint_id",
]
