from .editor import SaveApiRequest, SaveApiResponse, UpdateIndexRequest, UpdateIndexResponse
from .proxy import ErrorResponse, ProxyRequest

__all__ = [
    "ProxyRequest",
    "ErrorResponse",
    "SaveApiRequest",
    "SaveApiResponse",
    "UpdateIndexRequest",
    "UpdateIndexResponse",
]
