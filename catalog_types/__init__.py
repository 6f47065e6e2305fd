from .categories import MovieCategory, RequestStatus
from .errors import (
    ERROR_MESSAGES,
    CatalogError,
    ConfigurationError,
    ErrorKind,
    RequestCancelled,
)
from .pages import ListPage, PaginatedListState

__all__ = [
    "ERROR_MESSAGES",
    "CatalogError",
    "ConfigurationError",
    "ErrorKind",
    "ListPage",
    "MovieCategory",
    "PaginatedListState",
    "RequestCancelled",
    "RequestStatus",
]
