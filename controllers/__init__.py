from .base import PaginatedController
from .detail_controller import MovieDetailController
from .list_controller import PaginatedListController
from .search_controller import DebouncedSearchController

__all__ = [
    "DebouncedSearchController",
    "MovieDetailController",
    "PaginatedController",
    "PaginatedListController",
]
