# gateway.py
import logging
from typing import Any, Dict, Mapping, Optional

from cache_store import ResponseCache
from cancellation import InFlightRequestToken
from catalog_types import CatalogError, ListPage, MovieCategory
from config import DEFAULT_IMAGE_BASE_URL, DEFAULT_LANGUAGE, Settings
from http_client import HttpClient

logger = logging.getLogger(__name__)

# -----------------------------------------------------------
# Logical cache keys, one per operation kind
# -----------------------------------------------------------
CATEGORY_KEYS = {
    MovieCategory.NOW_PLAYING: "movies:now_playing",
    MovieCategory.POPULAR: "movies:popular",
    MovieCategory.TOP_RATED: "movies:top_rated",
    MovieCategory.UPCOMING: "movies:upcoming",
}
MOVIE_DETAIL_KEY = "movies:detail"
SEARCH_KEY = "search:movies"

CATEGORY_PATHS = {
    MovieCategory.NOW_PLAYING: "/movie/now_playing",
    MovieCategory.POPULAR: "/movie/popular",
    MovieCategory.TOP_RATED: "/movie/top_rated",
    MovieCategory.UPCOMING: "/movie/upcoming",
}
MOVIE_DETAIL_PATH = "/movie"
SEARCH_PATH = "/search/movie"

POSTER_SIZE = "w342"
BACKDROP_SIZE = "w780"
PROFILE_SIZE = "w185"


class CatalogGateway:
    """
    Domain reads over the catalog API with a read-through cache.

    On a cache HIT no upstream request is performed. Failures propagate
    unchanged from HttpClient and are never cached or retried.
    """

    def __init__(
        self,
        client: HttpClient,
        cache: ResponseCache,
        image_base_url: str = DEFAULT_IMAGE_BASE_URL,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self.client = client
        self.cache = cache
        self.image_base_url = image_base_url.rstrip("/")
        self.language = language
        self.upstream_calls = 0  # incremented every time we actually hit the API

    async def _read_through(
        self,
        logical_key: str,
        params: Mapping[str, Any],
        path: str,
        query_params: Mapping[str, Any],
        cancellation_token: Optional[InFlightRequestToken],
        parse=None,
    ) -> Any:
        cached = self.cache.get(logical_key, params)
        if cached is not None:
            logger.info("CACHE HIT → key=%s params=%s", logical_key, dict(params))
            return cached

        logger.info("CACHE MISS → key=%s params=%s", logical_key, dict(params))
        payload = await self.client.get(path, query_params, cancellation_token=cancellation_token)
        self.upstream_calls += 1
        value = parse(payload) if parse is not None else payload
        self.cache.set(logical_key, params, value)
        return value

    # -----------------------------------------------------------
    # Lists
    # -----------------------------------------------------------
    async def list_movies(
        self,
        category: MovieCategory,
        page: int = 1,
        cancellation_token: Optional[InFlightRequestToken] = None,
    ) -> ListPage:
        category = MovieCategory(category)
        if page < 1:
            raise ValueError("page numbers start at 1")
        return await self._read_through(
            CATEGORY_KEYS[category],
            {"page": page},
            CATEGORY_PATHS[category],
            {"page": page, "language": self.language},
            cancellation_token,
            parse=ListPage.from_payload,
        )

    async def now_playing(self, page: int = 1, cancellation_token: Optional[InFlightRequestToken] = None) -> ListPage:
        return await self.list_movies(MovieCategory.NOW_PLAYING, page, cancellation_token)

    async def popular(self, page: int = 1, cancellation_token: Optional[InFlightRequestToken] = None) -> ListPage:
        return await self.list_movies(MovieCategory.POPULAR, page, cancellation_token)

    async def top_rated(self, page: int = 1, cancellation_token: Optional[InFlightRequestToken] = None) -> ListPage:
        return await self.list_movies(MovieCategory.TOP_RATED, page, cancellation_token)

    async def upcoming(self, page: int = 1, cancellation_token: Optional[InFlightRequestToken] = None) -> ListPage:
        return await self.list_movies(MovieCategory.UPCOMING, page, cancellation_token)

    # -----------------------------------------------------------
    # Detail
    # -----------------------------------------------------------
    async def movie_details(
        self,
        movie_id: int,
        cancellation_token: Optional[InFlightRequestToken] = None,
    ) -> Dict[str, Any]:
        return await self._read_through(
            MOVIE_DETAIL_KEY,
            {"movie_id": movie_id},
            f"{MOVIE_DETAIL_PATH}/{movie_id}",
            {"language": self.language, "append_to_response": "credits"},
            cancellation_token,
        )

    async def movie_details_or_none(
        self,
        movie_id: int,
        cancellation_token: Optional[InFlightRequestToken] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Detail lookup for secondary views (tooltips, previews).
        A failure degrades to None instead of an error; cancellation still raises.
        """
        try:
            return await self.movie_details(movie_id, cancellation_token)
        except CatalogError as e:
            if e.cancelled:
                raise
            logger.warning("Detail lookup for movie %s degraded: %s (%s)", movie_id, e.message, e.kind.value)
            return None

    # -----------------------------------------------------------
    # Search
    # -----------------------------------------------------------
    async def search_movies(
        self,
        query: str,
        page: int = 1,
        cancellation_token: Optional[InFlightRequestToken] = None,
    ) -> ListPage:
        query = (query or "").strip()
        # Don't cache empty queries
        if not query:
            return ListPage.empty()
        if page < 1:
            raise ValueError("page numbers start at 1")
        return await self._read_through(
            SEARCH_KEY,
            {"query": query, "page": page},
            SEARCH_PATH,
            {"query": query, "page": page, "language": self.language, "include_adult": False},
            cancellation_token,
            parse=ListPage.from_payload,
        )

    # -----------------------------------------------------------
    # Images
    # -----------------------------------------------------------
    def image_url(self, path: Optional[str], size: str = "original") -> Optional[str]:
        if not path:
            return None
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.image_base_url}/{size}{path}"

    def poster_url(self, movie: Mapping[str, Any], size: str = POSTER_SIZE) -> Optional[str]:
        return self.image_url(movie.get("poster_path"), size)

    def backdrop_url(self, movie: Mapping[str, Any], size: str = BACKDROP_SIZE) -> Optional[str]:
        return self.image_url(movie.get("backdrop_path"), size)

    def profile_url(self, person: Mapping[str, Any], size: str = PROFILE_SIZE) -> Optional[str]:
        return self.image_url(person.get("profile_path"), size)

    # -----------------------------------------------------------
    # Invalidation & stats
    # -----------------------------------------------------------
    def invalidate_category(self, category: MovieCategory) -> int:
        key = CATEGORY_KEYS[MovieCategory(category)]
        removed = self.cache.invalidate_by_prefix(key)
        logger.info("CACHE INVALIDATE → key=%s removed=%s", key, removed)
        return removed

    def invalidate_movie_detail(self, movie_id: int) -> None:
        self.cache.invalidate(MOVIE_DETAIL_KEY, {"movie_id": movie_id})

    def invalidate_search(self) -> int:
        return self.cache.invalidate_by_prefix(SEARCH_KEY)

    def invalidate_all(self) -> None:
        """Clear the cache and reset the upstream call counter."""
        self.cache.clear()
        self.upstream_calls = 0
        logger.info("Cache cleared")

    def stats(self) -> dict:
        """Return cache metrics plus upstream call count."""
        stats = self.cache.stats()
        stats["upstream_calls"] = self.upstream_calls
        return stats


def build_gateway(settings: Settings) -> CatalogGateway:
    """Wire one client and one cache into a gateway; call once at startup."""
    client = HttpClient(settings.base_url, settings.api_key, timeout=settings.request_timeout_seconds)
    cache = ResponseCache(ttl_seconds=settings.cache_ttl_seconds)
    return CatalogGateway(client, cache, image_base_url=settings.image_base_url, language=settings.language)
