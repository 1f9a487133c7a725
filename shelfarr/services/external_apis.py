"""
Shelfarr v1.0.0 - External APIs
Integration with TMDb and IGDB for metadata enrichment
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from ..config import settings
from ..models import ContentType

logger = logging.getLogger(__name__)

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"


class ExternalApiResponse(BaseModel):
    """Uniform result of a catalog call"""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


def _year_from_date(value: Optional[str]) -> Optional[int]:
    if value and len(value) >= 4 and value[:4].isdigit():
        return int(value[:4])
    return None


def _year_from_timestamp(value: Optional[int]) -> Optional[int]:
    if not value:
        return None
    return time.gmtime(value).tm_year


class TMDbAPI:
    """The Movie Database API integration for movie/TV metadata"""

    @staticmethod
    async def _get(endpoint: str, params: Optional[Dict[str, Any]] = None) -> ExternalApiResponse:
        if not settings.TMDB_API_KEY:
            return ExternalApiResponse(success=False, error="TMDb API key not configured")

        query = {"api_key": settings.TMDB_API_KEY}
        query.update(params or {})

        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(
                    f"{settings.TMDB_BASE_URL}{endpoint}",
                    params=query,
                    timeout=settings.EXTERNAL_API_TIMEOUT,
                )
                response.raise_for_status()
                return ExternalApiResponse(success=True, data=response.json())

            except httpx.HTTPError as e:
                logger.error(f"TMDb request failed for {endpoint}: {e}")
                return ExternalApiResponse(success=False, error=str(e))

    @staticmethod
    def _search_result(item: Dict[str, Any], kind: str) -> Dict[str, Any]:
        is_movie = kind == "movie"
        return {
            "id": str(item["id"]),
            "title": item.get("title") if is_movie else item.get("name"),
            "year": _year_from_date(item.get("release_date") if is_movie else item.get("first_air_date")),
            "poster": f"{TMDB_IMAGE_BASE_URL}{item['poster_path']}" if item.get("poster_path") else None,
            "overview": item.get("overview") or None,
            "type": kind,
        }

    @staticmethod
    def _details(data: Dict[str, Any], kind: str) -> Dict[str, Any]:
        details = TMDbAPI._search_result(data, kind)
        details.update(
            {
                "tmdb_id": data.get("id"),
                "imdb_id": (data.get("external_ids") or {}).get("imdb_id") or data.get("imdb_id"),
                "genre": [g["name"] for g in data.get("genres", [])],
            }
        )
        return details

    @staticmethod
    async def search_movies(query: str, year: Optional[int] = None) -> ExternalApiResponse:
        """
        Search TMDb for movies

        Args:
            query: Movie title
            year: Optional release year

        Returns:
            ExternalApiResponse with a list of normalized results
        """
        query = (query or "").strip()
        if not query:
            return ExternalApiResponse(success=False, error="Invalid search query")

        params: Dict[str, Any] = {"query": query, "include_adult": "false"}
        if year:
            params["year"] = year

        response = await TMDbAPI._get("/search/movie", params)
        if not response.success:
            return response

        results = [TMDbAPI._search_result(item, "movie") for item in response.data.get("results", [])]
        return ExternalApiResponse(success=True, data=results)

    @staticmethod
    async def get_movie_details(tmdb_id: str) -> ExternalApiResponse:
        """Movie details including IMDb id and genres"""
        if not str(tmdb_id).isdigit():
            return ExternalApiResponse(success=False, error="Invalid TMDB ID")

        response = await TMDbAPI._get(f"/movie/{tmdb_id}", {"append_to_response": "external_ids"})
        if not response.success:
            return response

        return ExternalApiResponse(success=True, data=TMDbAPI._details(response.data, "movie"))

    @staticmethod
    async def search_tv_shows(query: str, year: Optional[int] = None) -> ExternalApiResponse:
        """Search TMDb for TV shows"""
        query = (query or "").strip()
        if not query:
            return ExternalApiResponse(success=False, error="Invalid search query")

        params: Dict[str, Any] = {"query": query, "include_adult": "false"}
        if year:
            params["first_air_date_year"] = year

        response = await TMDbAPI._get("/search/tv", params)
        if not response.success:
            return response

        results = [TMDbAPI._search_result(item, "tv") for item in response.data.get("results", [])]
        return ExternalApiResponse(success=True, data=results)

    @staticmethod
    async def get_tv_show_details(tmdb_id: str) -> ExternalApiResponse:
        if not str(tmdb_id).isdigit():
            return ExternalApiResponse(success=False, error="Invalid TMDB ID")

        response = await TMDbAPI._get(f"/tv/{tmdb_id}", {"append_to_response": "external_ids"})
        if not response.success:
            return response

        details = TMDbAPI._details(response.data, "tv")
        details["seasons"] = response.data.get("number_of_seasons")
        details["episodes"] = response.data.get("number_of_episodes")
        return ExternalApiResponse(success=True, data=details)


class IGDBAPI:
    """IGDB API integration for game metadata (Twitch client credentials)"""

    # Refresh the token this long before it expires
    TOKEN_REFRESH_BUFFER = 60 * 60

    _access_token: Optional[str] = None
    _token_expires_at: float = 0.0

    @classmethod
    def reset_token(cls) -> None:
        cls._access_token = None
        cls._token_expires_at = 0.0

    @classmethod
    async def get_access_token(cls) -> Optional[str]:
        """
        Return a cached access token, requesting a new one when missing or
        close to expiry
        """
        if not settings.IGDB_CLIENT_ID or not settings.IGDB_CLIENT_SECRET:
            return None

        if cls._access_token and time.time() < cls._token_expires_at - cls.TOKEN_REFRESH_BUFFER:
            return cls._access_token

        logger.info("Requesting new IGDB access token")
        async with httpx.AsyncClient() as client:
            response = await client.post(
                settings.IGDB_AUTH_URL,
                data={
                    "client_id": settings.IGDB_CLIENT_ID,
                    "client_secret": settings.IGDB_CLIENT_SECRET,
                    "grant_type": "client_credentials",
                },
                timeout=settings.EXTERNAL_API_TIMEOUT,
            )
            response.raise_for_status()
            payload = response.json()

        cls._access_token = payload["access_token"]
        cls._token_expires_at = time.time() + int(payload.get("expires_in", 0))
        return cls._access_token

    @classmethod
    async def _post(cls, endpoint: str, body: str) -> ExternalApiResponse:
        try:
            token = await cls.get_access_token()
        except httpx.HTTPError as e:
            logger.error(f"IGDB authentication failed: {e}")
            return ExternalApiResponse(success=False, error=f"IGDB authentication failed: {e}")

        if not token:
            return ExternalApiResponse(success=False, error="IGDB credentials not configured")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    f"{settings.IGDB_BASE_URL}{endpoint}",
                    content=body,
                    headers={
                        "Client-ID": settings.IGDB_CLIENT_ID,
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "text/plain",
                    },
                    timeout=settings.EXTERNAL_API_TIMEOUT,
                )
                if response.status_code == 401:
                    # Revoked token: re-authenticate on the next call
                    cls.reset_token()
                response.raise_for_status()
                return ExternalApiResponse(success=True, data=response.json())

            except httpx.HTTPError as e:
                logger.error(f"IGDB request failed for {endpoint}: {e}")
                return ExternalApiResponse(success=False, error=str(e))

    @staticmethod
    def _search_result(game: Dict[str, Any]) -> Dict[str, Any]:
        cover = (game.get("cover") or {}).get("url")
        return {
            "id": str(game["id"]),
            "title": game.get("name"),
            "year": _year_from_timestamp(game.get("first_release_date")),
            "poster": f"https:{cover.replace('t_thumb', 't_cover_big')}" if cover else None,
            "overview": game.get("summary") or None,
            "type": "game",
        }

    @staticmethod
    def _escape(query: str) -> str:
        return query.replace("\\", " ").replace('"', " ").strip()

    @classmethod
    async def search_games(cls, query: str, limit: int = 20) -> ExternalApiResponse:
        """
        Search IGDB for games (main games only)

        Args:
            query: Game title
            limit: Number of results

        Returns:
            ExternalApiResponse with a list of normalized results
        """
        query = cls._escape(query or "")
        if not query:
            return ExternalApiResponse(success=False, error="Invalid search query")

        body = (
            f'search "{query}";\n'
            "fields id, name, summary, cover.url, first_release_date, genres.name, platforms.name;\n"
            f"limit {limit};\n"
            "where category = 0;"
        )
        response = await cls._post("/games", body)
        if not response.success:
            return response

        return ExternalApiResponse(success=True, data=[cls._search_result(g) for g in response.data])

    @classmethod
    async def get_game_details(cls, igdb_id: str) -> ExternalApiResponse:
        if not str(igdb_id).isdigit():
            return ExternalApiResponse(success=False, error="Invalid IGDB ID")

        body = (
            "fields id, name, summary, cover.url, first_release_date, genres.name, "
            "platforms.name, platforms.abbreviation;\n"
            f"where id = {igdb_id};"
        )
        response = await cls._post("/games", body)
        if not response.success:
            return response
        if not response.data:
            return ExternalApiResponse(success=False, error="Game not found")

        game = response.data[0]
        details = cls._search_result(game)
        details.update(
            {
                "igdb_id": game.get("id"),
                "platforms": [p.get("name") for p in game.get("platforms", []) if p.get("name")],
                "genre": [g.get("name") for g in game.get("genres", []) if g.get("name")],
            }
        )
        return ExternalApiResponse(success=True, data=details)


async def _search_games(title: str, year: Optional[int] = None) -> ExternalApiResponse:
    return await IGDBAPI.search_games(title, limit=5)


class CatalogLookup:
    """Search and details per content type, as used by the library scanner"""

    SEARCH = {
        ContentType.MOVIE: TMDbAPI.search_movies,
        ContentType.TV_SHOW: TMDbAPI.search_tv_shows,
        ContentType.GAME: _search_games,
    }
    DETAILS = {
        ContentType.MOVIE: TMDbAPI.get_movie_details,
        ContentType.TV_SHOW: TMDbAPI.get_tv_show_details,
        ContentType.GAME: IGDBAPI.get_game_details,
    }

    async def search(
        self, content_type: ContentType, title: str, year: Optional[int] = None
    ) -> ExternalApiResponse:
        return await self.SEARCH[ContentType(content_type)](title, year)

    async def get_details(self, content_type: ContentType, catalog_id: str) -> ExternalApiResponse:
        return await self.DETAILS[ContentType(content_type)](catalog_id)

    async def best_match(
        self, content_type: ContentType, title: str, year: Optional[int] = None
    ) -> Optional[Dict[str, Any]]:
        """Details of the first search hit, or None"""
        results = await self.search(content_type, title, year)
        if not results.success or not results.data:
            return None

        hits: List[Dict[str, Any]] = results.data
        details = await self.get_details(content_type, hits[0]["id"])
        if not details.success:
            return None
        return details.data
