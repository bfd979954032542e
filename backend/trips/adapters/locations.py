"""Location search adapter using Google Places Text Search (New)."""

import logging
from typing import Any, Protocol

import httpx

from backend.trips.models.views import PlaceResult

logger = logging.getLogger(__name__)

FIELD_MASK = (
    "places.id,"
    "places.displayName,"
    "places.formattedAddress,"
    "places.editorialSummary,"
    "places.rating,"
    "places.location,"
    "places.photos"
)

PHOTO_MEDIA_URL = "https://places.googleapis.com/v1/{name}/media?maxWidthPx=400&key={key}"


class LocationResolver(Protocol):
    """External place-search provider."""

    async def search(self, query: str, limit: int) -> list[PlaceResult]:
        """Search places by free text.

        Args:
            query: Free-text query
            limit: Maximum number of results

        Returns:
            Place suggestions, best match first
        """
        ...


def _parse_place(place: dict[str, Any], api_key: str) -> PlaceResult:
    """Map one Places API result onto PlaceResult."""
    name = (place.get("displayName") or {}).get("text", "")
    address = place.get("formattedAddress", "")
    summary = (place.get("editorialSummary") or {}).get("text", "")
    location = place.get("location") or {}

    photo_url = ""
    photos = place.get("photos") or []
    if photos and photos[0].get("name") and api_key:
        photo_url = PHOTO_MEDIA_URL.format(name=photos[0]["name"], key=api_key)

    return PlaceResult(
        name=name,
        description=summary or address or name,
        address=address,
        photo_url=photo_url,
        rating=place.get("rating") or 0.0,
        place_id=place.get("id", ""),
        lat=location.get("latitude"),
        lon=location.get("longitude"),
    )


class GooglePlacesResolver:
    """LocationResolver backed by the Places Text Search endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://places.googleapis.com/v1/places:searchText",
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 4.0,
    ) -> None:
        """Initialize resolver.

        Args:
            api_key: Google Maps API key
            base_url: Text Search endpoint
            client: Optional httpx client (for testing with mocks)
            timeout_s: Per-request timeout when no client is supplied
        """
        self._api_key = api_key
        self._base_url = base_url
        self._client = client
        self._timeout_s = timeout_s

    async def search(self, query: str, limit: int) -> list[PlaceResult]:
        """Search places by free text.

        Raises:
            httpx.HTTPError: On network or HTTP errors
        """
        payload = {"textQuery": query, "maxResultCount": limit}
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_s)
            close_client = True

        try:
            logger.debug("Searching places", extra={"structured": {"query": query, "limit": limit}})
            response = await client.post(self._base_url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

            places = data.get("places", [])
            results = [_parse_place(place, self._api_key) for place in places[:limit]]
            logger.info(
                "Found places", extra={"structured": {"query": query, "count": len(results)}}
            )
            return results
        finally:
            if close_client:
                await client.aclose()
