"""FatSecret Platform API client."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx

from pantry_pal.services.recipe_search import RecipeSearchClient

# Refresh the token slightly before the server says it expires.
_TOKEN_EXPIRY_MARGIN = timedelta(seconds=60)


@dataclass
class HttpxFatSecretClient(RecipeSearchClient):
    """HTTPX-backed FatSecret client using OAuth2 client credentials."""

    client_id: str
    client_secret: str
    base_url: str
    token_url: str
    http_client: httpx.AsyncClient
    _token: str | None = field(default=None, init=False, repr=False)
    _token_expires_at: datetime | None = field(default=None, init=False, repr=False)

    @classmethod
    def create(
        cls, client_id: str, client_secret: str, base_url: str, token_url: str
    ) -> "HttpxFatSecretClient":
        """Create a FatSecret client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            base_url=base_url,
            token_url=token_url,
            http_client=httpx.AsyncClient(),
        )

    async def search_recipes(
        self, expression: str, max_results: int = 20
    ) -> dict[str, object]:
        """Search recipes matching a search expression."""
        return await self._call(
            "recipes.search.v3",
            search_expression=expression,
            max_results=str(max_results),
        )

    async def get_recipe(self, recipe_id: str) -> dict[str, object]:
        """Fetch full recipe details."""
        return await self._call("recipe.get.v2", recipe_id=recipe_id)

    async def find_food_id_for_barcode(self, barcode: str) -> dict[str, object]:
        """Resolve a GTIN-13 barcode to a food id."""
        return await self._call("food.find_id_for_barcode", barcode=barcode)

    async def get_food(self, food_id: str) -> dict[str, object]:
        """Fetch a food by id."""
        return await self._call("food.get.v4", food_id=food_id)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _call(self, method: str, **params: str) -> dict[str, object]:
        token = await self._access_token()
        response = await self.http_client.get(
            self.base_url,
            params={"method": method, "format": "json", **params},
            headers={"Authorization": f"Bearer {token}"},
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def _access_token(self) -> str:
        now = datetime.now(tz=UTC)
        if (
            self._token
            and self._token_expires_at is not None
            and now < self._token_expires_at
        ):
            return self._token
        response = await self.http_client.post(
            self.token_url,
            data={"grant_type": "client_credentials", "scope": "basic"},
            auth=(self.client_id, self.client_secret),
            timeout=15,
        )
        response.raise_for_status()
        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise RuntimeError("FatSecret token response missing access_token")
        expires_in = int(payload.get("expires_in", 3600))
        self._token = str(token)
        self._token_expires_at = (
            now + timedelta(seconds=expires_in) - _TOKEN_EXPIRY_MARGIN
        )
        return self._token
