"""Cloudflare Images provider.

Implements IImageProvider against the Cloudflare v4 REST API.  Listing uses
the cursor-paginated ``images/v2`` endpoint; rendition bytes are fetched
from the public delivery URLs found in each image's ``variants`` list.

The ``httpx.AsyncClient`` is injected for testability and shared with the
rest of the application, so credentials are attached per request rather
than to the client.
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from src.config.settings import Settings
from src.interfaces.image_provider import IImageProvider
from src.models.image import ImageListPage
from src.utils.errors import ConfigurationError, FetchError, ProviderError
from src.utils.logging import get_logger

_PROVIDER_NAME = "cloudflare_images"
_LIST_PATH = "/accounts/{account_id}/images/v2"


class CloudflareImagesProvider(IImageProvider):
    """Image listing and delivery via Cloudflare Images."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http_client
        self._base_url = settings.cloudflare_api_base_url.rstrip("/")
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._settings.cloudflare_api_key}"}
        if self._settings.cloudflare_email:
            headers["X-Auth-Email"] = self._settings.cloudflare_email
        return headers

    @staticmethod
    def _envelope_errors(payload: dict) -> str:
        """Join the messages of a v4 API ``errors`` array."""
        errors = payload.get("errors") or []
        messages = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors]
        return "; ".join(messages) or "unknown error"

    # -- IImageProvider implementation -----------------------------------------

    async def list_images(
        self, account_id: str, continuation_token: str | None = None
    ) -> ImageListPage:
        if not self.is_available():
            raise ConfigurationError(
                message="Cloudflare API key and account id are required to list images",
                provider_name=_PROVIDER_NAME,
            )

        url = self._base_url + _LIST_PATH.format(account_id=account_id)
        params = {"continuation_token": continuation_token} if continuation_token else None

        try:
            response = await self._http.get(url, params=params, headers=self._auth_headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise ProviderError(
                message=f"HTTP {exc.response.status_code} listing images",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                message=f"HTTP error listing images: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except ValueError as exc:
            raise ProviderError(
                message=f"Unparseable listing response: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if not payload.get("success", False):
            raise ProviderError(
                message=f"Listing rejected: {self._envelope_errors(payload)}",
                provider_name=_PROVIDER_NAME,
            )

        try:
            page = ImageListPage.model_validate(payload.get("result") or {})
        except ValidationError as exc:
            raise ProviderError(
                message=f"Unexpected listing shape: {exc.error_count()} validation errors",
                provider_name=_PROVIDER_NAME,
            ) from exc

        self._logger.debug(
            "cloudflare_list_page",
            account_id=account_id,
            images=len(page.images),
            has_more=page.continuation_token is not None,
        )
        return page

    async def fetch_rendition(self, url: str) -> httpx.Response:
        request = self._http.build_request("GET", url)
        try:
            return await self._http.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise FetchError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

    def is_available(self) -> bool:
        return self._settings.has_cloudflare_credentials()

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
