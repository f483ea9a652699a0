"""IP geolocation lookups proxied to ipinfo.io."""

import logging
from typing import Any

import httpx

from ipgeo_api.config import Settings
from ipgeo_api.exceptions import IpNotFoundError, UpstreamTimeoutError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


class IPInfoService:
    """Service for fetching geolocation data from the ipinfo.io API."""

    def __init__(
        self,
        base_url: str = "https://ipinfo.io",
        token: str | None = None,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "IPInfoService":
        return cls(
            base_url=settings.ipinfo_base_url,
            token=settings.ipinfo_token,
            timeout=settings.ipinfo_timeout_seconds,
        )

    def _url(self, ip: str | None) -> str:
        if ip:
            return f"{self.base_url}/{ip}/json"
        return f"{self.base_url}/json"

    async def lookup(self, ip: str | None = None) -> dict[str, Any]:
        """Fetch geolocation data for an address.

        Args:
            ip: IPv4 address to look up, or None for the caller's own address
                as seen by the provider

        Returns:
            The provider's JSON payload
        """
        params = {"token": self.token} if self.token else None
        target = ip or "current"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self._url(ip), params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"IP info timeout for {target}: {e}")
            raise UpstreamTimeoutError() from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.warning(f"IP info not found: {target}")
                raise IpNotFoundError() from e
            logger.error(f"IP info upstream error for {target}: {e}")
            raise UpstreamUnavailableError() from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"IP info request failed for {target}: {e}")
            raise UpstreamUnavailableError() from e

        if not isinstance(data, dict):
            logger.error(f"IP info returned unexpected payload for {target}: {data!r}")
            raise UpstreamUnavailableError()

        logger.info(f"IP info fetched: {target}")
        return data
