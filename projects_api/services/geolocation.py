"""
Client IP -> country code lookup against an ip-api.com compatible endpoint.

Only the ``countryCode`` field of the response is used. Every failure
(timeout, transport error, bad status, malformed body) resolves to None,
meaning "unknown country"; nothing is raised to the caller.

Private, loopback and non-IP addresses resolve to None without a request.
"""
from __future__ import annotations

import ipaddress
import logging
from typing import Optional
from urllib.parse import quote, urlparse

import httpx

from projects_api.core.config import PRO_GEOIP_HOST, Settings

logger = logging.getLogger(__name__)


def _is_public_ip(ip: str) -> bool:
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return addr.is_global


class GeoLocator:
    """Resolves client IPs to ISO country codes."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        lang: str = "zh-CN",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.lang = lang
        self.enabled = True

        if urlparse(self.base_url).hostname == PRO_GEOIP_HOST and not api_key:
            logger.error(
                f"GEOIP_API_KEY is not set but {PRO_GEOIP_HOST} requires one; "
                "every client country will be treated as unknown"
            )
            self.enabled = False

        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeoLocator":
        return cls(
            base_url=settings.geoip_url,
            api_key=settings.geoip_api_key,
            lang=settings.geoip_lang,
            timeout=settings.geoip_timeout,
        )

    async def resolve_country(self, ip: Optional[str]) -> Optional[str]:
        """Return the country code for ``ip``, or None when it cannot be determined."""
        if not ip or not self.enabled:
            return None
        if not _is_public_ip(ip):
            logger.debug(f"Not looking up non-public address {ip!r}")
            return None

        params = {"lang": self.lang}
        if self.api_key:
            params["key"] = self.api_key

        try:
            response = await self._client.get(f"{self.base_url}/{quote(ip)}", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Geolocation lookup failed for {ip}: {e!r}")
            return None
        except ValueError as e:
            logger.error(f"Geolocation response for {ip} is not JSON: {e}")
            return None

        country = data.get("countryCode") if isinstance(data, dict) else None
        if not isinstance(country, str) or not country:
            logger.warning(f"Geolocation response for {ip} has no country code")
            return None

        logger.debug(f"Country code for IP {ip}: {country}")
        return country

    async def aclose(self) -> None:
        await self._client.aclose()
