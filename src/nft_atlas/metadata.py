"""Token URI resolution into normalized metadata"""

import asyncio
import base64
import binascii
import json
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from .models import ResolvedMetadata, Trait
from .utils import IPFS_PREFIX

DATA_PREFIX = "data:"
HTTP_PREFIXES = ("http://", "https://")


class MetadataResolver:
    """
    Turns a raw token URI into {name, description, image, attributes}.

    Three URI families are tried in order: embedded ``data:`` payloads,
    ``ipfs://`` content fetched through a gateway, and plain HTTP(S).
    Any failure falls through to a ``{name: fallback_name, description: ''}``
    result; ``resolve`` never raises.
    """

    def __init__(
        self,
        gateway: str = "https://ipfs.io/ipfs/",
        timeout: float = 10,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.gateway = gateway if gateway.endswith("/") else gateway + "/"
        self.timeout = timeout
        self._session = session

    async def resolve(self, token_uri: Any, fallback_name: str = "") -> ResolvedMetadata:
        """Resolve a token URI (or inline data URI); never raises"""
        fallback_name = str(fallback_name) if fallback_name is not None else ""
        if not isinstance(token_uri, str):
            return self._fallback(fallback_name)
        uri = token_uri.strip()

        try:
            data = None
            if uri.startswith(DATA_PREFIX):
                data = self._decode_embedded(uri)
            elif uri.startswith(IPFS_PREFIX):
                data = await self._fetch_json(self._gateway_url(uri))
            elif uri.lower().startswith(HTTP_PREFIXES):
                data = await self._fetch_json(uri)

            if data is None:
                return self._fallback(fallback_name)
            return self._build(data, fallback_name)
        except Exception as e:
            logger.warning(f"Unexpected error resolving token URI: {e}")
            return self._fallback(fallback_name)

    def _gateway_url(self, uri: str) -> str:
        path = uri[len(IPFS_PREFIX):]
        if path.startswith("ipfs/"):
            path = path[len("ipfs/"):]
        return f"{self.gateway}{path}"

    def _decode_embedded(self, uri: str) -> Optional[Dict[str, Any]]:
        """data:<mime>[;base64],<payload>"""
        header, sep, payload = uri.partition(",")
        if not sep:
            return None
        try:
            if header.endswith(";base64"):
                raw = base64.b64decode(payload, validate=False).decode("utf-8")
            else:
                raw = payload
            data = json.loads(raw)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            logger.debug(f"Embedded metadata could not be decoded: {e}")
            return None
        return data if isinstance(data, dict) else None

    async def _fetch_json(self, url: str) -> Optional[Dict[str, Any]]:
        try:
            if self._session is not None:
                return await self._get(self._session, url)
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                return await self._get(session, url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Metadata fetch failed for {url}: {e}")
            return None

    async def _get(self, session: aiohttp.ClientSession, url: str) -> Optional[Dict[str, Any]]:
        async with session.get(url) as response:
            if response.status < 200 or response.status >= 300:
                logger.debug(f"Metadata fetch for {url} returned HTTP {response.status}")
                return None
            data = await response.json(content_type=None)
        return data if isinstance(data, dict) else None

    @staticmethod
    def _build(data: Dict[str, Any], fallback_name: str) -> ResolvedMetadata:
        name = data.get("name")
        description = data.get("description")
        image = data.get("image") or data.get("image_url")
        attributes = data.get("attributes")
        return ResolvedMetadata(
            name=str(name) if name not in (None, "") else fallback_name,
            description=str(description) if description is not None else "",
            image=str(image) if image else None,
            attributes=Trait.list_from_raw(attributes) if isinstance(attributes, list) else None,
        )

    @staticmethod
    def _fallback(fallback_name: str) -> ResolvedMetadata:
        return ResolvedMetadata(name=fallback_name, description="")
