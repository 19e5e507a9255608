"""Grand Exchange prices from the OSRS wiki real-time prices API."""
import asyncio
import time
from typing import Optional

import aiohttp

from config import HTTP_TIMEOUT, PRICE_MAPPING_TTL, PRICES_API_URL, USER_AGENT
from utils.logger import setup_logger

logger = setup_logger("Prices")


class PriceLookupError(Exception):
    pass


def format_price(value) -> str:
    return f"{value:,}" if value else "N/A"


def average_price(high, low) -> Optional[int]:
    if high and low:
        return (high + low) // 2
    return None


class PriceClient:
    def __init__(self, api_url: str = PRICES_API_URL, timeout: float = HTTP_TIMEOUT,
                 mapping_ttl: float = PRICE_MAPPING_TTL, clock=time.time):
        self.api_url = api_url.rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = {'User-Agent': USER_AGENT}
        self.mapping_ttl = mapping_ttl
        self.clock = clock
        self._mapping = None
        self._mapping_fetched_at = 0.0

    async def _get_json(self, path: str, params: Optional[dict] = None):
        try:
            async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
                async with session.get(f"{self.api_url}/{path}", params=params) as response:
                    if response.status != 200:
                        raise PriceLookupError(f"Prices API request failed: {response.status}")
                    return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise PriceLookupError(f"Prices API request failed: {e}") from e

    async def get_mapping(self) -> list:
        """Every tradeable item ({"id", "name", ...}); cached for `mapping_ttl` seconds."""
        if self._mapping is None or self.clock() - self._mapping_fetched_at >= self.mapping_ttl:
            mapping = await self._get_json('mapping')
            if not isinstance(mapping, list):
                raise PriceLookupError("Invalid mapping response from prices API")
            self._mapping = mapping
            self._mapping_fetched_at = self.clock()
            logger.info(f"Loaded {len(mapping)} items from the prices mapping")
        return self._mapping

    async def find_item(self, item_name: str) -> Optional[dict]:
        """Exact (case-insensitive) name match, else the first name containing `item_name`."""
        wanted = item_name.lower().strip()
        mapping = await self.get_mapping()
        for item in mapping:
            if item.get('name', '').lower() == wanted:
                return item
        for item in mapping:
            if wanted in item.get('name', '').lower():
                return item
        return None

    async def latest(self, item_id: int) -> Optional[dict]:
        """Latest {"high", "low", ...} for an item, or None when it has no trades."""
        data = await self._get_json('latest', params={'id': item_id})
        return (data.get('data') or {}).get(str(item_id)) if isinstance(data, dict) else None
