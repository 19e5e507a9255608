"""Fetches monster pages from the OSRS wiki's MediaWiki API."""
import asyncio
from typing import Tuple

import aiohttp

from config import HTTP_TIMEOUT, USER_AGENT, WIKI_API_URL
from utils.drop_models import FetchFailed, MalformedResponse, MonsterNotFound
from utils.logger import setup_logger

logger = setup_logger("WikiClient")


class WikiClient:
    def __init__(self, api_url: str = WIKI_API_URL, timeout: float = HTTP_TIMEOUT):
        self.api_url = api_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        # The wiki asks API clients to identify themselves
        self.headers = {'User-Agent': USER_AGENT}

    async def _query(self, session: aiohttp.ClientSession, **params) -> dict:
        params.setdefault('action', 'query')
        params.setdefault('format', 'json')
        try:
            async with session.get(self.api_url, params=params) as response:
                if response.status != 200:
                    raise FetchFailed(f"Wiki API request failed: {response.status}")
                data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchFailed(f"Wiki API request failed: {e}") from e
        except ValueError as e:
            raise MalformedResponse(f"Wiki API returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponse("Invalid response format from wiki API")
        return data

    async def search(self, session: aiohttp.ClientSession, monster_name: str) -> str:
        """Title of the best matching wiki page for `monster_name`."""
        data = await self._query(session, list='search', srsearch=monster_name, srlimit=1)
        results = (data.get('query') or {}).get('search') or []
        if not results:
            raise MonsterNotFound(f"Could not find monster: \"{monster_name}\"")
        return results[0]['title']

    async def fetch_markup(self, session: aiohttp.ClientSession, title: str) -> str:
        data = await self._query(
            session, prop='revisions', titles=title, rvprop='content', rvslots='main', redirects=1
        )
        pages = (data.get('query') or {}).get('pages')
        if not pages:
            raise MalformedResponse("Invalid response format from wiki API")

        page_id, page = next(iter(pages.items()))
        if page_id == '-1' or not page.get('revisions'):
            raise MonsterNotFound(f"Wiki page not found for: \"{title}\"")

        revision = page['revisions'][0]
        content = revision.get('*') or ((revision.get('slots') or {}).get('main') or {}).get('*')
        if not content:
            raise MalformedResponse(f"No content found for: \"{title}\"")
        return content

    async def fetch_monster_page(self, monster_name: str) -> Tuple[str, str]:
        """Search for a monster and return (page title, page markup)."""
        async with aiohttp.ClientSession(headers=self.headers, timeout=self.timeout) as session:
            title = await self.search(session, monster_name)
            logger.info(f"Fetching wiki page \"{title}\" for \"{monster_name}\"")
            return title, await self.fetch_markup(session, title)
