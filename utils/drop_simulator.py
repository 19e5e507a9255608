"""Entry point for "simulate N kills of monster M".

Looks the drop table up in the cache, otherwise fetches and parses the
monster's wiki page, falling back to the hand-written tables when the wiki
lets us down. Every outcome is returned as a dict; errors come back as
{"error": message} and never as exceptions.
"""
from typing import Optional

from utils.drop_cache import DropTableCache
from utils.drop_engine import run_simulation
from utils.drop_models import (
    DropDataError,
    DropTable,
    FetchFailed,
    MonsterNotFound,
    NoDropData,
)
from utils.fallback_drops import get_fallback_drop_table
from utils.logger import setup_logger
from utils.wiki_client import WikiClient
from utils.wiki_parser import parse_drop_table

logger = setup_logger("DropSimulator")


class DropSimulator:
    def __init__(self, fetcher=None, cache: Optional[DropTableCache] = None, rng=None):
        # fetcher: anything with `async fetch_monster_page(name) -> (title, markup)`
        self.fetcher = fetcher or WikiClient()
        self.cache = cache if cache is not None else DropTableCache()
        self.rng = rng

    async def get_drop_table(self, monster_name: str, allow_empty: bool = False) -> DropTable:
        """Drop table for `monster_name`, from cache, the wiki or the fallback tables.

        Raises a DropDataError subclass when none of those has a table.
        """
        cache_key = monster_name.lower()
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            title, markup = await self.fetcher.fetch_monster_page(monster_name)
        except MonsterNotFound as e:
            return self._fallback_or_raise(cache_key, monster_name, e)
        except Exception as e:
            logger.error(f"Error fetching drop data for {monster_name}: {e}")
            fallback = get_fallback_drop_table(monster_name)
            if fallback:
                # Not cached so the wiki gets another chance next time
                logger.info(f"Using fallback data for {monster_name}")
                return fallback
            if isinstance(e, DropDataError):
                raise
            raise FetchFailed(str(e)) from e

        try:
            table = parse_drop_table(markup, title)
        except NoDropData as e:
            logger.warning(f"No drop data found for {monster_name}, using fallback if available")
            try:
                return self._fallback_or_raise(cache_key, monster_name, e)
            except NoDropData:
                if not allow_empty:
                    raise
                table = DropTable(name=title)

        self.cache.put(cache_key, table)
        return table

    def _fallback_or_raise(self, cache_key: str, monster_name: str, error: DropDataError) -> DropTable:
        fallback = get_fallback_drop_table(monster_name)
        if not fallback:
            raise error
        logger.info(f"Using fallback data for {monster_name}")
        self.cache.put(cache_key, fallback)
        return fallback

    async def simulate_kills(self, monster_name: str, kill_count: int, allow_empty: bool = False) -> dict:
        """Simulate `kill_count` kills of `monster_name`.

        Returns {"monster_name", "kill_count", "loot", "unique_drops"} or
        {"error": message}.
        """
        try:
            table = await self.get_drop_table(monster_name, allow_empty=allow_empty)
        except MonsterNotFound as e:
            return {"error": str(e)}
        except NoDropData:
            return {"error": f"No drop table data found for: \"{monster_name}\""}
        except DropDataError:
            return {"error": f"Failed to fetch drop data for \"{monster_name}\". Please try again."}
        except Exception as e:
            logger.error(f"Unexpected error loading drop table for {monster_name}: {e}", exc_info=True)
            return {"error": f"Failed to fetch drop data for \"{monster_name}\". Please try again."}

        try:
            return run_simulation(table, kill_count, rng=self.rng).to_dict()
        except Exception as e:
            logger.error(f"Error simulating {kill_count} kills of {monster_name}: {e}", exc_info=True)
            return {"error": "Error simulating kills. Please try again."}
