from discord import app_commands
from discord.ext import commands, tasks

from config import DROP_CACHE_SWEEP_MINUTES, MAX_KILLS
from utils.drop_simulator import DropSimulator
from utils.embed import build_loot_embeds, error_embed, send_embed
from utils.logger import setup_logger

logger = setup_logger("KillCog")


class Kill(commands.Cog):
    """Boss and monster loot simulator"""

    def __init__(self, bot, simulator: DropSimulator = None):
        self.bot = bot
        self.simulator = simulator or DropSimulator()
        self.cache_sweep.start()  # Start background cache cleanup

    def cog_unload(self):
        self.cache_sweep.cancel()

    @tasks.loop(minutes=DROP_CACHE_SWEEP_MINUTES)
    async def cache_sweep(self):
        """Drop expired drop tables from the cache"""
        try:
            self.simulator.cache.sweep()
        except Exception as e:
            logger.error(f"Error sweeping drop table cache: {e}", exc_info=True)

    @commands.hybrid_command(name="kill", aliases=["sim"])
    @app_commands.describe(count="Number of kills to simulate (1-10000)", boss="Boss or monster name")
    async def kill(self, ctx, count: commands.Range[int, 1, MAX_KILLS], *, boss: str):
        """Simulate loot from killing a boss or monster.

        Examples:
        gkill 100 cerberus
        gkill 5000 king black dragon
        """
        await ctx.defer()
        try:
            result = await self.simulator.simulate_kills(boss, count)
        except Exception as e:
            logger.error(f"Error in kill command: {e}", exc_info=True)
            return await ctx.send(embed=error_embed("Error simulating kills. Please try again."))

        if result.get("error"):
            return await ctx.send(embed=error_embed(result["error"]))

        for embed in build_loot_embeds(result):
            await send_embed(ctx, embed)


async def setup(bot):
    await bot.add_cog(Kill(bot))
