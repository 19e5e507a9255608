from discord import app_commands
from discord.ext import commands

from utils.embed import build_price_embed, error_embed, send_embed
from utils.logger import setup_logger
from utils.prices import PriceClient

logger = setup_logger("PriceCog")


class Price(commands.Cog):
    """Grand Exchange price lookups"""

    def __init__(self, bot, client: PriceClient = None):
        self.bot = bot
        self.client = client or PriceClient()

    @commands.hybrid_command(name="itemprice", aliases=["price", "ge"])
    @app_commands.describe(item="The item name to check price for")
    async def itemprice(self, ctx, *, item: str):
        """Get the current Grand Exchange price for an OSRS item."""
        await ctx.defer()
        try:
            match = await self.client.find_item(item)
            if not match:
                return await ctx.send(embed=error_embed(f"Could not find item: \"{item}\""))

            prices = await self.client.latest(match['id'])
            if not prices:
                return await ctx.send(f"📊 **{match['name']}**\n> No active trades found on Grand Exchange")

            await send_embed(ctx, build_price_embed(match, prices))
        except Exception as e:
            logger.error(f"Error fetching OSRS price for {item}: {e}", exc_info=True)
            await ctx.send(embed=error_embed("Error fetching price data. Please try again later."))


async def setup(bot):
    await bot.add_cog(Price(bot))
