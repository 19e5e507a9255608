"""Embed helpers for the loot and price commands.

Usage: from utils.embed import send_embed, build_loot_embeds
       for embed in build_loot_embeds(result):
           await send_embed(ctx, embed)
"""
from typing import Any, List

import discord

from utils.prices import average_price, format_price

LOOT_COLOR = 0x9B59B6
PRICE_COLOR = 0xF1C40F
ERROR_COLOR = 0xDC143C

# Discord allows 4096 characters in an embed description
DESCRIPTION_LIMIT = 4000


async def send_embed(ctx: Any, embed: Any = None, **kwargs):
    """Send an embed with the command author's avatar as the thumbnail.

    All kwargs are forwarded to ctx.send.
    Returns whatever ctx.send returns.
    """
    if embed is None:
        return await ctx.send(**kwargs)

    # Do not override existing thumbnail
    has_thumb = bool(embed.thumbnail and embed.thumbnail.url)
    avatar = getattr(getattr(ctx, 'author', None), 'display_avatar', None)
    if not has_thumb and avatar:
        embed.set_thumbnail(url=avatar.url)

    return await ctx.send(embed=embed, **kwargs)


def error_embed(message: str) -> discord.Embed:
    return discord.Embed(description=f"❌ {message}", color=ERROR_COLOR)


def format_loot_lines(result: dict) -> List[str]:
    """One line per item, biggest stacks first, notable items starred."""
    notable = {drop['item'] for drop in result.get('unique_drops', [])}
    lines = []
    for item, quantity in sorted(result['loot'].items(), key=lambda entry: entry[1], reverse=True):
        prefix = '🌟 ' if item in notable else ''
        lines.append(f"{prefix}{quantity:,}x {item}")
    return lines


def format_unique_lines(result: dict) -> List[str]:
    drops = sorted(result.get('unique_drops', []), key=lambda drop: drop['kill_number'])
    return [f"Kill #{drop['kill_number']:,}: {drop['item']} ({drop['rarity']})" for drop in drops]


def _chunk_lines(lines: List[str], limit: int = DESCRIPTION_LIMIT) -> List[str]:
    chunks, current = [], ''
    for line in lines:
        if current and len(current) + len(line) + 1 > limit:
            chunks.append(current)
            current = ''
        current = f"{current}\n{line}" if current else line
    if current:
        chunks.append(current)
    return chunks


def build_loot_embeds(result: dict) -> List[discord.Embed]:
    """Embeds for a simulation result, split to stay inside Discord's limits."""
    lines = format_loot_lines(result) or ["No loot (extremely unlucky!)"]
    unique_lines = format_unique_lines(result)
    if unique_lines:
        lines += ['', '**🎉 Unique drops:**'] + unique_lines

    title = f"🎮 {result['kill_count']:,}x {result['monster_name']} kills"
    chunks = _chunk_lines(lines)
    embeds = []
    for index, chunk in enumerate(chunks):
        embed = discord.Embed(title=title if index == 0 else None, description=chunk, color=LOOT_COLOR)
        if len(chunks) > 1:
            embed.set_footer(text=f"Page {index + 1}/{len(chunks)}")
        embeds.append(embed)
    return embeds


def build_price_embed(item: dict, prices: dict) -> discord.Embed:
    high, low = prices.get('high'), prices.get('low')
    embed = discord.Embed(title=f"📊 {item['name']}", color=PRICE_COLOR)
    embed.add_field(name="💰 Buy", value=f"{format_price(high)} gp", inline=True)
    embed.add_field(name="💵 Sell", value=f"{format_price(low)} gp", inline=True)
    avg = average_price(high, low)
    embed.add_field(name="📈 Avg", value=f"{format_price(avg)} gp" if avg else "N/A", inline=True)
    return embed
