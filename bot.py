import os
import time
import asyncio
import discord
from discord.ext import commands
from utils.logger import setup_logger
import config

# Setup logging
logger = setup_logger("LootBot")

COGS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'cogs')

# Global cooldown tracker: {user_id: last command time}
user_cooldowns = {}
GLOBAL_COOLDOWN = 3.0  # 3 seconds
COOLDOWN_PRUNE_SIZE = 1000


def check_cooldown(user_id, now):
    """Seconds the user still has to wait, or 0 after recording this command."""
    last = user_cooldowns.get(user_id)
    if last is not None and now - last < GLOBAL_COOLDOWN:
        return GLOBAL_COOLDOWN - (now - last)

    # Forget users whose cooldown has run out
    if len(user_cooldowns) >= COOLDOWN_PRUNE_SIZE:
        for stale in [uid for uid, ts in user_cooldowns.items() if now - ts >= GLOBAL_COOLDOWN]:
            del user_cooldowns[stale]

    user_cooldowns[user_id] = now
    return 0


# Dynamic prefix function
def get_prefix(bot, message):
    # Longer prefixes must come first!
    prefix = config.PREFIX
    return [f"{prefix} ", f"{prefix.upper()} ", prefix, prefix.upper()]

# Setup bot
intents = discord.Intents.default()
intents.message_content = True
bot = commands.Bot(command_prefix=get_prefix, intents=intents, case_insensitive=True)

# Load all cogs
async def load_cogs():
    for file in sorted(os.listdir(COGS_DIR)):
        if file.endswith('.py') and not file.startswith('_'):
            try:
                await bot.load_extension(f'cogs.{file[:-3]}')
            except Exception as e:
                logger.error(f"Failed to load {file[:-3]}: {e}", exc_info=True)
    logger.info("Finished loading cogs.")

# Reload command
@bot.command(hidden=True)
async def reload(ctx, extension):
    if ctx.author.id != config.OWNER_ID:
        return await ctx.send("you dont have permission to use this command.")

    if extension.lower() == 'all':
        errors = []
        for name in list(bot.extensions):
            try:
                await bot.reload_extension(name)
            except Exception as e:
                errors.append(f"{name}: {str(e)[:100]}")

        if errors:
            return await ctx.send("❌ Errors:\n" + "\n".join(errors))
        return await ctx.send("✅ Successfully reloaded.")

    try:
        await bot.reload_extension(f'cogs.{extension}')
        await ctx.send("✅ Successfully reloaded.")
    except Exception as e:
        await ctx.send(f"❌ Error: {str(e)[:200]}")

@bot.event
async def on_ready():
    # Register slash commands
    try:
        synced = await bot.tree.sync()
        logger.info(f"Synced {len(synced)} slash commands")
    except discord.HTTPException as e:
        logger.error(f"Failed to sync slash commands: {e}")

    logger.info(f"Bot ready as {bot.user.name}")

@bot.event
async def on_command_error(ctx, error):
    """Handle command errors and show proper usage"""
    cmd = ctx.command

    # Numbers outside a command's allowed range
    if isinstance(error, commands.RangeError):
        await ctx.send(f"Value must be between {error.minimum} and {error.maximum:,}.")
        return

    # Missing required argument
    if isinstance(error, commands.MissingRequiredArgument):
        example = ""
        if cmd.name == 'kill':
            example = f"\nExample: `{config.PREFIX}kill 100 cerberus`"
        elif cmd.name == 'itemprice':
            example = f"\nExample: `{config.PREFIX}itemprice abyssal whip`"
        elif cmd.name == 'challenge':
            example = f"\nExample: `{config.PREFIX}challenge rock`"

        await ctx.send(f"Usage: `{config.PREFIX}{cmd.name} {cmd.signature}`{example}")
        return

    # Bad argument (wrong type or format)
    elif isinstance(error, commands.BadArgument):
        await ctx.send(f"Invalid argument. Usage: `{config.PREFIX}{cmd.name} {cmd.signature}`")
        return

    # Command not found - ignore silently
    elif isinstance(error, commands.CommandNotFound):
        return

    # Command on cooldown
    elif isinstance(error, commands.CommandOnCooldown):
        return await ctx.send(f"⏳ This command is on cooldown. Try again in {error.retry_after:.1f}s")

    # Log other errors
    else:
        logger.error(f"Command error in {cmd}: {error}", exc_info=error)

@bot.event
async def on_message(message):
    # Ignore bots
    if message.author.bot:
        return

    ctx = await bot.get_context(message)

    # Check global cooldown (skip for owner)
    if ctx.command and message.author.id != config.OWNER_ID:
        remaining = check_cooldown(message.author.id, time.time())
        if remaining:
            await message.channel.send(f"⏳ Slow down! Try again in {remaining:.1f}s")
            return

    # Process commands
    await bot.process_commands(message)

async def main():
    async with bot:
        await load_cogs()
        try:
            await bot.start(config.DISCORD_TOKEN)
        except discord.errors.LoginFailure:
            logger.error("Invalid Discord token! Check your .env file.")
        except Exception as e:
            logger.error(f"Connection error: {e}", exc_info=True)
            raise

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped.")
    except Exception as e:
        logger.error(f"Bot crashed: {e}", exc_info=True)