"""Bot configuration. Values come from the environment (or a local .env file)."""
import os

from dotenv import load_dotenv

load_dotenv()

# Discord
DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
PREFIX = os.getenv('BOT_PREFIX', 'g')
OWNER_ID = int(os.getenv('OWNER_ID', '0'))

# Logging
LOG_DIR = os.getenv('LOG_DIR', 'logs')

# External APIs
WIKI_API_URL = os.getenv('WIKI_API_URL', 'https://oldschool.runescape.wiki/api.php')
PRICES_API_URL = os.getenv('PRICES_API_URL', 'https://prices.runescape.wiki/api/v1/osrs')
USER_AGENT = os.getenv('USER_AGENT', 'osrs-loot-bot/1.0 (Discord bot; drop simulator)')
HTTP_TIMEOUT = float(os.getenv('HTTP_TIMEOUT', '15'))

# Drop table cache
DROP_CACHE_SIZE = int(os.getenv('DROP_CACHE_SIZE', '100'))
DROP_CACHE_EXPIRY = int(os.getenv('DROP_CACHE_EXPIRY', str(60 * 60)))  # seconds
DROP_CACHE_SWEEP_MINUTES = float(os.getenv('DROP_CACHE_SWEEP_MINUTES', '10'))

# Price lookups
PRICE_MAPPING_TTL = int(os.getenv('PRICE_MAPPING_TTL', str(6 * 60 * 60)))  # seconds

# Kill command bounds
MAX_KILLS = int(os.getenv('MAX_KILLS', '10000'))
