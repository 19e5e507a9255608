"""Turns OSRS wiki markup into a DropTable.

The wiki is not consistent about how drop tables are written, so every step
here is an ordered cascade: the usual format first, then older or
hand-written variants, stopping at the first one that produces something.
"""
import re
from typing import Callable, List, Optional, Pattern, Sequence

from utils.drop_models import Drop, DropTable, NoDropData, Quantity
from utils.logger import setup_logger

logger = setup_logger("WikiParser")

DEFAULT_RARITY = 128

RARITY_BUCKETS = {
    'always': 1,
    'common': 8,
    'uncommon': 32,
    'rare': 128,
    'very rare': 512,
    'very_rare': 512,
}

# Drop line templates, most common first
DROPS_LINE = re.compile(r'\{\{DropsLine\|name=([^|]+)\|quantity=([^|]+)\|rarity=([^|}]+)[^}]*\}\}')
DROPS_LINE_POSITIONAL = re.compile(r'\{\{drops\s*line\|([^|}]+)\|([^|}]+)\|([^|}]+)[^}]*\}\}', re.IGNORECASE)
DROP_KEYWORD = re.compile(r'\{\{drop\|item=([^|]+)\|quantity=([^|]+)\|rarity=([^|}]+)[^}]*\}\}', re.IGNORECASE)
WIKITABLE_ROW = re.compile(r'\|\s*([^|]+)\s*\|\|\s*([^|]+)\s*\|\|\s*([^|]+)')

# Section headings, tried in order
ALWAYS_SECTIONS = [
    re.compile(r'===100%===(.*?)(?:===|\{\{DropsTableBottom\}\})', re.DOTALL),
    re.compile(r'===\s*Always\s*===(.*?)(?:===|\{\{)', re.DOTALL | re.IGNORECASE),
    re.compile(r'===\s*100\s*%\s*===(.*?)(?:===|\{\{)', re.DOTALL | re.IGNORECASE),
]
UNIQUE_SECTIONS = [
    re.compile(r'===Uniques===(.*?)(?:===|\{\{DropsTableBottom\}\})', re.DOTALL),
    re.compile(r'===\s*Rare\s*drop\s*table\s*===(.*?)(?:===|\{\{)', re.DOTALL | re.IGNORECASE),
    re.compile(r'===\s*Unique\s*drops?\s*===(.*?)(?:===|\{\{)', re.DOTALL | re.IGNORECASE),
]
TERTIARY_SECTIONS = [
    re.compile(r'===Tertiary===(.*?)(?:===|\{\{DropsTableBottom\}\})', re.DOTALL),
    re.compile(r'===\s*Tertiary\s*drops?\s*===(.*?)(?:===|\{\{)', re.DOTALL | re.IGNORECASE),
]

# Drop mechanics stated in the page prose
UNIQUE_TABLE_CHANCE = [
    re.compile(r"''There is a ([\d/]+) chance of hitting the unique drop table", re.IGNORECASE),
    re.compile(r'(\d+/\d+).*?chance.*?unique', re.IGNORECASE),
    re.compile(r'unique drop table.*?(\d+/\d+)', re.IGNORECASE),
]
MAIN_TABLE_ROLLS = re.compile(r'main drop table.*?(\d+) times?', re.IGNORECASE)

# Monsters whose mechanics the wiki prose doesn't spell out in a parseable way
CERBERUS_MAIN_ROLLS = 2
CERBERUS_UNIQUE_CHANCE = 1 / 130


def _leading_int(text: str) -> Optional[int]:
    match = re.match(r'\s*(\d+)', text or '')
    if match:
        value = int(match.group(1))
        if value > 0:
            return value
    return None


def parse_quantity(text: str) -> Quantity:
    """Quantity text such as "5", "5-10" or "10-5 (noted)" to a Quantity.

    Anything that can't be read becomes a single item.
    """
    if not text:
        return Quantity()

    cleaned = re.sub(r'\s*\([^)]+\)', '', text).replace(',', '').replace('–', '-').strip()
    if not cleaned:
        return Quantity()

    if '-' in cleaned:
        low_text, high_text = cleaned.split('-')[:2]
        low = _leading_int(low_text) or 1
        high = _leading_int(high_text) or low
        return Quantity(min(low, high), max(low, high))

    amount = _leading_int(cleaned) or 1
    return Quantity(amount, amount)


def parse_rarity(text: str) -> float:
    """Rarity text to a "1 in N" denominator.

    "5/130" -> 26.0, "Rare" -> 128, unreadable -> 128.
    """
    if not text:
        return DEFAULT_RARITY

    cleaned = text.strip().replace(',', '')

    if '/' in cleaned:
        numerator_text, denominator_text = cleaned.split('/')[:2]
        numerator = _leading_int(numerator_text)
        denominator = _leading_int(denominator_text)
        if numerator is None and denominator is None:
            # "N/A", "Varies/see notes"
            return DEFAULT_RARITY
        return (denominator or 1) / (numerator or 1)

    number = _leading_int(cleaned)
    if number is not None:
        return number

    return RARITY_BUCKETS.get(cleaned.lower(), DEFAULT_RARITY)


def _make_drop(item: str, quantity: str, rarity: str) -> Drop:
    rarity_text = (rarity or '').strip() or 'Unknown'
    return Drop(
        item=item.strip(),
        quantity=parse_quantity(quantity),
        rarity=parse_rarity(rarity_text),
        rarity_text=rarity_text,
    )


def _line_extractor(pattern: Pattern, strict: bool) -> Callable[[str], List[Drop]]:
    """Build an extractor for one drop line template.

    Loose templates (`strict=False`) also match things that aren't drops, so
    their hits are dropped when the item name is blank or looks like a
    `key=value` parameter.
    """
    def extract(text: str) -> List[Drop]:
        drops = []
        for item, quantity, rarity in pattern.findall(text):
            if not strict and (not item.strip() or '=' in item):
                continue
            drops.append(_make_drop(item, quantity, rarity))
        return drops

    return extract


LINE_EXTRACTORS = [
    _line_extractor(DROPS_LINE, strict=True),
    _line_extractor(DROPS_LINE_POSITIONAL, strict=False),
    _line_extractor(DROP_KEYWORD, strict=False),
    _line_extractor(WIKITABLE_ROW, strict=False),
]


def extract_drops(text: str, extractors: Sequence[Callable[[str], List[Drop]]] = LINE_EXTRACTORS) -> List[Drop]:
    """Run the line extractors in order and return the first non-empty result."""
    if not text:
        return []
    for index, extractor in enumerate(extractors):
        drops = extractor(text)
        if drops:
            if index:
                logger.debug(f"Drop lines matched alternate template #{index}")
            return drops
    return []


def extract_main_drops(markup: str, claimed: Sequence[Drop],
                       extractors: Sequence[Callable[[str], List[Drop]]] = LINE_EXTRACTORS) -> List[Drop]:
    """Drops from the whole page that no heading section has claimed.

    A template only counts when it finds something unclaimed, so a page whose
    DropsLine templates all sit under headings still gets its main table from
    the alternates.
    """
    claimed_items = {drop.item for drop in claimed}
    for index, extractor in enumerate(extractors):
        drops = [drop for drop in extractor(markup) if drop.item not in claimed_items]
        if drops:
            if index:
                logger.debug(f"Main table matched alternate template #{index}")
            return drops
    return []


def extract_section(markup: str, patterns: Sequence[Pattern]) -> Optional[str]:
    """Body of the first heading pattern that matches, or None."""
    for pattern in patterns:
        match = pattern.search(markup)
        if match:
            return match.group(1)
    return None


def extract_unique_table_chance(markup: str) -> Optional[float]:
    for pattern in UNIQUE_TABLE_CHANCE:
        match = pattern.search(markup)
        if not match or '/' not in match.group(1):
            continue
        numerator_text, denominator_text = match.group(1).split('/')[:2]
        numerator = _leading_int(numerator_text)
        denominator = _leading_int(denominator_text)
        if numerator and denominator and numerator <= denominator:
            return numerator / denominator
    return None


def extract_main_table_rolls(markup: str) -> int:
    match = MAIN_TABLE_ROLLS.search(markup)
    if match:
        return max(1, int(match.group(1)))
    return 1


def deduplicate(table: DropTable):
    """Keep each item in one section only: always > uniques > tertiary > main."""
    seen = set()
    for section in ('always', 'uniques', 'tertiary', 'main'):
        kept = []
        for drop in getattr(table, section):
            if drop.item in seen:
                continue
            seen.add(drop.item)
            kept.append(drop)
        setattr(table, section, kept)


def parse_drop_table(markup: str, monster_name: str) -> DropTable:
    """Parse a monster page's markup into a DropTable.

    Raises NoDropData when nothing at all could be extracted, so the caller
    can decide whether to use a fallback table instead.
    """
    always = extract_drops(extract_section(markup, ALWAYS_SECTIONS))
    uniques = extract_drops(extract_section(markup, UNIQUE_SECTIONS))
    tertiary = extract_drops(extract_section(markup, TERTIARY_SECTIONS))
    # The main table has no heading of its own
    main = extract_main_drops(markup, always + uniques + tertiary)

    unique_table_chance = extract_unique_table_chance(markup)
    main_table_rolls = extract_main_table_rolls(markup)

    if 'cerberus' in monster_name.lower():
        main_table_rolls = CERBERUS_MAIN_ROLLS
        unique_table_chance = unique_table_chance or CERBERUS_UNIQUE_CHANCE

    table = DropTable(
        name=monster_name,
        always=always,
        main=main,
        uniques=uniques,
        tertiary=tertiary,
        main_table_rolls=main_table_rolls,
        unique_table_chance=unique_table_chance,
    )
    deduplicate(table)

    if table.is_empty():
        raise NoDropData(f"No drop table data found for: \"{monster_name}\"")

    logger.info(
        f"Parsed {monster_name}: {len(table.always)} always, {len(table.main)} main, "
        f"{len(table.uniques)} uniques, {len(table.tertiary)} tertiary"
    )
    return table
