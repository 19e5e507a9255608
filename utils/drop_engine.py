"""Monte-Carlo loot simulation over a parsed DropTable.

Up to APPROXIMATION_THRESHOLD kills every kill is rolled individually. Above
it the common tables are approximated from their expected counts plus a
sqrt(n) jitter, and notable drops get a random kill number instead of the
real one.
"""
import math
import random
import re
from typing import Optional, Sequence

from utils.drop_models import Drop, DropTable, Quantity, SimulationResult, UniqueDrop
from utils.logger import setup_logger

logger = setup_logger("DropEngine")

APPROXIMATION_THRESHOLD = 1000
# Tertiary drops this rare are announced like uniques
NOTABLE_TERTIARY_RARITY = 1000
# Scale for weights derived from a non-fractional rarity
WEIGHT_SCALE = 1000


def drop_weight(drop: Drop) -> float:
    """Relative weight of a main table drop.

    "5/130" weighs 5; anything else weighs WEIGHT_SCALE / rarity.
    """
    if drop.is_fractional:
        match = re.match(r'\s*(\d+)', drop.rarity_text.split('/')[0])
        numerator = int(match.group(1)) if match else 0
        return numerator or 1
    return WEIGHT_SCALE / drop.rarity


def select_weighted_drop(drops: Sequence[Drop], rng=random,
                         weights: Optional[Sequence[float]] = None) -> Optional[Drop]:
    """Pick one drop with probability proportional to its weight.

    Walks the drops in order subtracting weights from a draw in [0, total),
    so for equal weights the earlier drop wins a tie.
    """
    if not drops:
        return None
    if len(drops) == 1:
        return drops[0]

    if weights is None:
        weights = [drop_weight(drop) for drop in drops]
    total_weight = sum(weights)
    if total_weight <= 0:
        return drops[0]

    remaining = rng.random() * total_weight
    for drop, weight in zip(drops, weights):
        remaining -= weight
        if remaining <= 0:
            return drop

    return drops[-1]


def random_quantity(quantity: Quantity, rng=random) -> int:
    if quantity.min == quantity.max:
        return quantity.min
    return rng.randint(quantity.min, quantity.max)


def jittered_count(expected: float, rng=random) -> int:
    """Expected count nudged by up to half a standard deviation either way."""
    return round(expected + (rng.random() - 0.5) * math.sqrt(expected))


def _record_notable(result: SimulationResult, drop: Drop, kill_number: int):
    result.unique_drops.append(UniqueDrop(item=drop.item, kill_number=kill_number, rarity=drop.rarity_text))


def _award_unique(result: SimulationResult, drop: Drop, kill_number: int, rng):
    result.add_loot(drop.item, random_quantity(drop.quantity, rng))
    _record_notable(result, drop, kill_number)


def _simulate_exact(table: DropTable, kill_count: int, rng, result: SimulationResult):
    main_weights = [drop_weight(drop) for drop in table.main]

    for kill_number in range(1, kill_count + 1):
        for drop in table.always:
            result.add_loot(drop.item, random_quantity(drop.quantity, rng))

        for _ in range(table.main_table_rolls):
            drop = select_weighted_drop(table.main, rng, main_weights)
            if drop:
                result.add_loot(drop.item, random_quantity(drop.quantity, rng))

        if table.unique_table_chance and table.uniques:
            if rng.random() < table.unique_table_chance:
                _award_unique(result, rng.choice(table.uniques), kill_number, rng)
        else:
            for drop in table.uniques:
                if rng.random() < 1 / drop.rarity:
                    _award_unique(result, drop, kill_number, rng)

        for drop in table.tertiary:
            if rng.random() < 1 / drop.rarity:
                result.add_loot(drop.item, random_quantity(drop.quantity, rng))
                if drop.rarity >= NOTABLE_TERTIARY_RARITY:
                    _record_notable(result, drop, kill_number)


def _simulate_approximate(table: DropTable, kill_count: int, rng, result: SimulationResult):
    for drop in table.always:
        result.add_loot(drop.item, round(drop.quantity.mean * kill_count))

    if table.main:
        main_weights = [drop_weight(drop) for drop in table.main]
        total_weight = sum(main_weights)
        total_rolls = kill_count * table.main_table_rolls
        if total_weight > 0:
            for drop, weight in zip(table.main, main_weights):
                hits = jittered_count(total_rolls * weight / total_weight, rng)
                if hits > 0:
                    result.add_loot(drop.item, round(hits * drop.quantity.mean))

    if table.unique_table_chance and table.uniques:
        # Still one roll per kill, the unique table is hit rarely enough
        for kill_number in range(1, kill_count + 1):
            if rng.random() < table.unique_table_chance:
                _award_unique(result, rng.choice(table.uniques), kill_number, rng)
    else:
        for drop in table.uniques:
            for _ in range(jittered_count(kill_count / drop.rarity, rng)):
                _award_unique(result, drop, rng.randint(1, kill_count), rng)

    for drop in table.tertiary:
        hits = jittered_count(kill_count / drop.rarity, rng)
        if hits <= 0:
            continue
        result.add_loot(drop.item, round(hits * drop.quantity.mean))
        if drop.rarity >= NOTABLE_TERTIARY_RARITY:
            for _ in range(hits):
                _record_notable(result, drop, rng.randint(1, kill_count))


def run_simulation(table: DropTable, kill_count: int, rng=None) -> SimulationResult:
    """Simulate `kill_count` kills against `table`.

    Kill numbers on notable drops are only exact when
    kill_count <= APPROXIMATION_THRESHOLD.
    """
    rng = rng or random
    result = SimulationResult(monster_name=table.name, kill_count=kill_count)

    if kill_count > APPROXIMATION_THRESHOLD:
        logger.info(f"Simulating {kill_count} kills of {table.name} (approximated)")
        _simulate_approximate(table, kill_count, rng, result)
    else:
        logger.info(f"Simulating {kill_count} kills of {table.name}")
        _simulate_exact(table, kill_count, rng, result)

    return result
