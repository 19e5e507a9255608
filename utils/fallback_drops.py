"""Hand-written drop tables for monsters the wiki parser struggles with.

Used when the wiki can't be reached or its page yields no usable drops.
"""
import copy
from typing import Optional

from utils.drop_models import Drop, DropTable, Quantity


def _drop(item, quantity, rarity, rarity_text):
    if isinstance(quantity, int):
        quantity = Quantity(quantity, quantity)
    else:
        quantity = Quantity(*quantity)
    return Drop(item=item, quantity=quantity, rarity=rarity, rarity_text=rarity_text)


CERBERUS = DropTable(
    name='Cerberus',
    main_table_rolls=2,
    unique_table_chance=1 / 130,
    always=[
        _drop('Infernal ashes', 1, 1, 'Always'),
    ],
    uniques=[
        _drop('Primordial crystal', 1, 520, '1/520'),
        _drop('Pegasian crystal', 1, 520, '1/520'),
        _drop('Eternal crystal', 1, 520, '1/520'),
        _drop('Smouldering stone', 1, 520, '1/520'),
    ],
    main=[
        # Weapons and armour
        _drop('Rune platebody', 1, 26, '5/130'),
        _drop('Rune chainbody', 1, 32.5, '4/130'),
        _drop('Rune 2h sword', 1, 32.5, '4/130'),
        _drop("Black d'hide body", 1, 43.33, '3/130'),
        _drop('Rune axe', 1, 43.33, '3/130'),
        _drop('Rune pickaxe', 1, 43.33, '3/130'),
        _drop('Battlestaff', 6, 43.33, '3/130'),
        _drop('Rune full helm', 1, 43.33, '3/130'),
        _drop('Lava battlestaff', 1, 65, '2/130'),
        _drop('Rune halberd', 1, 65, '2/130'),
        # Runes and ammunition
        _drop('Fire rune', 300, 21.67, '6/130'),
        _drop('Soul rune', 100, 21.67, '6/130'),
        _drop('Pure essence', 300, 26, '5/130'),
        _drop('Blood rune', 60, 32.5, '4/130'),
        _drop('Cannonball', 50, 32.5, '4/130'),
        _drop('Runite bolts (unf)', 40, 32.5, '4/130'),
        _drop('Death rune', 100, 43.33, '3/130'),
        # Other
        _drop('Coal', 120, 21.67, '6/130'),
        _drop('Super restore(4)', 2, 21.67, '6/130'),
        _drop('Summer pie', 3, 21.67, '6/130'),
        _drop('Coins', (10000, 20000), 26, '5/130'),
        _drop('Dragon bones', 20, 26, '5/130'),
        _drop('Unholy symbol', 1, 26, '5/130'),
        _drop('Wine of zamorak', 15, 26, '5/130'),
        _drop('Ashes', 50, 32.5, '4/130'),
        _drop('Fire orb', 20, 32.5, '4/130'),
        _drop('Grimy torstol', 6, 32.5, '4/130'),
        _drop('Runite ore', 5, 43.33, '3/130'),
        _drop('Uncut diamond', 5, 43.33, '3/130'),
        _drop('Torstol seed', 3, 65, '2/130'),
        _drop('Ranarr seed', 2, 65, '2/130'),
        _drop('Key master teleport', 7, 65, '2/130'),
    ],
    tertiary=[
        _drop('Ensouled hellhound head', 1, 15, '1/15'),
        _drop('Clue scroll (elite)', 1, 100, '1/100'),
        _drop('Jar of souls', 1, 2000, '1/2000'),
        _drop('Hellpuppy', 1, 3000, '1/3000'),
    ],
)

KING_BLACK_DRAGON = DropTable(
    name='King Black Dragon',
    main_table_rolls=1,
    unique_table_chance=None,
    always=[
        _drop('Dragon bones', 1, 1, 'Always'),
    ],
    uniques=[
        _drop('Dragon pickaxe', 1, 1500, '1/1500'),
        _drop('Kbd heads', 1, 128, '1/128'),
    ],
    main=[
        _drop('Coins', (1000, 6000), 4, 'Common'),
        _drop('Adamant platebody', 1, 64, 'Uncommon'),
        _drop('Rune longsword', 1, 64, 'Uncommon'),
    ],
    tertiary=[
        _drop('Clue scroll (elite)', 1, 450, '1/450'),
    ],
)

# (name fragments, table); the first entry with a fragment in the name wins
FALLBACK_TABLES = [
    (('cerberus',), CERBERUS),
    (('kbd', 'king black dragon'), KING_BLACK_DRAGON),
]


def get_fallback_drop_table(monster_name: str) -> Optional[DropTable]:
    """Return a copy of the hand-written table matching `monster_name`, if any."""
    name = monster_name.lower()
    for fragments, table in FALLBACK_TABLES:
        if any(fragment in name for fragment in fragments):
            return copy.deepcopy(table)
    return None
