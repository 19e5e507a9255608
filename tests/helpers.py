from utils.drop_models import Drop, Quantity


class FixedRandom:
    """Stand-in for random.Random that always draws the same value."""

    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value

    def randint(self, a, b):
        return a

    def choice(self, seq):
        return seq[0]


def make_drop(item, quantity=1, rarity=128, rarity_text=None):
    if isinstance(quantity, int):
        quantity = Quantity(quantity, quantity)
    else:
        quantity = Quantity(*quantity)
    return Drop(item=item, quantity=quantity, rarity=rarity, rarity_text=rarity_text or f"1/{rarity}")
