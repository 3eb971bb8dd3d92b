import numpy as np

DECK_SIZE = 52
RANKS = 13
SUITS = 4

# After the first card, 3 of the remaining 51 share its rank
THEORETICAL_PROBABILITY = (SUITS - 1) / (DECK_SIZE - 1)

DEFAULT_STRATEGY = 'direct'


def rank(card):
    return card % RANKS


def draw_two_match(rng):
    first_card = int(rng.integers(DECK_SIZE))

    # Pick among the 51 cards left, skipping over the first one
    second_card = int(rng.integers(DECK_SIZE - 1))
    if second_card >= first_card:
        second_card += 1

    return rank(first_card) == rank(second_card)


def shuffle_match(rng):
    deck = np.arange(DECK_SIZE)
    rng.shuffle(deck)
    return rank(int(deck[0])) == rank(int(deck[1]))


STRATEGIES = {
    'direct': draw_two_match,
    'shuffle': shuffle_match,
}


def normalize_strategy(name):
    key = name.strip().lower()
    if key not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {name} (available: {', '.join(STRATEGIES)})")
    return key


def get_strategy(name):
    return STRATEGIES[normalize_strategy(name)]
