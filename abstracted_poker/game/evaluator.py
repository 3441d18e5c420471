"""
Showdown hand ranking using eval7.

Ranks are plain integers where higher values are stronger hands, so a
showdown only compares ranks of hands with the same number of cards.
"""

from collections import Counter
from typing import Iterable

import eval7

from abstracted_poker.core.cards import MAX_SUITS, card_rank, card_to_string

_MIN_EVAL7_CARDS = 5
_MAX_EVAL7_CARDS = 7

# Categories for hands too short for eval7 (no straights or flushes possible)
_HIGH_CARD, _PAIR, _TWO_PAIR, _TRIPS, _QUADS = 0, 1, 2, 3, 5
_KICKER_SLOTS = 4


class HandEvaluator:
    """
    Hand evaluator for any deck of up to 4 suits and 13 ranks.

    Hands of 5 to 7 cards go through eval7. Shorter hands (small-deck games)
    are ranked by rank multiplicity and then by the ranks themselves.
    """

    def __init__(self):
        self._card_cache: dict[tuple[int, int], eval7.Card] = {}

    def _to_eval7(self, card: int, num_suits: int) -> eval7.Card:
        key = (card, num_suits)
        cached = self._card_cache.get(key)
        if cached is None:
            cached = eval7.Card(card_to_string(card, num_suits))
            self._card_cache[key] = cached
        return cached

    def rank(self, cards: Iterable[int], num_suits: int = MAX_SUITS) -> int:
        """
        Rank a hand given as card ids.

        Args:
            cards: Hole and board cards together.
            num_suits: Suits in the deck the ids come from.

        Returns:
            Non-negative hand rank; higher beats lower.
        """
        cards = list(cards)
        if len(cards) > _MAX_EVAL7_CARDS:
            raise ValueError(f"Cannot rank {len(cards)} cards; at most 7 are supported")
        if len(cards) >= _MIN_EVAL7_CARDS:
            return eval7.evaluate([self._to_eval7(card, num_suits) for card in cards])
        return self._rank_short(cards, num_suits)

    @staticmethod
    def _rank_short(cards: list[int], num_suits: int) -> int:
        counts = Counter(card_rank(card, num_suits) for card in cards)
        ordered = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
        multiplicities = [count for _, count in ordered]

        if multiplicities[:1] == [4]:
            category = _QUADS
        elif multiplicities[:1] == [3]:
            category = _TRIPS
        elif multiplicities[:2] == [2, 2]:
            category = _TWO_PAIR
        elif multiplicities[:1] == [2]:
            category = _PAIR
        else:
            category = _HIGH_CARD

        value = category
        for slot in range(_KICKER_SLOTS):
            value = value * 16 + (ordered[slot][0] + 1 if slot < len(ordered) else 0)
        return value

    def compare_hands(
        self, cards1: Iterable[int], cards2: Iterable[int], num_suits: int = MAX_SUITS
    ) -> int:
        """
        Compare two hands.

        Returns:
            1 if the first hand wins, -1 if the second wins, 0 on a tie
        """
        rank1 = self.rank(cards1, num_suits)
        rank2 = self.rank(cards2, num_suits)
        return (rank1 > rank2) - (rank1 < rank2)


# Global evaluator instance for efficiency
_evaluator_instance = None


def get_evaluator() -> HandEvaluator:
    """
    Get the global evaluator instance (singleton pattern).

    Returns:
        Shared HandEvaluator instance
    """
    global _evaluator_instance
    if _evaluator_instance is None:
        _evaluator_instance = HandEvaluator()
    return _evaluator_instance
