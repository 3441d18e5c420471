"""
Round indexers over card strings.

Two facades over :class:`HandIndexer` with 1-based rounds:

- :class:`PreflopIndexer` indexes the hole cards alone and can render the
  rank-by-rank table of preflop classes.
- :class:`GeneralIndexer` chains rounds of a schedule (hold'em by default) and
  indexes a card string at the last round it completes.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from abstracted_poker.core.cards import (
    MAX_RANKS,
    MAX_SUITS,
    RANK_CHARS,
    cards_from_string,
    cards_to_string,
    make_card,
)
from abstracted_poker.indexing.hand_indexer import HandIndexer
from abstracted_poker.shared.errors import IndexerConfigurationError

HOLDEM_SCHEDULE = (2, 3, 1, 1)
MAX_INDEXER_ROUNDS = 4


class PreflopIndexer:
    """Canonical indexer for hole cards only (169 classes in hold'em)."""

    def __init__(
        self,
        num_suits: int = MAX_SUITS,
        num_ranks: int = MAX_RANKS,
        num_hole_cards: int = 2,
    ):
        self.num_suits = num_suits
        self.num_ranks = num_ranks
        self.num_hole_cards = num_hole_cards
        self._indexer = HandIndexer((num_hole_cards,), num_suits, num_ranks)
        self.size = self._indexer.size(0)

    def get_size(self) -> int:
        return self.size

    def index(self, card_string: str) -> int:
        """
        Index a hole-card string such as ``"AsKd"``.

        Raises:
            ValueError: If the string does not hold exactly the hole cards.
        """
        cards = cards_from_string(card_string, self.num_suits, self.num_ranks)
        if len(cards) != self.num_hole_cards:
            raise ValueError(
                f"Expected {self.num_hole_cards} hole cards, got {card_string!r}"
            )
        return self._indexer.index_last(cards)

    def canonical_hand(self, index: int) -> str:
        return cards_to_string(self._indexer.unindex(0, index), self.num_suits)

    def table(self) -> np.ndarray:
        """
        Rank-by-rank matrix of preflop indices, highest rank first.

        Cell ``[i, j]`` pairs rank ``i`` with rank ``j``: suited above the
        diagonal, pocket pairs on it, offsuit below it.
        """
        if self.num_hole_cards != 2 or self.num_suits < 2:
            raise ValueError("The preflop table needs two hole cards and at least two suits")

        top = self.num_ranks - 1
        table = np.zeros((self.num_ranks, self.num_ranks), dtype=np.int64)
        for i in range(self.num_ranks):
            for j in range(self.num_ranks):
                first = make_card(top - j, 0, self.num_suits)
                second = make_card(top - i, int(j <= i), self.num_suits)
                table[i, j] = self._indexer.index_last([first, second])
        return table

    def format_table(self) -> str:
        """Text rendering of :meth:`table` with rank labels."""
        labels = [RANK_CHARS[self.num_ranks - 1 - i] for i in range(self.num_ranks)]
        lines = ["preflop table:", " " + "".join(f"  {label} " for label in labels)]
        for label, row in zip(labels, self.table()):
            lines.append(label + "".join(f" {value:3d}" for value in row))
        return "\n".join(lines)


class GeneralIndexer:
    """
    Canonical indexer for the first ``round_count`` rounds of a schedule.

    Args:
        round_count: Number of rounds to index (1-4).
        schedule: Cards dealt per round; hold'em ``(2, 3, 1, 1)`` by default.
        num_suits: Suits in the deck.
        num_ranks: Ranks in the deck.

    Raises:
        IndexerConfigurationError: If ``round_count`` is outside [1, 4] or the
            schedule cannot provide that many rounds.
    """

    def __init__(
        self,
        round_count: int,
        schedule: Sequence[int] = HOLDEM_SCHEDULE,
        num_suits: int = MAX_SUITS,
        num_ranks: int = MAX_RANKS,
    ):
        if not 1 <= round_count <= MAX_INDEXER_ROUNDS:
            raise IndexerConfigurationError(
                f"Round count must be between 1 and {MAX_INDEXER_ROUNDS}, got {round_count}"
            )
        if len(schedule) < round_count:
            raise IndexerConfigurationError(
                f"Schedule {tuple(schedule)} has fewer than {round_count} rounds"
            )

        self.round_count = round_count
        self.num_suits = num_suits
        self.num_ranks = num_ranks
        self._indexer = HandIndexer(tuple(schedule[:round_count]), num_suits, num_ranks)
        self._cards_num = [self._indexer.cards_through(r) for r in range(round_count)]
        self._sizes = [self._indexer.size(r) for r in range(round_count)]

    def _check_round(self, round_num: int) -> None:
        if not 1 <= round_num <= self.round_count:
            raise ValueError(f"Round {round_num} outside [1, {self.round_count}]")

    def get_size(self, round_num: int) -> int:
        self._check_round(round_num)
        return self._sizes[round_num - 1]

    def get_cards_num(self, round_num: int) -> int:
        self._check_round(round_num)
        return self._cards_num[round_num - 1]

    def index(self, card_string: str) -> int:
        """
        Index a card string at the last round its length completes.

        Args:
            card_string: Cards in deal order, two characters each, e.g.
                ``"5s9sAhKhTc"`` (hole cards then board).

        Raises:
            ValueError: If the string is longer than the configured rounds hold,
                completes no round, or contains an invalid or repeated card.
        """
        cards = cards_from_string(card_string, self.num_suits, self.num_ranks)
        if len(cards) > self._cards_num[-1]:
            raise ValueError(
                f"{len(cards)} cards exceed the {self._cards_num[-1]} dealt in "
                f"{self.round_count} rounds"
            )
        reached = [r for r, total in enumerate(self._cards_num) if total <= len(cards)]
        if not reached:
            raise ValueError(f"{card_string!r} does not complete the first round")
        return self._indexer.index_round(cards, reached[-1])

    def canonical_hand(self, index: int) -> str:
        """
        Representative card string for ``index`` at the configured last round.

        Raises:
            ValueError: If ``index`` is outside ``[0, get_size(round_count))``.
        """
        cards = self._indexer.unindex(self.round_count - 1, index)
        return cards_to_string(cards, self.num_suits)
