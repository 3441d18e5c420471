"""
Suit-isomorphic hand indexing over multi-round deals.

Cards dealt in successive rounds (e.g. hole cards, flop, turn, river) are mapped
to a dense index per round such that two deals share an index exactly when one
becomes the other under a consistent relabeling of suits. The scheme is the
hand-isomorphism algorithm of Kevin Waugh ("A Fast and Optimal Hand Isomorphism
Algorithm", 2013):

- Each suit is summarised by its *count tuple*: the number of its cards dealt in
  each round. Suits sorted by count tuple (descending) form a *configuration*.
- Within a suit, the ranks dealt in a round are shifted down past the ranks the
  suit already used in earlier rounds and ranked colexicographically. Chaining
  the per-round ranks with mixed radix gives the suit index.
- Suits with identical count tuples are interchangeable, so their indices are
  combined as a multiset with the combinatorial number system.
- Configurations are ordered lexicographically and each owns a contiguous block
  of indices.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from itertools import accumulate
from math import comb
from typing import Iterator, Sequence

from abstracted_poker.core.cards import MAX_RANKS, MAX_SUITS
from abstracted_poker.shared.errors import IndexerConfigurationError

logger = logging.getLogger(__name__)

Configuration = tuple[tuple[int, ...], ...]


def colex_index(ranks: Sequence[int]) -> int:
    """Colexicographic rank of a set of distinct ranks given in ascending order."""
    return sum(comb(rank, position) for position, rank in enumerate(ranks, start=1))


def colex_unindex(index: int, size: int) -> list[int]:
    """Inverse of :func:`colex_index`: the ascending ``size``-subset with that rank."""
    ranks = []
    candidate = MAX_RANKS * MAX_SUITS
    for position in range(size, 0, -1):
        candidate -= 1
        while comb(candidate, position) > index:
            candidate -= 1
        ranks.append(candidate)
        index -= comb(candidate, position)
    ranks.reverse()
    return ranks


def _popcount(mask: int) -> int:
    return bin(mask).count("1")


def _nth_unset(mask: int, n: int) -> int:
    """Position of the ``n``-th (0-based) zero bit of ``mask``."""
    position = 0
    while True:
        if not mask >> position & 1:
            if n == 0:
                return position
            n -= 1
        position += 1


def _groups(configuration: Configuration) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` for each run of identical suits."""
    start = 0
    while start < len(configuration):
        end = start + 1
        while end < len(configuration) and configuration[end] == configuration[start]:
            end += 1
        yield start, end
        start = end


class HandIndexer:
    """
    Dense canonical indexer for a fixed round schedule.

    Rounds are 0-based here; the public round indexers in
    :mod:`abstracted_poker.indexing.round_indexers` expose 1-based rounds.

    Args:
        cards_per_round: Number of cards dealt in each round, e.g. ``(2, 3, 1, 1)``.
        num_suits: Suits in the deck (1-4).
        num_ranks: Ranks in the deck (1-13).

    Raises:
        IndexerConfigurationError: If the schedule cannot be dealt from the deck.
    """

    def __init__(
        self,
        cards_per_round: Sequence[int],
        num_suits: int = MAX_SUITS,
        num_ranks: int = MAX_RANKS,
    ):
        schedule = tuple(cards_per_round)
        if not schedule:
            raise IndexerConfigurationError("Round schedule must contain at least one round")
        if not 1 <= num_suits <= MAX_SUITS or not 1 <= num_ranks <= MAX_RANKS:
            raise IndexerConfigurationError(
                f"Unsupported deck of {num_suits} suits and {num_ranks} ranks"
            )
        if any(not isinstance(count, int) or count < 0 for count in schedule):
            raise IndexerConfigurationError(f"Invalid round schedule {schedule}")
        if sum(schedule) > num_suits * num_ranks:
            raise IndexerConfigurationError(
                f"Schedule {schedule} deals {sum(schedule)} cards from a "
                f"{num_suits * num_ranks}-card deck"
            )

        self.cards_per_round = schedule
        self.num_suits = num_suits
        self.num_ranks = num_ranks
        self.rounds = len(schedule)
        self.round_start = (0, *accumulate(schedule))[:-1]

        self._configurations: list[list[Configuration]] = []
        self._config_ids: list[dict[Configuration, int]] = []
        self._suit_sizes: list[list[tuple[int, ...]]] = []
        self._offsets: list[list[int]] = []
        self._round_sizes: list[int] = []

        previous: list[Configuration] = [tuple(() for _ in range(num_suits))]
        for round_idx, count in enumerate(schedule):
            configurations = sorted(
                {
                    extended
                    for configuration in previous
                    for extended in self._extend(configuration, count)
                }
            )
            self._tabulate(configurations)
            previous = configurations
            logger.debug(
                f"Round {round_idx}: {len(configurations)} suit configurations, "
                f"{self._round_sizes[-1]} canonical hands"
            )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    def _extend(self, configuration: Configuration, count: int) -> Iterator[Configuration]:
        """Yield every sorted configuration that deals ``count`` more cards."""
        room = [self.num_ranks - sum(counts) for counts in configuration]

        def split(suit: int, remaining: int) -> Iterator[tuple[int, ...]]:
            if suit == self.num_suits - 1:
                if remaining <= room[suit]:
                    yield (remaining,)
                return
            for taken in range(min(remaining, room[suit]) + 1):
                for rest in split(suit + 1, remaining - taken):
                    yield (taken, *rest)

        for dealt in split(0, count):
            extended = tuple(counts + (n,) for counts, n in zip(configuration, dealt))
            if all(extended[i] >= extended[i + 1] for i in range(self.num_suits - 1)):
                yield extended

    def _suit_size(self, counts: tuple[int, ...]) -> int:
        size, remaining = 1, self.num_ranks
        for n in counts:
            size *= comb(remaining, n)
            remaining -= n
        return size

    def _tabulate(self, configurations: list[Configuration]) -> None:
        suit_sizes = [tuple(self._suit_size(counts) for counts in c) for c in configurations]
        offsets = []
        total = 0
        for configuration, sizes in zip(configurations, suit_sizes):
            offsets.append(total)
            block = 1
            for start, end in _groups(configuration):
                block *= comb(sizes[start] + end - start - 1, end - start)
            total += block

        self._configurations.append(configurations)
        self._config_ids.append({c: i for i, c in enumerate(configurations)})
        self._suit_sizes.append(suit_sizes)
        self._offsets.append(offsets)
        self._round_sizes.append(total)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def size(self, round_idx: int) -> int:
        """Number of canonical hands after 0-based ``round_idx``."""
        self._check_round(round_idx)
        return self._round_sizes[round_idx]

    def configurations(self, round_idx: int) -> list[Configuration]:
        self._check_round(round_idx)
        return list(self._configurations[round_idx])

    def cards_through(self, round_idx: int) -> int:
        """Total cards dealt up to and including 0-based ``round_idx``."""
        self._check_round(round_idx)
        return self.round_start[round_idx] + self.cards_per_round[round_idx]

    def _check_round(self, round_idx: int) -> None:
        if not 0 <= round_idx < self.rounds:
            raise ValueError(f"Round {round_idx} outside [0, {self.rounds})")

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def index_all(self, cards: Sequence[int]) -> list[int]:
        """
        Index a deal after each round it covers.

        Args:
            cards: Card ids in deal order; the length must end exactly on a round
                boundary.

        Returns:
            One canonical index per covered round.

        Raises:
            ValueError: On a length that is not a round boundary, a card id
                outside the deck, or a repeated card.
        """
        boundaries = [self.cards_through(r) for r in range(self.rounds)]
        if len(cards) not in boundaries:
            raise ValueError(
                f"{len(cards)} cards do not end a round of schedule {self.cards_per_round}"
            )
        return self._index_rounds(cards, boundaries.index(len(cards)) + 1)

    def index_last(self, cards: Sequence[int]) -> int:
        return self.index_all(cards)[-1]

    def index_round(self, cards: Sequence[int], round_idx: int) -> int:
        """Index the cards dealt through 0-based ``round_idx``; extra cards are ignored."""
        needed = self.cards_through(round_idx)
        if len(cards) < needed:
            raise ValueError(f"Round {round_idx} needs {needed} cards, got {len(cards)}")
        return self._index_rounds(cards[:needed], round_idx + 1)[-1]

    def _index_rounds(self, cards: Sequence[int], rounds: int) -> list[int]:
        num_suits, deck = self.num_suits, self.num_suits * self.num_ranks
        used = [0] * num_suits
        suit_index = [0] * num_suits
        suit_multiplier = [1] * num_suits
        counts: list[tuple[int, ...]] = [() for _ in range(num_suits)]

        indices = []
        for round_idx in range(rounds):
            start = self.round_start[round_idx]
            dealt = [0] * num_suits
            for card in cards[start : start + self.cards_per_round[round_idx]]:
                if not 0 <= card < deck:
                    raise ValueError(f"Card id {card} outside a {deck}-card deck")
                rank, suit = divmod(card, num_suits)
                bit = 1 << rank
                if (dealt[suit] | used[suit]) & bit:
                    raise ValueError(f"Card id {card} dealt twice")
                dealt[suit] |= bit

            for suit in range(num_suits):
                shifted = [
                    rank - _popcount(used[suit] & ((1 << rank) - 1))
                    for rank in range(self.num_ranks)
                    if dealt[suit] >> rank & 1
                ]
                suit_index[suit] += suit_multiplier[suit] * colex_index(shifted)
                suit_multiplier[suit] *= comb(
                    self.num_ranks - _popcount(used[suit]), len(shifted)
                )
                used[suit] |= dealt[suit]
                counts[suit] += (len(shifted),)

            indices.append(self._combine(round_idx, counts, suit_index, suit_multiplier))
        return indices

    def _combine(
        self,
        round_idx: int,
        counts: list[tuple[int, ...]],
        suit_index: list[int],
        suit_multiplier: list[int],
    ) -> int:
        # Stable descending sort keeps equal suits in their original order
        order = sorted(range(self.num_suits), key=lambda s: counts[s], reverse=True)
        configuration = tuple(counts[s] for s in order)
        config_id = self._config_ids[round_idx][configuration]

        index = self._offsets[round_idx][config_id]
        multiplier = 1
        for start, end in _groups(configuration):
            group = sorted(suit_index[order[i]] for i in range(start, end))
            width = end - start
            part = sum(comb(value + m, m + 1) for m, value in enumerate(group))
            index += multiplier * part
            multiplier *= comb(suit_multiplier[order[start]] + width - 1, width)
        return index

    # ------------------------------------------------------------------
    # Un-indexing
    # ------------------------------------------------------------------

    def unindex(self, round_idx: int, index: int) -> list[int]:
        """
        Reconstruct the representative deal for ``index`` after 0-based ``round_idx``.

        Cards of each round come out suit by suit in canonical suit order, with
        ascending ranks inside a suit.

        Raises:
            ValueError: If the round or index is out of range.
        """
        self._check_round(round_idx)
        if not 0 <= index < self._round_sizes[round_idx]:
            raise ValueError(
                f"Index {index} outside [0, {self._round_sizes[round_idx]}) "
                f"for round {round_idx}"
            )

        offsets = self._offsets[round_idx]
        config_id = bisect_right(offsets, index) - 1
        configuration = self._configurations[round_idx][config_id]
        sizes = self._suit_sizes[round_idx][config_id]
        remainder = index - offsets[config_id]

        suit_index = [0] * self.num_suits
        for start, end in _groups(configuration):
            width = end - start
            group_size = comb(sizes[start] + width - 1, width)
            remainder, group_index = divmod(remainder, group_size)
            for position in range(start, end - 1):
                k = end - position
                value = self._largest_multiset(group_index, k, sizes[start])
                suit_index[position] = value
                group_index -= comb(value + k - 1, k)
            suit_index[end - 1] = group_index

        cards = [0] * self.cards_through(round_idx)
        location = list(self.round_start)
        for suit, counts in enumerate(configuration):
            used = 0
            value = suit_index[suit]
            dealt_before = 0
            for r, n in enumerate(counts):
                value, round_value = divmod(value, comb(self.num_ranks - dealt_before, n))
                dealt_before += n
                rank_set = 0
                for shifted in colex_unindex(round_value, n):
                    rank = _nth_unset(used, shifted)
                    rank_set |= 1 << rank
                    cards[location[r]] = rank * self.num_suits + suit
                    location[r] += 1
                used |= rank_set
        return cards

    @staticmethod
    def _largest_multiset(target: int, k: int, upper: int) -> int:
        """Largest ``x < upper`` with ``C(x + k - 1, k) <= target``."""
        low, high, best = 0, upper, 0
        while low < high:
            mid = (low + high) // 2
            if comb(mid + k - 1, k) <= target:
                best = mid
                low = mid + 1
            else:
                high = mid
        return best
