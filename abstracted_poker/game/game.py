"""
Abstracted poker game definition.

The game owns everything states share: validated rules, one canonical indexer
per betting round, the card-abstraction cluster tables and the read-only
game-scope off-abstraction raises. States keep a reference to their game and
never modify it.
"""

from __future__ import annotations

import logging
from typing import Mapping

from abstracted_poker.abstraction.clusters import ClusterTable
from abstracted_poker.abstraction.off_abstraction import freeze_raises
from abstracted_poker.game import tensors
from abstracted_poker.game.state import AbstractedPokerState
from abstracted_poker.indexing.round_indexers import GeneralIndexer, PreflopIndexer
from abstracted_poker.shared.config import Config, GameConfig

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "abstracted_poker"

NUM_LIMIT_ACTIONS = 3
NUM_NO_LIMIT_ACTIONS = 8


def card_schedule(rules: GameConfig) -> tuple[int, ...]:
    """Cards revealed to one player per round: hole plus first board, then the boards."""
    boards = rules.num_board_cards[: rules.num_rounds]
    return (rules.num_hole_cards + boards[0], *boards[1:])


def max_game_length(rules: GameConfig) -> int:
    """
    Upper bound on the number of actions in a hand.

    Counts the terminal step, every dealt card, one check per player per round
    and one raise per player for each doubling from the largest blind to the
    largest stack.
    """
    num_players = rules.num_players
    length = 1 + rules.total_board_cards + rules.num_hole_cards * num_players
    length += num_players * rules.num_rounds
    max_blind = max(max(rules.blind), 1)
    stack = max(rules.stack)
    while stack > max_blind:
        stack //= 2
        length += num_players
    return length


class AbstractedPokerGame:
    """
    Factory and shared context for abstracted poker states.

    Args:
        config: Complete configuration; defaults to heads-up no-limit hold'em.

    Raises:
        pydantic.ValidationError: If the configuration is invalid.
        ClusterFileError: If a configured cluster file does not match its round.
    """

    def __init__(self, config: Config | None = None):
        self.config = config if config is not None else Config.default()
        self.rules = self.config.game
        logging.getLogger(PACKAGE_LOGGER).setLevel(self.config.system.log_level)

        rules = self.rules
        self.schedule = card_schedule(rules)
        self.indexers: list[PreflopIndexer | GeneralIndexer] = []
        for round_num in range(1, rules.num_rounds + 1):
            if round_num == 1 and rules.num_board_cards[0] == 0:
                indexer = PreflopIndexer(rules.num_suits, rules.num_ranks, rules.num_hole_cards)
            else:
                indexer = GeneralIndexer(
                    round_num, self.schedule, rules.num_suits, rules.num_ranks
                )
            self.indexers.append(indexer)

        abstraction = self.config.abstraction
        self.cluster_table = ClusterTable(
            {r: self.round_size(r) for r in range(1, rules.num_rounds + 1)},
            abstraction.cluster_files,
            abstraction.placeholder_buckets,
        )
        self._off_abstraction_raises = freeze_raises(abstraction.off_abstraction_raises)

        logger.info(
            f"Created {rules.betting} game: {rules.num_players} players, "
            f"{rules.num_rounds} rounds, {rules.num_suits}x{rules.num_ranks} deck, "
            f"abstraction {rules.betting_abstraction}"
        )

    # ------------------------------------------------------------------
    # Game properties
    # ------------------------------------------------------------------

    @property
    def num_players(self) -> int:
        return self.rules.num_players

    @property
    def num_distinct_actions(self) -> int:
        return NUM_LIMIT_ACTIONS if self.rules.is_limit else NUM_NO_LIMIT_ACTIONS

    @property
    def max_chance_outcomes(self) -> int:
        return self.rules.deck_size

    @property
    def min_utility(self) -> float:
        return float(-self.rules.stack[0])

    @property
    def max_utility(self) -> float:
        return float(self.rules.stack[0] * (self.rules.num_players - 1))

    @property
    def max_game_length(self) -> int:
        return max_game_length(self.rules)

    @property
    def betting_abstraction(self) -> str:
        return self.rules.betting_abstraction

    @property
    def tensor_encoding(self) -> tensors.TensorEncoding:
        return self.config.abstraction.tensor_encoding

    @property
    def information_state_tensor_shape(self) -> tuple[int]:
        size = tensors.information_state_tensor_size(
            self.num_players, self.max_chance_outcomes, self.max_game_length, self.tensor_encoding
        )
        return (size,)

    @property
    def observation_tensor_shape(self) -> tuple[int]:
        return (tensors.observation_tensor_size(self.num_players, self.max_chance_outcomes),)

    # ------------------------------------------------------------------
    # Card abstraction
    # ------------------------------------------------------------------

    def _indexer(self, round_num: int) -> PreflopIndexer | GeneralIndexer:
        if not 1 <= round_num <= len(self.indexers):
            raise ValueError(f"Round {round_num} outside [1, {len(self.indexers)}]")
        return self.indexers[round_num - 1]

    def round_size(self, round_num: int) -> int:
        """Number of canonical hands in 1-based ``round_num``."""
        indexer = self._indexer(round_num)
        if isinstance(indexer, PreflopIndexer):
            return indexer.get_size()
        return indexer.get_size(round_num)

    def get_index(self, round_num: int, card_string: str) -> int:
        """Canonical index of ``card_string`` (hole cards then board) in 1-based ``round_num``."""
        return self._indexer(round_num).index(card_string)

    def get_canonical_hand(self, round_num: int, index: int) -> str:
        return self._indexer(round_num).canonical_hand(index)

    def get_cluster(self, round_num: int, index: int) -> int:
        return self.cluster_table.cluster(round_num, index)

    # ------------------------------------------------------------------
    # Action abstraction
    # ------------------------------------------------------------------

    @property
    def off_abstraction_raises(self) -> Mapping[str, int]:
        return self._off_abstraction_raises

    def has_off_abstraction_raise(self, info_state: str) -> bool:
        return info_state in self._off_abstraction_raises

    def off_abstraction_raise(self, info_state: str) -> int:
        """
        Raises:
            KeyError: If no game-scope raise is registered for ``info_state``.
        """
        return self._off_abstraction_raises[info_state]

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def new_initial_state(self) -> AbstractedPokerState:
        return AbstractedPokerState(self)

    def __repr__(self) -> str:
        rules = self.rules
        return (
            f"AbstractedPokerGame(betting={rules.betting!r}, players={rules.num_players}, "
            f"rounds={rules.num_rounds}, abstraction={rules.betting_abstraction!r})"
        )
