"""
Betting protocol engine.

Implements the raw betting mechanics of the ACPC reference server: spend
tracking, fold/call/raise validity, the no-limit minimum raise, round
transitions, all-in runouts and showdown values with side pots. The abstracted
state machine in :mod:`abstracted_poker.game.state` drives it through the
:class:`BettingProtocol` interface and never touches its fields directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import NamedTuple, Protocol, Sequence, runtime_checkable

from abstracted_poker.game.evaluator import get_evaluator
from abstracted_poker.shared.config import GameConfig


class ActionKind(Enum):
    """Raw protocol actions."""

    FOLD = auto()
    CALL = auto()
    RAISE = auto()


_KIND_CHARS = {ActionKind.FOLD: "f", ActionKind.CALL: "c", ActionKind.RAISE: "r"}


class RaiseRange(NamedTuple):
    """Inclusive raise-to bounds; both 0 in limit games."""

    min_size: int
    max_size: int


@runtime_checkable
class BettingProtocol(Protocol):
    """Structural interface the abstracted state uses for betting mechanics."""

    round: int

    def is_valid_action(self, kind: ActionKind, amount: int = 0) -> bool:
        """Whether the current player may take ``kind`` (raise-to ``amount``)."""

    def raise_is_valid(self) -> RaiseRange | None:
        """Raise-to bounds for the current player, or None if raising is not allowed."""

    def do_action(self, kind: ActionKind, amount: int = 0) -> None:
        """Apply an action for the current player."""

    def current_player(self) -> int:
        """Seat of the player to act."""

    def is_finished(self) -> bool:
        """Whether betting is over (fold-out or showdown)."""

    def num_folded(self) -> int:
        """Number of folded players."""

    def max_spend(self) -> int:
        """Largest amount any player has put in."""

    def money(self, player: int) -> int:
        """Chips ``player`` has behind."""

    def ante(self, player: int) -> int:
        """Chips ``player`` has put in the pot."""

    def value_of_state(
        self, player: int, hole_cards: Sequence[Sequence[int]], board_cards: Sequence[int]
    ) -> float:
        """Net chips won by ``player`` at a finished state."""

    def betting_sequence(self, round_idx: int) -> str:
        """Betting of one round in ACPC notation."""

    def to_string(self) -> str:
        """Compact rendering of the betting so far."""

    def clone(self) -> "BettingProtocol":
        """Independent copy."""


@dataclass
class _Record:
    kind: ActionKind
    size: int
    player: int


@dataclass
class AcpcBettingState:
    """
    ACPC betting state for one hand.

    Args:
        rules: Game definition (stacks, blinds, raise sizes, first players).
    """

    rules: GameConfig
    round: int = 0
    finished: bool = False
    spent: list[int] = field(default_factory=list)
    folded: list[bool] = field(default_factory=list)
    max_spent: int = 0
    min_no_limit_raise_to: int = 0
    actions: list[list[_Record]] = field(default_factory=list)

    def __post_init__(self):
        num_players = self.rules.num_players
        if not self.spent:
            self.spent = list(self.rules.blind)
        if not self.folded:
            self.folded = [False] * num_players
        if not self.actions:
            self.actions = [[] for _ in range(self.rules.num_rounds)]

        max_blind = max(self.rules.blind)
        self.max_spent = max(self.max_spent, max_blind)
        if not self.rules.is_limit and not self.min_no_limit_raise_to:
            # Calling the largest blind and raising by it
            self.min_no_limit_raise_to = 2 * max_blind if max_blind else 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def num_players(self) -> int:
        return self.rules.num_players

    def stack(self, player: int) -> int:
        return self.rules.stack[player]

    def is_finished(self) -> bool:
        return self.finished

    def num_folded(self) -> int:
        return sum(self.folded)

    def max_spend(self) -> int:
        return self.max_spent

    def money(self, player: int) -> int:
        return self.stack(player) - self.spent[player]

    def ante(self, player: int) -> int:
        return self.spent[player]

    def _can_act(self, player: int) -> bool:
        return not self.folded[player] and self.spent[player] < self.stack(player)

    def num_acting_players(self) -> int:
        return sum(self._can_act(p) for p in range(self.num_players))

    def num_raises(self) -> int:
        return sum(record.kind is ActionKind.RAISE for record in self.actions[self.round])

    def _num_called(self) -> int:
        """Players still able to act who have matched the last bet this round."""
        called = 0
        for record in reversed(self.actions[self.round]):
            still_acting = self.spent[record.player] < self.stack(record.player)
            if record.kind is ActionKind.RAISE:
                return called + still_acting
            if record.kind is ActionKind.CALL:
                called += still_acting
        return called

    def _next_player(self, after: int) -> int:
        for step in range(1, self.num_players + 1):
            player = (after + step) % self.num_players
            if self._can_act(player):
                return player
        raise ValueError("No player is able to act")

    def current_player(self) -> int:
        history = self.actions[self.round]
        if history:
            return self._next_player(history[-1].player)
        return self._next_player(self.rules.first_player[self.round] - 1)

    def raise_is_valid(self) -> RaiseRange | None:
        if self.num_raises() >= self.rules.max_raises[self.round]:
            return None
        if self.num_acting_players() <= 1:
            return None
        if self.rules.is_limit:
            return RaiseRange(0, 0)

        player = self.current_player()
        max_size = self.stack(player)
        if max_size <= self.max_spent:
            return None
        return RaiseRange(min(self.min_no_limit_raise_to, max_size), max_size)

    def is_valid_action(self, kind: ActionKind, amount: int = 0) -> bool:
        if self.finished:
            return False
        player = self.current_player()
        if kind is ActionKind.FOLD:
            return (
                self.spent[player] != self.max_spent
                and self.spent[player] != self.stack(player)
            )
        if kind is ActionKind.CALL:
            return True
        bounds = self.raise_is_valid()
        if bounds is None:
            return False
        if self.rules.is_limit:
            return True
        return bounds.min_size <= amount <= bounds.max_size

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def do_action(self, kind: ActionKind, amount: int = 0) -> None:
        """
        Apply ``kind`` for the current player and advance the round when betting closes.

        Raises:
            ValueError: If the action is not valid in this state.
        """
        if not self.is_valid_action(kind, amount):
            raise ValueError(f"Invalid protocol action {kind.name} {amount}")

        player = self.current_player()
        size = 0
        if kind is ActionKind.FOLD:
            self.folded[player] = True
        elif kind is ActionKind.CALL:
            self.spent[player] = min(self.max_spent, self.stack(player))
        else:
            if self.rules.is_limit:
                size = min(self.max_spent + self.rules.raise_size[self.round], self.stack(player))
            else:
                size = amount
                self.min_no_limit_raise_to = max(
                    self.min_no_limit_raise_to, 2 * size - self.max_spent
                )
            self.max_spent = size
            self.spent[player] = size
        self.actions[self.round].append(_Record(kind, size, player))

        self._close_betting()

    def _close_betting(self) -> None:
        if self.num_folded() + 1 >= self.num_players:
            self.finished = True
            return
        acting = self.num_acting_players()
        if self._num_called() < acting:
            return
        if acting <= 1:
            # Nobody left to bet against: deal out the board for the showdown
            self.finished = True
            self.round = self.rules.num_rounds - 1
        elif self.round + 1 < self.rules.num_rounds:
            self.round += 1
            self.min_no_limit_raise_to = max(max(self.rules.blind), 1) + self.max_spent
        else:
            self.finished = True

    def clone(self) -> "AcpcBettingState":
        return AcpcBettingState(
            rules=self.rules,
            round=self.round,
            finished=self.finished,
            spent=list(self.spent),
            folded=list(self.folded),
            max_spent=self.max_spent,
            min_no_limit_raise_to=self.min_no_limit_raise_to,
            actions=[list(records) for records in self.actions],
        )

    # ------------------------------------------------------------------
    # Payoff and rendering
    # ------------------------------------------------------------------

    def value_of_state(
        self, player: int, hole_cards: Sequence[Sequence[int]], board_cards: Sequence[int]
    ) -> float:
        """
        Net chips won by ``player``.

        A folded player loses what they put in; a sole survivor takes everything
        the others put in; otherwise the pot is split into side pots by
        contribution and each goes to the best live hand eligible for it, ties
        sharing equally.
        """
        if self.folded[player]:
            return float(-self.spent[player])
        if self.num_folded() + 1 == self.num_players:
            return float(sum(self.spent) - self.spent[player])

        evaluator = get_evaluator()
        ranks = [
            -1
            if self.folded[p]
            else evaluator.rank([*hole_cards[p], *board_cards], self.rules.num_suits)
            for p in range(self.num_players)
        ]

        contributions = list(self.spent)
        value = 0.0
        while contributions[player] > 0:
            eligible = [p for p in range(self.num_players) if contributions[p] > 0]
            layer = min(contributions[p] for p in eligible)
            best = max(ranks[p] for p in eligible)
            winners = sum(ranks[p] == best for p in eligible)
            if ranks[player] == best:
                value += layer * (len(eligible) - winners) / winners
            else:
                value -= layer
            for p in eligible:
                contributions[p] -= layer
        return value

    def betting_sequence(self, round_idx: int) -> str:
        parts = []
        for record in self.actions[round_idx]:
            parts.append(_KIND_CHARS[record.kind])
            if record.kind is ActionKind.RAISE and not self.rules.is_limit:
                parts.append(str(record.size))
        return "".join(parts)

    def to_string(self) -> str:
        betting = "/".join(self.betting_sequence(r) for r in range(self.round + 1))
        return f"STATE:{betting}:{'finished' if self.finished else 'open'}"
