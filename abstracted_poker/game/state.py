"""
Abstracted poker game state.

A state deals cards as chance actions (hole cards seat by seat, then the board
round by round), offers a small menu of abstract betting actions at decision
nodes, and forwards the monetary effect of each decision to the betting
protocol engine. Pot-relative bet sizes and the custom off-abstraction raise
are recomputed after every action.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import TYPE_CHECKING

import numpy as np

from abstracted_poker.abstraction.infoset import InfoStateKey, Observation
from abstracted_poker.abstraction.off_abstraction import OffAbstractionTable
from abstracted_poker.core.cards import CardSet, cards_to_string
from abstracted_poker.game import tensors
from abstracted_poker.game.actions import DEAL_CHAR, AbstractAction, ActionFlag, actions_in
from abstracted_poker.game.protocol import (
    AcpcBettingState,
    ActionKind,
    BettingProtocol,
    RaiseRange,
)
from abstracted_poker.shared.errors import InvalidActionError

if TYPE_CHECKING:
    from abstracted_poker.game.game import AbstractedPokerGame

logger = logging.getLogger(__name__)

CHANCE_PLAYER_ID = -1
TERMINAL_PLAYER_ID = -4

_BOARD = -1  # deal target marker for board cards

_POT_FRACTIONS = (
    (AbstractAction.BET_HALF_POT, 1, 2),
    (AbstractAction.BET_POT, 1, 1),
    (AbstractAction.BET_DOUBLE_POT, 2, 1),
)


class AbstractedPokerState:
    """
    One hand of the abstracted game.

    States are created by :meth:`AbstractedPokerGame.new_initial_state` and keep
    a read-only reference to their game for indexers, cluster tables and the
    shared off-abstraction raises. Everything else is owned by the state;
    :meth:`clone` gives an independent copy.
    """

    def __init__(self, game: "AbstractedPokerGame"):
        rules = game.rules
        self._game = game
        self._protocol: BettingProtocol = AcpcBettingState(rules)
        self._deck = CardSet.full_deck(rules.num_suits, rules.num_ranks)
        self._hole_cards = [
            CardSet(num_suits=rules.num_suits, num_ranks=rules.num_ranks)
            for _ in range(rules.num_players)
        ]
        self._board: list[int] = []
        self._deal_targets: list[int] = []
        self._action_sequence = ""
        self._history: list[int] = []
        self._bet_history: list[int] = []  # raise-to amounts forwarded, 0 otherwise
        self._off_abstraction = OffAbstractionTable(game.off_abstraction_raises)

        self._current_player = CHANCE_PLAYER_ID
        self._legal = ActionFlag.DEAL
        self._bet_sizes: dict[AbstractAction, int] = {}
        self._calculate_actions_and_node_type()

    # ------------------------------------------------------------------
    # Node type and legal actions
    # ------------------------------------------------------------------

    def _board_is_short(self) -> bool:
        return len(self._board) < self._game.rules.board_cards_required(self._protocol.round)

    def _set_node(self, player: int, flags: ActionFlag) -> None:
        self._current_player = player
        self._legal = flags

    def _calculate_actions_and_node_type(self) -> None:
        rules = self._game.rules
        protocol = self._protocol
        self._bet_sizes = {}

        if protocol.is_finished():
            if protocol.num_folded() >= rules.num_players - 1:
                self._set_node(TERMINAL_PLAYER_ID, ActionFlag.NONE)
            elif self._board_is_short():
                # All-in before the river: deal out the board for the showdown
                self._set_node(CHANCE_PLAYER_ID, ActionFlag.DEAL)
            else:
                self._set_node(TERMINAL_PLAYER_ID, ActionFlag.NONE)
            return

        # Hole cards go to seats in order, so the last seat completes last
        if self._hole_cards[-1].num_cards() < rules.num_hole_cards or self._board_is_short():
            self._set_node(CHANCE_PLAYER_ID, ActionFlag.DEAL)
            return

        player = protocol.current_player()
        flags = ActionFlag.NONE
        if protocol.is_valid_action(ActionKind.FOLD):
            flags |= ActionFlag.FOLD
        if protocol.is_valid_action(ActionKind.CALL):
            flags |= ActionFlag.CHECK_CALL
        self._set_node(player, flags)

        bounds = protocol.raise_is_valid()
        if rules.betting_abstraction == "fc" or bounds is None:
            return

        flags |= ActionFlag.BET
        if rules.is_limit:
            # The protocol adds the round's fixed raise size
            self._bet_sizes[AbstractAction.BET] = 0
            self._set_node(player, flags)
            return

        min_bet, all_in = bounds
        pot = protocol.max_spend() * (rules.num_players - protocol.num_folded())
        bet = min(max(pot, min_bet), all_in)
        self._bet_sizes[AbstractAction.BET] = bet
        self._bet_sizes[AbstractAction.ALL_IN] = all_in
        if all_in > bet:
            flags |= ActionFlag.ALL_IN
        for action, numerator, denominator in _POT_FRACTIONS:
            amount = protocol.max_spend() + numerator * pot // denominator
            self._bet_sizes[action] = amount
            if min_bet <= amount < all_in:
                flags |= action.flag
        self._set_node(player, flags)

        custom = self._off_abstraction.get(self.information_state_string(player))
        if custom is not None:
            self._bet_sizes[AbstractAction.OFF_ABS] = custom
            if min_bet <= custom < all_in:
                flags |= ActionFlag.OFF_ABS
        self._set_node(player, flags)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def game(self) -> "AbstractedPokerGame":
        return self._game

    @property
    def action_sequence(self) -> str:
        return self._action_sequence

    @property
    def round(self) -> int:
        """0-based betting round."""
        return self._protocol.round

    @property
    def legal_action_flags(self) -> ActionFlag:
        return self._legal

    @property
    def off_abstraction(self) -> OffAbstractionTable:
        return self._off_abstraction

    def history(self) -> list[int]:
        return list(self._history)

    def hole_cards(self, player: int) -> list[int]:
        self._check_player(player)
        return self._hole_cards[player].to_card_array()

    def board_cards(self) -> list[int]:
        """Board cards in deal order."""
        return list(self._board)

    def deck(self) -> list[int]:
        return self._deck.to_card_array()

    def antes(self) -> list[int]:
        return [self._protocol.ante(p) for p in range(self._game.num_players)]

    def money(self) -> list[int]:
        return [self._protocol.money(p) for p in range(self._game.num_players)]

    def pot(self) -> int:
        return self._protocol.max_spend() * (
            self._game.num_players - self._protocol.num_folded()
        )

    def is_terminal(self) -> bool:
        return self._current_player == TERMINAL_PLAYER_ID

    def is_chance_node(self) -> bool:
        return self._current_player == CHANCE_PLAYER_ID

    def current_player(self) -> int:
        return self._current_player

    def _check_player(self, player: int) -> None:
        if not 0 <= player < self._game.num_players:
            raise ValueError(f"Player {player} outside [0, {self._game.num_players})")

    def legal_actions(self) -> list[int]:
        if self.is_chance_node():
            return self._deck.to_card_array()
        return [int(action) for action in actions_in(self._legal)]

    def chance_outcomes(self) -> list[tuple[int, float]]:
        if not self.is_chance_node():
            raise ValueError("Chance outcomes requested at a non-chance node")
        cards = self._deck.to_card_array()
        probability = 1.0 / len(cards)
        return [(card, probability) for card in cards]

    def legal_raises(self) -> list[int]:
        """Raise-to amounts of the enabled raise actions, in legal-action order."""
        if self.is_chance_node() or self.is_terminal():
            return []
        return [
            self._bet_sizes[action] for action in actions_in(self._legal) if action.is_raise
        ]

    def bet_size(self, action: AbstractAction) -> int:
        """Amount the current node would forward for ``action`` (0 when not computed)."""
        return self._bet_sizes.get(action, 0)

    def fold_is_valid(self) -> bool:
        return bool(self._legal & ActionFlag.FOLD)

    def call_is_valid(self) -> bool:
        return bool(self._legal & ActionFlag.CHECK_CALL)

    def valid_raise_range(self) -> RaiseRange | None:
        """Raise-to interval the protocol allows the current player, if any."""
        if self.is_chance_node() or self.is_terminal():
            return None
        return self._protocol.raise_is_valid()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def apply_action(self, action: int) -> None:
        """
        Apply a chance card or a decision action.

        At chance nodes ``action`` is the id of the card to deal; otherwise it is
        an :class:`AbstractAction` id.

        Raises:
            InvalidActionError: If ``action`` is not legal here.
        """
        if self.is_terminal():
            raise InvalidActionError(f"Action {action} applied to a terminal state")
        amount = 0
        if self.is_chance_node():
            self._deal(action)
        else:
            amount = self._apply_choice(action)
        self._history.append(int(action))
        self._bet_history.append(amount)
        self._calculate_actions_and_node_type()

    def _deal(self, card: int) -> None:
        if not self._deck.contains_card(card):
            raise InvalidActionError(f"Card {card} is not in the deck")
        self._deck.remove_card(card)
        self._action_sequence += DEAL_CHAR

        needed = self._game.rules.num_hole_cards
        for player, hole in enumerate(self._hole_cards):
            if hole.num_cards() < needed:
                hole.add_card(card)
                self._deal_targets.append(player)
                return
        self._board.append(card)
        self._deal_targets.append(_BOARD)

    def _apply_choice(self, action_id: int) -> int:
        try:
            action = AbstractAction(action_id)
        except ValueError as exc:
            raise InvalidActionError(f"Action not recognized: {action_id}") from exc
        if not action.flag & self._legal:
            raise InvalidActionError(
                f"Action {action.name} is not legal; legal actions are {self.legal_actions()}"
            )

        self._action_sequence += action.char
        if action is AbstractAction.FOLD:
            self._protocol.do_action(ActionKind.FOLD)
            return 0
        if action is AbstractAction.CALL:
            self._protocol.do_action(ActionKind.CALL)
            return 0
        amount = self._bet_sizes[action]
        self._protocol.do_action(ActionKind.RAISE, amount)
        return amount

    def child(self, action: int) -> "AbstractedPokerState":
        state = self.clone()
        state.apply_action(action)
        return state

    def clone(self) -> "AbstractedPokerState":
        clone = AbstractedPokerState.__new__(AbstractedPokerState)
        clone._game = self._game
        clone._protocol = self._protocol.clone()
        clone._deck = self._deck.copy()
        clone._hole_cards = [hole.copy() for hole in self._hole_cards]
        clone._board = list(self._board)
        clone._deal_targets = list(self._deal_targets)
        clone._action_sequence = self._action_sequence
        clone._history = list(self._history)
        clone._bet_history = list(self._bet_history)
        clone._off_abstraction = self._off_abstraction.copy()
        clone._current_player = self._current_player
        clone._legal = self._legal
        clone._bet_sizes = dict(self._bet_sizes)
        return clone

    # ------------------------------------------------------------------
    # Off-abstraction raises
    # ------------------------------------------------------------------

    def register_off_abstraction_raise(self, info_state: str, amount: int) -> None:
        """
        Record a custom raise-to amount for an information state of this hand.

        The current node is re-evaluated, so registering the current player's
        information state enables OFF_ABS immediately when the amount is legal.

        Raises:
            DuplicateOffAbstractionError: If this state already registered an
                amount for the information state. Game-scope amounts can be
                shadowed.
        """
        self._off_abstraction.register(info_state, amount)
        if not self.is_chance_node() and not self.is_terminal():
            self._calculate_actions_and_node_type()

    # ------------------------------------------------------------------
    # Payoffs
    # ------------------------------------------------------------------

    def returns(self) -> list[float]:
        """Net chips won per player; all zeros before the hand ends."""
        num_players = self._game.num_players
        if not self.is_terminal():
            return [0.0] * num_players
        holes = [hole.to_card_array() for hole in self._hole_cards]
        return [
            self._protocol.value_of_state(player, holes, self._board)
            for player in range(num_players)
        ]

    # ------------------------------------------------------------------
    # Information states and observations
    # ------------------------------------------------------------------

    def _card_index(self, player: int) -> int:
        """Canonical index of ``player``'s cards, or 0 while a deal is incomplete."""
        rules = self._game.rules
        hole = self._hole_cards[player]
        if hole.num_cards() != rules.num_hole_cards:
            return 0
        boundaries = {rules.board_cards_required(r) for r in range(self.round + 1)}
        if self._board and len(self._board) not in boundaries:
            return 0
        if hole.num_cards() + len(self._board) < self._game.schedule[0]:
            return 0
        cards = hole.to_string() + cards_to_string(self._board, rules.num_suits)
        return self._game.get_index(self.round + 1, cards)

    def information_state_key(self, player: int) -> InfoStateKey:
        self._check_player(player)
        protocol = self._protocol
        round_num = self.round + 1
        return InfoStateKey(
            round=self.round,
            player=self._current_player,
            pot=self.pot(),
            money=tuple(self.money()),
            cluster=self._game.get_cluster(round_num, self._card_index(player)),
            sequences=tuple(protocol.betting_sequence(r) for r in range(self.round + 1)),
        )

    def information_state_string(self, player: int) -> str:
        return str(self.information_state_key(player))

    def observation(self, player: int) -> Observation:
        self._check_player(player)
        return Observation(
            round=self.round,
            player=self._current_player,
            pot=self.pot(),
            money=tuple(self.money()),
            private_cards=self._hole_cards[player].to_string(),
            ante=tuple(self.antes()),
        )

    def observation_string(self, player: int) -> str:
        return str(self.observation(player))

    def information_state_tensor(self, player: int) -> np.ndarray:
        self._check_player(player)
        return tensors.information_state_tensor(self, player)

    def observation_tensor(self, player: int) -> np.ndarray:
        self._check_player(player)
        return tensors.observation_tensor(self, player)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def action_to_string(self, player: int, action: int) -> str:
        if player == CHANCE_PLAYER_ID:
            return f"player=chance move=d card={action}"
        try:
            abstract = AbstractAction(action)
        except ValueError as exc:
            raise InvalidActionError(f"Invalid action in action_to_string: {action}") from exc
        if abstract is AbstractAction.FOLD:
            return f"player={player} move=f"
        if abstract is AbstractAction.CALL:
            return f"player={player} move=c"
        return f"player={player} move=r money={self.bet_size(abstract)}"

    def to_string(self) -> str:
        rules = self._game.rules
        lines = [f"BettingAbstraction: {rules.betting_abstraction.upper()}"]
        for player, hole in enumerate(self._hole_cards):
            lines.append(f"P{player} Cards: {hole.to_string()}")
        lines.append(f"BoardCards {cards_to_string(self._board, rules.num_suits)}")
        if self.is_chance_node():
            lines.append(f"PossibleCardsToDeal {self._deck.to_string()}")
        if self.is_terminal():
            for player, reward in enumerate(self.returns()):
                lines.append(f"P{player} Reward: {reward}")
        if self.is_chance_node():
            lines.append("Node type?: Chance node")
        elif self.is_terminal():
            lines.append("Node type?: Terminal Node!")
        else:
            lines.append(f"Node type?: Player node for player {self._current_player}")

        names = [f" ACTION_{flag.name} " for flag in ActionFlag if flag and flag & self._legal]
        lines.append(f"PossibleActions ({len(names)}): [{''.join(names)}]")
        lines.append(f"Round: {self.round}")
        lines.append(f"ACPC State: {self._protocol.to_string()}")
        lines.append(f"Action Sequence: {self._action_sequence}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.to_string()

    # ------------------------------------------------------------------
    # Belief support
    # ------------------------------------------------------------------

    def histories_consistent_with_infostate(self) -> list[tuple["AbstractedPokerState", float]]:
        """
        Every history the current player cannot tell apart from this one.

        Only two-player games are supported; other games return an empty list.
        Each history replays this hand with a different opponent hole-card
        combination drawn from the cards the current player has not seen; all
        are equally likely.
        Custom raises the opponent made are re-registered under the
        replacement information state so each history repeats the same amounts.

        Raises:
            ValueError: If called at a chance or terminal node.
        """
        if self._game.num_players != 2:
            return []
        if self.is_chance_node() or self.is_terminal():
            raise ValueError("Histories are defined only at decision nodes")

        player = self._current_player
        opponent = 1 - player
        seen = set(self._hole_cards[player]) | set(self._board)
        unseen = [card for card in range(self._game.max_chance_outcomes) if card not in seen]

        histories = []
        for combo in combinations(unseen, self._game.rules.num_hole_cards):
            replacement = iter(combo)
            root = self._game.new_initial_state()
            root._off_abstraction = self._off_abstraction.copy()
            deals = iter(self._deal_targets)
            for action, amount in zip(self._history, self._bet_history):
                if root.is_chance_node():
                    target = next(deals)
                    root.apply_action(next(replacement) if target == opponent else action)
                    continue
                off_abs = AbstractAction.OFF_ABS
                if action == off_abs and root.bet_size(off_abs) != amount:
                    # The opponent's custom raise was keyed by its own cards
                    info = root.information_state_string(root.current_player())
                    if info not in root.off_abstraction.private:
                        root.register_off_abstraction_raise(info, amount)
                root.apply_action(action)
            histories.append(root)

        probability = 1.0 / len(histories) if histories else 0.0
        logger.debug(f"{len(histories)} histories consistent with player {player}'s view")
        return [(history, probability) for history in histories]
