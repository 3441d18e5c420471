"""
Tensor encodings of information states and observations.

Information state layout: one-hot acting seat (``num_players``), own hole cards
(one bit per card id), board cards (one bit per card id), then the action
sequence, one slot per position up to the game's maximum length.

Two sequence encodings exist. ``legacy`` spends two bits per action and maps
several actions to the same pattern; it matches tensors produced by earlier
models. ``unambiguous`` one-hot encodes each of the nine sequence characters.

Observation layout: one-hot seat, own hole cards, board cards, then each
player's contribution to the pot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np

from abstracted_poker.game.actions import SEQUENCE_CHARS

if TYPE_CHECKING:
    from abstracted_poker.game.state import AbstractedPokerState

TensorEncoding = Literal["unambiguous", "legacy"]

# Raises of different kinds share patterns and fold encodes like a deal
LEGACY_BITS = {
    "c": (1, 0),
    "p": (0, 1),
    "a": (1, 1),
    "h": (1, 1),
    "b": (0, 0),
    "w": (0, 0),
    "t": (0, 0),
    "f": (0, 0),
    "d": (0, 0),
}

_ONE_HOT_SLOT = {char: slot for slot, char in enumerate(SEQUENCE_CHARS)}


def bits_per_action(encoding: TensorEncoding) -> int:
    return 2 if encoding == "legacy" else len(SEQUENCE_CHARS)


def information_state_tensor_size(
    num_players: int, num_cards: int, max_game_length: int, encoding: TensorEncoding
) -> int:
    return num_players + 2 * num_cards + bits_per_action(encoding) * max_game_length


def observation_tensor_size(num_players: int, num_cards: int) -> int:
    return 2 * (num_players + num_cards)


def _encode_cards(state: "AbstractedPokerState", player: int, values: np.ndarray) -> int:
    """Fill seat and card sections; return the offset after them."""
    num_players = state.game.num_players
    num_cards = state.game.max_chance_outcomes
    values[player] = 1.0
    offset = num_players
    for card in state.hole_cards(player):
        values[offset + card] = 1.0
    offset += num_cards
    for card in state.board_cards():
        values[offset + card] = 1.0
    return offset + num_cards


def information_state_tensor(state: "AbstractedPokerState", player: int) -> np.ndarray:
    """
    Encode ``player``'s information state.

    Raises:
        ValueError: If the action sequence does not fit the game's maximum length.
    """
    game = state.game
    encoding = game.tensor_encoding
    width = bits_per_action(encoding)
    values = np.zeros(game.information_state_tensor_shape[0], dtype=np.float64)
    offset = _encode_cards(state, player, values)

    sequence = state.action_sequence
    if len(sequence) >= game.max_game_length:
        raise ValueError(
            f"Action sequence of length {len(sequence)} does not fit "
            f"max game length {game.max_game_length}"
        )
    for position, char in enumerate(sequence):
        base = offset + width * position
        if encoding == "legacy":
            values[base : base + 2] = LEGACY_BITS[char]
        else:
            values[base + _ONE_HOT_SLOT[char]] = 1.0
    return values


def observation_tensor(state: "AbstractedPokerState", player: int) -> np.ndarray:
    game = state.game
    values = np.zeros(game.observation_tensor_shape[0], dtype=np.float64)
    offset = _encode_cards(state, player, values)
    values[offset : offset + game.num_players] = state.antes()
    return values
