"""Tests for information state and observation tensors."""

import numpy as np
import pytest

from abstracted_poker.game.actions import AbstractAction as A
from abstracted_poker.game.tensors import (
    LEGACY_BITS,
    bits_per_action,
    information_state_tensor_size,
    observation_tensor_size,
)
from tests.test_helpers import deal, make_game, play

# Leduc-like game: 2 players, 12 cards, max game length 16
SEQUENCE_OFFSET = 2 + 2 * 12


@pytest.fixture(scope="module")
def leduc():
    return make_game("leduc_like.yaml")


@pytest.fixture(scope="module")
def leduc_legacy():
    return make_game("leduc_like.yaml", abstraction__tensor_encoding="legacy")


class TestSizes:
    """Tests for tensor size helpers."""

    def test_bits_per_action(self):
        assert bits_per_action("legacy") == 2
        assert bits_per_action("unambiguous") == 9

    def test_sizes(self):
        assert information_state_tensor_size(2, 12, 16, "unambiguous") == 170
        assert information_state_tensor_size(2, 12, 16, "legacy") == 58
        assert observation_tensor_size(2, 12) == 28

    def test_legacy_collisions(self):
        assert LEGACY_BITS["a"] == LEGACY_BITS["h"]
        assert LEGACY_BITS["f"] == LEGACY_BITS["d"]


class TestInformationStateTensor:
    """Tests for the information state tensor layout."""

    def test_unambiguous_layout(self, leduc):
        state = deal(leduc.new_initial_state(), "4s6h")
        tensor = state.information_state_tensor(0)
        assert tensor.shape == leduc.information_state_tensor_shape == (170,)
        assert tensor[0] == 1.0 and tensor[1] == 0.0
        # 4s is card id 4
        assert tensor[2 + 4] == 1.0
        # Two deals, one-hot slot 0 each
        assert tensor[SEQUENCE_OFFSET] == 1.0
        assert tensor[SEQUENCE_OFFSET + 9] == 1.0
        assert tensor.sum() == 4.0

    def test_unambiguous_distinguishes_raises(self, leduc):
        state = deal(leduc.new_initial_state(), "4s6h")
        all_in = state.child(A.ALL_IN).information_state_tensor(1)
        half = state.child(A.BET_HALF_POT).information_state_tensor(1)
        assert not np.array_equal(all_in, half)

    def test_call_slot(self, leduc):
        state = deal(leduc.new_initial_state(), "4s6h")
        play(state, [A.CALL])
        tensor = state.information_state_tensor(1)
        assert tensor[SEQUENCE_OFFSET + 2 * 9 + 2] == 1.0

    def test_board_section(self, leduc):
        state = deal(leduc.new_initial_state(), "4s6h")
        play(state, [A.CALL, A.CALL])
        deal(state, "5h")
        tensor = state.information_state_tensor(1)
        # 6h is card id 9, 5h is card id 7
        assert tensor[2 + 9] == 1.0
        assert tensor[2 + 12 + 7] == 1.0

    def test_legacy_layout(self, leduc_legacy):
        state = deal(leduc_legacy.new_initial_state(), "4s6h")
        play(state, [A.CALL])
        tensor = state.information_state_tensor(0)
        assert tensor.shape == (58,)
        assert tensor[SEQUENCE_OFFSET : SEQUENCE_OFFSET + 4].tolist() == [0, 0, 0, 0]
        assert tensor[SEQUENCE_OFFSET + 4 : SEQUENCE_OFFSET + 6].tolist() == [1, 0]

    def test_legacy_collapses_raises(self, leduc_legacy):
        state = deal(leduc_legacy.new_initial_state(), "4s6h")
        all_in = state.child(A.ALL_IN).information_state_tensor(1)
        half = state.child(A.BET_HALF_POT).information_state_tensor(1)
        assert np.array_equal(all_in, half)


class TestObservationTensor:
    """Tests for the observation tensor layout."""

    def test_layout(self, leduc):
        state = deal(leduc.new_initial_state(), "4s6h")
        tensor = state.observation_tensor(1)
        assert tensor.shape == (28,)
        assert tensor[1] == 1.0
        assert tensor[2 + 9] == 1.0
        assert tensor[-2:].tolist() == [100.0, 100.0]

    def test_contributions_follow_bets(self, leduc):
        state = deal(leduc.new_initial_state(), "4s6h")
        play(state, [A.BET_POT])
        assert state.observation_tensor(0)[-2:].tolist() == [300.0, 100.0]
