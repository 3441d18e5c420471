"""Tests for the abstracted poker game definition."""

import logging

import numpy as np
import pytest

from abstracted_poker.abstraction.clusters import write_cluster_file
from abstracted_poker.game.actions import AbstractAction as A
from abstracted_poker.game.game import AbstractedPokerGame, card_schedule, max_game_length
from abstracted_poker.indexing import GeneralIndexer, PreflopIndexer
from abstracted_poker.shared.config import Config, GameConfig
from abstracted_poker.shared.errors import ClusterFileError
from tests.test_helpers import deal, make_game, play


@pytest.fixture(scope="module")
def hunl():
    return AbstractedPokerGame()


class TestGameProperties:
    """Tests for sizes, bounds and shapes."""

    def test_heads_up_no_limit(self, hunl):
        assert hunl.num_players == 2
        assert hunl.num_distinct_actions == 8
        assert hunl.max_chance_outcomes == 52
        assert hunl.min_utility == -20000.0
        assert hunl.max_utility == 20000.0
        assert hunl.betting_abstraction == "fcpa"

    def test_max_game_length(self, hunl):
        assert hunl.max_game_length == 34

    def test_max_game_length_small_deck(self):
        rules = Config.from_dict(
            {
                "game": {
                    "num_rounds": 2,
                    "stack": [1200, 1200],
                    "blind": [100, 100],
                    "first_player": [0, 0],
                    "num_suits": 2,
                    "num_ranks": 6,
                    "num_hole_cards": 1,
                    "num_board_cards": [0, 1],
                }
            }
        ).game
        assert max_game_length(rules) == 16

    def test_tensor_shapes(self, hunl):
        assert hunl.tensor_encoding == "unambiguous"
        assert hunl.information_state_tensor_shape == (2 + 2 * 52 + 9 * 34,)
        assert hunl.observation_tensor_shape == (2 * (2 + 52),)

    def test_legacy_tensor_shape(self):
        game = make_game(abstraction__tensor_encoding="legacy")
        assert game.information_state_tensor_shape == (2 + 2 * 52 + 2 * 34,)

    def test_limit_actions(self):
        game = make_game("limit_holdem.yaml")
        assert game.num_distinct_actions == 3
        assert game.rules.is_limit

    def test_repr(self, hunl):
        assert repr(hunl).startswith("AbstractedPokerGame(betting='nolimit'")


class TestCardAbstraction:
    """Tests for per-round indexing and clustering through the game."""

    def test_schedule(self, hunl):
        assert hunl.schedule == (2, 3, 1, 1)
        assert card_schedule(GameConfig(num_board_cards=[1, 1, 1, 1])) == (3, 1, 1, 1)

    def test_indexer_kinds(self, hunl):
        assert isinstance(hunl.indexers[0], PreflopIndexer)
        assert all(isinstance(indexer, GeneralIndexer) for indexer in hunl.indexers[1:])

    def test_board_in_first_round_uses_general_indexer(self):
        game = make_game(game__num_board_cards=[1, 1, 1, 1])
        assert isinstance(game.indexers[0], GeneralIndexer)
        assert game.round_size(1) == GeneralIndexer(1, (3,)).get_size(1)

    def test_round_sizes(self, hunl):
        sizes = [hunl.round_size(r) for r in range(1, 5)]
        assert sizes == [169, 1286792, 55190538, 2428287420]

    def test_get_index_and_canonical_hand(self, hunl):
        assert hunl.get_index(2, "5s9sAhKhTc") == 1026452
        assert hunl.get_canonical_hand(2, 1026452) == "5s9sKhAhTd"
        assert hunl.get_index(3, "2d9dKd7s7h4c") == 47386893
        assert hunl.get_index(4, "3s9s4d6c9c3c8d") == 1959686764

    def test_placeholder_cluster(self, hunl):
        assert hunl.get_cluster(2, 1026452) == 52

    def test_round_out_of_range(self, hunl):
        with pytest.raises(ValueError):
            hunl.get_index(5, "AsKs")
        with pytest.raises(ValueError):
            hunl.get_canonical_hand(0, 0)

    def test_cluster_file_feeds_info_state(self, tmp_path):
        buckets = np.arange(66) % 3
        path = write_cluster_file(tmp_path / "leduc_r2.bin", buckets)
        game = make_game("leduc_like.yaml", abstraction__cluster_files={2: str(path)})
        assert game.cluster_table.has_table(2)

        state = deal(game.new_initial_state(), "4s6h")
        play(state, [A.CALL, A.CALL])
        deal(state, "5h")
        expected = int(buckets[game.get_index(2, "4s5h")])
        assert f"[InfoAbs: {expected}]" in state.information_state_string(0)

    def test_cluster_file_size_mismatch(self, tmp_path):
        path = write_cluster_file(tmp_path / "bad.bin", [0] * 10)
        with pytest.raises(ClusterFileError):
            make_game("leduc_like.yaml", abstraction__cluster_files={2: str(path)})


class TestGameScope:
    """Tests for game-level shared data and logging."""

    def test_off_abstraction_raises_read_only(self):
        game = make_game(abstraction__off_abstraction_raises={"info": 500})
        assert game.off_abstraction_raises["info"] == 500
        with pytest.raises(TypeError):
            game.off_abstraction_raises["other"] = 1
        with pytest.raises(KeyError):
            game.off_abstraction_raise("other")

    def test_states_share_game(self, hunl):
        a = hunl.new_initial_state()
        b = hunl.new_initial_state()
        assert a.game is b.game is hunl
        a.apply_action(0)
        assert b.is_chance_node() and len(b.legal_actions()) == 52

    def test_log_level_applied(self):
        make_game(system__log_level="DEBUG")
        assert logging.getLogger("abstracted_poker").level == logging.DEBUG
        make_game(system__log_level="INFO")
        assert logging.getLogger("abstracted_poker").level == logging.INFO

    def test_creation_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="abstracted_poker"):
            AbstractedPokerGame()
        assert "Created nolimit game" in caplog.text

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            make_game(game__num_players=3)
