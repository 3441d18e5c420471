"""Tests for configuration models and YAML loading."""

import pytest
from pydantic import ValidationError

from abstracted_poker.shared.config import Config, GameConfig
from abstracted_poker.shared.config_loader import load_config, overrides_to_tree
from abstracted_poker.shared.errors import ConfigFileError
from tests.test_helpers import CONFIG_DIR


class TestGameConfig:
    """Tests for GameConfig defaults and validators."""

    def test_defaults_are_heads_up_no_limit_holdem(self):
        game = GameConfig()
        assert game.betting == "nolimit"
        assert game.num_players == 2
        assert game.stack == [20000, 20000]
        assert game.blind == [100, 50]
        assert game.first_player == [1, 0, 0, 0]
        assert game.num_board_cards == [0, 3, 1, 1]
        assert game.deck_size == 52
        assert game.total_board_cards == 5
        assert not game.is_limit

    def test_board_cards_required_is_cumulative(self):
        game = GameConfig()
        assert [game.board_cards_required(r) for r in range(4)] == [0, 3, 4, 5]

    def test_stack_length_must_match_players(self):
        with pytest.raises(ValidationError):
            GameConfig(num_players=3)

    def test_first_player_must_be_a_seat(self):
        with pytest.raises(ValidationError):
            GameConfig(first_player=[2, 0, 0, 0])

    def test_cards_must_fit_deck(self):
        with pytest.raises(ValidationError):
            GameConfig(num_suits=1, num_ranks=5)

    def test_hand_size_limited_to_seven(self):
        with pytest.raises(ValidationError):
            GameConfig(num_hole_cards=3)

    def test_limit_needs_raise_size_per_round(self):
        with pytest.raises(ValidationError):
            GameConfig(betting="limit", raise_size=[10])

    def test_frozen(self):
        game = GameConfig()
        with pytest.raises(ValidationError):
            game.num_players = 3

    def test_extra_keys_forbidden(self):
        with pytest.raises(ValidationError):
            GameConfig(antes=[1, 1])


class TestConfig:
    """Tests for the root Config."""

    def test_default(self):
        config = Config.default()
        assert config.abstraction.placeholder_buckets == 200
        assert config.abstraction.tensor_encoding == "unambiguous"
        assert config.abstraction.cluster_files == {}
        assert config.system.log_level == "INFO"

    def test_merge_returns_new_config(self):
        config = Config.default()
        merged = config.merge({"game": {"betting_abstraction": "fc"}})
        assert merged.game.betting_abstraction == "fc"
        assert config.game.betting_abstraction == "fcpa"

    def test_from_dict_keeps_unspecified_defaults(self):
        config = Config.from_dict({"abstraction": {"placeholder_buckets": 10}})
        assert config.abstraction.placeholder_buckets == 10
        assert config.game.num_players == 2

    def test_cluster_rounds_validated(self):
        with pytest.raises(ValidationError):
            Config.from_dict({"abstraction": {"cluster_files": {5: "river.bin"}}})

    def test_off_abstraction_amounts_must_be_positive(self):
        with pytest.raises(ValidationError):
            Config.from_dict({"abstraction": {"off_abstraction_raises": {"x": 0}}})

    def test_to_dict_round_trips(self):
        config = Config.default()
        assert Config.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_path_gives_defaults(self):
        assert load_config() == Config.default()

    def test_hunl_preset(self):
        config = load_config(CONFIG_DIR / "hunl.yaml")
        assert config.system.config_name == "hunl"
        assert config.game.stack == [20000, 20000]

    def test_extends_chain(self):
        config = load_config(CONFIG_DIR / "limit_holdem.yaml")
        assert config.game.betting == "limit"
        assert config.game.blind == [10, 5]
        # Inherited from hunl.yaml
        assert config.game.num_board_cards == [0, 3, 1, 1]
        assert config.system.config_name == "limit_holdem"

    def test_keyword_overrides_win(self):
        config = load_config(CONFIG_DIR / "hunl.yaml", game__betting_abstraction="fc")
        assert config.game.betting_abstraction == "fc"

    def test_leduc_like_preset(self):
        config = load_config(CONFIG_DIR / "leduc_like.yaml")
        assert config.game.num_rounds == 2
        assert config.game.deck_size == 12

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_extends_loop(self, tmp_path):
        (tmp_path / "a.yaml").write_text("extends: b.yaml\n")
        (tmp_path / "b.yaml").write_text("extends: a.yaml\n")
        with pytest.raises(ConfigFileError, match="a.yaml -> b.yaml -> a.yaml"):
            load_config(tmp_path / "a.yaml")

    def test_extends_must_be_file_name(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("extends: [hunl.yaml]\n")
        with pytest.raises(ConfigFileError):
            load_config(tmp_path / "bad.yaml")

    def test_preset_must_be_mapping(self, tmp_path):
        (tmp_path / "list.yaml").write_text("- game\n- system\n")
        with pytest.raises(ConfigFileError):
            load_config(tmp_path / "list.yaml")

    def test_empty_preset_keeps_defaults(self, tmp_path):
        (tmp_path / "empty.yaml").write_text("")
        assert load_config(tmp_path / "empty.yaml") == Config.default()

    def test_three_level_chain(self, tmp_path):
        (tmp_path / "base.yaml").write_text("game:\n  stack: [500, 500]\n  blind: [10, 5]\n")
        (tmp_path / "mid.yaml").write_text("extends: base.yaml\ngame:\n  blind: [20, 10]\n")
        (tmp_path / "top.yaml").write_text("extends: mid.yaml\nsystem:\n  config_name: top\n")
        config = load_config(tmp_path / "top.yaml")
        assert config.game.stack == [500, 500]
        assert config.game.blind == [20, 10]
        assert config.system.config_name == "top"


class TestOverridesToTree:
    """Tests for nesting keyword overrides."""

    def test_nests_by_section(self):
        assert overrides_to_tree({"game__stack": [500, 500], "system__log_level": "DEBUG"}) == {
            "game": {"stack": [500, 500]},
            "system": {"log_level": "DEBUG"},
        }

    def test_conflicting_keys(self):
        with pytest.raises(ValueError):
            overrides_to_tree({"game": 1, "game__stack": [500, 500]})
        with pytest.raises(ValueError):
            overrides_to_tree({"game__stack": [500, 500], "game": 1})
