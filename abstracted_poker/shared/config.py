"""
Configuration schema and defaults for games and abstractions.

Defaults are defined as Pydantic field defaults. YAML files provide overrides only.
Validation constraints live next to each field.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Shared type aliases for common constraints
# ---------------------------------------------------------------------------

PositiveInt = Annotated[int, Field(gt=0)]
NonNegInt = Annotated[int, Field(ge=0)]

MAX_PLAYERS = 10
MAX_ROUNDS = 4
MAX_CARDS_PER_HAND = 7
UNLIMITED_RAISES = 255


def deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with ``override`` merged onto ``base`` (override wins, recursive)."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Base model: all config classes inherit this
# ---------------------------------------------------------------------------


class StrictFrozenModel(BaseModel):
    """Base for all config models: immutable, extra keys forbidden."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------


class GameConfig(StrictFrozenModel):
    """
    Poker game definition.

    Per-player lists (``stack``, ``blind``) are indexed by seat. Per-round lists
    (``raise_size``, ``first_player``, ``max_raises``, ``num_board_cards``) are
    indexed by betting round. ``first_player`` is 0-based.
    """

    betting: Literal["nolimit", "limit"] = Field(default="nolimit")
    num_players: Annotated[int, Field(ge=2, le=MAX_PLAYERS)] = Field(default=2)
    num_rounds: Annotated[int, Field(ge=1, le=MAX_ROUNDS)] = Field(default=4)
    stack: list[PositiveInt] = Field(default_factory=lambda: [20000, 20000])
    blind: list[NonNegInt] = Field(default_factory=lambda: [100, 50])
    raise_size: list[PositiveInt] = Field(default_factory=lambda: [100, 100, 200, 200])
    first_player: list[NonNegInt] = Field(default_factory=lambda: [1, 0, 0, 0])
    max_raises: list[NonNegInt] = Field(
        default_factory=lambda: [UNLIMITED_RAISES] * MAX_ROUNDS
    )
    num_suits: Annotated[int, Field(ge=1, le=4)] = Field(default=4)
    num_ranks: Annotated[int, Field(ge=2, le=13)] = Field(default=13)
    num_hole_cards: Annotated[int, Field(ge=1, le=3)] = Field(default=2)
    num_board_cards: list[NonNegInt] = Field(default_factory=lambda: [0, 3, 1, 1])
    betting_abstraction: Literal["fcpa", "fc"] = Field(default="fcpa")

    @model_validator(mode="after")
    def lists_match_dimensions(self) -> "GameConfig":
        for name in ("stack", "blind"):
            values = getattr(self, name)
            if len(values) != self.num_players:
                raise ValueError(
                    f"{name} has {len(values)} entries but num_players is {self.num_players}"
                )
        for name in ("first_player", "num_board_cards", "max_raises"):
            values = getattr(self, name)
            if len(values) < self.num_rounds:
                raise ValueError(
                    f"{name} has {len(values)} entries but num_rounds is {self.num_rounds}"
                )
        if self.betting == "limit" and len(self.raise_size) < self.num_rounds:
            raise ValueError(
                f"raise_size has {len(self.raise_size)} entries but num_rounds is "
                f"{self.num_rounds}"
            )
        return self

    @model_validator(mode="after")
    def seats_are_valid(self) -> "GameConfig":
        for round_idx in range(self.num_rounds):
            if self.first_player[round_idx] >= self.num_players:
                raise ValueError(
                    f"first_player[{round_idx}] = {self.first_player[round_idx]} is not a seat "
                    f"of a {self.num_players}-player game"
                )
        return self

    @model_validator(mode="after")
    def cards_fit_deck(self) -> "GameConfig":
        per_hand = self.num_hole_cards + self.total_board_cards
        if per_hand > MAX_CARDS_PER_HAND:
            raise ValueError(
                f"A hand uses {per_hand} cards; at most {MAX_CARDS_PER_HAND} are supported"
            )
        dealt = self.num_hole_cards * self.num_players + self.total_board_cards
        if dealt > self.deck_size:
            raise ValueError(f"Dealing {dealt} cards needs more than a {self.deck_size}-card deck")
        return self

    @property
    def deck_size(self) -> int:
        return self.num_suits * self.num_ranks

    @property
    def total_board_cards(self) -> int:
        return sum(self.num_board_cards[: self.num_rounds])

    @property
    def is_limit(self) -> bool:
        return self.betting == "limit"

    def board_cards_required(self, round_idx: int) -> int:
        """Cumulative number of board cards visible in 0-based ``round_idx``."""
        return sum(self.num_board_cards[: round_idx + 1])


class AbstractionConfig(StrictFrozenModel):
    """Card and action abstraction settings."""

    # 1-based round -> path of a flat uint8 cluster file
    cluster_files: dict[int, str] = Field(default_factory=dict)
    placeholder_buckets: PositiveInt = Field(default=200)
    tensor_encoding: Literal["unambiguous", "legacy"] = Field(default="unambiguous")
    # Pre-populated game-scope table: information state string -> raise-to amount
    off_abstraction_raises: dict[str, PositiveInt] = Field(default_factory=dict)

    @model_validator(mode="after")
    def cluster_rounds_are_valid(self) -> "AbstractionConfig":
        bad_rounds = sorted(r for r in self.cluster_files if not 1 <= r <= MAX_ROUNDS)
        if bad_rounds:
            raise ValueError(f"cluster_files rounds must be between 1 and 4, got {bad_rounds}")
        return self


class SystemConfig(StrictFrozenModel):
    """System-level configuration."""

    config_name: str = Field(default="default")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class Config(StrictFrozenModel):
    """
    Complete game configuration.

    All defaults are defined here in Python. YAML files provide only overrides.
    """

    game: GameConfig = Field(default_factory=GameConfig)
    abstraction: AbstractionConfig = Field(default_factory=AbstractionConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize config to a plain dict (for JSON, logging, etc.)."""
        return self.model_dump()

    @classmethod
    def default(cls) -> "Config":
        """Return a Config populated with all defaults."""
        return cls()

    def merge(self, overrides: dict[str, Any]) -> "Config":
        """Return a new Config with the provided overrides merged in."""
        merged = deep_merge_dicts(self.model_dump(), overrides)
        return Config.model_validate(merged)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "Config":
        """Create Config from a dict merged over defaults."""
        merged = deep_merge_dicts(cls().model_dump(), config_dict)
        return cls.model_validate(merged)
