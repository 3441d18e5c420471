"""
Information state and observation records.

The string forms are consumed by external search and learning code and by
persisted logs, so field order, labels and separators are fixed.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class InfoStateKey:
    """
    Abstracted view of a decision for one player.

    Its string form is the information state identity:
    ``[Round r][Player: p][Pot: x][Money: m0 m1][InfoAbs: k][Sequences: s0|s1]``.
    """

    round: int  # 0-based betting round
    player: int  # player to act (-1 chance, -4 terminal)
    pot: int
    money: tuple[int, ...]  # chips behind, per seat
    cluster: int  # card abstraction bucket
    sequences: tuple[str, ...]  # betting per round, rounds 0..round

    def __str__(self) -> str:
        return (
            f"[Round {self.round}][Player: {self.player}][Pot: {self.pot}]"
            f"[Money: {' '.join(map(str, self.money))}][InfoAbs: {self.cluster}]"
            f"[Sequences: {'|'.join(self.sequences)}]"
        )


@dataclass(frozen=True)
class Observation:
    """Public view plus the observing player's own cards."""

    round: int
    player: int
    pot: int
    money: tuple[int, ...]
    private_cards: str | None  # None for the chance player
    ante: tuple[int, ...]

    def __str__(self) -> str:
        # No closing bracket after Money: persisted observations omit it
        text = f"[Round {self.round}][Player: {self.player}][Pot: {self.pot}][Money:"
        text += "".join(f" {amount}" for amount in self.money)
        if self.private_cards is not None:
            text += f"[Private: {self.private_cards}]"
        text += "[Ante:" + "".join(f" {amount}" for amount in self.ante) + "]"
        return text
