"""
Abstract betting actions.

Action ids are the public integers passed to ``apply_action`` at decision
nodes; flags form the legal-action set of a node; each action appends one
character to the state's action sequence.
"""

from enum import IntEnum, IntFlag


class AbstractAction(IntEnum):
    """Decision actions offered by the abstracted game."""

    FOLD = 0
    CALL = 1
    BET = 2
    ALL_IN = 3
    BET_HALF_POT = 4
    OFF_ABS = 5
    BET_POT = 6
    BET_DOUBLE_POT = 7

    @property
    def flag(self) -> "ActionFlag":
        return _FLAG_OF_ACTION[self]

    @property
    def char(self) -> str:
        return _CHAR_OF_FLAG[self.flag]

    @property
    def is_raise(self) -> bool:
        return self not in (AbstractAction.FOLD, AbstractAction.CALL)


class ActionFlag(IntFlag):
    """Bit flags for the legal-action set of a node."""

    NONE = 0
    DEAL = 1
    FOLD = 2
    CHECK_CALL = 4
    BET = 8
    ALL_IN = 16
    BET_HALF_POT = 32
    OFF_ABS = 64
    BET_POT = 128
    BET_DOUBLE_POT = 256


_FLAG_OF_ACTION = {
    AbstractAction.FOLD: ActionFlag.FOLD,
    AbstractAction.CALL: ActionFlag.CHECK_CALL,
    AbstractAction.BET: ActionFlag.BET,
    AbstractAction.ALL_IN: ActionFlag.ALL_IN,
    AbstractAction.BET_HALF_POT: ActionFlag.BET_HALF_POT,
    AbstractAction.OFF_ABS: ActionFlag.OFF_ABS,
    AbstractAction.BET_POT: ActionFlag.BET_POT,
    AbstractAction.BET_DOUBLE_POT: ActionFlag.BET_DOUBLE_POT,
}

_CHAR_OF_FLAG = {
    ActionFlag.DEAL: "d",
    ActionFlag.FOLD: "f",
    ActionFlag.CHECK_CALL: "c",
    ActionFlag.BET: "p",
    ActionFlag.ALL_IN: "a",
    ActionFlag.BET_HALF_POT: "h",
    ActionFlag.OFF_ABS: "b",
    ActionFlag.BET_POT: "w",
    ActionFlag.BET_DOUBLE_POT: "t",
}

DEAL_CHAR = _CHAR_OF_FLAG[ActionFlag.DEAL]

# Every character that can appear in an action sequence, in flag order
SEQUENCE_CHARS = tuple(_CHAR_OF_FLAG[flag] for flag in sorted(_CHAR_OF_FLAG))


def actions_in(flags: ActionFlag) -> list[AbstractAction]:
    """Decision actions enabled in ``flags``, in ascending id order."""
    return [action for action in AbstractAction if action.flag & flags]
