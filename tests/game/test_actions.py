"""Tests for abstract actions and legal-action flags."""

from abstracted_poker.game.actions import (
    DEAL_CHAR,
    SEQUENCE_CHARS,
    AbstractAction,
    ActionFlag,
    actions_in,
)


class TestAbstractAction:
    """Tests for action ids, flags and sequence characters."""

    def test_ids_are_stable(self):
        assert [int(a) for a in AbstractAction] == list(range(8))
        assert AbstractAction.OFF_ABS == 5
        assert AbstractAction.BET_DOUBLE_POT == 7

    def test_flags(self):
        assert AbstractAction.FOLD.flag == 2
        assert AbstractAction.CALL.flag == 4
        assert AbstractAction.BET.flag == 8
        assert AbstractAction.ALL_IN.flag == 16
        assert AbstractAction.BET_HALF_POT.flag == 32
        assert AbstractAction.OFF_ABS.flag == 64
        assert AbstractAction.BET_POT.flag == 128
        assert AbstractAction.BET_DOUBLE_POT.flag == 256

    def test_chars(self):
        chars = "".join(action.char for action in AbstractAction)
        assert chars == "fcpahbwt"
        assert DEAL_CHAR == "d"

    def test_is_raise(self):
        assert not AbstractAction.FOLD.is_raise
        assert not AbstractAction.CALL.is_raise
        assert all(AbstractAction(i).is_raise for i in range(2, 8))


class TestActionFlag:
    """Tests for flag sets."""

    def test_sequence_chars_in_flag_order(self):
        assert SEQUENCE_CHARS == ("d", "f", "c", "p", "a", "h", "b", "w", "t")

    def test_actions_in_ascending_id_order(self):
        flags = ActionFlag.BET_POT | ActionFlag.FOLD | ActionFlag.CHECK_CALL | ActionFlag.OFF_ABS
        assert actions_in(flags) == [
            AbstractAction.FOLD,
            AbstractAction.CALL,
            AbstractAction.OFF_ABS,
            AbstractAction.BET_POT,
        ]

    def test_deal_flag_has_no_decision_actions(self):
        assert actions_in(ActionFlag.DEAL) == []
        assert actions_in(ActionFlag.NONE) == []

    def test_membership(self):
        flags = ActionFlag.FOLD | ActionFlag.BET
        assert flags & ActionFlag.BET
        assert not flags & ActionFlag.ALL_IN
