"""
Card ids, text encoding and a bit-vector card set.

A card is the integer ``rank * num_suits + suit``. The text form is two
characters per card: a rank character from ``RANK_CHARS`` followed by a suit
character from ``SUIT_CHARS``.
"""

from __future__ import annotations

from typing import Iterable, Iterator

RANK_CHARS = "23456789TJQKA"
SUIT_CHARS = "shdc"

MAX_SUITS = len(SUIT_CHARS)
MAX_RANKS = len(RANK_CHARS)

_RANK_OF_CHAR = {char: rank for rank, char in enumerate(RANK_CHARS)}
_SUIT_OF_CHAR = {char: suit for suit, char in enumerate(SUIT_CHARS)}


def make_card(rank: int, suit: int, num_suits: int = MAX_SUITS) -> int:
    return rank * num_suits + suit


def card_rank(card: int, num_suits: int = MAX_SUITS) -> int:
    return card // num_suits


def card_suit(card: int, num_suits: int = MAX_SUITS) -> int:
    return card % num_suits


def card_to_string(card: int, num_suits: int = MAX_SUITS) -> str:
    """Render a card id as two characters, e.g. ``"Ah"``."""
    return RANK_CHARS[card_rank(card, num_suits)] + SUIT_CHARS[card_suit(card, num_suits)]


def card_from_string(text: str, num_suits: int = MAX_SUITS, num_ranks: int = MAX_RANKS) -> int:
    """
    Parse a two-character card.

    Raises:
        ValueError: If the text is not a rank/suit pair valid for the deck.
    """
    if len(text) != 2:
        raise ValueError(f"Card must be two characters, got {text!r}")
    rank = _RANK_OF_CHAR.get(text[0])
    suit = _SUIT_OF_CHAR.get(text[1])
    if rank is None or suit is None or rank >= num_ranks or suit >= num_suits:
        raise ValueError(f"Invalid card {text!r} for a {num_suits}x{num_ranks} deck")
    return make_card(rank, suit, num_suits)


def cards_from_string(
    text: str, num_suits: int = MAX_SUITS, num_ranks: int = MAX_RANKS
) -> list[int]:
    """Parse a concatenation of two-character cards, preserving order."""
    if len(text) % 2:
        raise ValueError(f"Card string must have an even length, got {text!r}")
    return [
        card_from_string(text[i : i + 2], num_suits, num_ranks) for i in range(0, len(text), 2)
    ]


def cards_to_string(cards: Iterable[int], num_suits: int = MAX_SUITS) -> str:
    return "".join(card_to_string(card, num_suits) for card in cards)


class CardSet:
    """
    Set of cards stored as an integer bit mask (bit ``card`` set when held).

    Iteration and ``to_card_array`` yield cards in ascending id order.
    """

    __slots__ = ("_mask", "num_suits", "num_ranks")

    def __init__(
        self,
        cards: Iterable[int] = (),
        num_suits: int = MAX_SUITS,
        num_ranks: int = MAX_RANKS,
    ):
        self.num_suits = num_suits
        self.num_ranks = num_ranks
        self._mask = 0
        for card in cards:
            self.add_card(card)

    @classmethod
    def full_deck(cls, num_suits: int = MAX_SUITS, num_ranks: int = MAX_RANKS) -> "CardSet":
        deck = cls(num_suits=num_suits, num_ranks=num_ranks)
        deck._mask = (1 << (num_suits * num_ranks)) - 1
        return deck

    @property
    def capacity(self) -> int:
        return self.num_suits * self.num_ranks

    def _check(self, card: int) -> None:
        if not 0 <= card < self.capacity:
            raise ValueError(f"Card id {card} outside a {self.capacity}-card deck")

    def add_card(self, card: int) -> None:
        self._check(card)
        self._mask |= 1 << card

    def remove_card(self, card: int) -> None:
        self._check(card)
        self._mask &= ~(1 << card)

    def contains_card(self, card: int) -> bool:
        return 0 <= card < self.capacity and bool(self._mask >> card & 1)

    def num_cards(self) -> int:
        return bin(self._mask).count("1")

    def to_card_array(self) -> list[int]:
        return list(self)

    def to_string(self) -> str:
        return cards_to_string(self, self.num_suits)

    def copy(self) -> "CardSet":
        clone = CardSet(num_suits=self.num_suits, num_ranks=self.num_ranks)
        clone._mask = self._mask
        return clone

    def __iter__(self) -> Iterator[int]:
        mask = self._mask
        while mask:
            low = mask & -mask
            yield low.bit_length() - 1
            mask ^= low

    def __contains__(self, card: object) -> bool:
        return isinstance(card, int) and self.contains_card(card)

    def __len__(self) -> int:
        return self.num_cards()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CardSet):
            return NotImplemented
        return (self._mask, self.num_suits, self.num_ranks) == (
            other._mask,
            other.num_suits,
            other.num_ranks,
        )

    def __hash__(self) -> int:
        return hash((self._mask, self.num_suits, self.num_ranks))

    def __repr__(self) -> str:
        return f"CardSet({self.to_string()!r})"
