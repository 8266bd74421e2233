"""
This module defines the `Color`, `Rank`, `CardKind` and `Card` classes, which
are used to represent UNO cards.

- `Color`: An enum representing the four card colors: red, yellow, green and
blue.

- `Rank`: An enum representing the face of a card: the numbers 0 through 9,
the three colored actions (skip, reverse, draw two) and the two wilds.

- `CardKind`: The coarse category of a rank (number, action or wild), which
decides how the card is validated and which effect it has.

- `Card`: A class representing a single card. Cards are values: two cards with
the same color and rank are interchangeable.

This module is part of the `unosync` package, a rules engine for synchronized
multiplayer UNO sessions.
"""

from enum import Enum, unique
from typing import Any, Dict, Optional


@unique
class Color(Enum):
    """
    Enum for card colors.
    """

    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"

    def __str__(self) -> str:
        return self.value


@unique
class CardKind(Enum):
    """
    Enum for the categories of card.
    """

    NUMBER = "number"
    ACTION = "action"
    WILD = "wild"

    def __str__(self) -> str:
        return self.value


@unique
class Rank(Enum):
    """
    Enum for the faces of a card.
    """

    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW_TWO = "draw_two"
    WILD = "wild"
    WILD_DRAW_FOUR = "wild_draw_four"

    @property
    def kind(self) -> CardKind:
        """The category this rank belongs to."""
        if self in (Rank.WILD, Rank.WILD_DRAW_FOUR):
            return CardKind.WILD
        if self in (Rank.SKIP, Rank.REVERSE, Rank.DRAW_TWO):
            return CardKind.ACTION
        return CardKind.NUMBER

    @property
    def rank_str(self):
        """A string representation of the rank."""
        if self.kind == CardKind.NUMBER:
            return self.value
        return self.name.replace("_", " ").title()

    def __str__(self) -> str:
        return self.rank_str


NUMBER_RANKS = tuple(rank for rank in Rank if rank.kind == CardKind.NUMBER)
ACTION_RANKS = (Rank.SKIP, Rank.REVERSE, Rank.DRAW_TWO)
WILD_RANKS = (Rank.WILD, Rank.WILD_DRAW_FOUR)

# Spellings accepted from clients in addition to the enum values
_RANK_ALIASES = {
    "draw2": Rank.DRAW_TWO,
    "draw-two": Rank.DRAW_TWO,
    "wild_draw4": Rank.WILD_DRAW_FOUR,
    "wild-draw-four": Rank.WILD_DRAW_FOUR,
}


def parse_color(value: Any) -> Color:
    """
    Convert a `Color` or its string value into a `Color`.

    :raises ValueError: if the value names no color.
    """
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        return Color(value.lower())
    raise ValueError(f"Invalid color: {value!r}")


def parse_rank(value: Any) -> Rank:
    """
    Convert a `Rank`, its string value or an integer 0-9 into a `Rank`.

    :raises ValueError: if the value names no rank.
    """
    if isinstance(value, Rank):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str):
        key = value.lower()
        if key in _RANK_ALIASES:
            return _RANK_ALIASES[key]
        return Rank(key)
    raise ValueError(f"Invalid rank: {value!r}")


class Card:
    """
    Class representing an UNO card.

    >>> card = Card(Color.RED, Rank.FIVE)
    >>> print(card)
    Red 5
    >>> wild = Card(None, Rank.WILD)
    >>> print(wild)
    Wild
    """

    __slots__ = ("color", "rank")

    def __init__(self, color: Optional[Color], rank: Rank):
        """
        Initialize a Card instance.

        :param color: Color of the card. Must be None for a wild card in a
                      hand or pile; the wild showing on the discard pile
                      carries the color chosen when it was played.
        :param rank: Rank of the card (one of the Rank enums)
        """
        if not isinstance(rank, Rank):
            raise TypeError(f"Invalid rank: {rank}")
        match rank.kind:
            case CardKind.WILD:
                if color is not None and not isinstance(color, Color):
                    raise TypeError(f"Invalid color: {color}")
            case _:
                if not isinstance(color, Color):
                    raise TypeError(f"Invalid color: {color}")
        object.__setattr__(self, "color", color)
        object.__setattr__(self, "rank", rank)

    def __setattr__(self, name, value):
        raise AttributeError("Card is immutable")

    @property
    def kind(self) -> CardKind:
        return self.rank.kind

    @property
    def is_wild(self) -> bool:
        return self.rank.kind == CardKind.WILD

    def with_color(self, color: Optional[Color]) -> "Card":
        """
        Return a copy of a wild card showing the given color.

        Colored cards are returned unchanged.
        """
        if not self.is_wild:
            return self
        return Card(color, self.rank)

    def matches(self, other: "Card") -> bool:
        """
        Check whether two cards are the same physical face.

        Wild cards match on rank alone, whatever color they are showing.
        """
        if self.is_wild:
            return self.rank == other.rank
        return self == other

    def to_dict(self) -> Dict[str, Any]:
        """Convert the card to plain data."""
        return {
            "color": self.color.value if self.color else None,
            "rank": self.rank.value,
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """
        Build a card from plain data.

        Accepts ``rank`` or ``value`` for the face; ``kind`` is derived and
        ignored if present.

        :raises ValueError: if the data does not describe a valid card.
        """
        rank = parse_rank(data.get("rank", data.get("value")))
        color = data.get("color")
        color = parse_color(color) if color is not None else None
        try:
            return cls(color, rank)
        except TypeError as e:
            raise ValueError(str(e)) from e

    def __eq__(self, other):
        """
        Checks if this card is equal to another card.

        :param other: The other card to compare to.
        :return: True if the cards have the same rank and color, False otherwise.
        """
        if isinstance(other, Card):
            return self.rank == other.rank and self.color == other.color
        return NotImplemented

    def __hash__(self):
        return hash((self.color, self.rank))

    def __repr__(self) -> str:
        """
        Provide a machine-readable representation of the card.

        :return: A string representation of the card.
        """
        color = f"Color.{self.color.name}" if self.color else "None"
        return f"Card({color}, Rank.{self.rank.name})"

    def __str__(self) -> str:
        """
        Provide a human-readable representation of the card.

        :return: A string representation of the card.
        """
        if self.color is None:
            return self.rank.rank_str
        return f"{self.color.value.title()} {self.rank.rank_str}"
