"""
This module contains the Deck class, which represents the 108-card UNO deck
while a game is being set up.

>>> deck = Deck()
>>> deck.size
108
>>> hands = deck.deal_hands(["a", "b"])
>>> len(hands[0]), deck.size
(7, 94)
"""

import random
from typing import List, Optional, Sequence, Tuple, Union

from unosync.common.card import (
    ACTION_RANKS,
    NUMBER_RANKS,
    Card,
    CardKind,
    Color,
    Rank,
)


def build_deck() -> List[Card]:
    """
    Build the fixed 108-card set.

    For each color: one 0, two each of 1-9, two each of skip, reverse and
    draw two. Then four wild and four wild draw four cards with no color.
    """
    cards: List[Card] = []
    for color in Color:
        for rank in NUMBER_RANKS:
            copies = 1 if rank == Rank.ZERO else 2
            cards.extend(Card(color, rank) for _ in range(copies))
        for rank in ACTION_RANKS:
            cards.extend(Card(color, rank) for _ in range(2))
    cards.extend(Card(None, Rank.WILD) for _ in range(4))
    cards.extend(Card(None, Rank.WILD_DRAW_FOUR) for _ in range(4))
    return cards


def shuffle_cards(
    cards: Sequence[Card], rng: Optional[random.Random] = None
) -> List[Card]:
    """
    Return a uniformly shuffled copy of the cards (Fisher-Yates).

    :param cards: The cards to shuffle; left untouched.
    :param rng: Random source. Tests pass a seeded ``random.Random``.
    """
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class Deck:
    """
    A class representing the working deck used to deal a new game.

    The top of the deck is the end of ``cards``.
    """

    def __init__(
        self,
        cards: Union[List[Card], None] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize a Deck instance.

        :param cards: A list of Card instances to populate the deck (optional).
                      If not provided, the full 108-card deck is built.
        :param rng: Random source used by shuffle().
        """
        self.rng = rng or random.Random()
        if cards is None:
            self.cards: List[Card] = build_deck()
        else:
            self.cards = list(cards)

    def shuffle(self):
        """
        Shuffle the cards in the deck.
        """
        self.cards = shuffle_cards(self.cards, self.rng)
        return self

    def deal(self, num_cards=1) -> Union[Card, List[Card]]:
        """
        Pop n cards from the top of the deck.

        :return: A card instance or a list of card instances.
        """
        if num_cards == 1:
            return self.cards.pop()
        return [self.cards.pop() for _ in range(num_cards)]

    def deal_hands(
        self, player_ids: Sequence[str], hand_size: int = 7
    ) -> List[Tuple[Card, ...]]:
        """
        Deal ``hand_size`` cards to each player in seating order.

        :return: One hand per player id, in the same order.
        :raises IndexError: if the deck runs out.
        """
        hands = []
        for _ in player_ids:
            hands.append(tuple(self.cards.pop() for _ in range(hand_size)))
        return hands

    def draw_opening_card(self) -> Card:
        """
        Draw the first discard: the first plain number card off the top.

        Wild and action cards met on the way go back into the deck, which is
        reshuffled before the next draw.

        :raises ValueError: if the deck holds no number card.
        """
        if not any(card.kind == CardKind.NUMBER for card in self.cards):
            raise ValueError("Deck has no number card to open with")
        while True:
            card = self.cards.pop()
            if card.kind == CardKind.NUMBER:
                return card
            self.cards.append(card)
            self.shuffle()

    @property
    def size(self) -> int:
        """
        Return the number of remaining cards in the deck.
        """
        return len(self.cards)

    def is_empty(self) -> bool:
        """
        Check if the deck is empty.
        """
        return len(self.cards) == 0

    def __repr__(self) -> str:
        return f"Deck({[repr(card) for card in self.cards]})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"
