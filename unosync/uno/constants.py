"""UNO rule constants."""

from unosync.common.card import Color

COLORS = tuple(Color)

DECK_SIZE = 108
HAND_SIZE = 7
MIN_PLAYERS = 2
MAX_PLAYERS = 10

# Cards forced on the next player by each penalty card
DRAW_TWO_PENALTY = 2
WILD_DRAW_FOUR_PENALTY = 4

# Cards dealt to a player caught holding one card without calling UNO
UNO_PENALTY = 2

# Which players count when deciding if reverse behaves like skip
REVERSE_SKIP_ACTIVE = "active"
REVERSE_SKIP_SEATED = "seated"
REVERSE_SKIP_BASES = (REVERSE_SKIP_ACTIVE, REVERSE_SKIP_SEATED)
