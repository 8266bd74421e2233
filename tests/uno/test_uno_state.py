"""
Tests for the UNO state models.
"""

from dataclasses import replace

import pytest

from unosync.common.card import Card, Color, Rank
from unosync.uno.state import GameState, PendingDraw, PlayerState, UnoRules


class TestUnoState:
    """Tests for the UNO game state models."""

    def test_game_state_initialization(self):
        """Test that GameState initializes with the correct default values."""
        state = GameState()

        assert state.id is not None
        assert state.players == ()
        assert state.draw_pile == ()
        assert state.discard_pile == ()
        assert state.top_card is None
        assert state.current_player_index == 0
        assert state.direction == 1
        assert state.is_over is False
        assert state.winner is None
        assert state.pending_draw is None
        assert state.vulnerable_player is None
        assert isinstance(state.rules, UnoRules)

    def test_player_state_defaults(self):
        player = PlayerState(id="a")
        assert player.hand == ()
        assert player.active is True
        assert player.card_count == 0

    def test_rules_reject_unknown_reverse_basis(self):
        with pytest.raises(ValueError):
            UnoRules(reverse_skip_basis="sometimes")

    def test_state_is_frozen(self):
        state = GameState()
        with pytest.raises(AttributeError):
            state.is_over = True

    def test_with_player_shares_other_seats(self, make_state):
        state = make_state({"a": [Card(Color.RED, Rank.ONE)], "b": [], "c": []})
        new_state = state.with_player(1, replace(state.players[1], active=False))

        assert new_state.players[1].active is False
        assert state.players[1].active is True
        assert new_state.players[0] is state.players[0]
        assert new_state.players[2] is state.players[2]
        assert new_state.draw_pile is state.draw_pile

    def test_lookup_helpers(self, make_state):
        state = make_state({"a": [], "b": [], "c": []}, current=2, inactive=("b",))

        assert state.player_index("b") == 1
        assert state.player_index("zed") is None
        assert state.get_player("c").id == "c"
        assert state.current_player.id == "c"
        assert [p.id for p in state.active_players] == ["a", "c"]

    def test_card_total_counts_pending_card(self, make_state):
        state = make_state(
            {"a": [Card(Color.RED, Rank.ONE)], "b": [Card(Color.BLUE, Rank.TWO)]},
            draw=[Card(Color.GREEN, Rank.THREE)],
        )
        assert state.card_total == 4

        limbo = replace(state, pending_draw=PendingDraw(Card(Color.RED, Rank.NINE), "a"))
        assert limbo.card_total == 5

    def test_to_dict_round_trip(self, make_state):
        state = make_state(
            {"a": [Card(None, Rank.WILD)], "b": [Card(Color.BLUE, Rank.SKIP)]},
            draw=[Card(Color.GREEN, Rank.THREE)],
            discard=[Card(Color.RED, Rank.ONE), Card(Color.YELLOW, Rank.WILD)],
            inactive=("b",),
            pending_draw=PendingDraw(Card(Color.YELLOW, Rank.TWO), "a"),
            vulnerable_player="a",
            rules=UnoRules(reverse_skip_basis="seated"),
        )

        assert GameState.from_dict(state.to_dict()) == state

    def test_client_projection_hides_hands(self, make_state):
        state = make_state(
            {
                "a": [Card(Color.RED, Rank.ONE), Card(Color.RED, Rank.TWO)],
                "b": [Card(Color.BLUE, Rank.SKIP)],
            },
            draw=[Card(Color.GREEN, Rank.THREE)],
            pending_draw=PendingDraw(Card(Color.RED, Rank.NINE), "a"),
            vulnerable_player="b",
        )

        view = state.to_client_dict()
        assert view["players"] == [
            {"id": "a", "hand_size": 2, "is_active": True},
            {"id": "b", "hand_size": 1, "is_active": True},
        ]
        assert "hand" not in view
        assert view["top_card"] == {"color": "red", "rank": "5", "kind": "number"}
        assert view["current_color"] == "red"
        assert view["current_player"] == "a"
        assert view["draw_pile_size"] == 1
        assert view["pending_draw"] == {"owner_id": "a"}
        assert view["vulnerable_player"] == "b"

    def test_client_projection_for_viewer(self, make_state):
        state = make_state(
            {"a": [Card(Color.RED, Rank.ONE)], "b": [Card(Color.BLUE, Rank.SKIP)]},
            pending_draw=PendingDraw(Card(Color.RED, Rank.NINE), "a"),
        )

        own = state.to_client_dict("a")
        assert own["hand"] == [{"color": "red", "rank": "1", "kind": "number"}]
        assert own["pending_draw"]["card"] == Card(Color.RED, Rank.NINE).to_dict()

        other = state.to_client_dict("b")
        assert other["hand"] == [{"color": "blue", "rank": "skip", "kind": "action"}]
        assert other["pending_draw"] == {"owner_id": "a"}
