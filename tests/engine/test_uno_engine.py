"""
Tests for the UNO room engine.

These tests drive UnoEngine through its async interface and check the stored
state and the events it publishes.
"""

import asyncio
import random

import pytest

from unosync.common.card import Card, Color, Rank
from unosync.engine import InMemoryRoomStore, RoomNotFoundError, UnoEngine
from unosync.events import EngineEventType
from unosync.uno import ErrorKind, Failure, GameState, is_failure

RED_1 = Card(Color.RED, Rank.ONE)
RED_9 = Card(Color.RED, Rank.NINE)
BLUE_7 = Card(Color.BLUE, Rank.SEVEN)
GREEN_2 = Card(Color.GREEN, Rank.TWO)
DRAW = [Card(Color.YELLOW, Rank(str(n))) for n in range(1, 9)]


@pytest.fixture
def engine(rng):
    """Create a UnoEngine with a seeded random source."""
    return UnoEngine(rng=rng)


@pytest.fixture
def events(engine):
    """Record every event the engine publishes as (name, data) pairs."""
    recorded = []
    engine.event_bus.on_any(recorded.append)
    return recorded


def names(events):
    return [name for name, _ in events]


def test_default_config(engine):
    """Test that the engine fills in the default rules."""
    assert engine.config["hand_size"] == 7
    assert engine.config["reverse_skip_basis"] == "active"
    assert engine.rules.uno_penalty_cards == 2
    assert engine.rules.end_when_one_active is True
    assert isinstance(engine.store, InMemoryRoomStore)


def test_config_overrides():
    """Test that provided config values reach the rules."""
    engine = UnoEngine(config={"reverse_skip_basis": "seated", "hand_size": 5})
    assert engine.rules.reverse_skip_basis == "seated"
    assert engine.rules.hand_size == 5
    assert engine.config["max_players"] == 10


def test_bad_config_rejected():
    with pytest.raises(ValueError):
        UnoEngine(config={"reverse_skip_basis": "never"})


@pytest.mark.asyncio
async def test_initialize_and_shutdown(engine, events):
    await engine.initialize()
    await engine.shutdown()

    assert names(events) == ["ENGINE_INIT", "ENGINE_SHUTDOWN"]
    assert events[0][1]["engine_type"] == "uno"
    assert events[0][1]["config"] == engine.config


@pytest.mark.asyncio
async def test_start_game(engine, events):
    state = await engine.start_game("room-1", ["alice", "bob"])

    assert isinstance(state, GameState)
    assert await engine.get_state("room-1") is state
    assert state.card_total == 108
    assert names(events) == ["GAME_STARTED", "STATE_UPDATED"]
    started = events[0][1]
    assert started["room_id"] == "room-1"
    assert started["players"] == ["alice", "bob"]
    assert started["current_player"] == "alice"
    assert "hand" not in events[1][1]["state"]


@pytest.mark.asyncio
async def test_start_game_uses_configured_hand_size():
    engine = UnoEngine(config={"hand_size": 4}, rng=random.Random(3))
    state = await engine.start_game("room-1", ["alice", "bob", "carol"])
    assert [p.card_count for p in state.players] == [4, 4, 4]


@pytest.mark.asyncio
async def test_start_game_rejects_bad_players(engine, events):
    result = await engine.start_game("room-1", ["alice"])

    assert isinstance(result, Failure)
    assert result.kind == ErrorKind.INVALID_PLAYER_COUNT
    assert names(events) == ["ACTION_REJECTED"]
    assert events[0][1]["error"] == "INVALID_PLAYER_COUNT"
    with pytest.raises(RoomNotFoundError):
        await engine.get_state("room-1")


@pytest.mark.asyncio
async def test_start_game_refuses_running_room(engine):
    await engine.start_game("room-1", ["alice", "bob"])
    result = await engine.start_game("room-1", ["carol", "dave"])
    assert result.kind == ErrorKind.GAME_IN_PROGRESS


@pytest.mark.asyncio
async def test_restart_after_game_over(engine, make_state):
    finished = make_state({"alice": [], "bob": [GREEN_2]}, is_over=True, winner="alice")
    await engine.store.save("room-1", finished)

    state = await engine.restart_game("room-1")
    assert state.id != finished.id
    assert [p.id for p in state.players] == ["alice", "bob"]
    assert state.is_over is False


@pytest.mark.asyncio
async def test_unknown_room(engine):
    with pytest.raises(RoomNotFoundError) as excinfo:
        await engine.draw_card("nowhere", "alice")
    assert excinfo.value.room_id == "nowhere"
    assert str(excinfo.value) == "Room nowhere not found"


@pytest.mark.asyncio
async def test_play_card_publishes_events(engine, events, make_state):
    await engine.store.save(
        "room-1", make_state({"alice": [RED_1, BLUE_7], "bob": [GREEN_2]}, draw=DRAW)
    )

    state = await engine.play_card("room-1", "alice", {"color": "red", "rank": "1"})

    assert state.top_card == RED_1
    assert await engine.get_state("room-1") is state
    assert names(events) == ["CARD_PLAYED", "TURN_CHANGED", "STATE_UPDATED"]
    played = events[0][1]
    assert played["player_id"] == "alice"
    assert played["card"] == RED_1.to_dict()
    assert played["from_draw"] is False
    assert events[1][1]["current_player"] == "bob"
    assert events[2][1]["state"]["vulnerable_player"] == "alice"


@pytest.mark.asyncio
async def test_rejected_action_leaves_state(engine, events, make_state):
    original = make_state({"alice": [RED_1], "bob": [GREEN_2]})
    await engine.store.save("room-1", original)

    result = await engine.play_card("room-1", "bob", GREEN_2)

    assert result.kind == ErrorKind.NOT_YOUR_TURN
    assert await engine.get_state("room-1") is original
    assert names(events) == ["ACTION_REJECTED"]
    assert events[0][1] == {
        "room_id": "room-1",
        "action": "PLAY_CARD",
        "player_id": "bob",
        "error": "NOT_YOUR_TURN",
        "message": result.message,
    }


@pytest.mark.asyncio
async def test_draw_and_play_drawn_card(engine, events, make_state):
    await engine.store.save(
        "room-1", make_state({"alice": [BLUE_7, GREEN_2], "bob": [GREEN_2]}, draw=[RED_9])
    )

    drawn = await engine.draw_card("room-1", "alice")
    assert drawn.pending_draw.card == RED_9
    assert names(events) == ["CARD_DRAWN", "STATE_UPDATED"]
    assert events[0][1]["pending"] is True

    client = await engine.get_client_state("room-1", "alice")
    assert client["pending_draw"]["card"] == RED_9.to_dict()
    other = await engine.get_client_state("room-1", "bob")
    assert "card" not in other["pending_draw"]

    blocked = await engine.play_card("room-1", "alice", BLUE_7)
    assert blocked.kind == ErrorKind.PENDING_DRAW_BLOCKS

    played = await engine.play_drawn_card("room-1", "alice")
    assert played.top_card == RED_9
    assert events[-3][0] == "CARD_PLAYED"
    assert events[-3][1]["from_draw"] is True


@pytest.mark.asyncio
async def test_pass_drawn_card(engine, events, make_state):
    await engine.store.save(
        "room-1", make_state({"alice": [BLUE_7], "bob": [GREEN_2]}, draw=[RED_9])
    )
    await engine.draw_card("room-1", "alice")
    events.clear()

    state = await engine.pass_drawn_card("room-1", "alice")

    assert state.players[0].hand == (BLUE_7, RED_9)
    assert names(events) == ["DRAWN_CARD_KEPT", "TURN_CHANGED", "STATE_UPDATED"]


@pytest.mark.asyncio
async def test_uno_call_race_has_one_winner(engine, events, make_state):
    await engine.store.save(
        "room-1",
        make_state(
            {"alice": [RED_1, BLUE_7], "bob": [GREEN_2], "carol": [GREEN_2]},
            draw=DRAW,
        ),
    )
    await engine.play_card("room-1", "alice", RED_1)
    events.clear()

    results = await asyncio.gather(
        engine.call_penalty("room-1", "alice", "bob"),
        engine.call_penalty("room-1", "alice", "carol"),
    )

    failures = [r for r in results if is_failure(r)]
    successes = [r for r in results if not is_failure(r)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert failures[0].kind == ErrorKind.INVALID_CALL

    state = await engine.get_state("room-1")
    assert state.get_player("alice").card_count == 3
    assert state.vulnerable_player is None
    assert names(events).count("UNO_CALLED") == 1
    called = next(data for name, data in events if name == "UNO_CALLED")
    assert called["target_id"] == "alice"
    assert called["penalty"] is True


@pytest.mark.asyncio
async def test_call_self(engine, events, make_state):
    await engine.store.save(
        "room-1",
        make_state({"alice": [RED_1], "bob": [GREEN_2]}, draw=DRAW, vulnerable_player="alice"),
    )

    state = await engine.call_self("room-1", "alice")

    assert state.vulnerable_player is None
    assert names(events) == ["UNO_CALLED", "STATE_UPDATED"]
    assert events[0][1]["penalty"] is False
    result = await engine.call_penalty("room-1", "alice", "bob")
    assert result.kind == ErrorKind.INVALID_CALL


@pytest.mark.asyncio
async def test_winning_play_ends_game(engine, events, make_state):
    await engine.store.save("room-1", make_state({"alice": [RED_1], "bob": [GREEN_2]}))

    state = await engine.play_card("room-1", "alice", RED_1)

    assert state.is_over is True
    assert names(events) == ["CARD_PLAYED", "GAME_ENDED", "STATE_UPDATED"]
    assert events[1][1]["winner"] == "alice"
    result = await engine.draw_card("room-1", "bob")
    assert result.kind == ErrorKind.GAME_OVER


@pytest.mark.asyncio
async def test_disconnect_and_reconnect(engine, events, make_state):
    await engine.store.save(
        "room-1",
        make_state({"alice": [RED_1, BLUE_7], "bob": [GREEN_2], "carol": [GREEN_2]}),
    )

    state = await engine.disconnect_player("room-1", "alice")
    assert state.players[0].active is False
    assert state.current_player.id == "bob"
    assert names(events) == ["PLAYER_LEFT", "TURN_CHANGED", "STATE_UPDATED"]

    events.clear()
    again = await engine.disconnect_player("room-1", "alice")
    assert again is state
    assert names(events) == ["STATE_UPDATED"]

    events.clear()
    state = await engine.reconnect_player("room-1", "alice")
    assert state.players[0].active is True
    assert names(events) == ["PLAYER_RETURNED", "STATE_UPDATED"]


@pytest.mark.asyncio
async def test_last_player_standing_wins(engine, events, make_state):
    await engine.store.save("room-1", make_state({"alice": [RED_1], "bob": [GREEN_2]}))

    state = await engine.disconnect_player("room-1", "bob")

    assert state.is_over is True
    assert state.winner == "alice"
    assert "GAME_ENDED" in names(events)


@pytest.mark.asyncio
async def test_execute_player_action(engine, make_state):
    await engine.store.save(
        "room-1", make_state({"alice": [RED_1, BLUE_7], "bob": [GREEN_2]}, draw=DRAW)
    )

    state = await engine.execute_player_action("room-1", "alice", "play_card", card=RED_1)
    assert state.top_card == RED_1

    state = await engine.execute_player_action(
        "room-1", "bob", "CALL_PENALTY", target_id="alice"
    )
    assert state.get_player("alice").card_count == 3

    result = await engine.execute_player_action("room-1", "alice", "DRAW_CARD")
    assert result.kind == ErrorKind.NOT_YOUR_TURN


@pytest.mark.asyncio
async def test_execute_player_action_bad_input(engine, make_state):
    await engine.store.save("room-1", make_state({"alice": [RED_1], "bob": [GREEN_2]}))

    with pytest.raises(ValueError):
        await engine.execute_player_action("room-1", "alice", "SHUFFLE")
    with pytest.raises(ValueError):
        await engine.execute_player_action("room-1", "alice", "PLAY_CARD")
    with pytest.raises(ValueError):
        await engine.execute_player_action("room-1", "alice", "CALL_PENALTY")

    result = await engine.execute_player_action(
        "room-1", "alice", "PLAY_CARD", card="wild", chosen_color="red"
    )
    assert result.kind == ErrorKind.CARD_NOT_IN_HAND
    assert (await engine.get_state("room-1")).players[0].hand == (RED_1,)


@pytest.mark.asyncio
async def test_valid_actions_and_close(engine, make_state):
    await engine.store.save("room-1", make_state({"alice": [RED_1], "bob": [GREEN_2]}))

    actions = await engine.get_valid_actions("room-1", "alice")
    assert actions == {"PLAY_CARD": [RED_1], "DRAW_CARD": True}

    assert await engine.close_room("room-1") is True
    assert await engine.close_room("room-1") is False
    with pytest.raises(RoomNotFoundError):
        await engine.get_state("room-1")


@pytest.mark.asyncio
async def test_close_room_keeps_writer_lock(engine, make_state):
    await engine.store.save("room-1", make_state({"alice": [RED_1], "bob": [GREEN_2]}))
    lock = engine._lock_for("room-1")

    async with lock:
        closing = asyncio.ensure_future(engine.close_room("room-1"))
        queued = asyncio.ensure_future(engine.draw_card("room-1", "alice"))
        await asyncio.sleep(0)
        assert not closing.done()

    assert await closing is True
    assert engine._lock_for("room-1") is lock
    with pytest.raises(RoomNotFoundError):
        await queued

    state = await engine.start_game("room-1", ["carol", "dave"])
    assert [p.id for p in state.players] == ["carol", "dave"]
    assert engine._lock_for("room-1") is lock

    first = await engine.start_game("room-1", ["alice", "bob"])
    second = await engine.start_game("room-2", ["carol", "dave", "erin"])

    await engine.draw_card("room-1", "alice")

    assert await engine.get_state("room-2") is second
    assert first.id != second.id
    assert sorted(await engine.store.room_ids()) == ["room-1", "room-2"]
