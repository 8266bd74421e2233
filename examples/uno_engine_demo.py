#!/usr/bin/env python3
"""
Example demonstrating the UnoEngine with the immutable state.

This script seats a few simulated players in a room and lets them play a
game of UNO against each other, printing what happens via the event bus.
"""

import asyncio
import argparse
import random

# Check if unosync is installed properly
try:
    from unosync.engine import UnoEngine
    from unosync.events import EventBus, EngineEventType
    from unosync.uno import is_failure
    from unosync.uno.constants import COLORS
except ImportError:
    print("ERROR: unosync package not found or incompletely installed.")
    print("Please ensure unosync is installed properly with: pip install -e .")
    import sys

    sys.exit(1)


async def take_turn(engine, room_id, player_id, rng):
    """Play the first legal card, otherwise draw and play what was drawn."""
    state = await engine.get_state(room_id)
    hand = state.get_player(player_id).hand
    actions = await engine.get_valid_actions(room_id, player_id)

    if "PLAY_CARD" in actions:
        card = actions["PLAY_CARD"][0]
        # Name the color held most often when playing a wild
        held = [c.color for c in hand if c.color is not None]
        color = max(COLORS, key=held.count) if held else rng.choice(COLORS)
        return await engine.play_card(room_id, player_id, card, color)

    result = await engine.draw_card(room_id, player_id)
    if is_failure(result) or result.pending_draw is None:
        return result
    return await engine.play_drawn_card(room_id, player_id, rng.choice(COLORS))


async def main():
    # Parse command-line arguments
    parser = argparse.ArgumentParser(description="Play a simulated game of UNO.")
    parser.add_argument(
        "-n",
        "--names",
        nargs="+",
        default=["Alice", "Bob", "Carol"],
        help="names of the players (default: Alice Bob Carol)",
    )
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument(
        "--forgetful",
        type=float,
        default=0.3,
        help="chance a player forgets to call UNO (default: 0.3)",
    )
    parser.add_argument(
        "-s", "--silent", action="store_true", help="run in silent mode (no output)"
    )
    args = parser.parse_args()

    rng = random.Random(args.seed)
    engine = UnoEngine(rng=rng)
    room_id = "demo"

    # Set up event listeners
    event_bus = EventBus.get_instance()

    def on_card_played(data):
        card = data["card"]
        print(f"{data['player_id']} plays {card['color'] or ''} {card['rank']}".strip())

    def on_uno_called(data):
        if data["penalty"]:
            print(f"{data['player_id']} caught {data['target_id']} without UNO!")
        else:
            print(f"{data['player_id']} calls UNO")

    def on_game_ended(data):
        print(f"Game over. Winner: {data['winner']}")

    if not args.silent:
        event_bus.on(EngineEventType.CARD_PLAYED, on_card_played)
        event_bus.on(EngineEventType.UNO_CALLED, on_uno_called)
        event_bus.on(EngineEventType.GAME_ENDED, on_game_ended)

    await engine.initialize()
    state = await engine.start_game(room_id, args.names)
    if is_failure(state):
        print(f"Could not start: {state.message}")
        return

    turns = 0
    while not state.is_over and turns < 1000:
        result = await take_turn(engine, room_id, state.current_player.id, rng)
        if is_failure(result):
            print(f"Stuck: {result.message}")
            break
        state = result
        turns += 1

        vulnerable = state.vulnerable_player
        if vulnerable is not None:
            if rng.random() >= args.forgetful:
                state = await engine.call_self(room_id, vulnerable)
            else:
                caller = rng.choice([n for n in args.names if n != vulnerable])
                state = await engine.call_penalty(room_id, vulnerable, caller)

    await engine.shutdown()
    print(f"Played {turns} turns")


if __name__ == "__main__":
    asyncio.run(main())
