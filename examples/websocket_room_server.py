#!/usr/bin/env python3
"""
WebSocket Room Server Example

This script demonstrates how to host UNO rooms over WebSockets with the
unosync engine. Clients send JSON messages of the form
``{"type": ..., "data": {...}}``:

- ``join``: ``{"room_id", "player_id"}``; joins (or rejoins) a room
- ``start_game``: ``{"player_ids"}``; starts a game in the joined room
- ``action``: ``{"action", ...}``; any UnoEngine player action, e.g.
  ``{"action": "PLAY_CARD", "card": {"color": "red", "rank": "7"}}``

Every state change is pushed to each connected player as a ``state`` message
carrying that player's own view of the room. Rejected actions are answered
with an ``error`` message to the player who sent them.
"""

import asyncio
import argparse
import json
import logging
import signal
import sys
from typing import Any, Dict, Optional, Tuple

try:
    from unosync.engine import RoomNotFoundError, UnoEngine
    from unosync.events import EngineEventType
    from unosync.uno import is_failure
except ImportError:
    print("ERROR: unosync package not found or incompletely installed.")
    print("Please ensure unosync is installed properly with: pip install -e .[server]")
    sys.exit(1)

# Setup logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("websocket_room_server")


class RoomServer:
    """
    WebSocket server hosting UNO rooms.

    Each connection is bound to one (room, player) pair after it joins.
    """

    def __init__(self, host: str = "localhost", port: int = 8765, config=None):
        """
        Initialize the room server.

        Args:
            host: Host to bind to
            port: Port to bind to
            config: Engine configuration
        """
        self.host = host
        self.port = port
        self.engine = UnoEngine(config=config)
        self.clients: Dict[Tuple[str, str], Any] = {}
        self.running = False
        self.server = None
        self._unsubscribe = None

    async def start(self):
        """Start the WebSocket server."""
        try:
            import websockets
        except ImportError:
            logger.error(
                "websockets package not found. Please install it with: pip install websockets"
            )
            sys.exit(1)

        await self.engine.initialize()
        self._unsubscribe = self.engine.event_bus.on(
            EngineEventType.STATE_UPDATED, self.on_state_updated
        )

        self.server = await websockets.serve(self.handle_client, self.host, self.port)
        self.running = True
        logger.info(f"Room server started on ws://{self.host}:{self.port}")

        # Register signal handlers
        loop = asyncio.get_running_loop()
        stop = loop.create_future()
        loop.add_signal_handler(signal.SIGINT, stop.set_result, None)
        loop.add_signal_handler(signal.SIGTERM, stop.set_result, None)

        await stop
        await self.shutdown()

    async def shutdown(self):
        """Shutdown the WebSocket server."""
        if not self.running:
            return

        logger.info("Shutting down room server...")
        self.running = False

        for websocket in list(self.clients.values()):
            await websocket.close()
        self.clients.clear()

        self.server.close()
        await self.server.wait_closed()
        if self._unsubscribe:
            self._unsubscribe()
        await self.engine.shutdown()

    async def handle_client(self, websocket):
        """
        Handle a WebSocket client connection.

        Args:
            websocket: WebSocket connection
        """
        seat: Optional[Tuple[str, str]] = None

        try:
            async for message in websocket:
                try:
                    data = json.loads(message)
                except json.JSONDecodeError:
                    await self.send_error(websocket, "Malformed message")
                    continue

                message_type = data.get("type", "")
                message_data = data.get("data", {})

                if message_type == "join":
                    seat = await self.join(websocket, message_data)
                elif seat is None:
                    await self.send_error(websocket, "Join a room first")
                elif message_type == "start_game":
                    await self.start_game(websocket, seat, message_data)
                elif message_type == "action":
                    await self.player_action(websocket, seat, message_data)
                else:
                    await self.send_error(websocket, f"Unknown message type: {message_type}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Error handling client: {e}")
        finally:
            if seat is not None and self.clients.get(seat) is websocket:
                await self.leave(seat)

    async def join(self, websocket, data: Dict[str, Any]) -> Optional[Tuple[str, str]]:
        """
        Bind a connection to a seat, reconnecting the player if a game is running.

        Returns:
            The (room_id, player_id) pair, or None if the message was invalid
        """
        room_id = data.get("room_id")
        player_id = data.get("player_id")
        if not room_id or not player_id:
            await self.send_error(websocket, "room_id and player_id are required")
            return None

        seat = (room_id, player_id)
        self.clients[seat] = websocket
        logger.info(f"Player {player_id} joined room {room_id}")

        try:
            result = await self.engine.reconnect_player(room_id, player_id)
        except RoomNotFoundError:
            # No game yet; the player waits for start_game
            return seat

        if is_failure(result):
            await self.send_error(websocket, result.message, result.kind.name)
        return seat

    async def leave(self, seat: Tuple[str, str]):
        """Release a seat and tell the engine the player disconnected."""
        room_id, player_id = seat
        self.clients.pop(seat, None)
        try:
            await self.engine.disconnect_player(room_id, player_id)
        except RoomNotFoundError:
            # Left before any game started
            pass
        logger.info(f"Player {player_id} left room {room_id}")

    async def start_game(self, websocket, seat: Tuple[str, str], data: Dict[str, Any]):
        room_id, _ = seat
        player_ids = data.get("player_ids") or [
            player_id for (room, player_id) in self.clients if room == room_id
        ]
        result = await self.engine.start_game(room_id, player_ids)
        if is_failure(result):
            await self.send_error(websocket, result.message, result.kind.name)

    async def player_action(self, websocket, seat: Tuple[str, str], data: Dict[str, Any]):
        room_id, player_id = seat
        params = dict(data)
        action = params.pop("action", "")
        try:
            result = await self.engine.execute_player_action(
                room_id, player_id, action, **params
            )
        except (ValueError, RoomNotFoundError) as e:
            await self.send_error(websocket, str(e))
            return

        if is_failure(result):
            await self.send_error(websocket, result.message, result.kind.name)

    def on_state_updated(self, event: Dict[str, Any]):
        """Push each connected player's view of the room that changed."""
        room_id = event["room_id"]
        for (room, player_id), websocket in list(self.clients.items()):
            if room == room_id:
                asyncio.create_task(self._send_view(websocket, room_id, player_id))

    async def _send_view(self, websocket, room_id: str, player_id: str):
        try:
            view = await self.engine.get_client_state(room_id, player_id)
            view["valid_actions"] = list(
                await self.engine.get_valid_actions(room_id, player_id)
            )
        except RoomNotFoundError:
            return
        await self._send_message(websocket, {"type": "state", "data": view})

    async def send_error(self, websocket, message: str, error: Optional[str] = None):
        await self._send_message(
            websocket, {"type": "error", "data": {"error": error, "message": message}}
        )

    async def _send_message(self, websocket, message: Dict[str, Any]):
        """
        Send a message to a WebSocket client.

        Args:
            websocket: WebSocket connection
            message: Message to send
        """
        try:
            await websocket.send(json.dumps(message))
        except Exception as e:
            logger.warning(f"Error sending message: {e}")


async def main():
    """Main function."""
    parser = argparse.ArgumentParser(description="WebSocket UNO room server")
    parser.add_argument("--host", type=str, default="localhost", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8765, help="Port to bind to")
    parser.add_argument(
        "--reverse-skip-basis",
        choices=["active", "seated"],
        default="active",
        help="Whether reverse acts as skip by connected or seated player count",
    )

    args = parser.parse_args()

    server = RoomServer(
        args.host, args.port, config={"reverse_skip_basis": args.reverse_skip_basis}
    )
    await server.start()


if __name__ == "__main__":
    asyncio.run(main())
