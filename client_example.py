"""
WebSocket Chat Client Example for Testing
Registers a display name, chats in the shared room and prints server events
"""

import asyncio
import json
import websockets
from typing import Optional, Dict, Any
import argparse
import sys


def frame(event: str, data: Any = None) -> str:
    """Encode a client frame"""
    return json.dumps({"event": event, "data": data})


def render_event(payload: Dict[str, Any], usernames: Optional[Dict[str, str]] = None) -> str:
    """
    Turn a server frame into a console line

    Args:
        payload: Decoded {"event", "data"} frame
        usernames: Known id -> username mapping, used to name departing users

    Returns:
        Human-readable line
    """
    usernames = usernames if usernames is not None else {}
    event = payload.get("event")
    data = payload.get("data")

    if event == "new_message":
        return f"📨 [{data.get('timestamp', '')}] {data.get('senderName', 'unknown')}: {data.get('content', '')}"
    elif event == "user_registered":
        return f"✅ Registered (id {data.get('userId')}), {len(data.get('messageHistory', []))} messages in history"
    elif event == "user_joined":
        return f"👋 {data.get('username')} joined"
    elif event == "user_left":
        return f"🚪 {usernames.get(data, data)} left"
    elif event == "active_users":
        names = ", ".join(user.get("username", "?") for user in data)
        return f"👥 Online ({len(data)}): {names}"
    elif event == "typing_status":
        who = data.get("username") or usernames.get(data.get("userId"), data.get("userId"))
        return f"✏️  {who} is typing..." if data.get("isTyping") else f"✏️  {who} stopped typing"
    elif event == "system_error":
        return f"❌ Server error: {data}"
    else:
        return f"❓ Unknown event: {event}"


class ChatClient:
    """WebSocket chat client for manual testing"""

    def __init__(self, username: str, server_url: str = "ws://localhost:8000/ws"):
        self.username = username
        self.server_url = server_url
        self.websocket = None
        self.user_id: Optional[str] = None
        self.usernames: Dict[str, str] = {}
        self.running = False

    async def connect(self) -> bool:
        """Connect to WebSocket server"""
        try:
            self.websocket = await websockets.connect(self.server_url)
            print(f"✅ Connected to {self.server_url}")
            return True
        except Exception as e:
            print(f"❌ Connection failed: {e}")
            return False

    async def register(self) -> bool:
        """Register the display name and wait for confirmation"""
        if not self.websocket:
            return False

        try:
            await self.websocket.send(frame("register_user", self.username))
            print(f"📤 Sent registration: {self.username}")

            response = json.loads(await self.websocket.recv())
            print(render_event(response, self.usernames))

            if response.get("event") == "user_registered":
                self.user_id = response["data"]["userId"]
                for message in response["data"].get("messageHistory", []):
                    print(render_event({"event": "new_message", "data": message}))
                return True
            return False

        except websockets.exceptions.ConnectionClosed:
            print("🔌 Connection closed by server")
            return False

    async def send_message(self, content: str) -> bool:
        """Send a message to the room"""
        if not self.websocket:
            return False

        try:
            await self.websocket.send(frame("send_message", {"content": content}))
            return True
        except websockets.exceptions.ConnectionClosed as e:
            print(f"❌ Send failed: {e}")
            return False

    async def set_typing(self, is_typing: bool):
        if self.websocket:
            await self.websocket.send(frame("typing_start" if is_typing else "typing_stop"))

    async def listen_for_messages(self):
        """Listen for incoming events"""
        if not self.websocket:
            return

        while self.running:
            try:
                payload = json.loads(await asyncio.wait_for(self.websocket.recv(), timeout=1.0))
            except asyncio.TimeoutError:
                continue
            except websockets.exceptions.ConnectionClosed:
                print("🔌 Connection closed by server")
                break

            if payload.get("event") == "active_users":
                self.usernames.update({user["id"]: user["username"] for user in payload.get("data", [])})
            print(render_event(payload, self.usernames))

    async def disconnect(self):
        """Disconnect from server"""
        self.running = False
        if self.websocket:
            await self.websocket.close()
            print("🔌 Disconnected from server")

    async def run_interactive(self):
        """Run interactive chat session"""
        if not await self.connect():
            return

        if not await self.register():
            await self.disconnect()
            return

        self.running = True
        listen_task = asyncio.create_task(self.listen_for_messages())

        try:
            print("\n🎮 Interactive mode started!")
            print("Commands: /typing, /quit, or just type your message")
            print("-" * 50)

            while self.running:
                try:
                    user_input = (await asyncio.to_thread(input, f"{self.username}> ")).strip()
                except (KeyboardInterrupt, EOFError):
                    break

                if not user_input:
                    continue
                if user_input == "/quit":
                    break
                elif user_input == "/typing":
                    await self.set_typing(True)
                else:
                    await self.send_message(user_input)

        finally:
            self.running = False
            listen_task.cancel()
            await self.disconnect()


async def demo_scenario(server_url: str):
    """Two users chat, then one leaves"""
    print("\n🧪 Demo: alice and bob")
    print("=" * 60)

    async def alice():
        client = ChatClient("alice", server_url)
        if await client.connect() and await client.register():
            client.running = True
            listen_task = asyncio.create_task(client.listen_for_messages())

            await asyncio.sleep(1)
            await client.set_typing(True)
            await asyncio.sleep(0.5)
            await client.send_message("hi")

            await asyncio.sleep(4)
            listen_task.cancel()
            await client.disconnect()

    async def bob():
        await asyncio.sleep(0.5)
        client = ChatClient("bob", server_url)
        if await client.connect() and await client.register():
            client.running = True
            listen_task = asyncio.create_task(client.listen_for_messages())

            await asyncio.sleep(2)
            await client.send_message("hello alice")

            await asyncio.sleep(1)
            listen_task.cancel()
            await client.disconnect()

    await asyncio.gather(alice(), bob())
    print("✅ Demo completed")


async def main():
    """Main function with command line interface"""
    parser = argparse.ArgumentParser(description="WebSocket Broadcast Chat Client")
    parser.add_argument("--username", default="testuser", help="Display name")
    parser.add_argument("--server", default="ws://localhost:8000/ws", help="Server URL")
    parser.add_argument("--demo", action="store_true", help="Run the two-user demo")

    args = parser.parse_args()

    if args.demo:
        await demo_scenario(args.server)
    else:
        client = ChatClient(args.username, args.server)
        await client.run_interactive()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Client error: {e}")
        sys.exit(1)
