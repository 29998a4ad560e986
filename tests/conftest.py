import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path: the bot imports its packages absolutely
# (core, ...), the same way run.py arranges it.
SRC_DIR = Path(__file__).parent.parent.resolve() / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from core.voice_rooms.errors import ChannelGoneError, ChannelLookupError, DeleteError, MemberMoveError  # noqa: E402
from core.voice_rooms.models import CATEGORY, VOICE, ChannelInfo  # noqa: E402
from core.voice_rooms.registry import WatchRegistry  # noqa: E402

GUILD_ID = 1
CATEGORY_ID = 10
TRIGGER_ID = 100


class FakeGateway:
    """In-memory GatewayClient recording every write."""

    def __init__(self) -> None:
        self.channels: dict[int, dict] = {}
        self.member_channels: dict[tuple[int, int], int] = {}
        self.created: list[tuple[int, int, str]] = []
        self.deleted: list[int] = []
        self.moves: list[tuple[int, int, int]] = []
        self.delete_attempts: list[int] = []
        self.fail_delete: set[int] = set()
        self.fail_occupants: set[int] = set()
        self.fail_move = False
        self._next_id = 1000

    # ---- helpers ----
    def add_channel(self, channel_id, *, guild_id=GUILD_ID, kind=VOICE, parent=CATEGORY_ID, occupants=0):
        self.channels[channel_id] = {
            "guild_id": guild_id,
            "kind": kind,
            "parent": parent,
            "occupants": occupants,
        }

    def place_member(self, user_id, channel_id, guild_id=GUILD_ID):
        self.member_channels[(guild_id, user_id)] = channel_id
        self.channels[channel_id]["occupants"] += 1

    def _info(self, channel_id) -> ChannelInfo:
        data = self.channels[channel_id]
        return ChannelInfo(
            id=channel_id,
            guild_id=data["guild_id"],
            kind=data["kind"],
            parent_category_id=data["parent"],
            occupant_count=data["occupants"],
        )

    # ---- GatewayClient ----
    async def fetch_channel(self, channel_id):
        if channel_id not in self.channels:
            raise ChannelLookupError(f"missing {channel_id}", channel_id=channel_id)
        return self._info(channel_id)

    async def list_category_channels(self, category_id):
        if category_id not in self.channels:
            raise ChannelLookupError(f"missing {category_id}", channel_id=category_id)
        return [self._info(cid) for cid, data in self.channels.items() if data["parent"] == category_id]

    async def occupant_count(self, channel_id):
        if channel_id in self.fail_occupants:
            raise ChannelLookupError(f"unreadable {channel_id}", channel_id=channel_id)
        if channel_id not in self.channels:
            raise ChannelGoneError(f"missing {channel_id}", channel_id=channel_id)
        return self.channels[channel_id]["occupants"]

    async def member_channel_id(self, guild_id, user_id):
        return self.member_channels.get((guild_id, user_id))

    async def create_voice_channel(self, guild_id, category_id, name):
        self._next_id += 1
        self.add_channel(self._next_id, guild_id=guild_id, parent=category_id)
        self.created.append((guild_id, category_id, name))
        return self._next_id

    async def delete_channel(self, channel_id):
        self.delete_attempts.append(channel_id)
        if channel_id in self.fail_delete:
            raise DeleteError(f"boom {channel_id}", channel_id=channel_id)
        if self.channels.pop(channel_id, None) is None:
            return False
        self.deleted.append(channel_id)
        return True

    async def move_member(self, guild_id, user_id, channel_id):
        if self.fail_move:
            raise MemberMoveError("move refused", channel_id=channel_id)
        previous = self.member_channels.get((guild_id, user_id))
        if previous in self.channels:
            self.channels[previous]["occupants"] -= 1
        self.moves.append((guild_id, user_id, channel_id))
        self.place_member(user_id, channel_id, guild_id)


@pytest.fixture
def gateway() -> FakeGateway:
    """Category 10 holding trigger 100 in guild 1."""
    gw = FakeGateway()
    gw.add_channel(CATEGORY_ID, kind=CATEGORY, parent=None)
    gw.add_channel(TRIGGER_ID)
    return gw


@pytest.fixture
def registry() -> WatchRegistry:
    return WatchRegistry({GUILD_ID: TRIGGER_ID})
