"""Salons vocaux éphémères (un salon personnel par membre, supprimé une fois vide).

Imports lazy : `import core.voice_rooms.registry` depuis la config ne charge
pas discord.py ni le manager.
"""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # aide mypy/IDE sans exécuter les imports au runtime initial
	from .manager import RoomSweeper, VoiceRoomsManager, setup_voice_rooms_manager  # noqa: F401
	from .models import ChannelInfo, VoiceTransition  # noqa: F401
	from .registry import WatchRegistry  # noqa: F401

__all__ = [
	"VoiceRoomsManager",
	"RoomSweeper",
	"setup_voice_rooms_manager",
	"VoiceTransition",
	"ChannelInfo",
	"WatchRegistry",
]

_LAZY = {
	"VoiceRoomsManager": "manager",
	"RoomSweeper": "manager",
	"setup_voice_rooms_manager": "manager",
	"VoiceTransition": "models",
	"ChannelInfo": "models",
	"WatchRegistry": "registry",
}


def __getattr__(name: str):  # lazy resolution
	module = _LAZY.get(name)
	if module is None:
		raise AttributeError(name)
	return getattr(import_module(f"{__name__}.{module}"), name)
