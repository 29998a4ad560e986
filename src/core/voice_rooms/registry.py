"""
Registre des salons déclencheurs (guild_id -> trigger_channel_id).

Construit une seule fois au démarrage à partir des variables
d'environnement préfixées par `WATCH_CHANNEL`, au format
`"<guild_id>:<trigger_channel_id>"`. Lecture seule ensuite : aucun verrou
n'est nécessaire pour les lectures concurrentes.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from .errors import ConfigError

logger = logging.getLogger(__name__)

WATCH_PREFIX = "WATCH_CHANNEL"


def _parse_id(raw: str, *, key: str, what: str) -> int:
    raw = raw.strip()
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key}: {what} invalide ({raw!r})") from None
    if value <= 0:
        raise ConfigError(f"{key}: {what} invalide ({raw!r})")
    return value


def parse_watch_entry(key: str, value: str) -> Tuple[int, int]:
    """Découpe une valeur `"<guild_id>:<channel_id>"` en couple d'entiers."""
    guild_raw, sep, channel_raw = value.partition(":")
    if not sep:
        raise ConfigError(f"{key}: séparateur ':' manquant dans {value!r}")
    guild_id = _parse_id(guild_raw, key=key, what="guild_id")
    channel_id = _parse_id(channel_raw, key=key, what="trigger_channel_id")
    return guild_id, channel_id


class WatchRegistry:
    """Association immuable guilde -> salon déclencheur."""

    __slots__ = ("_entries", "_triggers")

    def __init__(self, entries: Mapping[int, int]):
        self._entries = MappingProxyType(dict(entries))
        self._triggers = frozenset(self._entries.values())

    @classmethod
    def from_environ(cls, environ: Mapping[str, str], prefix: str = WATCH_PREFIX) -> "WatchRegistry":
        entries: dict[int, int] = {}
        for key in sorted(environ):
            if not key.startswith(prefix):
                continue
            guild_id, channel_id = parse_watch_entry(key, environ[key])
            existing = entries.get(guild_id)
            if existing is not None and existing != channel_id:
                raise ConfigError(
                    f"{key}: guilde {guild_id} déjà associée au salon {existing} (un seul déclencheur par guilde)"
                )
            entries[guild_id] = channel_id
        registry = cls(entries)
        if not registry:
            logger.warning("Aucune variable %s* trouvée : aucun salon surveillé", prefix)
        else:
            logger.debug("Salons surveillés: %s", dict(registry.items()))
        return registry

    def lookup(self, guild_id: Optional[int]) -> Optional[int]:
        if guild_id is None:
            return None
        return self._entries.get(guild_id)

    def is_trigger(self, channel_id: Optional[int]) -> bool:
        return channel_id is not None and channel_id in self._triggers

    def items(self):
        return self._entries.items()

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._entries

    def __repr__(self) -> str:
        return f"WatchRegistry({dict(self._entries)!r})"


__all__ = ["WatchRegistry", "parse_watch_entry", "WATCH_PREFIX"]
