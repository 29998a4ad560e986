"""
Configuration centrale du bot Discord.

Ce module charge les variables d'environnement (.env) et prépare :
- Les intents Discord (guilds, voice_states)
- Le token du bot (BOT_TOKEN, ou DISCORD_TOKEN en repli, obligatoire)
- Les réglages des salons vocaux éphémères via `load_settings()`

Un warning est émis si le token est absent pour détecter le problème avant le lancement du bot.
"""
from __future__ import annotations

import os
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv
import discord

from core.voice_rooms.errors import ConfigError
from core.voice_rooms.registry import WatchRegistry

load_dotenv()

logger = logging.getLogger(__name__)

INTENTS = discord.Intents.none()
INTENTS.guilds = True
INTENTS.voice_states = True

BOT_TOKEN = os.getenv("BOT_TOKEN") or os.getenv("DISCORD_TOKEN")


@dataclass(frozen=True)
class Settings:
    registry: WatchRegistry
    sweep_interval_seconds: float = 150.0
    prune_delay_seconds: float = 5.0
    room_name_template: Optional[str] = None


def _seconds(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = (environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key}: nombre de secondes attendu, reçu {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{key}: valeur négative interdite ({raw!r})")
    return value


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Construit les réglages à partir de l'environnement.
    Raises : ConfigError si une entrée WATCH_CHANNEL* ou une durée est invalide
    """
    env = os.environ if environ is None else environ
    return Settings(
        registry=WatchRegistry.from_environ(env),
        sweep_interval_seconds=_seconds(env, "SWEEP_INTERVAL_SECONDS", Settings.sweep_interval_seconds),
        prune_delay_seconds=_seconds(env, "PRUNE_DELAY_SECONDS", Settings.prune_delay_seconds),
        room_name_template=(env.get("ROOM_NAME_TEMPLATE") or None),
    )


# Avertit si le token du bot est absent
if not BOT_TOKEN:
    logger.warning("BOT_TOKEN manquant dans l'environnement")
