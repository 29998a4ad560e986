"""
Entrée principale du bot Discord.

Ce script garantit que le dossier courant est ajouté à sys.path pour permettre les imports absolus
(core, etc.), même si le lancement se fait via `python src/run.py`.
"""
from __future__ import annotations

import sys
import os

 # Ajoute dynamiquement le répertoire courant à sys.path si nécessaire
_CURRENT_DIR = os.path.dirname(__file__)
if _CURRENT_DIR not in sys.path:
    sys.path.insert(0, _CURRENT_DIR)

from core.logging_config import setup_logging  # noqa: E402
setup_logging()  # Initialise le logging global

import discord  # noqa: E402

from core import config, bot as bot_module  # noqa: E402
from core.voice_rooms.errors import ConfigError  # noqa: E402


def main() -> None:
    # Vérifie la présence du token Discord
    if not config.BOT_TOKEN:
        raise SystemExit("BOT_TOKEN manquant")
    try:
        settings = config.load_settings()
    except ConfigError as exc:
        raise SystemExit(f"Configuration invalide: {exc}") from exc

    # Instancie le client principal du bot
    bot = bot_module.Bot(settings)
    try:
        bot.run(config.BOT_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        raise SystemExit(f"Authentification Discord refusée: {exc}") from exc


# Démarre le bot si le script est exécuté directement
if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("Arrêt manuel")
        sys.exit(0)
