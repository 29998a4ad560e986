"""
Classe principale du bot Discord.

Responsabilités :
- Crée le client Discord avec les intents vocaux.
- Branche le manager des salons vocaux éphémères sur `on_voice_state_update`.
- Démarre le sweep périodique une fois connecté (une seule instance, même après reconnexion).

Note : L'initialisation asynchrone est centralisée dans `setup_hook`, appelé avant `on_ready`.
"""
from __future__ import annotations

import logging
import discord

from core import config

logger = logging.getLogger(__name__)

class Bot(discord.Client):
    """
    Client Discord étendu, encapsulant l'état applicatif.

    Attributs principaux :
        settings : Réglages chargés au démarrage (registre inclus)
        voice_rooms : VoiceRoomsManager (peuplé dans setup_hook)
        room_sweeper : RoomSweeper (démarré dans on_ready)
    """


    def __init__(self, settings: config.Settings):
        super().__init__(intents=config.INTENTS)
        self.settings = settings
        self.voice_rooms = None
        self.room_sweeper = None

    async def setup_hook(self):
        from core.voice_rooms.manager import setup_voice_rooms_manager  # type: ignore
        setup_voice_rooms_manager(self, self.settings.registry, self.settings)
        logger.info("VoiceRooms manager initialisé (%s guilde(s) surveillée(s))", len(self.settings.registry))

    async def on_ready(self):
        """
        Log d'état lorsque le bot est prêt.
        Démarre le sweep ; on_ready est rappelé après chaque reconnexion, start() est idempotent.
        """
        logger.info("Connecté: %s (%s)", self.user, getattr(self.user, 'id', '?'))
        if self.room_sweeper is not None and self.room_sweeper.start() is False:
            logger.debug("Sweep déjà actif (reconnexion)")

    async def close(self):  # type: ignore[override]
        """
        Fermeture propre du bot.
        Arrête la boucle de sweep avant de fermer la connexion Discord.
        """
        try:
            if self.room_sweeper is not None:
                await self.room_sweeper.stop()
                logger.info("Sweep arrêté")
        except Exception:  # noqa: BLE001
            logger.exception("Erreur arrêt sweep")
        await super().close()
