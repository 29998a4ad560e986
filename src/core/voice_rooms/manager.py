from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Set

import discord

from .creator import RoomCreator
from .errors import VoiceRoomsError
from .gateway import DiscordGateway, GatewayClient
from .models import VoiceTransition
from .pruner import RoomPruner
from .registry import WatchRegistry

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL = 150.0


class VoiceRoomsManager:
    """Réconcilie les transitions vocales avec le registre des déclencheurs.

    Responsabilités:
        - Création d'une room quand un membre rejoint le déclencheur.
        - Prune bloquant sur déconnexion (ordre garanti avant l'événement suivant).
        - Prune détaché quand un membre change de salon hors déclencheur.
    """

    def __init__(self, registry: WatchRegistry, creator: RoomCreator, pruner: RoomPruner):
        self.registry = registry
        self.creator = creator
        self.pruner = pruner
        self.locks: Dict[int, asyncio.Lock] = {}
        self._background: Set[asyncio.Task] = set()

    def get_lock(self, guild_id: int) -> asyncio.Lock:
        lock = self.locks.get(guild_id)
        if lock is None:
            lock = asyncio.Lock()
            self.locks[guild_id] = lock
        return lock

    async def handle_transition(self, transition: VoiceTransition) -> None:
        if transition.guild_id is None:
            logger.debug("Transition sans guild_id ignorée (user %s)", transition.user_id)
            return
        trigger_id = self.registry.lookup(transition.guild_id)
        if trigger_id is None:
            logger.debug("Aucun déclencheur pour la guilde %s", transition.guild_id)
            return

        # Un événement à la fois par guilde : le prune de déconnexion se termine
        # avant que l'événement suivant de la même guilde soit traité
        async with self.get_lock(transition.guild_id):
            await self._reconcile(transition, trigger_id)

    async def _reconcile(self, transition: VoiceTransition, trigger_id: int) -> None:
        previous = transition.previous_channel_id
        new = transition.new_channel_id

        if new is None:
            logger.debug("Membre %s déconnecté, prune de %s", transition.user_id, trigger_id)
            await self.safe_prune(trigger_id)
            return

        if previous is not None:
            if previous == trigger_id:
                logger.debug("Membre %s a quitté le déclencheur %s", transition.user_id, trigger_id)
            elif previous != new:
                logger.debug("Membre %s a changé de salon (%s -> %s), prune détaché", transition.user_id, previous, new)
                self.spawn_prune(trigger_id)

        if new != trigger_id:
            return

        logger.debug("Déclencheur %s rejoint par %s", trigger_id, transition.user_id)
        try:
            await self.creator.create(
                transition.guild_id, trigger_id, transition.user_id, transition.member_display_name
            )
        except VoiceRoomsError as exc:
            logger.warning("Création de room pour %s abandonnée: %s", transition.user_id, exc)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur inattendue à la création de room pour %s", transition.user_id)

    async def safe_prune(self, trigger_channel_id: int) -> None:
        try:
            await self.pruner.prune(trigger_channel_id)
        except VoiceRoomsError as exc:
            logger.warning("Prune de %s abandonné: %s", trigger_channel_id, exc)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur inattendue pendant le prune de %s", trigger_channel_id)

    def spawn_prune(self, trigger_channel_id: int) -> None:
        # Référence gardée jusqu'à la fin de la tâche, jamais attendue
        task = asyncio.create_task(self.safe_prune(trigger_channel_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)


class RoomSweeper:
    """Boucle de fond : prune de chaque déclencheur à intervalle fixe."""

    def __init__(self, registry: WatchRegistry, manager: VoiceRoomsManager, *, interval: float = DEFAULT_SWEEP_INTERVAL):
        self.registry = registry
        self.manager = manager
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        if self.running:
            return False
        self._task = asyncio.create_task(self.run_forever())
        logger.info("Sweep démarré (intervalle %ss, %s guilde(s))", self.interval, len(self.registry))
        return True

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        # wait() ne relève pas l'annulation de la boucle, seulement celle de l'appelant
        await asyncio.wait({task})

    async def sweep_once(self) -> None:
        for guild_id, trigger_id in self.registry.items():
            logger.debug("Sweep guilde %s (déclencheur %s)", guild_id, trigger_id)
            await self.manager.safe_prune(trigger_id)

    async def run_forever(self) -> None:
        while True:
            await self.sweep_once()
            await asyncio.sleep(self.interval)


def build_manager(
    registry: WatchRegistry,
    gateway: GatewayClient,
    *,
    delete_delay: float,
    name_template: Optional[str] = None,
) -> VoiceRoomsManager:
    creator = RoomCreator(gateway, name_template=name_template)
    pruner = RoomPruner(gateway, delete_delay=delete_delay)
    return VoiceRoomsManager(registry, creator, pruner)


def setup_voice_rooms_manager(bot: discord.Client, registry: WatchRegistry, settings) -> VoiceRoomsManager:
    manager = build_manager(
        registry,
        DiscordGateway(bot),
        delete_delay=settings.prune_delay_seconds,
        name_template=settings.room_name_template,
    )
    sweeper = RoomSweeper(registry, manager, interval=settings.sweep_interval_seconds)

    @bot.event
    async def on_voice_state_update(member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):  # type: ignore
        await manager.handle_transition(VoiceTransition.from_voice_states(member, before, after))

    bot.voice_rooms = manager  # type: ignore[attr-defined]
    bot.room_sweeper = sweeper  # type: ignore[attr-defined]
    return manager


__all__ = [
    "VoiceRoomsManager",
    "RoomSweeper",
    "build_manager",
    "setup_voice_rooms_manager",
    "DEFAULT_SWEEP_INTERVAL",
]
