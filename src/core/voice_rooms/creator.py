from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from .errors import NoCategoryError
from .gateway import GatewayClient

logger = logging.getLogger(__name__)

DEFAULT_NAME_TEMPLATE = "{display}'s room"
MAX_CHANNEL_NAME = 100


def build_room_name(template: Optional[str], display_name: str, user_id: int) -> str:
    """Nom du salon à partir du gabarit (`{display}`, `{user_id}`), tronqué à 100 caractères."""
    try:
        name = (template or DEFAULT_NAME_TEMPLATE).format(display=display_name, user_id=user_id)
    except (KeyError, IndexError, ValueError):
        logger.warning("Gabarit de nom invalide %r, gabarit par défaut utilisé", template)
        name = DEFAULT_NAME_TEMPLATE.format(display=display_name, user_id=user_id)
    name = name.strip() or DEFAULT_NAME_TEMPLATE.format(display=user_id, user_id=user_id)
    return name[:MAX_CHANNEL_NAME]


class RoomCreator:
    """Crée le salon personnel d'un membre à côté du salon déclencheur.

    Un verrou par déclencheur sérialise les créations : un événement dupliqué
    arrive après le déplacement du membre et échoue à la revalidation.
    """

    def __init__(self, gateway: GatewayClient, *, name_template: Optional[str] = None):
        self.gateway = gateway
        self.name_template = name_template
        self.locks: Dict[int, asyncio.Lock] = {}

    def get_lock(self, trigger_channel_id: int) -> asyncio.Lock:
        lock = self.locks.get(trigger_channel_id)
        if lock is None:
            lock = asyncio.Lock()
            self.locks[trigger_channel_id] = lock
        return lock

    async def create(self, guild_id: int, trigger_channel_id: int, user_id: int, display_name: str) -> Optional[int]:
        """
        Crée la room et y déplace le membre.

        Returns :
            l'id du nouveau salon, ou None si le membre a déjà quitté le déclencheur
        Raises :
            ChannelLookupError / GuildNotFoundError / NoCategoryError / ChannelCreateError / MemberMoveError
        """
        async with self.get_lock(trigger_channel_id):
            current = await self.gateway.member_channel_id(guild_id, user_id)
            if current != trigger_channel_id:
                logger.debug(
                    "Membre %s plus dans le déclencheur %s (actuel: %s), création ignorée",
                    user_id, trigger_channel_id, current,
                )
                return None

            trigger = await self.gateway.fetch_channel(trigger_channel_id)
            category_id = trigger.parent_category_id
            if category_id is None:
                raise NoCategoryError(
                    f"Le déclencheur {trigger_channel_id} n'est dans aucune catégorie",
                    channel_id=trigger_channel_id,
                )

            name = build_room_name(self.name_template, display_name, user_id)
            channel_id = await self.gateway.create_voice_channel(guild_id, category_id, name)
            logger.info("Salon %s (%r) créé dans la catégorie %s, déplacement de %s", channel_id, name, category_id, user_id)

            await self.gateway.move_member(guild_id, user_id, channel_id)
            return channel_id


__all__ = ["RoomCreator", "build_room_name", "DEFAULT_NAME_TEMPLATE"]
