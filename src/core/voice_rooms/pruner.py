"""
Suppression des salons vocaux vides d'une catégorie surveillée.

Un passage (sweep) relit la catégorie du déclencheur, puis supprime chaque
salon vocal frère sans occupant. Les erreurs d'un candidat n'interrompent
pas le passage ; un salon déjà supprimé n'est pas une erreur.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List

from .errors import ChannelGoneError, NoCategoryError, VoiceRoomsError
from .gateway import GatewayClient

logger = logging.getLogger(__name__)

DEFAULT_DELETE_DELAY = 5.0


class RoomPruner:
    def __init__(self, gateway: GatewayClient, *, delete_delay: float = DEFAULT_DELETE_DELAY):
        self.gateway = gateway
        self.delete_delay = delete_delay

    async def prune(self, trigger_channel_id: int) -> List[int]:
        """
        Supprime les salons vocaux vides rangés à côté du déclencheur.

        Returns : ids des salons effectivement supprimés
        Raises : ChannelLookupError / NoCategoryError si la catégorie n'est pas résolue
        """
        logger.debug("Prune des salons du déclencheur %s", trigger_channel_id)
        trigger = await self.gateway.fetch_channel(trigger_channel_id)
        category_id = trigger.parent_category_id
        if category_id is None:
            raise NoCategoryError(
                f"Le déclencheur {trigger_channel_id} n'est dans aucune catégorie",
                channel_id=trigger_channel_id,
            )

        siblings = await self.gateway.list_category_channels(category_id)
        candidates = [
            ch for ch in siblings
            if ch.is_voice and ch.parent_category_id == category_id and ch.id != trigger_channel_id
        ]

        deleted: List[int] = []
        for channel in candidates:
            try:
                if await self._prune_one(channel.id):
                    deleted.append(channel.id)
                    await asyncio.sleep(self.delete_delay)
            except VoiceRoomsError as exc:
                logger.warning("Salon %s ignoré pendant le prune: %s", channel.id, exc)
            except Exception:  # noqa: BLE001
                logger.exception("Erreur inattendue sur le salon %s pendant le prune", channel.id)

        if deleted:
            logger.info("Prune %s: %s salon(s) supprimé(s) %s", trigger_channel_id, len(deleted), deleted)
        return deleted

    async def _prune_one(self, channel_id: int) -> bool:
        try:
            occupants = await self.gateway.occupant_count(channel_id)
        except ChannelGoneError:
            logger.debug("Salon %s déjà supprimé", channel_id)
            return False
        if occupants:
            return False
        removed = await self.gateway.delete_channel(channel_id)
        if removed:
            logger.debug("Salon %s supprimé (vide)", channel_id)
        else:
            logger.debug("Salon %s déjà supprimé", channel_id)
        return removed


__all__ = ["RoomPruner", "DEFAULT_DELETE_DELAY"]
