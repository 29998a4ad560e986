"""
Accès à la plateforme Discord pour les salons vocaux éphémères.

Le contrat `GatewayClient` isole le cœur (creator, pruner, manager) de
discord.py : chaque appel relit l'état courant côté Discord, rien n'est
mis en cache localement. `DiscordGateway` l'implémente au-dessus d'un
`discord.Client` et traduit les exceptions HTTP vers `errors.py`.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import discord

from .errors import (
    ChannelCreateError,
    ChannelGoneError,
    ChannelLookupError,
    DeleteError,
    GuildNotFoundError,
    MemberMoveError,
)
from .models import CATEGORY, OTHER, VOICE, ChannelInfo

logger = logging.getLogger(__name__)


class GatewayClient(Protocol):
    async def fetch_channel(self, channel_id: int) -> ChannelInfo: ...

    async def list_category_channels(self, category_id: int) -> List[ChannelInfo]: ...

    async def occupant_count(self, channel_id: int) -> int: ...

    async def member_channel_id(self, guild_id: int, user_id: int) -> Optional[int]: ...

    async def create_voice_channel(self, guild_id: int, category_id: int, name: str) -> int: ...

    async def delete_channel(self, channel_id: int) -> bool: ...

    async def move_member(self, guild_id: int, user_id: int, channel_id: int) -> None: ...


def _kind_of(channel) -> str:
    if isinstance(channel, discord.VoiceChannel):
        return VOICE
    if isinstance(channel, discord.CategoryChannel):
        return CATEGORY
    return OTHER


def to_channel_info(channel) -> ChannelInfo:
    kind = _kind_of(channel)
    return ChannelInfo(
        id=channel.id,
        guild_id=channel.guild.id,
        kind=kind,
        parent_category_id=getattr(channel, "category_id", None),
        occupant_count=len(channel.members) if kind == VOICE else 0,
    )


class DiscordGateway:
    """Implémentation de `GatewayClient` via discord.py."""

    def __init__(self, client: discord.Client):
        self.client = client

    # ---------- résolution ----------
    async def _resolve_channel(self, channel_id: int):
        channel = self.client.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            channel = await self.client.fetch_channel(channel_id)
        except discord.NotFound:
            raise ChannelGoneError(f"Salon {channel_id} introuvable", channel_id=channel_id) from None
        except discord.HTTPException as exc:
            raise ChannelLookupError(
                f"Lecture du salon {channel_id} impossible: {exc}", channel_id=channel_id
            ) from exc
        if not isinstance(channel, discord.abc.GuildChannel):
            raise ChannelLookupError(f"Salon {channel_id} hors guilde", channel_id=channel_id)
        return channel

    async def _resolve_guild(self, guild_id: int) -> discord.Guild:
        guild = self.client.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self.client.fetch_guild(guild_id)
        except discord.HTTPException as exc:
            raise GuildNotFoundError(f"Guilde {guild_id} introuvable: {exc}") from exc

    async def _resolve_member(self, guild: discord.Guild, user_id: int) -> discord.Member:
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException as exc:
            raise ChannelLookupError(f"Membre {user_id} introuvable dans {guild.id}: {exc}") from exc

    # ---------- lecture ----------
    async def fetch_channel(self, channel_id: int) -> ChannelInfo:
        return to_channel_info(await self._resolve_channel(channel_id))

    async def list_category_channels(self, category_id: int) -> List[ChannelInfo]:
        category = await self._resolve_channel(category_id)
        if not isinstance(category, discord.CategoryChannel):
            raise ChannelLookupError(f"{category_id} n'est pas une catégorie", channel_id=category_id)
        try:
            channels = await category.guild.fetch_channels()
        except discord.HTTPException as exc:
            raise ChannelLookupError(
                f"Liste des salons de la guilde {category.guild.id} indisponible: {exc}",
                channel_id=category_id,
            ) from exc
        return [to_channel_info(ch) for ch in channels if getattr(ch, "category_id", None) == category_id]

    async def occupant_count(self, channel_id: int) -> int:
        channel = await self._resolve_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel):
            raise ChannelLookupError(f"{channel_id} n'est pas un salon vocal", channel_id=channel_id)
        return len(channel.members)

    async def member_channel_id(self, guild_id: int, user_id: int) -> Optional[int]:
        guild = await self._resolve_guild(guild_id)
        member = await self._resolve_member(guild, user_id)
        voice = member.voice
        if voice is None or voice.channel is None:
            return None
        return voice.channel.id

    # ---------- écriture ----------
    async def create_voice_channel(self, guild_id: int, category_id: int, name: str) -> int:
        guild = await self._resolve_guild(guild_id)
        category = await self._resolve_channel(category_id)
        if not isinstance(category, discord.CategoryChannel):
            raise ChannelLookupError(f"{category_id} n'est pas une catégorie", channel_id=category_id)
        try:
            channel = await guild.create_voice_channel(name, category=category, reason="Salon vocal personnel")
        except discord.HTTPException as exc:
            raise ChannelCreateError(f"Création de {name!r} impossible: {exc}") from exc
        return channel.id

    async def delete_channel(self, channel_id: int) -> bool:
        channel = self.client.get_channel(channel_id)
        try:
            if channel is None:
                channel = await self.client.fetch_channel(channel_id)
            await channel.delete(reason="Salon vocal personnel vide")
        except discord.NotFound:
            return False
        except discord.HTTPException as exc:
            raise DeleteError(f"Suppression du salon {channel_id} impossible: {exc}", channel_id=channel_id) from exc
        return True

    async def move_member(self, guild_id: int, user_id: int, channel_id: int) -> None:
        guild = await self._resolve_guild(guild_id)
        try:
            member = await self._resolve_member(guild, user_id)
            await member.move_to(discord.Object(id=channel_id), reason="Déplacement vers son salon personnel")
        except (discord.HTTPException, ChannelLookupError) as exc:
            raise MemberMoveError(
                f"Déplacement de {user_id} vers {channel_id} impossible: {exc}", channel_id=channel_id
            ) from exc


__all__ = ["GatewayClient", "DiscordGateway", "to_channel_info"]
