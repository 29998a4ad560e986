"""
Hiérarchie d'erreurs des salons vocaux éphémères.

Seule `ConfigError` est fatale (au démarrage). Les autres interrompent
l'opération en cours et sont journalisées par le manager ou le sweeper.
"""
from __future__ import annotations


class VoiceRoomsError(Exception):
    """Racine de toutes les erreurs de la fonctionnalité."""


class ConfigError(VoiceRoomsError):
    """Entrée WATCH_CHANNEL* ou variable d'environnement invalide."""


class ChannelLookupError(VoiceRoomsError):
    """Salon, catégorie ou guilde introuvable côté Discord."""

    def __init__(self, message: str, *, channel_id: int | None = None):
        super().__init__(message)
        self.channel_id = channel_id


class ChannelGoneError(ChannelLookupError):
    """Salon supprimé (HTTP 404), typiquement par un prune concurrent."""


class GuildNotFoundError(ChannelLookupError):
    pass


class NoCategoryError(ChannelLookupError):
    """Le salon déclencheur n'est rangé dans aucune catégorie."""


class CreateError(VoiceRoomsError):
    """Création de la room ou déplacement du membre en échec."""


class ChannelCreateError(CreateError):
    pass


class MemberMoveError(CreateError):
    def __init__(self, message: str, *, channel_id: int):
        super().__init__(message)
        # Room orpheline, récupérée par le prochain prune
        self.channel_id = channel_id


class DeleteError(VoiceRoomsError):
    def __init__(self, message: str, *, channel_id: int):
        super().__init__(message)
        self.channel_id = channel_id


__all__ = [
    "VoiceRoomsError",
    "ConfigError",
    "ChannelLookupError",
    "ChannelGoneError",
    "GuildNotFoundError",
    "NoCategoryError",
    "CreateError",
    "ChannelCreateError",
    "MemberMoveError",
    "DeleteError",
]
