from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

VOICE = "voice"
CATEGORY = "category"
OTHER = "other"


@dataclass(frozen=True)
class VoiceTransition:
    """Changement d'état vocal d'un membre, consommé une seule fois.

    previous_channel_id / new_channel_id valent None quand le membre
    n'était pas (ou n'est plus) connecté en vocal.
    """

    guild_id: Optional[int]
    user_id: int
    member_display_name: str
    previous_channel_id: Optional[int] = None
    new_channel_id: Optional[int] = None

    @classmethod
    def from_voice_states(cls, member: Any, before: Any, after: Any) -> "VoiceTransition":
        """Construit une transition depuis le triplet de `on_voice_state_update`."""
        guild = getattr(member, "guild", None)
        before_channel = getattr(before, "channel", None)
        after_channel = getattr(after, "channel", None)
        return cls(
            guild_id=getattr(guild, "id", None),
            user_id=member.id,
            member_display_name=getattr(member, "display_name", None) or str(member.id),
            previous_channel_id=getattr(before_channel, "id", None),
            new_channel_id=getattr(after_channel, "id", None),
        )


@dataclass(frozen=True)
class ChannelInfo:
    """Instantané d'un salon Discord, jamais mis en cache.

    kind:
        voice    -> salon vocal
        category -> catégorie (conteneur)
        other    -> tout le reste (texte, forum, stage...)
    """

    id: int
    guild_id: int
    kind: str
    parent_category_id: Optional[int] = None
    occupant_count: int = 0

    @property
    def is_voice(self) -> bool:
        return self.kind == VOICE
