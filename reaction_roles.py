"""Reaction role mappings and the in-memory reaction collector.

A reaction role menu is a posted message whose reactions are bound to guild
roles. Pairs are parsed from free-text wizard replies (``😄 @Role``,
``<:custom:123456789012345678> Role Name``) and validated against the bot's
role hierarchy once, when the menu is built. After the menu is registered the
raw reaction listeners in :mod:`discord_bot` call
:func:`handle_reaction_add` and :func:`handle_reaction_remove`, which add or
remove the mapped role for the reacting member.

Menus live only in memory and are lost on restart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import discord

__all__ = [
    "MAX_MAPPINGS",
    "ReactionRoleError",
    "InvalidPairError",
    "RoleNotFoundError",
    "RoleHierarchyError",
    "DuplicateEmojiError",
    "TooManyMappingsError",
    "ReactionRoleMapping",
    "ReactionRoleMenu",
    "ReactionRoleRegistry",
    "registry",
    "emoji_key",
    "split_pair",
    "resolve_role",
    "check_role_manageable",
    "parse_mapping",
    "handle_reaction_add",
    "handle_reaction_remove",
    "handle_message_delete",
    "handle_bulk_message_delete",
    "handle_channel_delete",
    "handle_guild_remove",
]

logger = logging.getLogger("reaction_roles")

# Discord allows at most 20 distinct reactions on a message
MAX_MAPPINGS = 20

VARIATION_SELECTOR = "\ufe0f"

EmojiKey = Union[int, str]


class ReactionRoleError(Exception):
    """Base error for reaction role setup. ``str(error)`` is shown to the user."""


class InvalidPairError(ReactionRoleError):
    pass


class RoleNotFoundError(ReactionRoleError):
    pass


class RoleHierarchyError(ReactionRoleError):
    pass


class DuplicateEmojiError(ReactionRoleError):
    pass


class TooManyMappingsError(ReactionRoleError):
    pass


def emoji_key(emoji) -> EmojiKey:
    """Return a comparable key for a typed emoji string or a Discord emoji object.

    Custom emoji compare by id so ``<:party:1234...>`` typed in the wizard
    matches the reaction a user later adds. Unicode emoji compare by their
    text with variation selectors removed.
    """
    if isinstance(emoji, str):
        emoji = discord.PartialEmoji.from_str(emoji.strip())

    emoji_id = getattr(emoji, "id", None)
    if emoji_id:
        return int(emoji_id)

    name = getattr(emoji, "name", None) or str(emoji)
    return name.replace(VARIATION_SELECTOR, "")


@dataclass
class ReactionRoleMapping:
    """One emoji bound to one role."""

    emoji: str
    role_id: int
    role_name: str

    @property
    def key(self) -> EmojiKey:
        return emoji_key(self.emoji)

    @property
    def role_mention(self) -> str:
        return f"<@&{self.role_id}>"


@dataclass
class ReactionRoleMenu:
    """A posted reaction role message and its mappings."""

    guild_id: int
    channel_id: int
    message_id: int
    mappings: List[ReactionRoleMapping] = field(default_factory=list)
    author_id: Optional[int] = None

    def mapping_for(self, emoji) -> Optional[ReactionRoleMapping]:
        key = emoji_key(emoji)
        for mapping in self.mappings:
            if mapping.key == key:
                return mapping
        return None

    def has_emoji(self, emoji) -> bool:
        return self.mapping_for(emoji) is not None


class ReactionRoleRegistry:
    """Active menus keyed by message id."""

    def __init__(self):
        self._menus: Dict[int, ReactionRoleMenu] = {}

    def register(self, menu: ReactionRoleMenu) -> None:
        self._menus[menu.message_id] = menu
        logger.info(
            f"Registered reaction role menu {menu.message_id} in guild {menu.guild_id} "
            f"with {len(menu.mappings)} mapping(s)"
        )

    def unregister(self, message_id: int) -> Optional[ReactionRoleMenu]:
        menu = self._menus.pop(message_id, None)
        if menu:
            logger.info(f"Unregistered reaction role menu {message_id}")
        return menu

    def get(self, message_id: int) -> Optional[ReactionRoleMenu]:
        return self._menus.get(message_id)

    def menus_for_guild(self, guild_id: int) -> List[ReactionRoleMenu]:
        return [menu for menu in self._menus.values() if menu.guild_id == guild_id]

    def clear(self) -> None:
        self._menus.clear()

    def __len__(self) -> int:
        return len(self._menus)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._menus


# Global registry instance
registry = ReactionRoleRegistry()


def split_pair(text: str) -> Tuple[str, str]:
    """Split ``"<emoji> <role>"`` into the emoji token and the role part."""
    parts = text.split()
    if len(parts) < 2:
        raise InvalidPairError(
            "Invalid format. Please send `emoji @Role` or `emoji RoleName`."
        )
    return parts[0], " ".join(parts[1:])


def resolve_role(guild: discord.Guild, role_text: str, role_mentions=None) -> discord.Role:
    """Find the role for a pair: mentioned role first, then a case-insensitive name match."""
    if role_mentions:
        return role_mentions[0]

    wanted = role_text.strip().lower()
    role = discord.utils.find(lambda r: r.name.lower() == wanted, guild.roles)
    if role is None:
        raise RoleNotFoundError(f"Role not found: {role_text}. Try again.")
    return role


def check_role_manageable(role: discord.Role, bot_member: discord.Member) -> None:
    """Raise :class:`RoleHierarchyError` if the bot cannot hand out ``role``."""
    if role.is_default():
        raise RoleHierarchyError("The @everyone role cannot be used for reaction roles.")
    if role.managed:
        raise RoleHierarchyError(
            f"I cannot manage the role {role.name} because it is managed by an integration."
        )
    if role.position >= bot_member.top_role.position:
        raise RoleHierarchyError(
            f"I cannot manage the role {role.name} because it's higher or equal to my highest role."
        )


def parse_mapping(
    message: discord.Message,
    guild: discord.Guild,
    bot_member: discord.Member,
    existing: List[ReactionRoleMapping],
) -> ReactionRoleMapping:
    """Turn a wizard reply into a validated mapping."""
    emoji_text, role_text = split_pair(message.content.strip())

    if len(existing) >= MAX_MAPPINGS:
        raise TooManyMappingsError(
            f"A message can only hold {MAX_MAPPINGS} reactions. Type `done` to finish."
        )

    key = emoji_key(emoji_text)
    if any(mapping.key == key for mapping in existing):
        raise DuplicateEmojiError(f"{emoji_text} is already mapped. Use a different emoji.")

    role = resolve_role(guild, role_text, message.role_mentions)
    check_role_manageable(role, bot_member)

    return ReactionRoleMapping(emoji=emoji_text, role_id=role.id, role_name=role.name)


async def _resolve_member(guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
    member = guild.get_member(user_id)
    if member is not None:
        return member
    try:
        return await guild.fetch_member(user_id)
    except discord.HTTPException:
        return None


async def _sync_role(bot, payload: discord.RawReactionActionEvent, add: bool) -> bool:
    """Add or remove the mapped role for a raw reaction event.

    Returns ``True`` when the member's roles were changed.
    """
    menu = registry.get(payload.message_id)
    if menu is None or payload.guild_id is None:
        return False

    mapping = menu.mapping_for(payload.emoji)
    if mapping is None:
        return False

    guild = bot.get_guild(payload.guild_id)
    if guild is None:
        return False

    member = payload.member if add else None
    if member is None:
        member = await _resolve_member(guild, payload.user_id)
    if member is None or member.bot:
        return False

    role = guild.get_role(mapping.role_id)
    if role is None:
        logger.warning(
            f"Role {mapping.role_name} ({mapping.role_id}) for menu {menu.message_id} no longer exists"
        )
        return False

    has_role = any(r.id == role.id for r in member.roles)
    try:
        if add and not has_role:
            await member.add_roles(role, reason="Reaction role")
            logger.info(f"Added role {role.name} to {member} via menu {menu.message_id}")
            return True
        if not add and has_role:
            await member.remove_roles(role, reason="Reaction role")
            logger.info(f"Removed role {role.name} from {member} via menu {menu.message_id}")
            return True
    except discord.HTTPException as e:
        action = "add" if add else "remove"
        logger.error(f"Failed to {action} role {role.name} for {member}: {e}")
    return False


async def handle_reaction_add(bot, payload: discord.RawReactionActionEvent) -> bool:
    """Give the mapped role to a member who reacted on a menu."""
    return await _sync_role(bot, payload, add=True)


async def handle_reaction_remove(bot, payload: discord.RawReactionActionEvent) -> bool:
    """Take the mapped role from a member who removed their reaction."""
    return await _sync_role(bot, payload, add=False)


def handle_message_delete(payload: discord.RawMessageDeleteEvent) -> None:
    """Stop collecting reactions for a deleted menu message."""
    registry.unregister(payload.message_id)


def handle_bulk_message_delete(payload: discord.RawBulkMessageDeleteEvent) -> None:
    for message_id in payload.message_ids:
        registry.unregister(message_id)


def handle_channel_delete(channel: discord.abc.GuildChannel) -> None:
    """Stop collecting reactions for menus posted in a deleted channel."""
    for menu in registry.menus_for_guild(channel.guild.id):
        if menu.channel_id == channel.id:
            registry.unregister(menu.message_id)


def handle_guild_remove(guild: discord.Guild) -> None:
    """Drop every menu of a guild the bot has left."""
    for menu in registry.menus_for_guild(guild.id):
        registry.unregister(menu.message_id)
