import re

import discord
from typing import List, Optional

from reaction_roles import ReactionRoleMapping

BARE_HEX = re.compile(r"^[0-9a-fA-F]{6}$")


def parse_color(text: str) -> Optional[discord.Colour]:
    """Parse a user supplied color. ``none`` means "pick one at random" and returns ``None``.

    Accepts ``#00FF00``, ``0x00FF00``, bare ``00FF00`` and ``rgb(0, 255, 0)``.
    Raises ``ValueError`` for anything else.
    """
    value = text.strip()
    if not value:
        raise ValueError("empty colour")
    if value.lower() == "none":
        return None
    if BARE_HEX.match(value):
        value = f"#{value}"
    return discord.Colour.from_str(value)


def build_menu_embed(
    title: Optional[str],
    description: Optional[str],
    color: Optional[discord.Colour],
    mappings: List[ReactionRoleMapping],
) -> discord.Embed:
    """Build the reaction role announcement with one inline field per mapping."""
    embed = discord.Embed(
        title=title,
        description=description,
        color=color if color is not None else discord.Colour.random(),
    )
    for mapping in mappings:
        embed.add_field(name=mapping.emoji, value=mapping.role_mention, inline=True)
    return embed
