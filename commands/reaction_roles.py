"""Discord command that builds a reaction role menu interactively."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import discord
from discord.ext import commands

from config import settings
from reaction_roles import (
    ReactionRoleError,
    ReactionRoleMapping,
    ReactionRoleMenu,
    parse_mapping,
    registry,
)
from utils.embed_utils import build_menu_embed, parse_color
from utils.permissions import (
    MissingManageRoles,
    bot_can_run_reaction_roles,
    can_manage_roles,
)

logger = logging.getLogger(__name__)

TIMED_OUT = "Timed out. Please run the command again when ready."
PAIR_INSTRUCTIONS = (
    "Now send emoji and role pairs, one per message. "
    "Examples: `😄 @Role`, `<:custom:123456> @Role`, or `😄 RoleName`.\n"
    "When finished, type `done`. Type `cancel` to abort."
)
PAIR_PROMPT = "Send an emoji and a role (or `done` / `cancel`):"


async def ask(ctx: commands.Context, question: str, timeout: float) -> Optional[discord.Message]:
    """Send ``question`` and wait for the author's next message in the same channel.

    Returns ``None`` if nothing arrives within ``timeout`` seconds.
    """
    await ctx.send(question)

    def check(message: discord.Message) -> bool:
        return message.author.id == ctx.author.id and message.channel.id == ctx.channel.id

    try:
        return await ctx.bot.wait_for("message", check=check, timeout=timeout)
    except asyncio.TimeoutError:
        return None


def _text_or_none(message: discord.Message) -> Optional[str]:
    text = message.content.strip()
    if text.lower() == "none":
        return None
    return text


async def ask_color(ctx: commands.Context) -> tuple[bool, Optional[discord.Colour]]:
    """Ask for the embed color until it parses. Returns ``(answered, color)``."""
    while True:
        reply = await ask(
            ctx,
            "Enter an embed color (hex like `#00FF00`) or type `none` to use default:",
            settings.prompt_timeout_seconds,
        )
        if reply is None:
            return False, None
        try:
            return True, parse_color(reply.content)
        except ValueError:
            await ctx.send(
                f"Invalid color: {reply.content.strip()}. Use a hex value like `#00FF00` or `none`."
            )


async def collect_mappings(
    ctx: commands.Context, bot_member: discord.Member
) -> Optional[List[ReactionRoleMapping]]:
    """Read emoji/role pairs until ``done``. Returns ``None`` on timeout or cancel."""
    await ctx.send(PAIR_INSTRUCTIONS)

    mappings: List[ReactionRoleMapping] = []
    while True:
        reply = await ask(ctx, PAIR_PROMPT, settings.pair_timeout_seconds)
        if reply is None:
            await ctx.send(TIMED_OUT)
            return None

        text = reply.content.strip()
        if text.lower() == "cancel":
            await ctx.send("Cancelled reaction role setup.")
            return None
        if text.lower() == "done":
            return mappings

        try:
            mapping = parse_mapping(reply, ctx.guild, bot_member, mappings)
        except ReactionRoleError as e:
            await ctx.send(str(e))
            continue

        mappings.append(mapping)
        await ctx.send(f"Added mapping: {mapping.emoji} -> {mapping.role_name}")


@commands.command(name="reactionroles", aliases=["rr"])
@commands.guild_only()
@can_manage_roles()
@bot_can_run_reaction_roles()
async def reaction_roles(ctx: commands.Context) -> None:
    """Create an embed reaction-role menu interactively."""
    guild = ctx.guild

    title_msg = await ask(
        ctx,
        "Please enter the embed title (or type `none` for no title):",
        settings.prompt_timeout_seconds,
    )
    if title_msg is None:
        await ctx.send(TIMED_OUT)
        return
    title = _text_or_none(title_msg)

    desc_msg = await ask(
        ctx,
        "Please enter the embed description (or type `none` for no description):",
        settings.prompt_timeout_seconds,
    )
    if desc_msg is None:
        await ctx.send(TIMED_OUT)
        return
    description = _text_or_none(desc_msg)

    answered, color = await ask_color(ctx)
    if not answered:
        await ctx.send(TIMED_OUT)
        return

    mappings = await collect_mappings(ctx, guild.me)
    if mappings is None:
        return
    if not mappings:
        await ctx.send("No mappings provided. Aborting.")
        return

    embed = build_menu_embed(title, description, color, mappings)
    sent = await ctx.send(embed=embed)

    for mapping in mappings:
        try:
            await sent.add_reaction(mapping.emoji)
        except (discord.HTTPException, TypeError) as e:
            logger.error(f"Failed to react with {mapping.emoji}: {e}")
            await ctx.send(
                f"Warning: failed to react with {mapping.emoji}. "
                "Make sure the emoji is valid and I have access to it."
            )

    registry.register(
        ReactionRoleMenu(
            guild_id=guild.id,
            channel_id=ctx.channel.id,
            message_id=sent.id,
            mappings=mappings,
            author_id=ctx.author.id,
        )
    )
    await ctx.send("Reaction role message created and collector started.")


@reaction_roles.error
async def reaction_roles_error(ctx: commands.Context, error: commands.CommandError) -> None:
    """Turn failed checks into replies; log anything else."""
    if isinstance(error, commands.NoPrivateMessage):
        await ctx.reply("This command can only be used in a server.")
    elif isinstance(error, MissingManageRoles):
        await ctx.reply(str(error))
    elif isinstance(error, commands.BotMissingPermissions):
        await ctx.reply(
            "I need `Manage Roles`, `Add Reactions` and `Manage Messages` "
            "permissions to create reaction roles."
        )
    else:
        logger.error(f"Reaction role setup failed: {error}", exc_info=error)
        await ctx.send(f"❌ Failed to create reaction roles: {error}")


__all__ = ["reaction_roles", "ask", "collect_mappings"]
