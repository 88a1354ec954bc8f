"""Permission helpers."""

from discord.ext import commands


class MissingManageRoles(commands.CheckFailure):
    """Raised when the command author can manage neither roles nor the server."""


def can_manage_roles():
    """Check if command author has Manage Roles or Manage Server permissions."""

    async def predicate(ctx: commands.Context) -> bool:
        perms = ctx.author.guild_permissions
        if perms.manage_roles or perms.manage_guild:
            return True
        raise MissingManageRoles(
            "You need the `Manage Roles` permission to create reaction roles."
        )

    return commands.check(predicate)


def bot_can_run_reaction_roles():
    """Check the bot can assign roles, add reactions and manage messages."""
    return commands.bot_has_permissions(
        manage_roles=True, add_reactions=True, manage_messages=True
    )
