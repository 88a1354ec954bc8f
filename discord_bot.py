"""Discord bot client hosting the reaction role wizard and its reaction listeners."""

import discord
from discord.ext import commands
import logging

from logging_config import setup_logging
from config import settings

import reaction_roles
from commands.reaction_roles import reaction_roles as reaction_roles_command

# Setup logging
setup_logging()
logger = logging.getLogger("discord_bot")

# Discord bot intents
intents = discord.Intents.default()
intents.message_content = True  # Required to read wizard replies
intents.members = True  # Required to resolve members on reaction removal
intents.reactions = True

# Create bot instance
bot = commands.Bot(command_prefix=settings.prefix, intents=intents, owner_id=settings.owner)
bot.add_command(reaction_roles_command)


class DiscordBot:
    """Discord bot wrapper used by the service entrypoint."""

    def __init__(self):
        self.bot = bot
        self.ready = False

    async def start(self):
        """Start the Discord bot."""
        try:
            await self.bot.start(settings.token)
        except Exception as e:
            logger.error(f"Failed to start Discord bot: {e}")
            raise

    async def close(self):
        """Disconnect from Discord."""
        self.ready = False
        if not self.bot.is_closed():
            await self.bot.close()

    @property
    def active_menus(self) -> int:
        return len(reaction_roles.registry)


# Global bot instance
discord_bot_instance = DiscordBot()


@bot.event
async def on_ready():
    """Called when the bot has successfully connected to Discord."""
    logger.info(f"{bot.user} has connected to Discord!")
    discord_bot_instance.ready = True


@bot.event
async def on_raw_reaction_add(payload: discord.RawReactionActionEvent):
    """Give mapped roles when a member reacts on a reaction role menu."""
    await reaction_roles.handle_reaction_add(bot, payload)


@bot.event
async def on_raw_reaction_remove(payload: discord.RawReactionActionEvent):
    """Take mapped roles back when a member removes their reaction."""
    await reaction_roles.handle_reaction_remove(bot, payload)


@bot.event
async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent):
    reaction_roles.handle_message_delete(payload)


@bot.event
async def on_raw_bulk_message_delete(payload: discord.RawBulkMessageDeleteEvent):
    reaction_roles.handle_bulk_message_delete(payload)


@bot.event
async def on_guild_channel_delete(channel: discord.abc.GuildChannel):
    reaction_roles.handle_channel_delete(channel)


@bot.event
async def on_guild_remove(guild: discord.Guild):
    """Forget menus of a guild the bot was removed from."""
    reaction_roles.handle_guild_remove(guild)


@bot.event
async def on_error(event, *args, **kwargs):
    """Handle bot errors."""
    logger.error(f"Bot error in {event}: {args}, {kwargs}", exc_info=True)
