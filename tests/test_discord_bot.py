import asyncio
import os
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("TOKEN", "dummy")

import discord_bot
import reaction_roles
from config import settings
from discord_bot import bot, discord_bot_instance


class TestDiscordBot(unittest.TestCase):
    def setUp(self):
        discord_bot_instance.ready = False
        self.addCleanup(setattr, discord_bot_instance, "ready", False)

    def test_wizard_command_registered(self):
        command = bot.get_command("reactionroles")
        self.assertIsNotNone(command)
        self.assertIs(bot.get_command("rr"), command)
        self.assertEqual(bot.command_prefix, settings.prefix)

    def test_on_ready_marks_ready(self):
        asyncio.run(discord_bot.on_ready())
        self.assertTrue(discord_bot_instance.ready)

    def test_raw_reaction_events_delegate(self):
        payload = MagicMock()
        with patch("reaction_roles.handle_reaction_add", new_callable=AsyncMock) as mock_add, \
             patch("reaction_roles.handle_reaction_remove", new_callable=AsyncMock) as mock_remove:
            asyncio.run(discord_bot.on_raw_reaction_add(payload))
            asyncio.run(discord_bot.on_raw_reaction_remove(payload))
        mock_add.assert_awaited_once_with(bot, payload)
        mock_remove.assert_awaited_once_with(bot, payload)

    def test_message_delete_events_delegate(self):
        payload = MagicMock()
        with patch("reaction_roles.handle_message_delete") as mock_delete, \
             patch("reaction_roles.handle_bulk_message_delete") as mock_bulk:
            asyncio.run(discord_bot.on_raw_message_delete(payload))
            asyncio.run(discord_bot.on_raw_bulk_message_delete(payload))
        mock_delete.assert_called_once_with(payload)
        mock_bulk.assert_called_once_with(payload)

    def test_channel_and_guild_removal_delegate(self):
        channel = MagicMock()
        guild = MagicMock()
        with patch("reaction_roles.handle_channel_delete") as mock_channel, \
             patch("reaction_roles.handle_guild_remove") as mock_guild:
            asyncio.run(discord_bot.on_guild_channel_delete(channel))
            asyncio.run(discord_bot.on_guild_remove(guild))
        mock_channel.assert_called_once_with(channel)
        mock_guild.assert_called_once_with(guild)

    def test_guild_remove_clears_menus(self):
        reaction_roles.registry.clear()
        self.addCleanup(reaction_roles.registry.clear)
        reaction_roles.registry.register(
            reaction_roles.ReactionRoleMenu(guild_id=1, channel_id=2, message_id=3)
        )
        guild = MagicMock()
        guild.id = 1
        asyncio.run(discord_bot.on_guild_remove(guild))
        self.assertEqual(discord_bot_instance.active_menus, 0)

    def test_start_uses_token(self):
        with patch.object(bot, "start", new_callable=AsyncMock) as mock_start:
            asyncio.run(discord_bot_instance.start())
        mock_start.assert_awaited_once_with(settings.token)

    def test_start_failure_logged(self):
        with patch.object(bot, "start", new_callable=AsyncMock, side_effect=RuntimeError("bad token")):
            with self.assertLogs("discord_bot", level="ERROR"):
                with self.assertRaises(RuntimeError):
                    asyncio.run(discord_bot_instance.start())

    def test_close(self):
        discord_bot_instance.ready = True
        with patch.object(bot, "is_closed", return_value=False), \
             patch.object(bot, "close", new_callable=AsyncMock) as mock_close:
            asyncio.run(discord_bot_instance.close())
        mock_close.assert_awaited_once()
        self.assertFalse(discord_bot_instance.ready)

    def test_active_menus(self):
        reaction_roles.registry.clear()
        self.addCleanup(reaction_roles.registry.clear)
        reaction_roles.registry.register(
            reaction_roles.ReactionRoleMenu(guild_id=1, channel_id=2, message_id=3)
        )
        self.assertEqual(discord_bot_instance.active_menus, 1)


if __name__ == "__main__":
    unittest.main()
