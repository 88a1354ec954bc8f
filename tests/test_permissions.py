import asyncio
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock
import unittest

import discord
from discord.ext import commands

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("TOKEN", "dummy")

from utils.permissions import MissingManageRoles, bot_can_run_reaction_roles, can_manage_roles


class TestCanManageRoles(unittest.TestCase):
    def run_check(self, permissions):
        ctx = MagicMock()
        ctx.author.guild_permissions = permissions
        return asyncio.run(can_manage_roles().predicate(ctx))

    def test_manage_roles_allowed(self):
        self.assertTrue(self.run_check(discord.Permissions(manage_roles=True)))

    def test_manage_guild_allowed(self):
        self.assertTrue(self.run_check(discord.Permissions(manage_guild=True)))

    def test_without_permissions(self):
        with self.assertRaises(MissingManageRoles) as cm:
            self.run_check(discord.Permissions.none())
        self.assertIsInstance(cm.exception, commands.CheckFailure)
        self.assertIn("Manage Roles", str(cm.exception))


class TestBotPermissions(unittest.TestCase):
    def run_check(self, permissions):
        ctx = MagicMock()
        ctx.bot_permissions = permissions
        return asyncio.run(bot_can_run_reaction_roles().predicate(ctx))

    def test_all_permissions(self):
        perms = discord.Permissions(manage_roles=True, add_reactions=True, manage_messages=True)
        self.assertTrue(self.run_check(perms))

    def test_missing_manage_messages(self):
        perms = discord.Permissions(manage_roles=True, add_reactions=True)
        with self.assertRaises(commands.BotMissingPermissions) as cm:
            self.run_check(perms)
        self.assertEqual(cm.exception.missing_permissions, ["manage_messages"])


if __name__ == "__main__":
    unittest.main()
