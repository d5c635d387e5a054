"""Slash commands: parsing and execution."""

from .executor import CommandExecutor, HELP_TEXT
from .parser import SlashCommand, is_command, parse

__all__ = ["CommandExecutor", "HELP_TEXT", "SlashCommand", "is_command", "parse"]
