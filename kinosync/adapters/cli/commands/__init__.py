"""Sous-package CLI commands - re-exporte les commandes publiques."""

from kinosync.adapters.cli.commands.sync_commands import identify, sync

__all__ = ["identify", "sync"]
