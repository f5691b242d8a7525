"""Remote mirror implementations for Compound."""

from compound.remotes.base import BaseRemote, RemoteError
from compound.remotes.file import FileRemote
from compound.remotes.supabase import SupabaseRemote

__all__ = [
    "BaseRemote",
    "FileRemote",
    "RemoteError",
    "SupabaseRemote",
]
