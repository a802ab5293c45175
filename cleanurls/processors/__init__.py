"""Processors turning URLs into their clean or native form."""

from .cleaner import Cleaner, is_excluded, outgoing_key
from .uncleaner import Uncleaner

__all__ = ["Cleaner", "Uncleaner", "is_excluded", "outgoing_key"]
