"""
Registry module - persistent serial to address mapping.
"""

from .store import RegistryEntry, RegistryStore

__all__ = ["RegistryEntry", "RegistryStore"]
