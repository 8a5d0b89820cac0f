"""
Hydrator

Builds entities from rows and extracts rows from entities.
"""

from slimorm.hydrator.hydrator import Hydrator

__all__ = ["Hydrator"]
