"""
LIGHTBOX IMAGE EDITOR - Services Layer

Memory checks and background bake execution.

BakeService lives in services.bake_service; it is not re-exported here
because bake.py itself imports from this package.
"""

from services.memory_manager import MemoryManager

__all__ = [
    'MemoryManager',
]
