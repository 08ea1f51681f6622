"""
Adapters layer - Concrete collaborators (reservation storage).
"""

from .memory_store import SAMPLE_DATA_FILE, InMemoryReservationStore

__all__ = ["InMemoryReservationStore", "SAMPLE_DATA_FILE"]
