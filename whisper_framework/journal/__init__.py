"""
Journal module - collectible pages with condition-driven unlocks.
"""

from whisper_framework.journal.manager import JournalManager, JournalPage

__all__ = ["JournalManager", "JournalPage"]
