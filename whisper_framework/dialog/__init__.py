"""
Dialog module - branching conversations driven by the variable store.

Provides:
- Dialogue tree models and JSON loading
- Structural validation
- DialogueManager (choices, impacts, node commands, end timers)
- Text script parser
- Dialogue triggers
"""

from whisper_framework.dialog.models import (
    Speaker,
    ChoiceImpact,
    DialogueChoice,
    DialogueNode,
    DialogueTree,
)
from whisper_framework.dialog.validation import validate_tree, ensure_valid
from whisper_framework.dialog.system import DialogueManager, DialogueState
from whisper_framework.dialog.parser import DialogParser, compile_dialog_file
from whisper_framework.dialog.loader import build_tree, load_dialogues, load_dialogue_file
from whisper_framework.dialog.triggers import DialogueTrigger, segment_flag

__all__ = [
    "Speaker",
    "ChoiceImpact",
    "DialogueChoice",
    "DialogueNode",
    "DialogueTree",
    "validate_tree",
    "ensure_valid",
    "DialogueManager",
    "DialogueState",
    "DialogParser",
    "compile_dialog_file",
    "build_tree",
    "load_dialogues",
    "load_dialogue_file",
    "DialogueTrigger",
    "segment_flag",
]
