"""
Dialogue loading - raw content entries to validated trees.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import jsonschema
from pydantic import ValidationError

from whisper_engine.core.errors import ContentError
from whisper_engine.resources.database import ContentDatabase, read_json
from whisper_engine.resources.schemas import DIALOG_SCHEMA
from whisper_framework.dialog.models import DialogueTree
from whisper_framework.dialog.parser import DialogParser
from whisper_framework.dialog.validation import ensure_valid, validate_tree

if TYPE_CHECKING:
    from whisper_framework.commands.dispatcher import CommandDispatcher

logger = logging.getLogger(__name__)

SCRIPT_SUFFIXES = ('.dialog', '.txt')


def build_tree(data: dict, dispatcher: Optional[CommandDispatcher] = None) -> DialogueTree:
    """
    Build and validate a tree from its JSON layout.

    Raises:
        ContentError: The entry does not fit the model
        DialogueValidationError: The graph is broken
    """
    try:
        tree = DialogueTree.from_dict(data)
    except (KeyError, ValidationError) as e:
        raise ContentError(f"dialogue '{data.get('id', '?')}' is malformed: {e}") from e
    return ensure_valid(tree, dispatcher)


def load_dialogues(
    db: ContentDatabase,
    dispatcher: Optional[CommandDispatcher] = None,
) -> dict[str, DialogueTree]:
    """
    Convert every dialogue in the database to a tree.

    Trees that fail validation are logged and left out.
    """
    trees: dict[str, DialogueTree] = {}
    for dialog_id, data in db.dialogs.items():
        try:
            tree = DialogueTree.from_dict(data)
        except (KeyError, ValidationError) as e:
            logger.error(f"Dialogue '{dialog_id}' is malformed: {e}")
            continue

        problems = validate_tree(tree, dispatcher)
        if problems:
            for problem in problems:
                logger.error(f"Dialogue '{dialog_id}': {problem}")
            continue

        trees[dialog_id] = tree

    logger.info(f"Loaded {len(trees)} of {len(db.dialogs)} dialogue trees")
    return trees


def load_dialogue_file(
    path: Path | str,
    dispatcher: Optional[CommandDispatcher] = None,
) -> DialogueTree:
    """
    Load one tree from a .json file or a dialogue script.

    Raises:
        ContentError: The file cannot be read or parsed
        DialogueValidationError: The graph is broken
    """
    path = Path(path)

    if path.suffix.lower() in SCRIPT_SUFFIXES:
        parser = DialogParser()
        data = parser.to_json(parser.parse_file(path))
    else:
        data = read_json(path)
        try:
            jsonschema.validate(instance=data, schema=DIALOG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ContentError(f"schema validation failed: {e.message}", str(path)) from e

    return build_tree(data, dispatcher)
