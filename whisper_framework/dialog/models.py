"""
Dialogue data - speakers, choices, nodes and trees.

Read-only at runtime. Nodes reference each other by id; the tree
resolves ids case-insensitively.

JSON layout (see whisper_engine.resources.schemas.DIALOG_SCHEMA):
    {
      "id": "writer_intro",
      "start": "greeting",
      "nodes": [
        {"id": "greeting", "speaker": "writer", "text": "...",
         "on_enter": ["flag:met_writer"],
         "choices": [{"text": "...", "next": "trust",
                      "condition": "courage >= 10",
                      "impacts": [{"variable": "trust_writer", "change": 5}]}]},
        {"id": "trust", "text": "...", "end": true, "duration": 4.0}
      ]
    }
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Data(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


class Speaker(_Data):
    """A character who can speak lines."""
    id: str
    display_name: str = ""
    portrait: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.id


class ChoiceImpact(_Data):
    """
    Integer delta applied when a choice is selected.

    Attributes:
        variable_name: Int variable to change
        value_change: Signed delta
        apply_condition: Optional gate; the impact is skipped when false
    """
    variable_name: str
    value_change: int
    apply_condition: Optional[str] = None

    @property
    def is_conditional(self) -> bool:
        return bool(self.apply_condition and self.apply_condition.strip())


class DialogueChoice(_Data):
    """
    A player-selectable option.

    has_condition switches show_condition on or off. Left unset, it is
    on whenever show_condition is non-blank.
    """
    text: str
    next_node: Optional[str] = None
    has_condition: bool = False
    show_condition: Optional[str] = None
    impacts: tuple[ChoiceImpact, ...] = ()

    @model_validator(mode='before')
    @classmethod
    def _default_has_condition(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get('has_condition') is None:
            condition = data.get('show_condition')
            data = {**data, 'has_condition': bool(condition and condition.strip())}
        return data


class DialogueNode(_Data):
    """
    One line of dialogue.

    Attributes:
        id: Unique within the tree (case-insensitive)
        speaker: Speaker id
        line_text: Text shown to the player
        voice / voice_delay: Voice clip id and its start offset
        choices: Ordered options (may be conditionally hidden)
        next_node_if_auto: Target when advancing without a choice
        start_commands: Run when the node is shown
        end_commands: Run when the node is left
        is_end_node: Auto-closes after display_duration when no
            choice is visible
        display_duration: Seconds before auto-close (<= 0 uses the
            configured grace period)
    """
    id: str
    speaker: str = ""
    line_text: str = ""
    voice: Optional[str] = None
    voice_delay: float = 0.0
    choices: tuple[DialogueChoice, ...] = ()
    next_node_if_auto: Optional[str] = None
    start_commands: tuple[str, ...] = ()
    end_commands: tuple[str, ...] = ()
    is_end_node: bool = False
    display_duration: float = 0.0


class DialogueTree(_Data):
    """A complete conversation graph."""
    id: str
    title: str = ""
    start_node: Optional[str] = None
    nodes: tuple[DialogueNode, ...] = ()
    speakers: tuple[Speaker, ...] = ()
    typewriter_speed: float = Field(default=0.05, gt=0)
    auto_advance_if_single_choice: bool = False

    def get_node(self, node_id: Optional[str]) -> Optional[DialogueNode]:
        """Find a node by id, ignoring case."""
        if not node_id:
            return None
        key = node_id.strip().lower()
        for node in self.nodes:
            if node.id.lower() == key:
                return node
        return None

    def start(self) -> Optional[DialogueNode]:
        """The start node, or None if unset or missing."""
        return self.get_node(self.start_node)

    def get_speaker(self, speaker_id: str) -> Optional[Speaker]:
        key = (speaker_id or "").lower()
        for speaker in self.speakers:
            if speaker.id.lower() == key:
                return speaker
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DialogueTree:
        """Build a tree from its JSON layout."""
        return cls(
            id=data['id'],
            title=data.get('title', ""),
            start_node=data.get('start'),
            typewriter_speed=data.get('typewriter_speed', 0.05),
            auto_advance_if_single_choice=data.get('auto_advance_single_choice', False),
            speakers=tuple(
                Speaker(
                    id=s['id'],
                    display_name=s.get('name', ""),
                    portrait=s.get('portrait'),
                )
                for s in data.get('speakers', [])
            ),
            nodes=tuple(_node_from_dict(n) for n in data.get('nodes', [])),
        )


def _node_from_dict(data: dict[str, Any]) -> DialogueNode:
    choices = []
    for choice in data.get('choices') or []:
        choices.append(DialogueChoice(
            text=choice.get('text', ""),
            next_node=choice.get('next'),
            has_condition=choice.get('has_condition'),
            show_condition=choice.get('condition'),
            impacts=tuple(
                ChoiceImpact(
                    variable_name=impact['variable'],
                    value_change=impact['change'],
                    apply_condition=impact.get('condition'),
                )
                for impact in choice.get('impacts', [])
            ),
        ))

    return DialogueNode(
        id=data['id'],
        speaker=data.get('speaker') or "",
        line_text=data.get('text', ""),
        voice=data.get('voice'),
        voice_delay=data.get('voice_delay', 0.0),
        choices=tuple(choices),
        next_node_if_auto=data.get('next'),
        start_commands=tuple(data.get('on_enter', [])),
        end_commands=tuple(data.get('on_exit', [])),
        is_end_node=data.get('end', False),
        display_duration=data.get('duration', 0.0),
    )
