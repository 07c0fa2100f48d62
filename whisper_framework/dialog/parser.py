"""
Dialogue parser - converts dialogue scripts to the JSON layout.

Supports a compact text format:

```
$title = "The Writer"
$auto_advance_single_choice = true

# greeting
@writer
You came back. I wasn't sure you would.
!enter: flag:met_writer
!exit: var:visits+1

>> I had to. -> trust [courage >= 10] {trust_writer+5, courage+2 ? !saw_dolls}
>> Who are you? -> who
>> Leave.

---

# trust
@writer
Then listen closely.
-> farewell

# farewell
Goodbye.
!end 4.0
```

- `# id` starts a node; the first node is the start node unless
  `$start` says otherwise
- `>> text` without a target ends the dialogue when chosen
- `[...]` is the show condition, `{...}` the impacts
- `!voice clip [delay]` attaches a voice clip
- `//` lines are comments
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from whisper_engine.core.errors import ContentError
from whisper_framework.dialog.models import DialogueTree

logger = logging.getLogger(__name__)


@dataclass
class ParsedChoice:
    """A parsed choice option."""
    text: str
    next_node: Optional[str] = None
    condition: Optional[str] = None
    impacts: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class ParsedNode:
    """A parsed dialogue node."""
    id: str
    speaker: str = ""
    text: str = ""
    voice: Optional[str] = None
    voice_delay: float = 0.0
    next_node: Optional[str] = None
    choices: list[ParsedChoice] = field(default_factory=list)
    on_enter: list[str] = field(default_factory=list)
    on_exit: list[str] = field(default_factory=list)
    end: bool = False
    duration: float = 0.0


@dataclass
class ParsedDialog:
    """A complete parsed dialogue."""
    id: str
    nodes: list[ParsedNode] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)


class DialogParser:
    """
    Parses dialogue scripts from the text format.

    Malformed directives raise ContentError with the line number.
    """

    # Regex patterns
    NODE_PATTERN = re.compile(r'^#\s*(\w+)\s*$')
    SPEAKER_PATTERN = re.compile(r'^@(\w+)\s*$')
    CHOICE_PATTERN = re.compile(
        r'^>>\s*(?P<text>.+?)'
        r'(?:\s*->\s*(?P<next>\w+))?'
        r'(?:\s*\[(?P<condition>[^\]]*)\])?'
        r'(?:\s*\{(?P<impacts>[^}]*)\})?\s*$'
    )
    NEXT_PATTERN = re.compile(r'^->\s*(\w+)\s*$')
    SCRIPT_PATTERN = re.compile(r'^!\s*(\w+)\s*:?\s*(.*)$')
    SETTING_PATTERN = re.compile(r'^\$(\w+)\s*=\s*(.+)$')
    IMPACT_PATTERN = re.compile(r'^(\w+)\s*([+-])\s*(\d+)\s*(?:\?\s*(.+))?$')

    def parse_file(self, path: str | Path) -> ParsedDialog:
        """Parse a dialogue script file. The file stem becomes the tree id."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise ContentError(f"cannot read file: {e}", str(path)) from e

        try:
            dialog = self.parse_string(content)
        except ContentError as e:
            raise ContentError(str(e), str(path)) from e

        dialog.id = dialog.settings.pop('id', path.stem)
        return dialog

    def parse_string(self, content: str) -> ParsedDialog:
        """Parse a dialogue script string."""
        dialog = ParsedDialog(id="parsed")
        current_node: Optional[ParsedNode] = None
        text_lines: list[str] = []

        def close_node() -> None:
            if current_node:
                current_node.text = '\n'.join(text_lines).strip()
                dialog.nodes.append(current_node)

        for number, line in enumerate(content.split('\n'), start=1):
            line = line.rstrip()
            stripped = line.strip()

            # Blank lines are kept inside node text
            if not stripped:
                if current_node and text_lines:
                    text_lines.append('')
                continue

            if stripped.startswith('//'):
                continue

            # Node separator
            if stripped == '---':
                close_node()
                current_node = None
                text_lines = []
                continue

            match = self.NODE_PATTERN.match(stripped)
            if match:
                close_node()
                current_node = ParsedNode(id=match.group(1))
                text_lines = []
                continue

            # Settings (before the first node)
            match = self.SETTING_PATTERN.match(stripped)
            if match and not current_node:
                key = match.group(1)
                value = match.group(2).strip()
                try:
                    dialog.settings[key] = json.loads(value)
                except json.JSONDecodeError:
                    dialog.settings[key] = value
                continue

            if not current_node:
                raise ContentError(f"line {number}: text outside a node: '{stripped}'")

            match = self.SPEAKER_PATTERN.match(stripped)
            if match:
                current_node.speaker = match.group(1)
                continue

            if stripped.startswith('>>'):
                current_node.choices.append(self._parse_choice(stripped, number))
                continue

            match = self.NEXT_PATTERN.match(stripped)
            if match:
                current_node.next_node = match.group(1)
                continue

            match = self.SCRIPT_PATTERN.match(stripped)
            if match:
                self._apply_directive(current_node, match.group(1), match.group(2).strip(), number)
                continue

            text_lines.append(line)

        close_node()
        return dialog

    def _parse_choice(self, line: str, number: int) -> ParsedChoice:
        match = self.CHOICE_PATTERN.match(line)
        if not match:
            raise ContentError(f"line {number}: malformed choice '{line}'")

        condition = match.group('condition')
        choice = ParsedChoice(
            text=match.group('text').strip(),
            next_node=match.group('next'),
            condition=condition.strip() if condition and condition.strip() else None,
        )

        impacts = match.group('impacts')
        for part in (impacts or "").split(','):
            part = part.strip()
            if not part:
                continue
            impact = self.IMPACT_PATTERN.match(part)
            if not impact:
                raise ContentError(f"line {number}: malformed impact '{part}'")
            name, sign, amount, apply_condition = impact.groups()
            choice.impacts.append({
                'variable': name,
                'change': int(amount) if sign == '+' else -int(amount),
                'condition': apply_condition.strip() if apply_condition else None,
            })

        return choice

    def _apply_directive(self, node: ParsedNode, name: str, value: str, number: int) -> None:
        name = name.lower()

        if name == 'enter':
            node.on_enter.append(value)
        elif name == 'exit':
            node.on_exit.append(value)
        elif name == 'end':
            node.end = True
            if value:
                node.duration = self._parse_number(value, number)
        elif name == 'voice':
            parts = value.split()
            if not parts:
                raise ContentError(f"line {number}: !voice needs a clip id")
            node.voice = parts[0]
            if len(parts) > 1:
                node.voice_delay = self._parse_number(parts[1], number)
        else:
            raise ContentError(f"line {number}: unknown directive '!{name}'")

    @staticmethod
    def _parse_number(text: str, number: int) -> float:
        try:
            return float(text)
        except ValueError:
            raise ContentError(f"line {number}: expected a number, got '{text}'") from None

    def to_json(self, dialog: ParsedDialog) -> dict[str, Any]:
        """Convert a parsed dialogue to the JSON layout."""
        data: dict[str, Any] = {
            'id': dialog.id,
            'start': dialog.nodes[0].id if dialog.nodes else None,
        }
        data.update(dialog.settings)

        data['nodes'] = []
        for node in dialog.nodes:
            entry: dict[str, Any] = {
                'id': node.id,
                'speaker': node.speaker,
                'text': node.text,
                'next': node.next_node,
                'on_enter': node.on_enter,
                'on_exit': node.on_exit,
                'end': node.end,
                'duration': node.duration,
                'choices': [
                    {
                        'text': choice.text,
                        'next': choice.next_node,
                        'condition': choice.condition,
                        'impacts': choice.impacts,
                    }
                    for choice in node.choices
                ],
            }
            if node.voice:
                entry['voice'] = node.voice
                entry['voice_delay'] = node.voice_delay
            data['nodes'].append(entry)

        return data

    def to_tree(self, dialog: ParsedDialog) -> DialogueTree:
        return DialogueTree.from_dict(self.to_json(dialog))

    def save_json(self, dialog: ParsedDialog, path: str | Path) -> None:
        """Save a parsed dialogue as JSON."""
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(dialog), f, indent=2)


def compile_dialog_file(input_path: str | Path, output_path: Optional[str | Path] = None) -> Path:
    """
    Compile a dialogue script to JSON.

    Args:
        input_path: Path to .dialog file
        output_path: Path to output .json file (default: same name with .json)

    Returns:
        The written path
    """
    input_path = Path(input_path)
    output_path = input_path.with_suffix('.json') if output_path is None else Path(output_path)

    parser = DialogParser()
    dialog = parser.parse_file(input_path)
    parser.save_json(dialog, output_path)
    logger.info(f"Compiled {input_path} -> {output_path}")
    return output_path
