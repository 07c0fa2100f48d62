"""
Command string parsing.

    command := kind (":" arg)*

The kind is everything before the first colon (case-insensitive).
The remainder is kept whole as `param` so handlers that expect a
nested pattern ("cam:point_id:3", "door:lock:cellar") can split it
themselves, while handlers taking a single value ("var:score+10")
read it untouched.
"""

from __future__ import annotations

from dataclasses import dataclass

DELIMITER = ":"


@dataclass(frozen=True)
class Command:
    """A parsed command string."""
    kind: str
    param: str = ""
    raw: str = ""

    @property
    def args(self) -> list[str]:
        """param split on every delimiter, each part trimmed."""
        if not self.param:
            return []
        return [part.strip() for part in self.param.split(DELIMITER)]

    def arg(self, index: int, default: str = "") -> str:
        args = self.args
        return args[index] if index < len(args) and args[index] else default

    def __str__(self) -> str:
        return self.raw or (f"{self.kind}{DELIMITER}{self.param}" if self.param else self.kind)


def parse_command(text: str | None) -> Command | None:
    """
    Split a command string on its first delimiter.

    Returns:
        The Command, or None for blank input
    """
    if text is None:
        return None

    raw = text.strip()
    if not raw:
        return None

    kind, sep, param = raw.partition(DELIMITER)
    return Command(kind=kind.strip().lower(), param=param.strip() if sep else "", raw=raw)
