from dataclasses import dataclass
from enum import Enum
from typing import Optional

from syntax_node import Position


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_TEXT_PREFIX = {
    Severity.ERROR: "[ERROR]",
    Severity.WARNING: "[WARN]",
    Severity.INFO: "[INFO]",
}

@dataclass(frozen=True)
class Finding:
    position: Optional[Position]
    rule_id: str
    message: str
    severity: Severity = Severity.WARNING

    def to_dict(self):
        position = self.position
        return {
            "severity": self.severity.value,
            "source": "rule",
            "rule": self.rule_id,
            "line": position.line if position else None,
            "column": position.column if position else None,
            "message": self.message,
        }

    def __str__(self):
        prefix = _TEXT_PREFIX[self.severity]
        if self.position is None:
            return f"{prefix} {self.message}"
        return f"{prefix} {self.message} (line {self.position.line}, column {self.position.column})"
