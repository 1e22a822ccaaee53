from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class MalformedTreeError(ValueError):
    pass


class NodeKind(Enum):
    IF_BRANCH = "if"
    UNLESS_BRANCH = "unless"
    WHILE_LOOP = "while"
    UNTIL_LOOP = "until"
    ASSIGNMENT = "assignment"
    MULTIPLE_ASSIGNMENT = "multiple_assignment"
    COMPARISON = "comparison"
    PARENTHESIZED = "parenthesized"
    OTHER = "other"


BRANCH_KINDS = frozenset(
    {
        NodeKind.IF_BRANCH,
        NodeKind.UNLESS_BRANCH,
        NodeKind.WHILE_LOOP,
        NodeKind.UNTIL_LOOP,
    }
)

CONDITION_ROLE = "condition"


@dataclass(frozen=True)
class Position:
    line: int
    column: int = 0
    file: Optional[str] = None

    def __str__(self):
        prefix = f"{self.file}:" if self.file else ""
        return f"{prefix}{self.line}:{self.column}"


@dataclass(frozen=True, eq=False)
class SyntaxNode:
    """
    Immutable node of the tree the rules inspect.

    Children are stored as a tuple and owned by their parent. The
    controlling expression of a branch or loop is the child whose role
    is "condition". Nodes compare by identity.
    """

    kind: NodeKind
    children: Tuple["SyntaxNode", ...] = field(default_factory=tuple)
    position: Optional[Position] = None
    role: Optional[str] = None
    modifier: bool = False
    text: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def line(self):
        return self.position.line if self.position else None

    @property
    def is_branch(self):
        return self.kind in BRANCH_KINDS

    def condition_children(self):
        return [c for c in self.children if c.role == CONDITION_ROLE]


def node_from_dict(data, *, file=None):
    """
    Build a SyntaxNode tree from nested mappings, e.g. a JSON dump produced
    by an external parser:

        {"kind": "if", "line": 1, "children": [
            {"kind": "assignment", "role": "condition", "line": 1, "column": 3}
        ]}
    """
    if not isinstance(data, dict):
        raise MalformedTreeError(f"Expected a mapping for a node, got {type(data).__name__}.")

    raw_kind = data.get("kind")
    if raw_kind is None:
        raise MalformedTreeError("Node is missing its 'kind'.")
    try:
        kind = NodeKind(raw_kind)
    except ValueError:
        valid = ", ".join(k.value for k in NodeKind)
        raise MalformedTreeError(f"Unknown node kind '{raw_kind}'. Valid kinds: {valid}.") from None

    raw_children = data.get("children", [])
    if not isinstance(raw_children, list):
        raise MalformedTreeError(f"'children' of a '{raw_kind}' node must be a list.")

    position = None
    line = data.get("line")
    if isinstance(line, int):
        column = data.get("column")
        position = Position(line, column if isinstance(column, int) else 0, file)

    return SyntaxNode(
        kind=kind,
        children=tuple(node_from_dict(c, file=file) for c in raw_children),
        position=position,
        role=data.get("role"),
        modifier=bool(data.get("modifier", False)),
        text=data.get("text"),
    )
