import logging
import os

from clang.cindex import CursorKind, Diagnostic

from syntax_node import CONDITION_ROLE, NodeKind, Position, SyntaxNode


logger = logging.getLogger(__name__)

_BRANCH_KINDS = {
    CursorKind.IF_STMT: (NodeKind.IF_BRANCH, False),
    CursorKind.WHILE_STMT: (NodeKind.WHILE_LOOP, False),
    # do { ... } while (cond) tests its condition after the body, like a
    # statement-suffix loop.
    CursorKind.DO_STMT: (NodeKind.WHILE_LOOP, True),
}

_ASSIGNMENT_OPS = {"="}
_COMPARISON_OPS = {"==", "!=", "<", ">", "<=", ">="}
_OPERATORS = _ASSIGNMENT_OPS | _COMPARISON_OPS | {
    "&&", "||", "+", "-", "*", "/", "%", "&", "|", "^", "<<", ">>",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=", ",",
}

_CXX_OPERATOR_CALL = getattr(CursorKind, "CXX_OPERATOR_CALL_EXPR", None)


def _tokens(cursor):
    return [t.spelling for t in cursor.get_tokens()]


def _cursor_file(cursor):
    return cursor.location.file.name if cursor.location.file else None


def _binary_operator(cursor, operands):
    tokens = _tokens(cursor)
    if not tokens:
        return None

    if len(operands) >= 2:
        left_tokens = _tokens(operands[0])
        right_tokens = _tokens(operands[1])

        middle = list(tokens)
        if left_tokens and middle[: len(left_tokens)] == left_tokens:
            middle = middle[len(left_tokens) :]
        if right_tokens and len(middle) >= len(right_tokens) and middle[-len(right_tokens) :] == right_tokens:
            middle = middle[: -len(right_tokens)]

        for tok in middle:
            if tok in _OPERATORS:
                return tok

    for tok in tokens:
        if tok in _OPERATORS:
            return tok
    return None


def _cxx_operator_operands(children):
    operands = []
    for child in children:
        if child.kind == CursorKind.OVERLOADED_DECL_REF:
            continue
        if child.kind == CursorKind.DECL_REF_EXPR and (child.spelling or "").startswith("operator"):
            continue
        operands.append(child)
    return operands[-2:]


def _condition_index(kind, children):
    if not children:
        return None
    if kind == CursorKind.DO_STMT:
        return len(children) - 1

    for i, child in enumerate(children):
        # if (int x = f()) declares its condition
        if child.kind == CursorKind.VAR_DECL:
            return i
        if child.kind.is_expression():
            return i
    return None


class _TreeBuilder:
    def __init__(self, target_file=None):
        self.target_file = target_file
        self._realpath_cache = {}

    def _in_target(self, cursor):
        if not self.target_file:
            return True
        cursor_file = _cursor_file(cursor)
        if not cursor_file:
            return True
        cached = self._realpath_cache.get(cursor_file)
        if cached is None:
            cached = os.path.realpath(cursor_file)
            self._realpath_cache[cursor_file] = cached
        return cached == self.target_file

    def _children(self, cursor):
        return [c for c in cursor.get_children() if self._in_target(c)]

    def _position(self, cursor):
        loc = cursor.location
        if not loc or not loc.line:
            return None
        return Position(loc.line, loc.column, _cursor_file(cursor))

    def convert(self, cursor, role=None):
        kind = cursor.kind
        children = self._children(cursor)

        # Implicit casts and other transparent wrappers.
        if kind == CursorKind.UNEXPOSED_EXPR and len(children) == 1:
            return self.convert(children[0], role)

        if kind in _BRANCH_KINDS:
            return self._convert_branch(cursor, children, role)

        if kind == CursorKind.PAREN_EXPR:
            return self._node(NodeKind.PARENTHESIZED, cursor, children, role)

        if kind == CursorKind.BINARY_OPERATOR:
            return self._convert_operator(cursor, children, children, role)

        if _CXX_OPERATOR_CALL is not None and kind == _CXX_OPERATOR_CALL:
            operands = _cxx_operator_operands(children)
            return self._convert_operator(cursor, children, operands, role)

        return self._node(NodeKind.OTHER, cursor, children, role)

    def _node(self, node_kind, cursor, children, role, modifier=False, text=None):
        return SyntaxNode(
            kind=node_kind,
            children=tuple(self.convert(c) for c in children),
            position=self._position(cursor),
            role=role,
            modifier=modifier,
            text=text,
        )

    def _convert_operator(self, cursor, children, operands, role):
        if cursor.kind == CursorKind.BINARY_OPERATOR:
            op = _binary_operator(cursor, operands)
        else:
            spelling = cursor.spelling or ""
            op = spelling[len("operator") :] if spelling.startswith("operator") else None

        if op in _ASSIGNMENT_OPS:
            node_kind = NodeKind.ASSIGNMENT
        elif op in _COMPARISON_OPS:
            node_kind = NodeKind.COMPARISON
        else:
            return self._node(NodeKind.OTHER, cursor, children, role)

        return self._node(node_kind, cursor, operands, role, text=" ".join(_tokens(cursor)))

    def _convert_branch(self, cursor, children, role):
        node_kind, modifier = _BRANCH_KINDS[cursor.kind]
        index = _condition_index(cursor.kind, children)
        if index is None:
            logger.debug("no condition found for %s on line %s", cursor.kind, cursor.location.line)
            return self._node(NodeKind.OTHER, cursor, children, role)

        converted = tuple(
            self.convert(c, CONDITION_ROLE if i == index else None)
            for i, c in enumerate(children)
        )
        return SyntaxNode(
            kind=node_kind,
            children=converted,
            position=self._position(cursor),
            role=role,
            modifier=modifier,
        )


def build_tree(cursor, target_file=None):
    """
    Convert a libclang cursor (usually translation_unit.cursor) into a
    SyntaxNode tree. Cursors outside target_file are left out.
    """
    if target_file:
        target_file = os.path.realpath(target_file)
    return _TreeBuilder(target_file).convert(cursor)


def diagnostic_items(translation_unit, target_file):
    severity_map = {
        Diagnostic.Ignored: "info",
        Diagnostic.Note: "info",
        Diagnostic.Warning: "warning",
        Diagnostic.Error: "error",
        Diagnostic.Fatal: "error",
    }
    target_file = os.path.realpath(target_file)
    items = []

    for diag in translation_unit.diagnostics:
        loc = diag.location
        loc_file = loc.file.name if loc and loc.file else None
        if loc_file and os.path.realpath(loc_file) != target_file:
            continue

        items.append(
            {
                "severity": severity_map.get(diag.severity, "info"),
                "source": "clang",
                "rule": None,
                "line": loc.line if loc else None,
                "column": loc.column if loc else None,
                "message": diag.spelling,
            }
        )

    return items


def has_blocking_errors(items):
    return any(item.get("severity") == "error" for item in items)
