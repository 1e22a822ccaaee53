from enum import Enum

from syntax_node import NodeKind


class ConditionClass(Enum):
    PLAIN_ASSIGNMENT = "plain_assignment"
    PARENTHESIZED_ASSIGNMENT = "parenthesized_assignment"
    ASSIGNMENT_IN_COMPARISON = "assignment_in_comparison"
    MULTIPLE_ASSIGNMENT = "multiple_assignment"
    UNRELATED = "unrelated"


_ASSIGNMENT_KINDS = {NodeKind.ASSIGNMENT, NodeKind.MULTIPLE_ASSIGNMENT}


def _unwrap_parens(node):
    cur = node
    while cur.kind == NodeKind.PARENTHESIZED and len(cur.children) == 1:
        cur = cur.children[0]
    return cur


def _is_assignment_operand(node):
    return _unwrap_parens(node).kind == NodeKind.ASSIGNMENT


def classify_condition(node):
    """
    Classify the top-level form of a condition expression.

    Only the outermost node is inspected, plus the operands of a
    comparison. A parenthesized operand of a comparison still counts as
    an assignment in comparison; parentheses only make a whole-condition
    assignment explicit.
    """
    kind = node.kind

    if kind == NodeKind.PARENTHESIZED:
        if len(node.children) == 1 and node.children[0].kind in _ASSIGNMENT_KINDS:
            return ConditionClass.PARENTHESIZED_ASSIGNMENT
        return ConditionClass.UNRELATED

    if kind == NodeKind.ASSIGNMENT:
        return ConditionClass.PLAIN_ASSIGNMENT

    if kind == NodeKind.MULTIPLE_ASSIGNMENT:
        return ConditionClass.MULTIPLE_ASSIGNMENT

    if kind == NodeKind.COMPARISON:
        if any(_is_assignment_operand(operand) for operand in node.children[:2]):
            return ConditionClass.ASSIGNMENT_IN_COMPARISON

    return ConditionClass.UNRELATED
