import logging
from dataclasses import dataclass

from syntax_node import MalformedTreeError, NodeKind, SyntaxNode


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ConditionSite:
    node: SyntaxNode
    construct: NodeKind
    branch: SyntaxNode
    modifier: bool = False

    @property
    def position(self):
        return self.node.position


def _condition_of(branch):
    conditions = branch.condition_children()
    if len(conditions) != 1:
        where = f" on line {branch.line}" if branch.line else ""
        raise MalformedTreeError(
            f"{branch.kind.value} construct{where} has {len(conditions)} condition children, expected exactly 1."
        )
    return conditions[0]


def iter_condition_sites(root):
    """
    Pre-order walk yielding one ConditionSite per if/unless/while/until
    construct, block and modifier forms alike.
    """
    seen = set()
    stack = [root]

    while stack:
        node = stack.pop()
        if id(node) in seen:
            raise MalformedTreeError(f"{node.kind.value} node reached twice; the tree must not share subtrees.")
        seen.add(id(node))

        if node.is_branch:
            site = ConditionSite(
                node=_condition_of(node),
                construct=node.kind,
                branch=node,
                modifier=node.modifier,
            )
            logger.debug("condition site: %s at %s", site.construct.value, site.position)
            yield site

        stack.extend(reversed(node.children))


class ConditionExtractor:
    """
    Restartable view over the condition sites of one tree: every iteration
    walks the tree again from the root.
    """

    def __init__(self, root):
        self.root = root

    def __iter__(self):
        return iter_condition_sites(self.root)
