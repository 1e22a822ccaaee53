from assignment_classifier import ConditionClass, classify_condition
from base_rule import BaseRule
from finding import Finding, Severity
from rule_config import RuleConfig


class AssignmentInConditionRule(BaseRule):
    """
    Warns when a branch or loop condition is a bare assignment.

    `if v = fetch()` is flagged; `if (v = fetch())` states the intent
    explicitly and is accepted, as are multiple assignments. Assignments
    inside a comparison are left to other rules.
    """

    rule_id = "assignment-in-condition"
    message = "assignment in condition clause should be wrapped for clarity"

    def __init__(self, config=None):
        self.config = config or RuleConfig()

    def matches(self, site):
        return self.config.flag_bare_assignment

    def apply(self, site):
        if classify_condition(site.node) != ConditionClass.PLAIN_ASSIGNMENT:
            return None

        return Finding(
            position=site.position,
            rule_id=self.rule_id,
            message=self.message,
            severity=Severity.WARNING,
        )
