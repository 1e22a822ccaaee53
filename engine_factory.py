from rule_engine import RuleEngine

from assignment_in_condition_rule import AssignmentInConditionRule
from rule_config import RuleConfig


def build_engine(config=None):
    if config is None:
        config = RuleConfig()
    elif isinstance(config, dict):
        config = RuleConfig.from_dict(config)

    return RuleEngine([AssignmentInConditionRule(config)])


def analyze(root, config=None):
    return build_engine(config).run(root)
