import logging

from condition_extractor import ConditionExtractor


logger = logging.getLogger(__name__)


class RuleEngine:
    """
    Applies a collection of rules to the condition sites of a tree
    and collects their findings in site order.
    """

    def __init__(self, rules):
        self.rules = rules

    def evaluate(self, sites):
        findings = []

        for site in sites:
            for rule in self.rules:
                # Check if the rule applies to this site
                if rule.matches(site):
                    result = rule.apply(site)

                    # Only keep actual findings
                    if result is not None:
                        findings.append(result)

        for rule in self.rules:
            findings.extend(rule.finalize() or [])

        logger.debug("%d finding(s) from %d rule(s)", len(findings), len(self.rules))
        return findings

    def run(self, root):
        return self.evaluate(ConditionExtractor(root))
