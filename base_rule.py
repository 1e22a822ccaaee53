class BaseRule:
    rule_id = None

    def matches(self, site):
        raise NotImplementedError("matches() must be implemented")

    def apply(self, site):
        raise NotImplementedError("apply() must be implemented")

    def finalize(self):
        """
        Optional hook for rules that need to report after every site was seen.
        """
        return []
