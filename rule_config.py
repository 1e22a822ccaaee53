import logging
from dataclasses import dataclass

import yaml


logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    pass


_KEY_ALIASES = {
    "flagBareAssignment": "flag_bare_assignment",
    "flag_bare_assignment": "flag_bare_assignment",
}


@dataclass(frozen=True)
class RuleConfig:
    """
    Settings for the assignment-in-condition rule.

    flag_bare_assignment: when False the rule is switched off entirely.
    """

    flag_bare_assignment: bool = True

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}.")

        values = {}
        for key, value in data.items():
            attr = _KEY_ALIASES.get(key)
            if attr is None:
                logger.warning("Ignoring unknown configuration key '%s'", key)
                continue
            if not isinstance(value, bool):
                raise ConfigError(f"'{key}' must be true or false, got {value!r}.")
            values[attr] = value

        return cls(**values)

    @classmethod
    def from_yaml(cls, file_path):
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except (yaml.YAMLError, UnicodeDecodeError) as exc:
                raise ConfigError(f"Could not read configuration from {file_path}: {exc}") from exc

        config = cls.from_dict(data)
        logger.info("Configuration loaded from %s", file_path)
        return config
