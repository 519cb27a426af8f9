import json
import os
from typing import List, Optional

import structlog

from metric_translator.errors import ConfigError
from metric_translator.models.rules import Rule
from metric_translator.translator.validation import coerce_rules, validate_translation_rules
from metric_translator.utils.json_path import PathNotFound, find_first

logger = structlog.get_logger(__name__)

DEFAULT_RULES_PATH = "config.rules.json"
DEFAULT_RULES_SELECTOR = "$"


def rules_path_from_env() -> str:
    return os.getenv("TRANSLATION_RULES_PATH", DEFAULT_RULES_PATH)


def rules_selector_from_env() -> str:
    return os.getenv("TRANSLATION_RULES_SELECTOR", DEFAULT_RULES_SELECTOR)


def load_json(path: str):
    try:
        with open(path, "r") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON in configuration file {path}: {e}") from e


def load_rules(path: Optional[str] = None, selector: Optional[str] = None) -> List[Rule]:
    """Load and validate translation rules from a JSON file.

    selector is a JSONPath picking the rule list out of a larger document,
    e.g. "$.exporters.signalfx.translation_rules". "$" means the whole
    document is the list.
    """
    path = path or rules_path_from_env()
    selector = selector or rules_selector_from_env()

    doc = load_json(path)
    try:
        raw_rules = doc if selector == "$" else find_first(doc, selector)
    except PathNotFound as e:
        raise ConfigError(f"no translation rules in {path}: {e}") from e
    if not isinstance(raw_rules, list):
        raise ConfigError(f"translation rules in {path} must be a list, got {type(raw_rules).__name__}")

    rules = coerce_rules(raw_rules)
    validate_translation_rules(rules)
    logger.info(f"Loaded {len(rules)} translation rules from {path}")
    return rules
