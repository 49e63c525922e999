import json
import logging
import os
import re

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = os.path.join(os.path.dirname(__file__), "rules.json")

# {NAME} refers to an entry of "classes"; {2} and friends stay quantifiers
PLACEHOLDER = re.compile(r"\{([A-Za-z_]\w*)\}")

# classes may refer to other classes, e.g. STRONG -> S1
MAX_CLASS_DEPTH = 4

# upper bound on passes of a "repeat" rule
MAX_REPEAT = 16


class RuleError(ValueError):
    """A repair rule could not be loaded or compiled."""


def load_rules(path=None):
    """
    Read a rule file and return its rules with every {CLASS} placeholder
    expanded. Rules keep the order of the file; sorting is the engine's job.
    """
    path = path or DEFAULT_RULES_PATH
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    classes = data.get("classes", {})
    rules = []
    for rule in data.get("rules", []):
        rule = dict(rule)
        if "pattern" not in rule:
            rules.append(rule)
            continue
        try:
            rule["pattern"] = expand_classes(rule["pattern"], classes)
        except RuleError as e:
            logger.error("Rule '%s': %s", rule.get("name"), e)
            raise RuleError(f"Rule '{rule.get('name')}': {e}") from e
        rules.append(rule)
    return rules


def expand_classes(pattern, classes, depth=0):
    if depth > MAX_CLASS_DEPTH:
        raise RuleError("class references nest too deep (circular reference?)")

    def replace(m):
        name = m.group(1)
        if name not in classes:
            raise RuleError(f"unknown class {name}")
        return expand_classes(classes[name], classes, depth + 1)

    return PLACEHOLDER.sub(replace, pattern)


class RepairRuleEngine:
    def __init__(self, rules=None):
        """
        Initialize the repair chain.
        :param rules: list of rule dicts (name, pattern, replacement, priority,
                      optional repeat).
                      Defaults to the packaged rules.json.
        """
        if rules is None:
            rules = load_rules()
        self.rules = self._compile_rules(rules)
        logger.debug("Compiled %d repair rules: %s", len(self.rules), ", ".join(self.names))

    def _compile_rules(self, rules):
        # Sort by priority desc; equal priorities keep the given order
        rules = sorted(rules, key=lambda x: x.get("priority", 0), reverse=True)

        compiled_rules = []
        for rule in rules:
            name = rule.get("name", "<unnamed>")
            if "pattern" not in rule or "replacement" not in rule:
                logger.error("Rule '%s' needs both a pattern and a replacement", name)
                raise RuleError(f"Rule '{name}' needs both a pattern and a replacement")
            try:
                regex_obj = re.compile(rule["pattern"])
            except re.error as e:
                logger.error("Error compiling regex for rule '%s': %s", name, e)
                raise RuleError(f"Rule '{name}' has an invalid pattern: {e}") from e
            compiled_rules.append((name, regex_obj, rule["replacement"], bool(rule.get("repeat"))))

        return tuple(compiled_rules)

    @property
    def names(self):
        return [name for name, _, _, _ in self.rules]

    def apply_rules(self, text):
        """
        Run every rule over the text, in order. Each rule replaces all
        non-overlapping matches and feeds its output to the next one.
        A rule marked "repeat" runs again until the text stops changing.
        """
        for name, regex_obj, replacement, repeat in self.rules:
            text = regex_obj.sub(replacement, text)
            if not repeat:
                continue
            for _ in range(MAX_REPEAT):
                new_text = regex_obj.sub(replacement, text)
                if new_text == text:
                    break
                text = new_text
            else:
                logger.warning("Rule '%s' did not settle after %d passes", name, MAX_REPEAT)
        return text

    def __call__(self, text):
        return self.apply_rules(text)
