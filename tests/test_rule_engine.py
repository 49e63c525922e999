import json

import pytest
from khmer_normalizer.rule_engine import RepairRuleEngine, RuleError, load_rules

RULE_ORDER = [
    "invisible_run_collapse",
    "compound_vowel_oe",
    "compound_vowel_au",
    "compound_vowel_u_oe",
    "subscript_reorder_strong",
    "subscript_reorder_weak",
    "coeng_ro_last",
    "coeng_da_to_ta",
]


@pytest.fixture(scope="module")
def engine():
    return RepairRuleEngine()


def only(*names):
    """Engine made of the named packaged rules, in chain order."""
    return RepairRuleEngine([r for r in load_rules() if r["name"] in names])


def test_packaged_chain_order(engine):
    assert engine.names == RULE_ORDER


def test_placeholders_are_expanded():
    for rule in load_rules():
        assert "{" not in rule["pattern"], rule["name"]


class TestInvisibleRunCollapse:
    def test_two_joiners(self, engine):
        assert engine.apply_rules("\u200d\u200d") == "\u200d"

    def test_mixed_marks_keep_leading(self, engine):
        assert engine.apply_rules("\u200c\u200d\u17d2") == "\u200c"

    def test_coeng_joiner_kept_as_pair(self, engine):
        assert engine.apply_rules("\u17d2\u200d\u200d") == "\u17d2\u200d"

    def test_single_mark_untouched(self, engine):
        assert engine.apply_rules("\u1780\u200c") == "\u1780\u200c"


class TestCompoundVowels:
    def test_e_ii_to_oe(self, engine):
        assert engine.apply_rules("\u17c1\u17b8") == "\u17be"

    def test_e_ii_keeps_below_vowel(self, engine):
        assert engine.apply_rules("\u17c1\u17bc\u17b8") == "\u17be\u17bc"

    def test_e_aa_to_au(self, engine):
        assert engine.apply_rules("\u17c1\u17b6") == "\u17c4"

    def test_e_aa_keeps_u(self, engine):
        assert engine.apply_rules("\u17c1\u17bb\u17b6") == "\u17c4\u17bb"

    def test_oe_u_swaps(self, engine):
        assert engine.apply_rules("\u17be\u17bb") == "\u17bb\u17be"


class TestSubscriptReorder:
    def test_strong_cluster(self, engine):
        # KA + coeng KA + U + I
        text = "\u1780\u17d2\u1780\u17bb\u17b7"
        assert engine.apply_rules(text) == "\u1780\u17d2\u1780\u17b7\u17bb"

    def test_strong_cluster_aa_nikahit(self, engine):
        assert engine.apply_rules("\u1780\u17bb\u17b6\u17c6") == "\u1780\u17b6\u17c6\u17bb"

    def test_strong_cluster_samyok_sannya(self, engine):
        assert engine.apply_rules("\u1780\u17bb\u17d0") == "\u1780\u17d0\u17bb"

    def test_aa_alone_is_not_an_upper_sign(self, engine):
        assert engine.apply_rules("\u1780\u17bb\u17b6") == "\u1780\u17bb\u17b6"

    def test_series_two_base_is_weak(self):
        text = "\u1798\u17bb\u17b7"  # MO + U + I
        assert only("subscript_reorder_strong").apply_rules(text) == text
        assert only("subscript_reorder_weak").apply_rules(text) == "\u1798\u17b7\u17bb"

    def test_ba_is_weak(self):
        text = "\u1794\u17bb\u17b7"  # BA + U + I
        assert only("subscript_reorder_strong").apply_rules(text) == text
        assert only("subscript_reorder_weak").apply_rules(text) == "\u1794\u17b7\u17bb"

    def test_series_one_base_is_strong(self):
        text = "\u1781\u17bb\u17b7"  # KHA + U + I
        assert only("subscript_reorder_strong").apply_rules(text) == "\u1781\u17b7\u17bb"

    def test_nyo_is_neither_series_one_nor_two(self):
        text = "\u1789\u17d2\u1789\u17bb\u17b7"  # NYO + coeng NYO + U + I
        assert only("subscript_reorder_strong").apply_rules(text) == text

    def test_two_layer_series_one_stack(self):
        # SA + coeng TA + coeng KA is a series 1 stack
        text = "\u179f\u17d2\u178f\u17d2\u1780\u17bb\u17b7"
        assert only("subscript_reorder_strong").apply_rules(text) == "\u179f\u17d2\u178f\u17d2\u1780\u17b7\u17bb"


class TestCoengFixes:
    def test_coeng_ro_goes_last(self, engine):
        assert engine.apply_rules("\u17d2\u179a\u17d2\u178f") == "\u17d2\u178f\u17d2\u179a"

    def test_coeng_ro_goes_after_whole_stack(self, engine):
        text = "\u17d2\u179a\u17d2\u1780\u17d2\u1781"
        assert engine.apply_rules(text) == "\u17d2\u1780\u17d2\u1781\u17d2\u179a"

    def test_two_coeng_ro_both_go_last(self, engine):
        text = "\u17d2\u179a\u17d2\u1780\u17d2\u179a\u17d2\u1781"
        result = engine.apply_rules(text)
        assert result == "\u17d2\u1780\u17d2\u1781\u17d2\u179a\u17d2\u179a"
        assert engine.apply_rules(result) == result

    def test_coeng_ro_alone_untouched(self, engine):
        assert engine.apply_rules("\u1780\u17d2\u179a") == "\u1780\u17d2\u179a"

    def test_coeng_da_to_ta(self, engine):
        assert engine.apply_rules("\u1780\u17d2\u178a") == "\u1780\u17d2\u178f"

    def test_plain_da_untouched(self, engine):
        assert engine.apply_rules("\u178a\u17b6") == "\u178a\u17b6"


class TestRuleOrder:
    OE = {"name": "oe", "pattern": "\u17c1([\u17bb-\u17bd]?)\u17b8", "replacement": "\u17be\\1"}
    U_OE = {"name": "u_oe", "pattern": "(\u17be)(\u17bb)", "replacement": "\\2\\1"}

    def test_compound_then_swap_is_not_commutative(self):
        forward = RepairRuleEngine([dict(self.OE, priority=2), dict(self.U_OE, priority=1)])
        backward = RepairRuleEngine([dict(self.OE, priority=1), dict(self.U_OE, priority=2)])
        text = "\u17c1\u17bb\u17b8"
        assert forward.apply_rules(text) == "\u17bb\u17be"
        assert backward.apply_rules(text) == "\u17be\u17bb"

    def test_reversed_chain_differs(self, engine):
        rules = load_rules()
        for priority, rule in enumerate(rules):
            rule["priority"] = priority
        reversed_engine = RepairRuleEngine(rules)
        assert reversed_engine.names == RULE_ORDER[::-1]

        # the subscript rule puts OE back in front of U only when it runs after the swap
        text = "\u1780\u17be\u17bb"
        assert engine.apply_rules(text) == "\u1780\u17be\u17bb"
        assert reversed_engine.apply_rules(text) == "\u1780\u17bb\u17be"

    def test_equal_priorities_keep_given_order(self):
        rules = [
            {"name": "b", "pattern": "a", "replacement": "b"},
            {"name": "c", "pattern": "b", "replacement": "c"},
        ]
        assert RepairRuleEngine(rules).apply_rules("a") == "c"
        assert RepairRuleEngine(rules[::-1]).apply_rules("a") == "b"


class TestRuleErrors:
    def test_invalid_pattern(self):
        with pytest.raises(RuleError, match="broken"):
            RepairRuleEngine([{"name": "broken", "pattern": "(", "replacement": ""}])

    def test_missing_replacement(self):
        with pytest.raises(RuleError):
            RepairRuleEngine([{"name": "half", "pattern": "a"}])

    def test_unknown_class(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "classes": {},
            "rules": [{"name": "x", "pattern": "{NOPE}", "replacement": ""}],
        }), encoding="utf-8")
        with pytest.raises(RuleError, match="NOPE"):
            load_rules(str(path))

    def test_circular_classes(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "classes": {"A": "{B}", "B": "{A}"},
            "rules": [{"name": "loop", "pattern": "{A}", "replacement": ""}],
        }), encoding="utf-8")
        with pytest.raises(RuleError):
            load_rules(str(path))

    def test_quantifiers_are_not_classes(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({
            "classes": {"K": "[\u1780-\u1781]"},
            "rules": [{"name": "two", "pattern": "{K}{2}", "replacement": "x"}],
        }), encoding="utf-8")
        rules = load_rules(str(path))
        assert rules[0]["pattern"] == "[\u1780-\u1781]{2}"
        assert RepairRuleEngine(rules).apply_rules("\u1780\u1781\u1780") == "x\u1780"


class TestRepeat:
    def test_repeat_runs_until_settled(self):
        rule = {"name": "sink", "pattern": "ba", "replacement": "ab"}
        assert RepairRuleEngine([rule]).apply_rules("bba") == "bab"
        assert RepairRuleEngine([dict(rule, repeat=True)]).apply_rules("bba") == "abb"

    def test_coeng_ro_rule_repeats(self):
        rule = [r for r in load_rules() if r["name"] == "coeng_ro_last"][0]
        assert rule["repeat"] is True


def test_empty_chain_is_identity():
    assert RepairRuleEngine([]).apply_rules("\u1780\u17d2\u178a") == "\u1780\u17d2\u178a"
