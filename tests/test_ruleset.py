"""
Rule set registry tests

Duplicate rejection, explicit override, sealing, pass-through declarations
and coverage of the two built-in targets.
"""

import pytest

from vaultpress.lib.ruleset import RuleSet, Target, ruleSet_build
from vaultpress.models.node import Node, NodeKind
from vaultpress.models.rule import BuildError, Rule


def rule_make(name, kind, predicate=None):
    return Rule(name=name, description=f"{name} rule", kind=kind,
                transform=lambda node, context: node, predicate=predicate)


class TestRegistration:
    """One rule per kind"""

    def test_register_and_get(self):
        ruleset = RuleSet("test")
        rule = rule_make("image", NodeKind.IMAGE)
        ruleset.register(rule)
        assert ruleset.get(NodeKind.IMAGE) is rule
        assert NodeKind.IMAGE in ruleset
        assert len(ruleset) == 1

    def test_duplicate_rejected(self):
        ruleset = RuleSet("test")
        ruleset.register(rule_make("first", NodeKind.CODE_BLOCK))
        with pytest.raises(BuildError, match="first"):
            ruleset.register(rule_make("second", NodeKind.CODE_BLOCK))
        assert ruleset.get(NodeKind.CODE_BLOCK).name == "first"

    def test_explicit_replace(self):
        ruleset = RuleSet("test")
        ruleset.register(rule_make("first", NodeKind.CODE_BLOCK))
        ruleset.register(rule_make("second", NodeKind.CODE_BLOCK), replace=True)
        assert ruleset.get(NodeKind.CODE_BLOCK).name == "second"

    def test_sealed_set_rejects(self):
        ruleset = RuleSet("test").seal()
        with pytest.raises(BuildError, match="sealed"):
            ruleset.register(rule_make("late", NodeKind.TEXT))

    def test_passthrough_kind_rejects_rule(self):
        ruleset = RuleSet("test", passthrough=[NodeKind.TEXT])
        with pytest.raises(BuildError, match="pass-through"):
            ruleset.register(rule_make("text", NodeKind.TEXT))


class TestLookup:
    """rule_find and unhandled-kind reporting"""

    def test_predicate_miss_returns_none(self):
        ruleset = RuleSet("test")
        ruleset.register(rule_make("mermaid", NodeKind.CODE_BLOCK,
                                   predicate=lambda n: n.attr("lang") == "mermaid"))
        assert ruleset.rule_find(Node(NodeKind.CODE_BLOCK, attributes={"lang": "mermaid"})) is not None
        assert ruleset.rule_find(Node(NodeKind.CODE_BLOCK, attributes={"lang": "c"})) is None

    def test_kinds_unhandled(self):
        ruleset = RuleSet("test", passthrough=[NodeKind.TEXT])
        ruleset.register(rule_make("paragraph", NodeKind.PARAGRAPH))
        tree = Node(NodeKind.DOCUMENT, children=[
            Node(NodeKind.PARAGRAPH, children=[Node.text("a"), Node(NodeKind.IMAGE)]),
            Node.fragment([Node.text("b")]),
        ])
        assert ruleset.kinds_unhandled(tree) == {NodeKind.DOCUMENT, NodeKind.IMAGE}


class TestBuiltinTargets:
    """The Hugo and WeChat sets"""

    @pytest.mark.parametrize("target", list(Target))
    def test_built_once_and_sealed(self, target):
        ruleset = ruleSet_build(target)
        assert ruleset is ruleSet_build(target)
        assert ruleset.sealed
        assert ruleset.target == target.value

    @pytest.mark.parametrize("target", list(Target))
    def test_every_kind_is_ruled_or_declared(self, target):
        ruleset = ruleSet_build(target)
        for kind in NodeKind:
            if kind is NodeKind.NOP:
                continue
            assert kind in ruleset or ruleset.passthrough_is(kind), kind

    def test_hugo_passthrough_leaves(self):
        ruleset = ruleSet_build(Target.HUGO_BLOWFISH)
        for kind in (NodeKind.TEXT, NodeKind.INLINE_CODE, NodeKind.HTML_BLOCK, NodeKind.FOOTNOTE_REF):
            assert ruleset.passthrough_is(kind)

    def test_wechat_passthrough_is_raw_html_only(self):
        ruleset = ruleSet_build(Target.WECHAT_POST)
        assert ruleset.passthrough == frozenset({NodeKind.HTML_BLOCK, NodeKind.HTML_INLINE})
