"""
Rule set registry

Maps node kinds to Rules for one export target. Each target builds its set
once, seals it, and shares it read-only across every run.
"""

from enum import Enum
from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from ..models.node import Node, NodeKind, tree_walk
from ..models.rule import BuildError, Rule


class Target(Enum):
    """Supported output formats"""
    HUGO_BLOWFISH = "hugo-blowfish"    # static-site shortcode text
    WECHAT_POST = "wechat-post"        # self-contained inline HTML


class RuleSet:
    """
    Registry of the rules of one output target

    Exactly one rule may be registered per node kind. A second registration
    for the same kind is rejected unless the caller passes replace=True.

    Kinds with no rule pass through the executor unchanged. The kinds a
    target leaves untouched on purpose are declared in `passthrough`; any
    other unmatched kind is reported as a likely gap in the set.
    """

    def __init__(self, target: str, passthrough: Iterable[NodeKind] = ()) -> None:
        self.target = target
        self.rules: Dict[NodeKind, Rule] = {}
        self.passthrough: FrozenSet[NodeKind] = frozenset(passthrough)
        self.sealed = False

    def register(self, rule: Rule, replace: bool = False) -> None:
        """
        Register a rule for its kind

        Args:
            rule: Rule to add
            replace: Explicitly override an existing rule for the same kind

        Raises:
            BuildError: Set is sealed, or the kind already has a rule and
                        replace is False
        """
        if self.sealed:
            raise BuildError(f"Rule set '{self.target}' is sealed; cannot register '{rule.name}'")
        existing = self.rules.get(rule.kind)
        if existing is not None and not replace:
            raise BuildError(
                f"Rule set '{self.target}' already has rule '{existing.name}' for "
                f"{rule.kind.value}; refusing '{rule.name}' (pass replace=True to override)"
            )
        if rule.kind in self.passthrough:
            raise BuildError(
                f"Rule set '{self.target}' declares {rule.kind.value} as pass-through; "
                f"cannot register '{rule.name}' for it"
            )
        self.rules[rule.kind] = rule

    def seal(self) -> 'RuleSet':
        """Make the set read-only"""
        self.sealed = True
        return self

    def get(self, kind: NodeKind) -> Optional[Rule]:
        """Rule registered for a kind, or None"""
        return self.rules.get(kind)

    def rule_find(self, node: Node) -> Optional[Rule]:
        """Rule that applies to a node, or None"""
        rule = self.rules.get(node.kind)
        if rule is not None and rule.matches(node):
            return rule
        return None

    def passthrough_is(self, kind: NodeKind) -> bool:
        return kind in self.passthrough

    def kinds_unhandled(self, root: Node) -> Set[NodeKind]:
        """
        Kinds in a tree that have neither a rule nor a pass-through declaration

        Fragments are ignored; they are flattened away before output.
        """
        return {
            node.kind for node in tree_walk(root)
            if not node.is_fragment
            and node.kind not in self.rules
            and node.kind not in self.passthrough
        }

    def rules_list(self) -> List[Rule]:
        return list(self.rules.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self.rules

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"RuleSet(target='{self.target}', rules={len(self.rules)}, sealed={self.sealed})"


@lru_cache(maxsize=None)
def ruleSet_build(target: Target) -> RuleSet:
    """
    Sealed rule set for a target, built once per process

    Args:
        target: Output format

    Returns:
        Shared, read-only RuleSet
    """
    from .shortcode import HugoBlowfishRuleSet
    from .inline_html import WechatPostRuleSet

    if target is Target.HUGO_BLOWFISH:
        return HugoBlowfishRuleSet().seal()
    if target is Target.WECHAT_POST:
        return WechatPostRuleSet().seal()
    raise ValueError(f"Unknown target: {target!r}")
