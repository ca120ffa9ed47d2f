"""
Rule records and their builder

A Rule pairs one node-kind matcher with one transform. Rules are built
once at startup, validated eagerly, and never change afterwards. The
RuleSet registry (lib.ruleset) groups them per export target.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union, TYPE_CHECKING

from .node import Node, NodeKind

if TYPE_CHECKING:
    from .context import ExportContext


TransformResult = Union[Node, Awaitable[Node]]
Transform = Callable[[Node, 'ExportContext'], TransformResult]
Predicate = Callable[[Node], bool]


class BuildError(Exception):
    """Raised when a Rule or RuleSet is malformed at construction time"""
    pass


@dataclass(frozen=True)
class Rule:
    """
    Named, single-kind transformation unit

    Attributes:
        name: Human-readable label, used in logs and error reports
        description: What the rule produces
        kind: Node kind this rule is registered for
        transform: (node, context) -> Node, sync or async. May return a
                   Nop fragment to replace the node with several nodes.
        predicate: Optional extra test on top of kind equality
    """
    name: str
    description: str
    kind: NodeKind
    transform: Transform
    predicate: Optional[Predicate] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise BuildError("Rule is missing a name")
        if not self.description:
            raise BuildError(f"Rule '{self.name}' is missing a description")
        if not isinstance(self.kind, NodeKind):
            raise BuildError(f"Rule '{self.name}' is missing a node kind matcher")
        if not callable(self.transform):
            raise BuildError(f"Rule '{self.name}' is missing a transform")

    def matches(self, node: Node) -> bool:
        """Check whether this rule applies to a node"""
        if node.kind is not self.kind:
            return False
        if self.predicate is not None:
            return bool(self.predicate(node))
        return True


class RuleBuilder:
    """
    Step-by-step Rule construction

    Steps must be taken in order: name (constructor), description, kind
    matcher, transform. Skipping ahead, setting a step twice, or building
    with a step missing raises BuildError.

    Example:
        rule = (
            RuleBuilder('mermaid')
            .description_set('Render mermaid blocks as shortcodes')
            .kind_match(NodeKind.CODE_BLOCK)
            .transform_set(mermaid_transform)
            .build()
        )
    """

    def __init__(self, name: str) -> None:
        if not name:
            raise BuildError("Rule name must not be empty")
        self.name = name
        self.description: Optional[str] = None
        self.kind: Optional[NodeKind] = None
        self.predicate: Optional[Predicate] = None
        self.transform: Optional[Transform] = None

    def description_set(self, description: str) -> 'RuleBuilder':
        if self.description is not None:
            raise BuildError(f"Rule '{self.name}' already has a description")
        self.description = description
        return self

    def kind_match(self, kind: NodeKind, predicate: Optional[Predicate] = None) -> 'RuleBuilder':
        if self.description is None:
            raise BuildError(f"Rule '{self.name}': describe the rule before setting its matcher")
        if self.kind is not None:
            raise BuildError(f"Rule '{self.name}' already matches {self.kind.value}; one matcher per rule")
        self.kind = kind
        self.predicate = predicate
        return self

    def transform_set(self, transform: Transform) -> 'RuleBuilder':
        if self.kind is None:
            raise BuildError(f"Rule '{self.name}': set the matcher before the transform")
        if self.transform is not None:
            raise BuildError(f"Rule '{self.name}' already has a transform; one transform per rule")
        self.transform = transform
        return self

    def build(self) -> Rule:
        missing = [
            label for label, value in (
                ('description', self.description),
                ('kind matcher', self.kind),
                ('transform', self.transform),
            ) if value is None
        ]
        if missing:
            raise BuildError(f"Rule '{self.name}' is missing: {', '.join(missing)}")
        return Rule(
            name=self.name,
            description=self.description,  # type: ignore[arg-type]
            kind=self.kind,  # type: ignore[arg-type]
            transform=self.transform,  # type: ignore[arg-type]
            predicate=self.predicate,
        )
