"""
Rule executor and re-entrant processor

The Executor dispatches one node to the rule registered for its kind and
awaits the result. It never walks children itself: a rule decides whether
and how to descend, and does so through the Processor bound to the run's
context (context.processor). That lets a rule skip a callout's title,
process children out of declaration order, or not recurse at all.

Ordering: Processor.children_execute awaits children one after another, so
side effects on context.data (e.g., the image list) land in document order.
"""

import asyncio
import inspect
from typing import Iterable, List, Optional, Sequence, Union

from ..models.context import ExportContext
from ..models.node import Node, NodeKind, fragments_flatten, tree_flatten
from .log import LOG
from .ruleset import RuleSet
from .serializer import HtmlSerializer

# Nesting depth at which re-entrant execution moves to a new task
STACK_HOP = 64


class TransformError(Exception):
    """
    Raised when a rule's transform fails

    Attributes:
        kind: Kind of the node whose conversion failed
        rule_name: Name of the rule that raised

    The original exception is chained as __cause__.
    """

    def __init__(self, kind: NodeKind, rule_name: str, message: str) -> None:
        self.kind = kind
        self.rule_name = rule_name
        super().__init__(f"Rule '{rule_name}' failed on {kind.value} node: {message}")


class Executor:
    """
    Dispatches nodes to the rules of one RuleSet

    Stateless apart from the rule set; safe to share between runs.
    """

    def __init__(self, ruleset: RuleSet) -> None:
        self.ruleset = ruleset

    async def execute(self, node: Node, context: ExportContext) -> Node:
        """
        Apply the matching rule to a node

        Args:
            node: Node to convert
            context: Context of the current run

        Returns:
            Replacement node (possibly a Nop fragment), or the node itself
            when no rule matches

        Raises:
            TransformError: The rule raised or returned something other
                            than a Node
        """
        rule = self.ruleset.rule_find(node)

        if rule is None:
            if not self.ruleset.passthrough_is(node.kind) and not node.is_fragment:
                if node.kind not in context.unmatched:
                    LOG(
                        f"Warning: no rule for '{node.kind.value}' in target "
                        f"'{self.ruleset.target}', passing through",
                        level=2,
                        severity="WARNING",
                    )
                context.unmatched.add(node.kind)
            return node

        LOG(f"Rule '{rule.name}' on {node.kind.value}", level=3)

        try:
            result = rule.transform(node, context)
            if inspect.isawaitable(result):
                result = await result
        except TransformError:
            raise
        except Exception as e:
            raise TransformError(node.kind, rule.name, str(e) or type(e).__name__) from e

        if not isinstance(result, Node):
            raise TransformError(
                node.kind, rule.name, f"transform returned {type(result).__name__}, expected Node"
            )
        return result


class Processor:
    """
    Capability handle given to rules through context.processor

    Exposes exactly what a transform may need for re-entrant work: execute
    nodes, execute children in order, and serialize resolved HTML. Binding
    a Processor to a context sets context.processor.

    Attributes:
        executor: Executor of the active target
        serializer: HTML serializer
        context: Context of the current run
    """

    def __init__(
        self,
        executor: Executor,
        context: ExportContext,
        serializer: Optional[HtmlSerializer] = None,
    ) -> None:
        self.executor = executor
        self.serializer = serializer or HtmlSerializer()
        self.context = context
        self.depth = 0
        context.processor = self

    async def execute(self, node: Node) -> Node:
        """
        Execute one node against the bound context

        Every STACK_HOP nested levels the call continues on a fresh task,
        which starts from the event loop's shallow stack. Deeply nested
        documents therefore never reach the interpreter's recursion limit.
        """
        self.depth += 1
        try:
            if self.depth % STACK_HOP == 0:
                return await asyncio.ensure_future(self.executor.execute(node, self.context))
            return await self.executor.execute(node, self.context)
        finally:
            self.depth -= 1

    async def children_execute(self, children: Iterable[Node]) -> List[Node]:
        """
        Execute nodes sequentially, in the order given

        Fragments returned by rules are flattened into the result, so the
        list holds no Nop node.
        """
        results: List[Node] = []
        for child in children:
            results.append(await self.execute(child))
        return fragments_flatten(results)

    async def descend(self, node: Node) -> Node:
        """Copy of a node with every child executed, in document order"""
        return node.children_replace(await self.children_execute(node.children))

    def serialize(self, nodes: Union[Node, Sequence[Node]]) -> str:
        """Serialize resolved node(s) to one HTML string"""
        if isinstance(nodes, Node):
            return self.serializer.node_toHtml(nodes)
        return self.serializer.nodes_toHtml(nodes)

    async def run(self, root: Node) -> Node:
        """
        Convert a whole document

        Executes the root (its rule drives any recursion) and removes every
        fragment from the result.
        """
        if self.context.root is None:
            self.context.root = root
        return tree_flatten(await self.execute(root))
