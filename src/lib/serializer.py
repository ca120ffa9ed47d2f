"""
AST to HTML serializer

Collapses an already-transformed subtree into one HTML string. No rule
lookup happens here: by the time a rule calls the serializer, every node in
the subtree must already be raw HTML, text, or a fragment of those.
"""

from typing import Iterable, List

from ..models.node import Node, NodeKind


class SerializationError(Exception):
    """Raised when the serializer meets a node not yet resolved to HTML"""

    def __init__(self, kind: NodeKind) -> None:
        self.kind = kind
        super().__init__(
            f"Cannot serialize unresolved {kind.value} node to HTML; "
            f"execute its rule before serializing"
        )


class HtmlSerializer:
    """
    Concatenates resolved HTML in document order

    Accepts HtmlBlock, HtmlInline and Text leaves and descends into Nop
    fragments. Values are emitted verbatim; escaping is the job of the
    rules that produced them.
    """

    RESOLVED = frozenset({NodeKind.HTML_BLOCK, NodeKind.HTML_INLINE, NodeKind.TEXT})

    def node_toHtml(self, node: Node) -> str:
        """
        Serialize one resolved subtree

        Raises:
            SerializationError: If any non-fragment node is not resolved
        """
        parts: List[str] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current.is_fragment:
                stack.extend(reversed(current.children))
            elif current.kind in self.RESOLVED:
                parts.append(current.value or '')
            else:
                raise SerializationError(current.kind)
        return ''.join(parts)

    def nodes_toHtml(self, nodes: Iterable[Node]) -> str:
        """Serialize a sequence of resolved nodes, concatenated in order"""
        return ''.join(self.node_toHtml(node) for node in nodes)
