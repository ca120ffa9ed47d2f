"""
Document node model

Defines the tagged node used by every export target: a closed NodeKind tag,
an optional textual value, an open attribute bag, ordered children and an
optional role. Typed attribute views give rules a checked way to read the
bag without closing it.

The Nop kind is the fragment container: a transform may return one to splice
several nodes into its parent's child list. Fragments are flattened before
any output is produced and never reach a renderer.
"""

from enum import Enum
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterable, List, Optional, Type


class NodeKind(Enum):
    """
    Semantic type of a document node

    Values are the wire names used in serialized ASTs.
    """
    DOCUMENT = "Document"
    FRONT_MATTER = "FrontMatter"
    HTML_COMMENT = "HtmlComment"

    # Block level
    CODE_BLOCK = "CodeBlock"
    MATH_BLOCK = "MathBlock"
    CALLOUT = "Callout"
    BLOCK_QUOTE = "BlockQuote"
    LIST = "List"
    LIST_ITEM = "ListItem"
    HORIZONTAL_RULE = "HorizontalRule"
    HEADING = "Heading"
    TABLE = "Table"
    TABLE_HEADER = "TableHeader"
    TABLE_ROW = "TableRow"
    TABLE_CELL = "TableCell"
    FOOTNOTE_DEF = "FootnoteDef"
    HTML_BLOCK = "HtmlBlock"
    PARAGRAPH = "Paragraph"

    # Inline
    TEXT = "Text"
    INLINE_CODE = "InlineCode"
    MATH_SPAN = "MathSpan"
    WIKI_LINK = "WikiLink"
    EMBED = "Embed"
    FOOTNOTE_REF = "FootnoteRef"
    IMAGE = "Image"
    LINK = "Link"
    HIGHLIGHT = "Highlight"
    STRIKE = "Strike"
    STRONG_EMPHASIS = "StrongEmphasis"
    STRONG = "Strong"
    EMPHASIS = "Emphasis"
    HTML_INLINE = "HtmlInline"
    AUTO_LINK = "AutoLink"
    ESCAPED_CHAR = "EscapedChar"

    # Fragment: children replace the node in its parent
    NOP = "Nop"


# Role carried by a callout's title paragraph
ROLE_TITLE = "title"


@dataclass(frozen=True)
class CodeAttributes:
    lang: str = ""


@dataclass(frozen=True)
class ImageAttributes:
    url: str = ""
    alt: str = ""
    title: str = ""
    embed: bool = True


@dataclass(frozen=True)
class CalloutAttributes:
    calloutType: str = "note"


@dataclass(frozen=True)
class ReferenceAttributes:
    """
    Wiki link target

    Attributes:
        file: Linked note name (empty for same-page heading links)
        heading: Heading anchor inside the target
        alias: Display text override
        linkType: One of 'article', 'external-heading', 'internal-heading'
    """
    file: str = ""
    heading: str = ""
    alias: str = ""
    linkType: str = "article"


@dataclass(frozen=True)
class EmbedAttributes:
    file: str = ""
    heading: str = ""
    alias: str = ""


@dataclass(frozen=True)
class HeadingAttributes:
    level: int = 1


@dataclass(frozen=True)
class ListAttributes:
    ordered: bool = False


@dataclass(frozen=True)
class ListItemAttributes:
    level: int = 0
    task: Optional[bool] = None
    number: Optional[int] = None


@dataclass(frozen=True)
class LinkAttributes:
    url: str = ""
    label: str = ""
    title: str = ""


@dataclass(frozen=True)
class TableAttributes:
    align: tuple = ()


@dataclass(frozen=True)
class FootnoteAttributes:
    id: str = ""


ATTRIBUTE_VIEWS: Dict[NodeKind, Type[Any]] = {
    NodeKind.CODE_BLOCK: CodeAttributes,
    NodeKind.IMAGE: ImageAttributes,
    NodeKind.CALLOUT: CalloutAttributes,
    NodeKind.WIKI_LINK: ReferenceAttributes,
    NodeKind.EMBED: EmbedAttributes,
    NodeKind.HEADING: HeadingAttributes,
    NodeKind.LIST: ListAttributes,
    NodeKind.LIST_ITEM: ListItemAttributes,
    NodeKind.LINK: LinkAttributes,
    NodeKind.AUTO_LINK: LinkAttributes,
    NodeKind.TABLE: TableAttributes,
    NodeKind.FOOTNOTE_REF: FootnoteAttributes,
    NodeKind.FOOTNOTE_DEF: FootnoteAttributes,
}


@dataclass
class Node:
    """
    One element of the document tree

    Attributes:
        kind: Semantic tag; fixed for the lifetime of the node
        value: Textual payload (raw code, formula source, literal text)
        attributes: Open, kind-dependent attribute bag
                    (e.g., {"lang": "python"} or {"calloutType": "warning"})
        children: Ordered child nodes (empty for leaves)
        role: Marks structurally special children (e.g., "title" in a callout)

    Example:
        Node(
            kind=NodeKind.CALLOUT,
            attributes={"calloutType": "warning"},
            children=[
                Node(NodeKind.PARAGRAPH, role="title", children=[Node.text("Heads up")]),
                Node(NodeKind.PARAGRAPH, children=[Node.text("Check X")]),
            ],
        )
    """
    kind: NodeKind
    value: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    children: List['Node'] = field(default_factory=list)
    role: Optional[str] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == 'kind' and 'kind' in self.__dict__:
            raise AttributeError(
                f"Node kind is fixed at creation ({self.kind.value}); return a new node instead"
            )
        super().__setattr__(name, value)

    @classmethod
    def text(cls, value: str) -> 'Node':
        """Plain text leaf"""
        return cls(kind=NodeKind.TEXT, value=value)

    @classmethod
    def fragment(cls, children: Iterable['Node']) -> 'Node':
        """Nop container whose children replace it in the parent"""
        return cls(kind=NodeKind.NOP, children=list(children))

    @property
    def is_fragment(self) -> bool:
        return self.kind is NodeKind.NOP

    def attr(self, key: str, default: Any = None) -> Any:
        """Read one key from the open attribute bag"""
        value = self.attributes.get(key)
        return default if value is None else value

    def attributes_typed(self) -> Optional[Any]:
        """
        Typed view of the attribute bag for this node's kind

        Unknown keys are ignored and missing keys take the view's defaults.
        Returns None for kinds that carry no attributes.
        """
        view = ATTRIBUTE_VIEWS.get(self.kind)
        if view is None:
            return None
        known = {f.name for f in fields(view)}
        values = {k: v for k, v in self.attributes.items() if k in known and v is not None}
        if 'align' in values:
            values['align'] = tuple(values['align'])
        return view(**values)

    def child_withRole(self, role: str) -> Optional['Node']:
        """First child carrying the given role, or None"""
        for child in self.children:
            if child.role == role:
                return child
        return None

    def children_withoutRole(self, role: str) -> List['Node']:
        """Children in document order, skipping those with the given role"""
        return [child for child in self.children if child.role != role]

    def children_replace(self, children: Iterable['Node']) -> 'Node':
        """Copy of this node with a new child list (attributes copied too)"""
        return replace(self, attributes=dict(self.attributes), children=list(children))

    def plainText_get(self) -> str:
        """Concatenated value of every descendant leaf, in document order"""
        if not self.children:
            return self.value or ''
        return ''.join(child.plainText_get() for child in self.children)


def fragments_flatten(nodes: Iterable[Node]) -> List[Node]:
    """
    Splice fragment children into place, recursively

    Args:
        nodes: Child list possibly containing Nop containers

    Returns:
        New list with no Nop node at this level; order preserved
    """
    result: List[Node] = []
    for node in nodes:
        if node.is_fragment:
            result.extend(fragments_flatten(node.children))
        else:
            result.append(node)
    return result


def tree_flatten(node: Node) -> Node:
    """
    Remove every fragment from a tree

    A fragment at the root becomes a Document holding its flattened children.
    Nodes whose child lists contain no fragment anywhere below are returned
    as-is.
    """
    if not node.children:
        return Node(kind=NodeKind.DOCUMENT) if node.is_fragment else node

    flattened: List[Node] = []
    for child in fragments_flatten(node.children):
        flattened.append(tree_flatten(child))

    if node.is_fragment:
        return Node(kind=NodeKind.DOCUMENT, children=flattened)
    if len(flattened) == len(node.children) and all(a is b for a, b in zip(flattened, node.children)):
        return node
    return node.children_replace(flattened)


def tree_walk(node: Node) -> Iterable[Node]:
    """Yield a node and all its descendants in document order"""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_fromDict(data: Dict[str, Any]) -> Node:
    """
    Build a node tree from its mapping form

    The mapping uses the flat shape of serialized ASTs: "type", "value",
    "children" and "role" are structural, every other key is an attribute.

    Raises:
        ValueError: If "type" is missing or not a known NodeKind
    """
    if 'type' not in data:
        raise ValueError(f"Node mapping has no 'type': {data!r}")
    try:
        kind = NodeKind(data['type'])
    except ValueError as e:
        raise ValueError(f"Unknown node type '{data['type']}'") from e

    attributes = {
        k: v for k, v in data.items()
        if k not in ('type', 'value', 'children', 'role')
    }
    return Node(
        kind=kind,
        value=data.get('value'),
        attributes=attributes,
        children=[node_fromDict(child) for child in data.get('children') or []],
        role=data.get('role'),
    )


def node_toDict(node: Node) -> Dict[str, Any]:
    """Inverse of node_fromDict; empty fields are omitted"""
    data: Dict[str, Any] = {'type': node.kind.value}
    if node.value is not None:
        data['value'] = node.value
    if node.role is not None:
        data['role'] = node.role
    data.update(node.attributes)
    if node.children:
        data['children'] = [node_toDict(child) for child in node.children]
    return data
