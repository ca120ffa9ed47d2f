"""
AST to Markdown stringifier

Renders a (transformed) node tree back to Markdown text. The shortcode
target produces its final article this way: rules replace the nodes that
need shortcodes and the rest of the tree is written back as Markdown.

The walk is iterative and post-order: every node is rendered from the
already rendered text of its descendants, so document depth is bounded
by memory rather than the interpreter's recursion limit.
"""

from typing import Callable, Dict, List, Tuple

from ..models.node import Node, NodeKind, ROLE_TITLE


ALIGN_MARKERS = {
    'left': ':-----',
    'center': ':-----:',
    'right': '-----:',
}

# id(node) -> rendered text, filled bottom-up during one walk
Rendered = Dict[int, str]


class MarkdownStringifier:
    """
    Node tree to Markdown text

    Kinds with no dedicated handler render as the concatenation of their
    children. Handlers receive the node and the text already rendered for
    its subtree; none of them call back into the walk.
    """

    def __init__(self) -> None:
        self.handlers: Dict[NodeKind, Callable[[Node, Rendered], str]] = {
            NodeKind.DOCUMENT: self.document_stringify,
            NodeKind.NOP: self.children_join,
            NodeKind.PARAGRAPH: lambda node, done: self.children_join(node, done) + '\n',
            NodeKind.HEADING: self.heading_stringify,
            NodeKind.TEXT: lambda node, done: node.value or '',
            NodeKind.STRONG: lambda node, done: f"**{self.children_join(node, done)}**",
            NodeKind.EMPHASIS: lambda node, done: f"*{self.children_join(node, done)}*",
            NodeKind.STRONG_EMPHASIS: lambda node, done: f"***{self.children_join(node, done)}***",
            NodeKind.HIGHLIGHT: lambda node, done: f"=={self.children_join(node, done)}==",
            NodeKind.STRIKE: lambda node, done: f"~~{self.children_join(node, done)}~~",
            NodeKind.INLINE_CODE: lambda node, done: f"`{node.value or ''}`",
            NodeKind.CODE_BLOCK: self.codeBlock_stringify,
            NodeKind.LINK: lambda node, done: f"[{node.attr('label', '')}]({node.attr('url', '')})",
            NodeKind.IMAGE: self.image_stringify,
            NodeKind.LIST: self.list_stringify,
            NodeKind.LIST_ITEM: self.listItem_stringify,
            NodeKind.BLOCK_QUOTE: self.blockQuote_stringify,
            NodeKind.CALLOUT: self.callout_stringify,
            NodeKind.MATH_BLOCK: lambda node, done: f"$$\n{node.value or ''}\n$$\n",
            NodeKind.MATH_SPAN: lambda node, done: f"${node.value or ''}$",
            NodeKind.HORIZONTAL_RULE: lambda node, done: '---\n',
            NodeKind.TABLE: self.table_stringify,
            NodeKind.WIKI_LINK: lambda node, done: f"[[{node.value or ''}]]",
            NodeKind.EMBED: lambda node, done: f"![[{node.value or ''}]]",
            NodeKind.AUTO_LINK: lambda node, done: node.attr('url', ''),
            NodeKind.ESCAPED_CHAR: lambda node, done: f"\\{node.value or ''}",
            NodeKind.FOOTNOTE_REF: lambda node, done: f"[^{node.attr('id', '')}]",
            NodeKind.FOOTNOTE_DEF: lambda node, done: f"[^{node.attr('id', '')}]: {self.children_join(node, done)}\n",
            NodeKind.FRONT_MATTER: lambda node, done: f"---\n{node.value or ''}\n---\n",
            NodeKind.HTML_COMMENT: lambda node, done: node.value or '',
            NodeKind.HTML_BLOCK: lambda node, done: node.value or '',
            NodeKind.HTML_INLINE: lambda node, done: node.value or '',
        }

    def node_stringify(self, node: Node) -> str:
        """
        Render one node and its subtree as Markdown

        Args:
            node: Node to render

        Returns:
            Markdown text of the whole subtree
        """
        done: Rendered = {}
        stack: List[Tuple[Node, bool]] = [(node, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                done[id(current)] = self.handler_get(current)(current, done)
                continue
            stack.append((current, True))
            stack.extend((child, False) for child in current.children)
        return done[id(node)]

    def handler_get(self, node: Node) -> Callable[[Node, Rendered], str]:
        return self.handlers.get(node.kind, self.children_join)

    def children_join(self, node: Node, done: Rendered, separator: str = '') -> str:
        return separator.join(done[id(child)] for child in node.children)

    def document_stringify(self, node: Node, done: Rendered) -> str:
        return self.children_join(node, done, '\n')

    def heading_stringify(self, node: Node, done: Rendered) -> str:
        level = node.attr('level', 1)
        return '#' * level + ' ' + self.children_join(node, done) + '\n'

    def codeBlock_stringify(self, node: Node, done: Rendered) -> str:
        lang = node.attr('lang', '')
        return f"```{lang}\n{node.value or ''}\n```\n"

    def image_stringify(self, node: Node, done: Rendered) -> str:
        attrs = node.attributes_typed()
        if attrs.embed:
            label = f"![{attrs.alt or attrs.url}]"
        else:
            label = f"[{attrs.alt}]"
        if attrs.title:
            return f'{label}({attrs.url} "{attrs.title}")'
        return f"{label}({attrs.url})"

    def list_stringify(self, node: Node, done: Rendered) -> str:
        """Items are re-rendered here: their marker depends on the parent List"""
        ordered = bool(node.attr('ordered', False))
        return ''.join(
            self.listItem_stringify(child, done, ordered=ordered, index=i)
            if child.kind is NodeKind.LIST_ITEM else done[id(child)]
            for i, child in enumerate(node.children, start=1)
        )

    def listItem_stringify(
        self, node: Node, done: Rendered, ordered: bool = False, index: int = 1
    ) -> str:
        attrs = node.attributes_typed()
        indent = ' ' * (attrs.level * 4)
        if attrs.task is not None:
            prefix = '- [x] ' if attrs.task else '- [ ] '
        elif ordered:
            prefix = f"{attrs.number if attrs.number is not None else index}. "
        else:
            prefix = '- '

        inline: List[str] = []
        nested: List[str] = []
        for child in node.children:
            if child.kind is NodeKind.LIST:
                nested.append(done[id(child)])
            else:
                inline.append(done[id(child)])
        return indent + prefix + ''.join(inline) + '\n' + ''.join(nested)

    def blockQuote_stringify(self, node: Node, done: Rendered) -> str:
        content = self.children_join(node, done)
        return '\n'.join(f"> {line}" if line else '' for line in content.split('\n')) + '\n'

    def callout_stringify(self, node: Node, done: Rendered) -> str:
        callout_type = node.attr('calloutType', 'note')
        title_node = node.child_withRole(ROLE_TITLE)
        title = self.children_join(title_node, done) if title_node is not None else ''

        body = ''.join(done[id(child)] for child in node.children_withoutRole(ROLE_TITLE))
        lines = [line for line in body.split('\n') if line.strip()]
        quoted = '\n'.join(f"> {line}" for line in lines)
        return f"> [!{callout_type}] {title}\n{quoted}\n"

    def table_stringify(self, node: Node, done: Rendered) -> str:
        """Pipe table: header row, alignment row, then body rows"""
        def row_render(row: Node) -> str:
            return ' | '.join(done[id(cell)] for cell in row.children)

        header = next((c for c in node.children if c.kind is NodeKind.TABLE_HEADER), None)
        rows = [c for c in node.children if c.kind is NodeKind.TABLE_ROW]
        align = node.attributes_typed().align
        if not align and header is not None:
            align = tuple('' for _ in header.children)

        lines = [
            row_render(header) if header is not None else '',
            ' | '.join(ALIGN_MARKERS.get(a or '', '-----') for a in align),
        ]
        lines.extend(row_render(row) for row in rows)
        return '\n'.join(lines) + '\n'


def markdown_stringify(node: Node) -> str:
    """Render a tree with a default MarkdownStringifier"""
    return MarkdownStringifier().node_stringify(node)
