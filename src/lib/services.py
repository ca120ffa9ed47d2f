"""
Default service adapters

Implementations of the slug, code, formula and asset contracts over a
plain directory of Markdown notes (a "vault"). The command line wires
these in; library callers may pass their own ExportServices instead.

Blocking file I/O runs in a worker thread so rules awaiting these
services never stall the event loop.
"""

import asyncio
import base64
import glob
import mimetypes
import shutil
from html import escape
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name
from pygments.util import ClassNotFound

from ..config.settings import ExportSettings, appsettings
from ..models.services import AssetNotFoundError, ExportServices, SlugNotFoundError
from .log import LOG


class Vault:
    """
    Directory of notes and attachments

    Attributes:
        root: Vault directory
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def file_find(self, name: str) -> Optional[Path]:
        """
        Resolve a link path the way a wiki link does

        Tries the path relative to the vault root, then any file with that
        name anywhere in the vault, then the same with '.md' appended.
        The first match in sorted path order wins.
        """
        if not name:
            return None
        direct = self.root / name
        if direct.is_file():
            return direct

        base = Path(name).name
        for candidate in (base, f"{base}.md"):
            matches = sorted(p for p in self.root.rglob(glob.escape(candidate)) if p.is_file())
            if matches:
                return matches[0]
        return None

    def frontmatter_read(self, path: Path) -> Dict[str, Any]:
        """
        Leading YAML block of a note, or an empty dict

        Raises:
            yaml.YAMLError: Front matter is present but malformed
        """
        text = path.read_text(encoding='utf-8')
        if not text.startswith('---'):
            return {}
        parts = text.split('\n---', 1)
        if len(parts) < 2:
            return {}
        data = yaml.safe_load(parts[0][3:]) or {}
        return data if isinstance(data, dict) else {}


class VaultSlugResolver:
    """Publish slug from the linked note's front matter"""

    async def slug_resolve(self, app: Vault, file_name: str) -> str:
        path = app.file_find(file_name)
        if path is None:
            raise SlugNotFoundError(f"Linked note not found: {file_name}")
        frontmatter = await asyncio.to_thread(app.frontmatter_read, path)
        slug = frontmatter.get('slug')
        if not slug:
            raise SlugNotFoundError(f"{path.stem} has no 'slug' in its front matter")
        return str(slug)


class PygmentsCodeRenderer:
    """
    Fenced text or Pygments-highlighted HTML

    HTML uses inline styles (noclasses) so it survives channels that strip
    stylesheets.
    """

    def __init__(self, style: str = 'monokai') -> None:
        self.style = style

    async def fence_render(self, source: str, lang: str) -> str:
        return f"```{lang}\n{source}\n```\n"

    async def html_render(self, source: str, lang: str) -> str:
        lexer: Lexer
        try:
            lexer = get_lexer_by_name(lang) if lang else TextLexer()
        except ClassNotFound:
            LOG(f"No lexer for '{lang}', highlighting as plain text", level=2)
            lexer = TextLexer()
        formatter = HtmlFormatter(style=self.style, noclasses=True)
        return highlight(source, lexer, formatter)


class LatexFormulaRenderer:
    """Escaped LaTeX, delimited for a client-side typesetter"""

    async def formula_render(self, source: str, block: bool) -> str:
        escaped = escape(source, quote=False)
        if block:
            return f"$$\n{escaped}\n$$"
        return f"${escaped}$"


class VaultAssetStore:
    """Copies attachments next to the article, or inlines them as data URIs"""

    def asset_locate(self, app: Vault, path: str) -> Path:
        found = app.file_find(path)
        if found is None:
            raise AssetNotFoundError(f"Asset not found in vault: {path}")
        return found

    async def asset_copy(self, app: Vault, path: str, settings: ExportSettings, slug: str) -> None:
        source = self.asset_locate(app, path)
        target_dir = settings.imageDir_resolve(slug)

        def copy() -> None:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target_dir / source.name)

        await asyncio.to_thread(copy)
        LOG(f"Copied {source.name} -> {target_dir}", level=2)

    async def asset_encode(self, app: Vault, path: str, settings: ExportSettings, slug: str) -> str:
        source = self.asset_locate(app, path)
        data = await asyncio.to_thread(source.read_bytes)
        mime = mimetypes.guess_type(source.name)[0] or 'application/octet-stream'
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def services_default(settings: Optional[ExportSettings] = None) -> ExportServices:
    """ExportServices wired with the vault adapters"""
    settings = settings or appsettings
    return ExportServices(
        slugs=VaultSlugResolver(),
        code=PygmentsCodeRenderer(style=settings.pygments_style),
        formula=LatexFormulaRenderer(),
        assets=VaultAssetStore(),
    )
