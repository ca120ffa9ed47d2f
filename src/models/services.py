"""
External service contracts

Rules reach outside the tree only through these narrow interfaces: slug
lookup, code and formula rendering, and asset copying/encoding. Every
method is a coroutine so an implementation may suspend on I/O. Default
adapters over a vault directory live in lib.services.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config.settings import ExportSettings


class SlugNotFoundError(LookupError):
    """Raised when a linked note does not exist or has no slug"""
    pass


class AssetNotFoundError(FileNotFoundError):
    """Raised when a referenced asset cannot be located"""
    pass


class SlugResolver(Protocol):
    async def slug_resolve(self, app: Any, file_name: str) -> str:
        """Publish slug of a note; raises SlugNotFoundError if absent"""
        ...


class CodeRenderer(Protocol):
    async def fence_render(self, source: str, lang: str) -> str:
        """Literal fenced-code text"""
        ...

    async def html_render(self, source: str, lang: str) -> str:
        """Self-contained HTML fragment"""
        ...


class FormulaRenderer(Protocol):
    async def formula_render(self, source: str, block: bool) -> str:
        """Embeddable markup for a formula"""
        ...


class AssetStore(Protocol):
    async def asset_copy(self, app: Any, path: str, settings: 'ExportSettings', slug: str) -> None:
        """Copy an asset next to the exported article"""
        ...

    async def asset_encode(self, app: Any, path: str, settings: 'ExportSettings', slug: str) -> str:
        """Portable inline reference (e.g., a data: URI)"""
        ...


@dataclass
class ExportServices:
    """
    Bundle of external collaborators handed to a run

    Any member may be None when the active target never calls it; a rule
    that needs a missing service fails with a TransformError.
    """
    slugs: Optional[SlugResolver] = None
    code: Optional[CodeRenderer] = None
    formula: Optional[FormulaRenderer] = None
    assets: Optional[AssetStore] = None

    def require(self, name: str) -> Any:
        """Get a service by attribute name, raising if it was not provided"""
        service = getattr(self, name)
        if service is None:
            raise LookupError(f"No '{name}' service configured for this export")
        return service
