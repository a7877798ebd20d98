"""Markdown content lookup for the content API.

Documents live under ``<content_dir>/<locale>/<slug>.md`` with YAML front
matter. Only an explicit allow list of slugs is exposed, so arbitrary files
can never be read through the API.
"""

from __future__ import annotations

import logging
from pathlib import Path

import frontmatter

from app.core.errors import NotFoundAppError
from app.schemas.content import ContentDocument

logger = logging.getLogger(__name__)

ALLOWED_SLUGS: frozenset[str] = frozenset(
    {
        "privacy-policy",
        "cookie-policy",
        "tech-stack",
    }
)

DEFAULT_LOCALE = "en"


class ContentService:
    """Serve allow-listed markdown documents from the content directory."""

    def __init__(
        self,
        content_dir: Path,
        *,
        allowed_slugs: frozenset[str] = ALLOWED_SLUGS,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        self._content_dir = Path(content_dir)
        self._allowed_slugs = allowed_slugs
        self._locale = locale

    def path_for(self, slug: str) -> Path:
        return self._content_dir / self._locale / f"{slug}.md"

    def get_document(self, slug: str) -> ContentDocument:
        """Load a document by slug.

        Args:
            slug: Document identifier, e.g. ``privacy-policy``.

        Returns:
            ContentDocument with the resolved title and markdown body.

        Raises:
            NotFoundAppError: If the slug is not exposed or its file is missing.
        """
        if slug not in self._allowed_slugs:
            logger.info("content.slug_not_allowed", extra={"slug": slug})
            raise NotFoundAppError(
                code="content_not_found",
                message="Not found",
                details={"slug": slug},
            )

        path = self.path_for(slug)
        if not path.is_file():
            logger.warning("content.file_missing", extra={"slug": slug, "path": str(path)})
            raise NotFoundAppError(
                code="content_not_found",
                message="Not found",
                details={"slug": slug},
            )

        post = frontmatter.load(str(path), encoding="utf-8")
        return ContentDocument(title=resolve_title(post.metadata, slug), body=post.content)


def resolve_title(metadata: dict, slug: str) -> str:
    """Pick ``title``, then ``name``, then the slug itself."""

    for key in ("title", "name"):
        value = metadata.get(key)
        if value is not None:
            return str(value)
    return slug
