"""Tag registration and additive association."""

from __future__ import annotations

import logging

from core.errors import TermExistsError
from core.ports import TaxonomyPort
from core.slugs import normalize_slug

LOGGER = logging.getLogger(__name__)


class TagRegistrar:
    """Creates tags on demand and attaches them to posts without clearing others."""

    def __init__(self, taxonomy: TaxonomyPort) -> None:
        self._taxonomy = taxonomy

    def ensure_exists(self, tag_slug: str) -> str:
        """Create the tag if the store does not know it yet.

        Returns the normalized slug, or "" when nothing was registered.
        """

        slug = normalize_slug(tag_slug)
        if not slug:
            return ""
        if self._taxonomy.term_exists(slug):
            return slug
        try:
            self._taxonomy.create_term(slug)
        except TermExistsError:
            # A concurrent creator won the race; the tag exists either way.
            LOGGER.debug("Tag %s created concurrently", slug)
            return slug
        LOGGER.info("Created tag %s", slug)
        return slug

    def attach(self, post_id: int, tag_slug: str) -> None:
        """Associate an existing tag with a post, keeping its other tags."""

        slug = normalize_slug(tag_slug)
        if not slug:
            return
        self._taxonomy.set_post_tags(post_id, [slug], additive=True)
