"""
RecipeShare API: Recipe Listing Service
========================================

What:  Builds one page of the recipe index, optionally filtered by a name
       search, plus the total page count.
How:   Two separate record-store round trips over the same filter:
           1. find(pattern, skip=8*page-8, limit=8)
           2. count(pattern)
       pages = ceil(count / 8)
Who:   GET /recipes.

Search:
    The raw term is escaped so every regex metacharacter
    (- [ ] { } ( ) * + ? . , \\ ^ $ | # and whitespace) matches literally,
    then matched case-insensitively against recipe names. An empty term
    means no search.

Failure handling:
    fetch fails → message added to `warnings`, page left empty, count still runs
    count fails → logged, PersistenceError propagates to the error handler
"""

import logging
import math
import re
from typing import List, Optional

from recipeshare.exceptions import PersistenceError
from recipeshare.schemas.recipe import RecipePageResponse, to_recipe_response
from recipeshare.services.recipe_store import RecipeStore

logger = logging.getLogger(__name__)

PAGE_SIZE = 8

NO_MATCH_MESSAGE = "No recipes match your search, please try again."

_REGEX_SPECIAL = re.compile(r"[-\[\]{}()*+?.,\\^$|#\s]")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def escape_search_term(term: str) -> str:
    """Backslash-escapes every regex metacharacter and whitespace in `term`."""
    return _REGEX_SPECIAL.sub(lambda m: "\\" + m.group(0), term)


def parse_page(raw: Optional[str]) -> int:
    """
    Parses the `page` query value.

    Reads a leading integer the way parseInt does ("3", " 3", "3abc" → 3).
    Absent, non-numeric, zero and negative values fall back to page 1.
    """
    if raw is None:
        return 1
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 1
    page = int(match.group(1))
    return page if page >= 1 else 1


def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total / page_size)


class ListingService:
    """Paginated, optionally filtered recipe index."""

    def __init__(self, store: RecipeStore):
        self.store = store

    async def list_recipes(self, search: Optional[str] = None, page: int = 1) -> RecipePageResponse:
        """
        Returns page `page` of recipes whose name matches `search`.

        Raises:
            PersistenceError: The count query failed.
        """
        name_pattern = escape_search_term(search) if search else None
        skip = (PAGE_SIZE * page) - PAGE_SIZE
        warnings: List[str] = []

        recipes = []
        fetched = False
        try:
            recipes = await self.store.find(name_pattern, skip=skip, limit=PAGE_SIZE)
            fetched = True
        except PersistenceError as e:
            logger.warning("Recipe page fetch failed (page=%d, search=%r): %s", page, search, e.message)
            warnings.append(e.message)

        try:
            total = await self.store.count(name_pattern)
        except PersistenceError as e:
            logger.error("Recipe count failed (search=%r): %s", search, e.message)
            raise

        no_match = None
        if search and fetched and not recipes:
            no_match = NO_MATCH_MESSAGE

        logger.info(
            "Listed page %d: %d recipe(s) of %d (search=%r)",
            page,
            len(recipes),
            total,
            search,
        )

        return RecipePageResponse(
            recipes=[to_recipe_response(recipe) for recipe in recipes],
            current=page,
            pages=page_count(total),
            total_count=total,
            no_match=no_match,
            search=search or None,
            warnings=warnings,
        )
