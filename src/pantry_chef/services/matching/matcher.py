"""Ranking of stored recipes by overlap with a list of ingredients.

The database narrows the search to public recipes with at least one input
ingredient containing a query term. Counting, thresholding, ordering and
pagination happen here so the ordering rules live in one place.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pantry_chef.observability.logging import get_logger
from pantry_chef.schemas.enums import RecipeSortField, SortOrder


if TYPE_CHECKING:
    from pantry_chef.database.repositories.recipe import (
        MatchCandidate,
        RecipeRecord,
        RecipeRepository,
    )

logger = get_logger(__name__)


@dataclass(frozen=True)
class RankedCandidate:
    candidate: MatchCandidate
    match_count: int


@dataclass(frozen=True)
class RecipeMatchResult:
    recipe: RecipeRecord
    match_count: int


def normalize_terms(ingredients: Iterable[str]) -> list[str]:
    """Lowercased, stripped, de-duplicated query terms in request order."""
    terms = (term.strip().lower() for term in ingredients)
    return list(dict.fromkeys(term for term in terms if term))


def count_matches(input_ingredients: Iterable[str], terms: Sequence[str]) -> int:
    """Number of input ingredients containing any term.

    Each input ingredient counts at most once, however many terms it contains.
    """
    return sum(
        1
        for ingredient in input_ingredients
        if any(term in ingredient.lower() for term in terms)
    )


def _sort_key(sort_by: str) -> Any:
    field = RecipeSortField(sort_by)
    if field is RecipeSortField.AVERAGE_RATING:
        return lambda ranked: ranked.candidate.average_rating
    if field is RecipeSortField.VIEWS:
        return lambda ranked: ranked.candidate.views
    if field is RecipeSortField.TITLE:
        return lambda ranked: ranked.candidate.title.casefold()
    return lambda ranked: ranked.candidate.created_at


def rank_candidates(
    candidates: Iterable[MatchCandidate],
    terms: Sequence[str],
    *,
    min_match: int = 1,
    sort_by: str = RecipeSortField.CREATED_AT,
    sort_order: str = SortOrder.DESC,
) -> list[RankedCandidate]:
    """Count, threshold and order candidates.

    Order is match count descending, then the sort field, then insertion
    order. Python's sort is stable, so sorting by the least significant key
    first yields the combined order.
    """
    ranked = [
        RankedCandidate(candidate, count)
        for candidate in candidates
        if (count := count_matches(candidate.input_ingredients, terms)) >= min_match
    ]
    ranked.sort(key=lambda item: item.candidate.seq)
    ranked.sort(key=_sort_key(sort_by), reverse=SortOrder(sort_order) is SortOrder.DESC)
    ranked.sort(key=lambda item: item.match_count, reverse=True)
    return ranked


class RecipeMatcher:
    """Finds public recipes sharing ingredients with a query."""

    def __init__(self, recipes: RecipeRepository) -> None:
        self._recipes = recipes

    async def search(
        self,
        ingredients: Sequence[str],
        *,
        min_match: int = 1,
        skip: int = 0,
        limit: int = 10,
        sort_by: str = RecipeSortField.CREATED_AT,
        sort_order: str = SortOrder.DESC,
    ) -> list[RecipeMatchResult]:
        """One page of matching recipes, each with its match count."""
        terms = normalize_terms(ingredients)
        if not terms:
            return []

        candidates = await self._recipes.find_match_candidates(terms)
        ranked = rank_candidates(
            candidates,
            terms,
            min_match=min_match,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        page = ranked[skip : skip + limit]

        records = await self._recipes.get_many([item.candidate.id for item in page])
        counts = {item.candidate.id: item.match_count for item in page}

        logger.debug(
            "Ingredient search ranked",
            terms=len(terms),
            candidates=len(candidates),
            matched=len(ranked),
            returned=len(records),
        )
        return [RecipeMatchResult(record, counts[record.id]) for record in records]
