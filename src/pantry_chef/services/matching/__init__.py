"""Ingredient matching service package."""

from pantry_chef.services.matching.matcher import (
    RecipeMatcher,
    count_matches,
    normalize_terms,
    rank_candidates,
)


__all__ = ["RecipeMatcher", "count_matches", "normalize_terms", "rank_candidates"]
