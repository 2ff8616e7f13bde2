"""Enumeration types shared by API schemas and storage."""

from __future__ import annotations

from enum import StrEnum


class DietaryRestriction(StrEnum):
    """Dietary restriction tags accepted on users and generation requests."""

    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "gluten-free"
    DAIRY_FREE = "dairy-free"
    NUT_FREE = "nut-free"
    LOW_CARB = "low-carb"
    KETO = "keto"
    PALEO = "paleo"


class MealType(StrEnum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"
    DESSERT = "dessert"
    APPETIZER = "appetizer"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class GeneratedBy(StrEnum):
    """Provenance of a stored recipe."""

    AZURE_OPENAI = "azure-openai"
    USER = "user"
    ADMIN = "admin"


class RecipeSortField(StrEnum):
    CREATED_AT = "createdAt"
    AVERAGE_RATING = "averageRating"
    VIEWS = "views"
    TITLE = "title"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class GenerationOutcome(StrEnum):
    """Whether the AI reply parsed into a recipe or a placeholder was used."""

    PARSED = "parsed"
    FALLBACK = "fallback"


class HealthStatus(StrEnum):
    OK = "OK"
    DEGRADED = "DEGRADED"
    ERROR = "ERROR"


class DependencyStatus(StrEnum):
    """Status of a single dependency in the health report."""

    RUNNING = "running"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    CONFIGURED = "configured"
    NOT_CONFIGURED = "not_configured"
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"
