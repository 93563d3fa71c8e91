"""
Session, recipe and cache models for the Foodly client.

This module defines the schemas shared by every component:
- Session: the authenticated identity, owned by SessionStore
- SearchState and CacheMarker: the search parameters and the fingerprint of the last
  fetch, owned by QueryCache
- Recipe, Tag, Ingredient and Pagination: the backend's wire formats

# NOTE: Session, SearchState and CacheMarker are frozen. Owners replace them wholesale,
    so a snapshot handed to another component can never change under it.
    Recipes are updated the same way, through model_copy(update=...).
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

T = TypeVar("T")


class Session(BaseModel):
    """
    Authenticated identity of the current process.

    Invariant: is_logged_in implies a token is present.
    """
    is_loading: bool = Field(default=True, description="True while a session operation is running")
    is_logged_in: bool = Field(default=False, description="True once a token has been accepted")
    token: Optional[str] = Field(default=None, description="Bearer token of the logged-in user")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_token(self) -> "Session":
        if self.is_logged_in and self.token is None:
            raise ValueError("a logged-in session must carry a token")
        return self

    @property
    def active_token(self) -> Optional[str]:
        """Token to send with requests, or None when logged out."""
        return self.token if self.is_logged_in else None


class Tag(BaseModel):
    """Recipe tag; the slug is the filter key."""
    label: str
    slug: str


class Ingredient(BaseModel):
    unit: Optional[str] = None
    label: str
    amount: Optional[float] = None


class Recipe(BaseModel):
    """
    Recipe as returned by the backend.

    bookmarked and owned are None until resolved for the current session.
    """
    id: int = Field(..., description="Unique, immutable recipe identifier")
    title: str
    servings: Optional[str] = None
    timer: Optional[int] = Field(None, description="Preparation time in minutes")
    kcal: Optional[int] = None
    carbs: Optional[int] = None
    proteins: Optional[int] = None
    fats: Optional[int] = None
    image: Optional[Dict[str, Any]] = Field(None, description="Hosted image metadata (url, secure_url, ...)")
    instructions: List[str] = Field(default_factory=list)
    ingredients: List[Ingredient] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list, description="Tag slugs")
    bookmarked: Optional[bool] = None
    owned: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="allow")

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: List[str]) -> List[str]:
        # slugs form a set; keep first occurrence order
        return list(dict.fromkeys(tags))

    def with_bookmark(self, bookmarked: bool) -> "Recipe":
        """Return a copy carrying the given bookmark state."""
        return self.model_copy(update={"bookmarked": bookmarked})


class SearchState(BaseModel):
    """Search text and selected tags of the recipe list."""
    query: Optional[str] = None
    filter: List[Tag] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CacheMarker(BaseModel):
    """Fingerprint of the last successful fetch: what, under whose identity, and when."""
    url: str
    token: Optional[str] = None
    fetched_at_ms: int

    model_config = ConfigDict(frozen=True)


class Pagination(BaseModel, Generic[T]):
    """Paginated wire envelope; only records are kept by the caches."""
    records: List[T]
    total: int = 0
    current_page: int = 1
    per_page: int = 0


class User(BaseModel):
    """User created by /register (the echoed password hash is ignored)."""
    id: int
    username: str

    model_config = ConfigDict(extra="ignore")


class UserProfile(BaseModel):
    username: str

    model_config = ConfigDict(extra="allow")
