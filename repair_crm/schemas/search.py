"""
Pydantic schemas for global search.
"""
from pydantic import BaseModel
from typing import List, Literal


class SearchResult(BaseModel):
    """A single hit from the global search."""
    type: Literal["customer", "vehicle", "workorder"]
    id: int
    title: str
    subtitle: str
    description: str


class SearchResults(BaseModel):
    """Global search response."""
    results: List[SearchResult] = []
