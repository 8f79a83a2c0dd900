"""Pydantic models for the DocQA API."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Question to answer from the category's documents")
    category: Optional[str] = Field(
        default=None,
        description="Category name; unknown or missing values use the default category",
    )


class QueryResponse(BaseModel):
    answer: Any = Field(default=None, description="Model output as JSON, or {'raw': text} when it was not JSON")
    used_files: List[str] = Field(default_factory=list, description="Files whose content was sent to the model")
    error: Optional[str] = None


class CategoryInfo(BaseModel):
    name: str
    directory: str
    exists: bool


class CategoriesResponse(BaseModel):
    default_category: str
    categories: List[CategoryInfo]
