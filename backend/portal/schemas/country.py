"""Schemas for country endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CountryResponse(BaseModel):
    id: int
    name: str
    code: str


class CountryListResponse(BaseModel):
    countries: list[CountryResponse] = Field(default_factory=list)
