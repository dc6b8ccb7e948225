from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class TagCategory(str, Enum):
    type = "type"
    culture = "culture"
    geography = "geography"
    activity = "activity"
    season = "season"
    budget = "budget"
    crowd = "crowd"


class Tag(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    # Not restricted to TagCategory; unknown categories weigh 1.0 in similarity
    category: str = ""
    color: str | None = None


class Site(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    address: str = ""
    city: str = ""
    province: str = ""
    country: str = ""
    latitude: float | None = None
    longitude: float | None = None
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    price_adult: float = Field(default=0.0, ge=0.0)
    price_child: float | None = None
    price_student: float | None = None
    open_time: str = ""
    close_time: str = ""
    best_visit_season: list[str] = Field(default_factory=list)
    rating: float = Field(default=3.0, ge=1.0, le=5.0)
    visit_duration: str = ""
    created_at: str = ""
    updated_at: str = ""


class SiteCreate(BaseModel):
    id: str | None = None
    name: str = Field(..., min_length=1)
    description: str = ""
    address: str = ""
    city: str = ""
    province: str = ""
    country: str = ""
    latitude: float | None = None
    longitude: float | None = None
    images: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    price_adult: float = Field(default=0.0, ge=0.0)
    price_child: float | None = None
    price_student: float | None = None
    open_time: str = ""
    close_time: str = ""
    best_visit_season: list[str] = Field(default_factory=list)
    rating: float = Field(default=3.0, ge=1.0, le=5.0)
    visit_duration: str = ""


class SiteUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    address: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    images: list[str] | None = None
    tags: list[str] | None = None
    price_adult: float | None = Field(default=None, ge=0.0)
    price_child: float | None = None
    price_student: float | None = None
    open_time: str | None = None
    close_time: str | None = None
    best_visit_season: list[str] | None = None
    rating: float | None = Field(default=None, ge=1.0, le=5.0)
    visit_duration: str | None = None


class TagCreate(BaseModel):
    id: str | None = None
    name: str = Field(..., min_length=1)
    category: TagCategory
    color: str | None = None


class TagUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    category: TagCategory | None = None
    color: str | None = None


class TagGroup(BaseModel):
    category: str
    tags: list[Tag]
