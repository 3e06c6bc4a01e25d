from __future__ import annotations
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every request/response body.
    JSON keys are camelCase on the wire; snake_case is accepted on input too.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class InsertModel(CamelModel):
    # Request bodies reject anything not declared (id, userId, createdAt, ...)
    model_config = ConfigDict(extra="forbid")


# Users / auth
class UserPublic(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str


# Weight entries
WeightUnit = Literal["lbs", "kg"]
EntryType = Literal["manual", "photo"]


class WeightEntryCreate(InsertModel):
    """
    POST /api/weight-entries body.
    weight accepts "150.5" or 150.5; stored as numeric(5,2).
    """
    weight: Decimal = Field(..., gt=0, max_digits=5, decimal_places=2)
    unit: WeightUnit = "lbs"
    entry_type: EntryType = "manual"
    photo_path: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class WeightEntryUpdate(InsertModel):
    weight: Optional[Decimal] = Field(None, gt=0, max_digits=5, decimal_places=2)
    unit: Optional[WeightUnit] = None
    notes: Optional[str] = None


class WeightEntryOut(CamelModel):
    id: int
    user_id: str
    weight: Decimal
    unit: str
    entry_type: str
    photo_path: Optional[str] = None
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class PhotoUploadResponse(CamelModel):
    weight_entry: WeightEntryOut
    detected_weight: float
    photo_path: str
    message: str


# Activity logs
class ActivityLogOut(CamelModel):
    id: int
    user_id: str
    action: str
    description: Optional[str] = None
    # ORM attribute is `meta`, column and JSON key are "metadata"
    meta: Optional[Dict[str, Any]] = Field(None, serialization_alias="metadata")
    created_at: Optional[datetime] = None


# Business profiles
class BusinessProfileCreate(InsertModel):
    business_name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=40)
    website: Optional[str] = None
    is_active: bool = True


class BusinessProfileUpdate(InsertModel):
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=40)
    website: Optional[str] = None
    is_active: Optional[bool] = None


class BusinessProfileOut(CamelModel):
    id: int
    user_id: str
    business_name: str
    category: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Customer preferences
class CustomerPreferencesCreate(InsertModel):
    preferred_categories: List[str] = []
    budget_range: Optional[str] = None
    location: Optional[str] = None
    dietary_restrictions: List[str] = []
    interests: List[str] = []
    preferred_distance: Optional[str] = None


class CustomerPreferencesUpdate(InsertModel):
    preferred_categories: Optional[List[str]] = None
    budget_range: Optional[str] = None
    location: Optional[str] = None
    dietary_restrictions: Optional[List[str]] = None
    interests: Optional[List[str]] = None
    preferred_distance: Optional[str] = None


class CustomerPreferencesOut(CamelModel):
    id: int
    user_id: str
    preferred_categories: List[str] = []
    budget_range: Optional[str] = None
    location: Optional[str] = None
    dietary_restrictions: List[str] = []
    interests: List[str] = []
    preferred_distance: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("preferred_categories", "dietary_restrictions", "interests", mode="before")
    @classmethod
    def _null_list(cls, v):
        return v or []


# Reviews
class BusinessReviewCreate(InsertModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=5000)


class BusinessReviewOut(CamelModel):
    id: int
    business_id: int
    customer_id: str
    rating: int
    review_text: Optional[str] = None
    created_at: Optional[datetime] = None


# Recommendations (scores come from outside this service)
class RecommendationCreate(InsertModel):
    user_id: str
    business_id: int
    recommendation_type: str = Field(..., max_length=50)
    score: Decimal = Field(..., max_digits=5, decimal_places=2)
    reason: Optional[str] = None


class RecommendationOut(CamelModel):
    id: int
    user_id: str
    business_id: int
    recommendation_type: str
    score: Decimal
    reason: Optional[str] = None
    is_viewed: bool
    created_at: Optional[datetime] = None
    business: BusinessProfileOut
