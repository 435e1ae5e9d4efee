"""Pydantic models for the skill and candidate write endpoints."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

BillingClass = Literal["A", "B", "C", "D"]


class SkillCreate(BaseModel):
    """Request model for skill creation."""
    name: Optional[str] = None
    sub_category_id: Optional[int] = None
    billing_class: BillingClass

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v


class SkillUpdate(BaseModel):
    """Request model for partial skill updates; unset fields are left alone."""
    name: Optional[str] = None
    sub_category_id: Optional[int] = None
    billing_class: Optional[BillingClass] = None


class SkillRecord(BaseModel):
    """Stored skill as returned by the write endpoints."""
    id: int
    name: Optional[str] = None
    sub_category_id: Optional[int] = None
    billing_class: Optional[str] = None
    group_text: Optional[str] = None
    has_embedding: bool = False


class CandidateCreate(BaseModel):
    """Request model for candidate creation."""
    first_name: str
    last_name: str
    email: Optional[str] = None
    job_title: Optional[str] = None
    primary_skill_id: Optional[int] = None
    experience_years: Optional[float] = Field(None, ge=0)
    saudi_experience: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    nationality: Optional[str] = None
    billing_class: Optional[BillingClass] = None
    profile_picture_url: Optional[str] = None
    terms_accepted: bool = False


class CandidateUpdate(BaseModel):
    """
    Request model for partial candidate updates.

    Auth fields are accepted here because password resets and verification
    flows save through the same document; they never trigger re-embedding.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    job_title: Optional[str] = None
    primary_skill_id: Optional[int] = None
    experience_years: Optional[float] = Field(None, ge=0)
    saudi_experience: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    nationality: Optional[str] = None
    billing_class: Optional[BillingClass] = None
    profile_picture_url: Optional[str] = None
    terms_accepted: Optional[bool] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None
    email_verification_token: Optional[str] = None
    email_verification_expires: Optional[datetime] = None
    email_verified: Optional[bool] = None
    phone_verified: Optional[bool] = None


class CandidateRecord(BaseModel):
    """Stored candidate as returned by the write endpoints."""
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    job_title: Optional[str] = None
    primary_skill_id: Optional[int] = None
    experience_years: Optional[float] = None
    terms_accepted: bool = False
    has_bio_embedding: bool = False
