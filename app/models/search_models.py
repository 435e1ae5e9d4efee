"""Pydantic models for candidate and skill search."""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SearchMethod = Literal["pgvector", "text"]


class CandidateSummary(BaseModel):
    """Candidate card returned by the employer search."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    first_name: str = Field("", serialization_alias="firstName")
    last_name: str = Field("", serialization_alias="lastName")
    job_title: str = Field("", serialization_alias="jobTitle")
    location: str = ""
    nationality: str = ""
    experience_years: float = Field(0, serialization_alias="experienceYears")
    saudi_experience: float = Field(0, serialization_alias="saudiExperience")
    profile_picture_url: Optional[str] = Field(None, serialization_alias="profilePictureUrl")
    billing_class: Optional[str] = Field(None, serialization_alias="billingClass")


class CandidateSearchResponse(BaseModel):
    """Response for GET /candidates/search."""
    candidates: List[CandidateSummary] = Field(default_factory=list)
    total: int = 0


class SkillSummary(BaseModel):
    """Skill picker entry with its taxonomy path."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    billing_class: Optional[str] = Field(None, serialization_alias="billingClass")
    sub_category: Optional[str] = Field(None, serialization_alias="subCategory")
    category: Optional[str] = None
    discipline: Optional[str] = None
    full_path: str = Field("", serialization_alias="fullPath")


class SearchTimings(BaseModel):
    """Per-stage wall clock timings in milliseconds."""
    total_ms: float = Field(0, serialization_alias="totalMs")
    embedding_ms: Optional[float] = Field(None, serialization_alias="embeddingMs")
    db_ms: Optional[float] = Field(None, serialization_alias="dbMs")


class SkillSearchResponse(BaseModel):
    """Response for GET /skills/search."""
    skills: List[SkillSummary] = Field(default_factory=list)


class SkillSearchDebugResponse(BaseModel):
    """Response for GET /skills/search-debug."""
    skills: List[SkillSummary] = Field(default_factory=list)
    method: SearchMethod = "text"
    timings: SearchTimings = Field(default_factory=SearchTimings)
    error: Optional[str] = None


class SkillDetailResponse(BaseModel):
    """Response for GET /skills/{skill_id}."""
    skill: SkillSummary
