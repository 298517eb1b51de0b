"""
Pydantic schemas for catalogue artifacts
Document model of the artifact store and the search result DTO
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Any
from datetime import date, datetime


class LocationInfo(BaseModel):
    """Where an artifact was found; empty strings and None mean unknown"""
    model_config = ConfigDict(extra="ignore")

    placename: str = ""
    river: str = ""
    city: str = ""
    region: str = ""
    country: str = ""
    continent: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("placename", "river", "city", "region", "country", "continent", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class ArtifactImage(BaseModel):
    """Image rendition attached to an artifact"""
    model_config = ConfigDict(extra="ignore")

    date: Optional[str] = None
    copyright: Optional[str] = None
    imageid: Optional[int] = None
    idsid: Optional[int] = None
    format: Optional[str] = None
    description: Optional[str] = None
    technique: Optional[str] = None
    renditionnumber: Optional[str] = None
    displayorder: Optional[int] = None
    baseimageurl: Optional[str] = None
    alttext: Optional[str] = None
    width: Optional[int] = None
    publiccaption: Optional[str] = None
    iiifbaseuri: Optional[str] = None
    height: Optional[int] = None


class ArtifactBase(BaseModel):
    """Fields shared by the stored document and the API representation"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id", description="Externally generated artifact id")
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    culture: Optional[str] = None
    department: Optional[str] = None
    period: Optional[str] = None
    medium: Optional[str] = None
    dimension: Optional[str] = None
    artist_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    exact_found_date: Optional[date] = None
    location: LocationInfo = Field(default_factory=LocationInfo)
    uploaded_by: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    images: List[ArtifactImage] = Field(default_factory=list)
    image_url: Optional[str] = None

    @field_validator("exact_found_date", mode="before")
    @classmethod
    def datetime_as_date(cls, v: Any):
        # BSON has no date-only type; documents store midnight datetimes
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("location", mode="before")
    @classmethod
    def missing_location_as_empty(cls, v: Any):
        # legacy documents store an absent location as null or an empty array
        if v is None or (isinstance(v, list) and not v):
            return LocationInfo()
        return v

    @field_validator("tags", "images", mode="before")
    @classmethod
    def none_as_empty_list(cls, v: Any):
        return [] if v is None else v


class Artifact(ArtifactBase):
    """Artifact document as held by the artifact store"""

    @classmethod
    def from_document(cls, document: dict) -> "Artifact":
        return cls.model_validate(document)


class ArtifactResult(ArtifactBase):
    """Artifact returned to catalogue visitors, with live rating aggregates"""

    average_rating: float = Field(default=0.0, alias="averageRating")
    total_ratings: int = Field(default=0, alias="totalRatings")

    @classmethod
    def from_artifact(cls, artifact: Artifact, average_rating: float = 0.0, total_ratings: int = 0) -> "ArtifactResult":
        return cls(
            **artifact.model_dump(),
            average_rating=average_rating,
            total_ratings=total_ratings
        )


class RatingSummary(BaseModel):
    """Average rating and number of ratings for one artifact"""
    artifact_id: str
    average_rating: float = 0.0
    total_ratings: int = 0
