import os
from typing import Annotated, List
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """
    Artifact catalogue search configuration
    Manages all environment variables with validation and type safety
    """

    # Basic application settings
    APP_NAME: str = "Artifact Catalogue Search"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API settings
    API_PREFIX: str = "/api"
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # Review-status store (relational)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./catalogue_reviews.db",
        description="Async SQLAlchemy URL of the review/rating database"
    )

    # Artifact store (document)
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL for artifact documents"
    )
    MONGODB_DATABASE: str = Field(default="catalogue", description="MongoDB database name")
    MONGODB_COLLECTION: str = Field(default="artifacts", description="Artifact collection name")
    MONGODB_TIMEOUT_MS: int = Field(
        default=5000,
        description="Server selection timeout for MongoDB operations"
    )

    # Search behaviour
    DEFAULT_PAGE_SIZE: int = Field(default=6, description="Page size used when none (or <= 0) is given")
    MAX_PAGE_SIZE: int = Field(default=100, description="Upper bound applied to requested page sizes")
    GEO_KM_PER_DEGREE: float = Field(
        default=111.0,
        description="Kilometres per degree used by the bounding-box radius approximation"
    )
    SEARCH_INCLUDE_RATINGS: bool = Field(
        default=True,
        description="Attach average rating and rating count to returned artifacts"
    )
    RATING_QUERY_CHUNK_SIZE: int = Field(
        default=500,
        description="Maximum number of artifact ids per rating aggregation query"
    )

    model_config = SettingsConfigDict(
        env_file=os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_database_url(cls, v):
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE", "RATING_QUERY_CHUNK_SIZE", "MONGODB_TIMEOUT_MS")
    @classmethod
    def validate_positive(cls, v, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer")
        return v

    @field_validator("GEO_KM_PER_DEGREE")
    @classmethod
    def validate_km_per_degree(cls, v):
        if v <= 0:
            raise ValueError("GEO_KM_PER_DEGREE must be positive")
        return v


# Global settings instance
settings = Settings()
