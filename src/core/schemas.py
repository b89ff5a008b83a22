"""Core data models for the scholarship aggregator."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SEE_WEBSITE = "See Website"
DEFAULT_CATEGORY = "General"
DEFAULT_REGION = "National"
MAX_REQUIREMENTS = 5

ScholarshipStatus = Literal["applied", "hidden"]
ResultOrigin = Literal["store", "cache", "live", "none"]


class Source(BaseModel):
    """One university's external-opportunities portal."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    base_url: str
    listing_path: str = "/opportunities/external"

    @field_validator("id")
    @classmethod
    def id_not_empty(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            msg = "source id must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("base_url")
    @classmethod
    def base_url_absolute(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must be an absolute http(s) URL, got '{v}'"
            raise ValueError(msg)
        return v

    @field_validator("listing_path")
    @classmethod
    def listing_path_rooted(cls, v: str) -> str:
        v = v.strip()
        return v if v.startswith("/") else f"/{v}"


class Scholarship(BaseModel):
    """A normalized scholarship listing.

    Frozen — produced once by the extractor and read-only downstream.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    name: str
    provider: str
    amount: int = Field(default=0, ge=0)
    deadline: str = SEE_WEBSITE
    description: str = ""
    requirements: list[str] = Field(default_factory=list, max_length=MAX_REQUIREMENTS)
    url: str
    categories: list[str] = Field(default_factory=lambda: [DEFAULT_CATEGORY])
    region: str = DEFAULT_REGION
    updated_at: datetime | None = None

    @field_validator("categories")
    @classmethod
    def categories_non_empty(cls, v: list[str]) -> list[str]:
        return v or [DEFAULT_CATEGORY]


class UserScholarshipStatus(BaseModel):
    """A user's mark on a single scholarship."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    scholarship_id: str
    status: ScholarshipStatus
    updated_at: datetime = Field(default_factory=datetime.now)


class PageResult(BaseModel):
    """One page of scholarships plus where it came from."""

    items: list[Scholarship] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    source: ResultOrigin = "none"
    error: str | None = None


class SyncResult(BaseModel):
    """Outcome of writing a result set into the store."""

    written: int = 0
    skipped: int = 0
    chunks: int = 0


class ScrapeRunResult(BaseModel):
    """Summary of a batch scrape across all sources."""

    scholarships: list[Scholarship] = Field(default_factory=list)
    sources_attempted: int = 0
    sources_with_results: int = 0
    raw_count: int = 0
    started_at: datetime
    finished_at: datetime

    @property
    def unique_count(self) -> int:
        return len(self.scholarships)
