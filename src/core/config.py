"""Configuration models and YAML loader for the scholarship aggregator."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.core.schemas import Source
from src.core.sources import default_sources

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class CategoryRule(BaseModel):
    """One row of the categorization table: a tag and the keywords that trigger it."""

    tag: str
    keywords: list[str]

    @field_validator("tag")
    @classmethod
    def tag_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "category tag must not be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("keywords")
    @classmethod
    def keywords_normalized(cls, v: list[str]) -> list[str]:
        cleaned = [kw.lower().strip() for kw in v if kw.strip()]
        if not cleaned:
            msg = "category rule needs at least one keyword"
            raise ValueError(msg)
        return cleaned


DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        tag="Technology/STEM",
        keywords=["technology", "computer", "engineering", "stem", "science",
                  "math", "cyber", "data"],
    ),
    CategoryRule(
        tag="Medical/Health",
        keywords=["medical", "health", "nursing", "doctor", "medicine",
                  "biology", "dental", "pharmacy"],
    ),
    CategoryRule(
        tag="Law/Policy",
        keywords=["law", "legal", "justice", "attorney", "political", "policy"],
    ),
    CategoryRule(
        tag="Business",
        keywords=["business", "finance", "accounting", "marketing", "management",
                  "entrepreneur"],
    ),
    CategoryRule(
        tag="Arts/Creative",
        keywords=["art", "design", "music", "theater", "film", "creative", "media"],
    ),
    CategoryRule(
        tag="Education",
        keywords=["education", "teaching", "teacher", "child"],
    ),
    CategoryRule(tag="Athletics", keywords=["sport", "athlete", "athletic"]),
    CategoryRule(tag="Women", keywords=["woman", "women", "female"]),
    CategoryRule(
        tag="Diversity",
        keywords=["minority", "diversity", "hispanic", "latino", "black", "african",
                  "asian", "native"],
    ),
)


class ScrapeConfig(BaseModel):
    """Batch sizes and page ceilings for scraping runs."""

    batch_size: int = Field(default=5, ge=1, le=50)
    max_pages: int = Field(default=8, ge=1, le=50)
    live_max_pages: int = Field(default=3, ge=1, le=50)
    page_delay_seconds: float = Field(default=0.0, ge=0.0)


class HttpConfig(BaseModel):
    """HTTP client configuration for listing-page fetches."""

    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_connections: int = Field(default=20, ge=1)
    proxy_base_url: str | None = None

    @field_validator("proxy_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip().rstrip("/")


class StoreConfig(BaseModel):
    """Persistent document store configuration."""

    path: str = "data/scholarships.db"
    bulk_write_size: int = Field(default=500, ge=1, le=500)
    stale_after_days: int = Field(default=30, ge=1)


class CacheConfig(BaseModel):
    """Local page cache configuration.

    Bump ``key`` whenever the extracted shape changes so stale payloads miss.
    """

    path: str = "data/scholarship_cache.json"
    key: str = "scholarship_cache_v8"
    ttl_hours: float = Field(default=24.0, gt=0.0)


class EssayConfig(BaseModel):
    """Essay generation provider and model fallback order."""

    provider: str = "gemini"
    models: list[str] = Field(default_factory=list)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    sources: list[Source] = Field(default_factory=default_sources)
    scrape: ScrapeConfig = Field(default_factory=ScrapeConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    categories: list[CategoryRule] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORY_RULES),
    )
    essay: EssayConfig = Field(default_factory=EssayConfig)

    @field_validator("sources")
    @classmethod
    def sources_unique(cls, v: list[Source]) -> list[Source]:
        if not v:
            msg = "at least one source must be configured"
            raise ValueError(msg)
        seen: set[str] = set()
        for source in v:
            if source.id in seen:
                msg = f"duplicate source id '{source.id}'"
                raise ValueError(msg)
            seen.add(source.id)
        return v

    def source_by_id(self, source_id: str) -> Source | None:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
