"""Tests for core schemas: Source, Scholarship, PageResult, ScrapeRunResult."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from src.core.schemas import (
    DEFAULT_CATEGORY,
    SEE_WEBSITE,
    PageResult,
    Scholarship,
    ScrapeRunResult,
    Source,
    UserScholarshipStatus,
)


def _make_scholarship(**overrides: object) -> Scholarship:
    defaults: dict[str, object] = {
        "id": "umich-smith-family-award-2500-abcdef12",
        "source_id": "umich",
        "name": "Smith Family Award",
        "provider": "UMich External Opportunities",
        "amount": 2500,
        "url": "https://umich.academicworks.com/opportunities/123",
    }
    defaults.update(overrides)
    return Scholarship(**defaults)  # type: ignore[arg-type]


class TestSource:
    def test_normalizes_fields(self) -> None:
        s = Source(id=" UMich ", display_name="UMich", base_url="https://umich.academicworks.com/",
                   listing_path="opportunities/external")
        assert s.id == "umich"
        assert s.base_url == "https://umich.academicworks.com"
        assert s.listing_path == "/opportunities/external"

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError, match="source id must not be empty"):
            Source(id="  ", display_name="X", base_url="https://x.academicworks.com")

    def test_relative_base_url_rejected(self) -> None:
        with pytest.raises(ValidationError, match="absolute http"):
            Source(id="x", display_name="X", base_url="x.academicworks.com")


class TestScholarship:
    def test_defaults(self) -> None:
        s = _make_scholarship()
        assert s.deadline == SEE_WEBSITE
        assert s.categories == [DEFAULT_CATEGORY]
        assert s.region == "National"
        assert s.requirements == []
        assert s.updated_at is None

    def test_frozen(self) -> None:
        s = _make_scholarship()
        with pytest.raises(ValidationError):
            s.name = "Other"  # type: ignore[misc]

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_scholarship(amount=-1)

    def test_at_most_five_requirements(self) -> None:
        with pytest.raises(ValidationError):
            _make_scholarship(requirements=[f"Requirement {i}" for i in range(6)])

    def test_empty_categories_become_general(self) -> None:
        assert _make_scholarship(categories=[]).categories == [DEFAULT_CATEGORY]

    def test_json_round_trip(self) -> None:
        s = _make_scholarship(requirements=["Must be enrolled."], categories=["Business"])
        assert Scholarship.model_validate_json(s.model_dump_json()) == s


class TestUserScholarshipStatus:
    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            UserScholarshipStatus(user_id="u1", scholarship_id="s1", status="saved")  # type: ignore[arg-type]


class TestPageResult:
    def test_empty_defaults(self) -> None:
        r = PageResult()
        assert r.items == []
        assert r.total_count == 0
        assert r.source == "none"
        assert r.error is None

    def test_unknown_origin_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PageResult(source="disk")  # type: ignore[arg-type]


class TestScrapeRunResult:
    def test_unique_count(self) -> None:
        now = datetime.now()
        r = ScrapeRunResult(
            scholarships=[_make_scholarship(), _make_scholarship(id="other")],
            raw_count=3,
            started_at=now,
            finished_at=now,
        )
        assert r.unique_count == 2
        assert r.raw_count == 3
