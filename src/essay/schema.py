"""StudentProfile model for config/student.yaml."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class StudentProfile(BaseModel):
    """What the essay writer knows about the student."""

    full_name: str | None = None
    age: int | None = Field(default=None, ge=0)
    graduation_year: int | None = None
    is_transfer: bool = False
    interests: list[str] = Field(default_factory=list)
    quiz_answers: dict[str, str] = Field(default_factory=dict)
    base_essay: str = ""

    @field_validator("interests")
    @classmethod
    def strip_interests(cls, v: list[str]) -> list[str]:
        return [i.strip() for i in v if i.strip()]

    @classmethod
    def from_yaml(cls, path: str | Path) -> "StudentProfile":
        """Load a profile from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Student profile not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    def to_yaml(self, path: str | Path) -> None:
        """Write the profile to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump()
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))
