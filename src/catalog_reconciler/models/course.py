"""Course and catalog models.

This module defines Pydantic models for:
- RawRecord: one course row as delivered by the extraction layer
- Course: the canonical, normalized course entity
- CatalogSource / CourseCatalog: the persisted district catalog

Attributes are snake_case in Python and camelCase on disk; always dump
with ``by_alias=True``.
"""

from typing import Annotated, Any

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from catalog_reconciler.normalization.fields import (
    NA,
    clean_description,
    normalize_na,
    parse_credits,
    parse_grades,
)
from catalog_reconciler.normalization.gpa import GPA_VALUES, calculate_gpa
from catalog_reconciler.normalization.schools import (
    dedupe_school_names,
    normalize_school_name,
)

NonEmptyText = Annotated[str, StringConstraints(min_length=1)]

_HTTP_URL = TypeAdapter(AnyHttpUrl)

# Scalar text fields that use the "n/a" sentinel
SCALAR_TEXT_FIELDS: tuple[str, ...] = (
    "subject",
    "term",
    "prerequisite",
    "corequisite",
    "enrollment_notes",
    "course_description",
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class RawRecord(_CamelModel):
    """One course row as produced by the extraction layer for one school.

    Optional fields that are missing are normalized to ``"n/a"`` when the
    record is turned into a Course.
    """

    course_code: str
    course_name: str
    credits: str | float | None = None
    tags: list[str] = Field(default_factory=list)
    schools: list[str] | None = None
    subject: str | None = None
    term: str | None = None
    eligible_grades: str | list[str] | None = None
    prerequisite: str | None = None
    corequisite: str | None = None
    enrollment_notes: str | None = None
    course_description: str | None = None


class Course(_CamelModel):
    """A canonical course, keyed by ``course_code``.

    Attributes:
        course_code: Stable identity assigned by the source extractor.
        course_name: Display name.
        credits: Non-negative credit value.
        tags: Short labels (set semantics, case-sensitive).
        gpa: Grade-point scale derived from name and tags.
        subject: Subject area or "n/a".
        term: Term offered or "n/a".
        eligible_grades: Grade labels the course is open to.
        prerequisite: Prerequisite text or course code(s), or "n/a".
        corequisite: Corequisite text or "n/a".
        enrollment_notes: Enrollment notes or "n/a".
        course_description: Description or "n/a".
        schools: Schools offering the course, no normalized duplicates.
    """

    course_code: NonEmptyText
    course_name: NonEmptyText
    credits: float = Field(default=0.0, ge=0)
    tags: list[str] = Field(default_factory=list)
    gpa: float
    subject: NonEmptyText = NA
    term: NonEmptyText = NA
    eligible_grades: list[str] = Field(default_factory=list)
    prerequisite: NonEmptyText = NA
    corequisite: NonEmptyText = NA
    enrollment_notes: NonEmptyText = NA
    course_description: NonEmptyText = NA
    schools: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_missing_gpa(cls, data: Any) -> Any:
        """Fill in a missing GPA from the name and tags."""
        if isinstance(data, dict) and data.get("gpa") is None:
            name = data.get("courseName", data.get("course_name")) or ""
            tags = data.get("tags") or []
            data = {**data, "gpa": calculate_gpa(name, tags)}
        return data

    @field_validator("gpa")
    @classmethod
    def _check_gpa(cls, value: float) -> float:
        if value not in GPA_VALUES:
            msg = f"gpa must be one of {sorted(GPA_VALUES)}, got {value}"
            raise ValueError(msg)
        return value

    @field_validator("course_code", "course_name", *SCALAR_TEXT_FIELDS)
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "must be meaningful text or 'n/a', not blank"
            raise ValueError(msg)
        return value

    @field_validator("schools")
    @classmethod
    def _check_school_duplicates(cls, value: list[str]) -> list[str]:
        keys = [normalize_school_name(school) for school in value]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            msg = f"schools contains equivalent names: {', '.join(duplicates)}"
            raise ValueError(msg)
        return value

    def to_document(self) -> dict[str, Any]:
        """Serialize to the on-disk (camelCase) form."""
        return self.model_dump(by_alias=True)


class CatalogSource(_CamelModel):
    """Provenance of a catalog or per-source document.

    ``school`` is only set on per-source documents.
    """

    district: NonEmptyText
    url: NonEmptyText
    school: str | None = None

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        # Validated as a URL but stored as written so documents round-trip
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            msg = f"not a valid http(s) URL: {value!r}"
            raise ValueError(msg) from None
        return value


class CourseCatalog(_CamelModel):
    """A district catalog: provenance plus courses with unique codes."""

    source: CatalogSource
    courses: list[Course] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_codes(self) -> "CourseCatalog":
        seen: set[str] = set()
        duplicates: list[str] = []
        for course in self.courses:
            if course.course_code in seen and course.course_code not in duplicates:
                duplicates.append(course.course_code)
            seen.add(course.course_code)
        if duplicates:
            msg = f"duplicate courseCode values: {', '.join(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def course_codes(self) -> list[str]:
        """Course codes in catalog order."""
        return [course.course_code for course in self.courses]

    def to_document(self) -> dict[str, Any]:
        """Serialize to the on-disk (camelCase) form."""
        return self.model_dump(by_alias=True, exclude_none=True)


def create_course(data: RawRecord | dict[str, Any]) -> Course:
    """Create a normalized Course from a raw record.

    Trims identity and name, parses credits and grades, maps missing or
    empty text to ``"n/a"``, cleans the description, de-duplicates schools
    and derives the GPA.

    Args:
        data: A RawRecord or a mapping in raw-record shape.

    Returns:
        The normalized course.
    """
    raw = data if isinstance(data, RawRecord) else RawRecord.model_validate(data)
    course_name = raw.course_name.strip()

    return Course(
        course_code=raw.course_code.strip(),
        course_name=course_name,
        credits=parse_credits(raw.credits),
        tags=list(raw.tags),
        gpa=calculate_gpa(course_name, raw.tags),
        subject=normalize_na(raw.subject),
        term=normalize_na(raw.term),
        eligible_grades=parse_grades(raw.eligible_grades),
        prerequisite=normalize_na(raw.prerequisite),
        corequisite=normalize_na(raw.corequisite),
        enrollment_notes=normalize_na(raw.enrollment_notes),
        course_description=clean_description(raw.course_description),
        schools=dedupe_school_names(raw.schools or []),
    )
