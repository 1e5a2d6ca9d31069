from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal, Union


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Candidate details shown in the template sidebar
class SidebarInfo(CamelModel):
    name: str = ""
    nationality: str = ""
    gender: str = ""


# One block of professional experience
class ExperienceEntry(CamelModel):
    title: str = ""
    company: str = ""
    period: str = ""
    points: List[str] = []


# Structured output of the optimize / refine calls
class CVResult(CamelModel):
    match_score: int = Field(ge=0, le=100)
    sidebar_info: SidebarInfo
    education: List[str]
    experience: List[ExperienceEntry]
    optimized_cv: str = Field(alias="optimizedCV")
    key_changes: List[str] = []
    suggested_keywords: List[str] = []
    missing_skills: List[str] = []
    strengths: List[str] = []
    photo_url: Optional[str] = None
    company_logo_url: Optional[str] = None

    @field_validator("match_score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        if isinstance(v, str):
            v = v.strip().rstrip("%")
        try:
            score = round(float(v))
        except (TypeError, ValueError, OverflowError):
            raise ValueError(f"matchScore must be a number, got {v!r}")
        return max(0, min(100, score))


# Weight constants for the page splitter
class PaginationConfig(CamelModel):
    page_one_limit: float = 200
    other_page_limit: float = 220
    experience_header_weight: float = 12
    line_weight: float = 6
    chars_per_line: int = Field(default=75, gt=0)
    education_header_weight: float = 20
    education_line_weight: float = 5


class PagedEntry(CamelModel):
    index: int
    entry: ExperienceEntry


class Page(CamelModel):
    page_index: int
    show_education: bool
    entries: List[PagedEntry] = []


# Base64 file payload as sent to the AI service
class FilePayload(CamelModel):
    filename: str = ""
    mime_type: str
    data: str


# A pasted text or an uploaded file
DocumentInput = Union[str, FilePayload]


EditKind = Literal[
    "update_sidebar",
    "update_education",
    "add_education",
    "delete_education",
    "update_experience",
    "add_experience",
    "delete_experience",
    "update_point",
    "add_point",
    "delete_point",
]


# Serialized edit, dispatched by layout.edits.apply_edit
class EditOp(CamelModel):
    op: EditKind
    index: Optional[int] = None
    point_index: Optional[int] = None
    field: Optional[str] = None
    text: Optional[str] = None


class RefineRequest(CamelModel):
    result: CVResult
    instruction: str


class EditRequest(CamelModel):
    result: CVResult
    edit: EditOp


class LayoutRequest(CamelModel):
    result: CVResult
    config: Optional[PaginationConfig] = None
