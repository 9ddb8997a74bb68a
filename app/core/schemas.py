from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Dict, List, Literal, Optional

from app.core.layout import ParserName


ParseQuality = Literal["high", "medium", "low"]


class ResumeModel(BaseModel):
    """JSON-Resume shaped models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Location(ResumeModel):
    city: Optional[str] = None
    region: Optional[str] = None
    country_code: Optional[str] = None


class Profile(ResumeModel):
    network: str
    username: Optional[str] = None
    url: Optional[str] = None


class Basics(ResumeModel):
    name: Optional[str] = None
    label: Optional[str] = None  # headline, e.g. "Senior software engineer"
    email: Optional[str] = None
    phone: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None
    location: Optional[Location] = None
    profiles: Optional[List[Profile]] = None


class WorkEntry(ResumeModel):
    name: Optional[str] = None  # company
    position: Optional[str] = None
    start_date: Optional[str] = None  # YYYY-MM
    end_date: Optional[str] = None  # YYYY-MM, absent while current
    location: Optional[str] = None
    url: Optional[str] = None
    summary: Optional[str] = None
    highlights: Optional[List[str]] = None


class EducationEntry(ResumeModel):
    institution: Optional[str] = None
    study_type: Optional[str] = None  # Bachelor of Science, B.S., MBA ...
    area: Optional[str] = None  # Computer Science
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    score: Optional[str] = None  # GPA
    courses: Optional[List[str]] = None


class Skill(ResumeModel):
    name: str


class Project(ResumeModel):
    name: Optional[str] = None
    description: Optional[str] = None
    highlights: Optional[List[str]] = None
    url: Optional[str] = None


class Certificate(ResumeModel):
    name: Optional[str] = None
    issuer: Optional[str] = None
    date: Optional[str] = None
    url: Optional[str] = None


class Language(ResumeModel):
    language: str
    fluency: Optional[str] = None


class StructuredResume(ResumeModel):
    basics: Basics = Field(default_factory=Basics)
    work: List[WorkEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    certificates: List[Certificate] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)


class FieldConfidence(BaseModel):
    """Per-field confidence metadata. Tracks why confidence is what it is."""
    field_name: str
    confidence: float = Field(..., ge=0.0, le=1.0, description="0.0 (no confidence) to 1.0 (absolute certainty)")
    extraction_method: str = Field(..., description="How it was extracted (e.g., 'feature_score', 'pattern_scan', 'semantic')")
    score: Optional[float] = Field(default=None, description="Winning feature score, when scored")
    threshold: Optional[float] = Field(default=None, description="Threshold the score had to clear")
    reasons: List[str] = Field(default_factory=list, description="Why confidence is this value")
    required: bool = Field(default=False, description="Is this field required for 'high' parse quality?")


class ParseMeta(ResumeModel):
    parser: ParserName
    page_count: int = 0
    char_count: int = 0
    ocr_applied: bool = False
    semantic_enhanced: bool = False


class ParseResponse(BaseModel):
    resume: StructuredResume
    meta: ParseMeta
    confidence_scores: Dict[str, FieldConfidence] = Field(
        default_factory=dict,
        description="Confidence metadata for each basics field"
    )
    parse_quality: ParseQuality
    warnings: List[str] = Field(default_factory=list)
