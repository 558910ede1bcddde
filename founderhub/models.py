"""Data models for the FounderHub profile workspace."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Dict, Any, Tuple, Union

from pydantic import BaseModel, Field, ConfigDict

from .utils.validation import get_extension


DOCUMENT_EXTENSIONS = frozenset({"pdf"})
VIDEO_EXTENSIONS = frozenset({"mp4", "avi", "mov", "mkv", "wmv"})


class ThumbnailKind(str, Enum):
    """How a thumbnail was produced."""
    DOCUMENT_PREVIEW = "document_preview"
    VIDEO_FRAME = "video_frame"
    GENERIC_ICON = "generic_icon"


class FileIcon(str, Enum):
    """Generic icons used when no rendered preview is available."""
    DOCUMENT = "document"
    VIDEO = "video"
    UNKNOWN = "unknown"

    @classmethod
    def for_extension(cls, extension: str) -> "FileIcon":
        extension = extension.lower().lstrip(".")
        if extension in DOCUMENT_EXTENSIONS:
            return cls.DOCUMENT
        if extension in VIDEO_EXTENSIONS:
            return cls.VIDEO
        return cls.UNKNOWN

    @property
    def glyph(self) -> str:
        return {"document": "📄", "video": "🎬", "unknown": "📁"}[self.value]


class OperationState(str, Enum):
    """What the pitch-deck session is currently doing."""
    IDLE = "idle"
    LOADING = "loading"
    SELECTING = "selecting"
    STAGING = "staging"
    REMOVING = "removing"
    SUBMITTING = "submitting"


class SubmissionStatus(str, Enum):
    """Result kinds of a submit request."""
    SUBMITTED = "submitted"
    NOTHING_TO_SUBMIT = "nothing_to_submit"
    ALREADY_SUBMITTED = "already_submitted"


@dataclass
class StagedFile:
    """A validated file held locally until the deck is submitted."""
    path: Optional[Path]
    extension: str
    size_bytes: int = 0
    original_name: Optional[str] = None
    object_key: Optional[str] = None
    remote_url: Optional[str] = None

    @classmethod
    def from_path(cls, path: Path) -> "StagedFile":
        path = Path(path)
        return cls(
            path=path,
            extension=get_extension(path.name),
            size_bytes=path.stat().st_size if path.is_file() else 0,
            original_name=path.name,
        )

    @classmethod
    def from_stored(cls, url: str, name: Optional[str] = None,
                    original_name: Optional[str] = None) -> "StagedFile":
        """Build an entry for a file that only exists in remote storage."""
        extension = get_extension(name) if name else ""
        if not extension:
            extension = get_extension(url)
        return cls(
            path=None,
            extension=extension,
            original_name=original_name or name,
            object_key=name,
            remote_url=url,
        )

    @property
    def name(self) -> str:
        if self.original_name:
            return self.original_name
        if self.path is not None:
            return self.path.name
        if self.object_key:
            return self.object_key.rsplit("/", 1)[-1]
        return "unknown"

    @property
    def is_stored(self) -> bool:
        return self.remote_url is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": str(self.path) if self.path else None,
            "extension": self.extension,
            "size_bytes": self.size_bytes,
            "object_key": self.object_key,
            "remote_url": self.remote_url,
        }


@dataclass(frozen=True)
class Thumbnail:
    """Preview for one staged file: a rendered image or a generic icon."""
    kind: ThumbnailKind
    icon: FileIcon
    image_path: Optional[Path] = None

    @classmethod
    def generic(cls, extension: str) -> "Thumbnail":
        return cls(kind=ThumbnailKind.GENERIC_ICON, icon=FileIcon.for_extension(extension))

    @property
    def is_generic(self) -> bool:
        return self.kind == ThumbnailKind.GENERIC_ICON


@dataclass(frozen=True)
class ThumbnailOutcome:
    """Result of one thumbnail attempt; `failure` is set when it degraded."""
    thumbnail: Thumbnail
    failure: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.failure is not None


@dataclass(frozen=True)
class StagedEntry:
    """One row of the pitch deck: the file and its preview."""
    file: StagedFile
    thumbnail: Thumbnail


@dataclass
class SubmissionState:
    """Submission flag and date; only moves from unsubmitted to submitted."""
    is_submitted: bool = False
    submitted_at: Optional[datetime] = None

    def mark_submitted(self, when: Optional[datetime] = None) -> None:
        if self.is_submitted:
            return
        self.submitted_at = when or datetime.now()
        self.is_submitted = True


@dataclass(frozen=True)
class FileValidationFailure:
    """A chosen file that was rejected, with the reason."""
    file_name: str
    reason: str

    def __str__(self) -> str:
        return f"{self.file_name}: {self.reason}"


@dataclass
class SelectionResult:
    """Outcome of a file selection: accepted paths plus per-file errors."""
    accepted: List[Path] = field(default_factory=list)
    errors: List[FileValidationFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def should_stage(self) -> bool:
        return bool(self.accepted)


@dataclass
class SubmissionOutcome:
    status: SubmissionStatus
    file_count: int = 0
    submitted_at: Optional[datetime] = None
    file_urls: List[str] = field(default_factory=list)

    @property
    def submitted(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED

    @property
    def message(self) -> str:
        if self.status == SubmissionStatus.NOTHING_TO_SUBMIT:
            return "Nothing to submit: add at least one pitch deck file first"
        if self.status == SubmissionStatus.ALREADY_SUBMITTED:
            return "Pitch deck has already been submitted"
        return f"Pitch deck submitted ({self.file_count} file(s))"


class PitchDeckRecord(BaseModel):
    """Persisted pitch-deck row as stored in the `pitch_decks` table."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    user_id: str
    file_urls: List[str] = Field(default_factory=list)
    file_names: List[str] = Field(default_factory=list)
    original_names: List[str] = Field(default_factory=list)
    file_count: int = 0
    is_submitted: bool = False
    submission_date: Optional[datetime] = None


class TeamMember(BaseModel):
    """A member of the founding team."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    role: str
    avatar_url: str = ""
    linkedin_url: Optional[str] = None
    date_added: datetime = Field(default_factory=datetime.now)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TeamMember":
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            role=record.get("role") or "",
            avatar_url=record.get("avatar_url") or "",
            linkedin_url=record.get("linkedin_url") or None,
            date_added=record.get("created_at") or datetime.now(),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "linkedin_url": self.linkedin_url,
            "avatar_url": self.avatar_url,
            "created_at": self.date_added.isoformat(),
        }

    @property
    def initials(self) -> str:
        parts = [p for p in self.name.split() if p]
        return "".join(p[0].upper() for p in parts[:2]) or "?"


class CompanyProfile(BaseModel):
    company_name: str = ""
    tagline: str = ""
    industry: str = ""
    region: str = ""


class FundingProfile(BaseModel):
    idea_description: str = ""
    funding_goal: Optional[int] = None
    funding_phase: Optional[str] = None
    avatar_url: Optional[str] = None


CANVAS_SECTIONS: Tuple[str, ...] = (
    "key_partners",
    "key_activities",
    "key_resources",
    "value_propositions",
    "customer_relationships",
    "customer_segments",
    "channels",
    "cost_structure",
    "revenue_streams",
)


class BusinessModelCanvas(BaseModel):
    """The nine free-text sections of a Business Model Canvas."""
    key_partners: str = ""
    key_activities: str = ""
    key_resources: str = ""
    value_propositions: str = ""
    customer_relationships: str = ""
    customer_segments: str = ""
    channels: str = ""
    cost_structure: str = ""
    revenue_streams: str = ""

    def is_section_complete(self, section: str) -> bool:
        return bool(getattr(self, section).strip())

    @property
    def completed_sections(self) -> int:
        return sum(1 for s in CANVAS_SECTIONS if self.is_section_complete(s))

    @property
    def completion_percentage(self) -> float:
        return self.completed_sections / len(CANVAS_SECTIONS) * 100


class DashboardSummary(BaseModel):
    """Read-only aggregate shown on the founder dashboard."""
    company_name: str = ""
    tagline: str = ""
    industry: str = ""
    region: str = ""
    profile_completion: float = 0.0
    funding_goal: Optional[int] = None
    funding_phase: Optional[str] = None
    pitch_deck_file_count: int = 0
    pitch_deck_submitted: bool = False
    pitch_deck_submitted_at: Optional[datetime] = None
    team_member_count: int = 0
    leadership: List[str] = Field(default_factory=list)
    team_completion: float = 0.0
    canvas_completed_sections: int = 0
    canvas_completion: float = 0.0
    generated_at: datetime = Field(default_factory=datetime.now)
