import uuid
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, EmailStr, Field, field_validator
from thesisflow.models import (
    ThesisStatus, ChapterStatus, TaskStatus, TaskPriority,
    CitationStyle, PermissionLevel, JournalEntryType
)


class UserBase(BaseModel):
    email: EmailStr
    first_name: str | None = None
    last_name: str | None = None


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class UserResponse(UserBase):
    id: uuid.UUID
    study_level: str | None = None
    field: str | None = None
    language: str | None = None
    onboarding_completed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    study_level: str | None = None
    field: str | None = None
    language: str | None = None


class OnboardingRequest(BaseModel):
    study_level: str = Field(min_length=1)
    field: str = Field(min_length=1)
    language: str = "english"
    thesis_title: str = Field(min_length=1, max_length=500)
    topic: str | None = None
    research_questions: list[str] = []
    objectives: list[str] = []


class ThesisUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    topic: str | None = None
    language: str | None = None
    research_questions: list[str] | None = None
    objectives: list[str] | None = None
    status: ThesisStatus | None = None
    matrix_columns: list[str] | None = None
    methodology_type: str | None = None
    specific_methodology: str | None = None


class ThesisResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    topic: str | None
    language: str | None
    research_questions: list[str]
    objectives: list[str]
    status: ThesisStatus
    matrix_columns: list[str]
    methodology_type: str | None
    specific_methodology: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ChapterCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    content: str = ""
    target_word_count: int | None = Field(default=None, ge=0)
    deadline: datetime | None = None


class ChapterUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = None
    status: ChapterStatus | None = None
    target_word_count: int | None = Field(default=None, ge=0)
    deadline: datetime | None = None


class ChapterResponse(BaseModel):
    id: uuid.UUID
    thesis_id: uuid.UUID
    title: str
    content: str
    word_count: int
    target_word_count: int | None
    order_index: int
    status: ChapterStatus
    deadline: datetime | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    paragraph_index: int | None = Field(default=None, ge=0)


class CommentUpdate(BaseModel):
    content: str | None = Field(default=None, min_length=1)
    paragraph_index: int | None = Field(default=None, ge=0)
    resolved: bool | None = None


class CommentResponse(BaseModel):
    id: uuid.UUID
    chapter_id: uuid.UUID
    user_id: uuid.UUID
    content: str
    paragraph_index: int | None
    resolved: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    chapter_id: uuid.UUID | None = None


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    chapter_id: uuid.UUID | None = None
    completed: bool | None = None
    order_index: int | None = Field(default=None, ge=0)


class TaskResponse(BaseModel):
    id: uuid.UUID
    thesis_id: uuid.UUID
    chapter_id: uuid.UUID | None
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    completed: bool
    order_index: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MilestoneCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    target_date: datetime | None = None


class MilestoneInitialize(BaseModel):
    milestones: list[MilestoneCreate] | None = None


class MilestoneUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    target_date: datetime | None = None
    completed: bool | None = None


class MilestoneResponse(BaseModel):
    id: uuid.UUID
    thesis_id: uuid.UUID
    name: str
    description: str | None
    target_date: datetime | None
    completed: bool
    completed_date: datetime | None
    order_index: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReferenceBase(BaseModel):
    title: str = Field(min_length=1, max_length=1000)
    authors: list[str] = []
    year: int | None = None
    source: str | None = None
    url: str | None = None
    doi: str | None = None
    citation_style: CitationStyle = CitationStyle.APA
    notes: str | None = None
    tags: list[str] = []


class ReferenceCreate(ReferenceBase):
    pass


class ReferenceUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=1000)
    authors: list[str] | None = None
    year: int | None = None
    source: str | None = None
    url: str | None = None
    doi: str | None = None
    citation_style: CitationStyle | None = None
    notes: str | None = None
    tags: list[str] | None = None
    matrix_data: dict[str, str] | None = None


class ReferenceResponse(ReferenceBase):
    id: uuid.UUID
    thesis_id: uuid.UUID
    matrix_data: dict[str, str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CitationResponse(BaseModel):
    style: CitationStyle
    citation: str


class MatrixColumnCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Column name cannot be blank")
        return v


class MatrixCellUpdate(BaseModel):
    reference_id: uuid.UUID
    column: str = Field(min_length=1)
    value: str = ""


class MatrixRow(BaseModel):
    reference_id: uuid.UUID
    title: str
    authors: list[str]
    year: int | None
    cells: dict[str, str]


class MatrixResponse(BaseModel):
    columns: list[str]
    rows: list[MatrixRow]


class ShareCreate(BaseModel):
    email: EmailStr
    permission_level: PermissionLevel = PermissionLevel.READ
    expires_in_days: int | None = Field(default=None, ge=1, le=365)


class SharedAccessResponse(BaseModel):
    id: uuid.UUID
    thesis_id: uuid.UUID
    email: str
    token: str
    permission_level: PermissionLevel
    accepted: bool
    expires_at: datetime | None
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentResponse(BaseModel):
    id: uuid.UUID
    thesis_id: uuid.UUID
    title: str
    content: str
    filename: str
    mime_type: str
    created_at: datetime

    class Config:
        from_attributes = True


class JournalEntryCreate(BaseModel):
    content: str = Field(min_length=1)
    entry_type: JournalEntryType = JournalEntryType.THOUGHT
    tags: list[str] = []
    entry_date: datetime | None = None


class JournalEntryUpdate(BaseModel):
    content: str | None = Field(default=None, min_length=1)
    entry_type: JournalEntryType | None = None
    tags: list[str] | None = None
    entry_date: datetime | None = None


class JournalEntryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    content: str
    entry_type: JournalEntryType
    tags: list[str]
    entry_date: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FlashcardCreate(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    category: str = "general"


class FlashcardUpdate(BaseModel):
    front: str | None = Field(default=None, min_length=1)
    back: str | None = Field(default=None, min_length=1)
    category: str | None = None
    mastery_level: int | None = Field(default=None, ge=0, le=5)


class FlashcardResponse(BaseModel):
    id: uuid.UUID
    thesis_id: uuid.UUID
    front: str
    back: str
    category: str
    mastery_level: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FlashcardStats(BaseModel):
    total: int
    new: int
    learning: int
    mastered: int


class DashboardStats(BaseModel):
    total_words: int = 0
    completed_chapters: int = 0
    total_chapters: int = 0
    pending_tasks: int = 0
    upcoming_deadlines: int = 0
    progress: int = 0


class DashboardResponse(BaseModel):
    thesis: ThesisResponse | None
    chapters: list[ChapterResponse] = []
    tasks: list[TaskResponse] = []
    milestones: list[MilestoneResponse] = []
    stats: DashboardStats


class PlannerResponse(BaseModel):
    thesis: ThesisResponse | None
    milestones: list[MilestoneResponse] = []


class EditorResponse(BaseModel):
    thesis: ThesisResponse | None
    chapters: list[ChapterResponse] = []


class TasksPageResponse(BaseModel):
    tasks: list[TaskResponse] = []
    chapters: list[ChapterResponse] = []


class SettingsResponse(BaseModel):
    user: UserResponse
    thesis: ThesisResponse | None
    shared_access: list[SharedAccessResponse] = []


class SharedThesisResponse(BaseModel):
    thesis: ThesisResponse
    chapters: list[ChapterResponse]
    permission_level: PermissionLevel


AssistAction = Literal["outline", "academic", "summarize", "structure", "humanize", "ghostwrite"]


class AIAssistRequest(BaseModel):
    action: AssistAction
    chapter_title: str = ""
    content: str | None = None
    prompt: str = ""


class AIAssistResponse(BaseModel):
    response: str


class AIStatusResponse(BaseModel):
    provider: str
    model: str
    configured: bool


class FlashcardGenerateRequest(BaseModel):
    amount: int | None = Field(default=None, ge=1, le=20)
    category: str = "general"


class MethodologyRequest(BaseModel):
    methodology_type: Literal["qualitative", "quantitative", "mixed"]
    specific_methodology: str = Field(min_length=1)


class MethodologyResponse(BaseModel):
    chapter_id: uuid.UUID
    chapter: ChapterResponse
