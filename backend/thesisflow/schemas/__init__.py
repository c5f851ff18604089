from thesisflow.schemas.schemas import (
    UserCreate, UserResponse, ProfileUpdate, OnboardingRequest,
    ThesisUpdate, ThesisResponse,
    ChapterCreate, ChapterUpdate, ChapterResponse,
    CommentCreate, CommentUpdate, CommentResponse,
    TaskCreate, TaskUpdate, TaskResponse,
    MilestoneCreate, MilestoneInitialize, MilestoneUpdate, MilestoneResponse,
    ReferenceCreate, ReferenceUpdate, ReferenceResponse, CitationResponse,
    MatrixColumnCreate, MatrixCellUpdate, MatrixRow, MatrixResponse,
    ShareCreate, SharedAccessResponse,
    DocumentResponse,
    JournalEntryCreate, JournalEntryUpdate, JournalEntryResponse,
    FlashcardCreate, FlashcardUpdate, FlashcardResponse, FlashcardStats,
    DashboardStats, DashboardResponse, PlannerResponse, EditorResponse,
    TasksPageResponse, SettingsResponse, SharedThesisResponse,
    AIAssistRequest, AIAssistResponse, AIStatusResponse,
    FlashcardGenerateRequest, MethodologyRequest, MethodologyResponse
)

__all__ = [
    "UserCreate", "UserResponse", "ProfileUpdate", "OnboardingRequest",
    "ThesisUpdate", "ThesisResponse",
    "ChapterCreate", "ChapterUpdate", "ChapterResponse",
    "CommentCreate", "CommentUpdate", "CommentResponse",
    "TaskCreate", "TaskUpdate", "TaskResponse",
    "MilestoneCreate", "MilestoneInitialize", "MilestoneUpdate", "MilestoneResponse",
    "ReferenceCreate", "ReferenceUpdate", "ReferenceResponse", "CitationResponse",
    "MatrixColumnCreate", "MatrixCellUpdate", "MatrixRow", "MatrixResponse",
    "ShareCreate", "SharedAccessResponse",
    "DocumentResponse",
    "JournalEntryCreate", "JournalEntryUpdate", "JournalEntryResponse",
    "FlashcardCreate", "FlashcardUpdate", "FlashcardResponse", "FlashcardStats",
    "DashboardStats", "DashboardResponse", "PlannerResponse", "EditorResponse",
    "TasksPageResponse", "SettingsResponse", "SharedThesisResponse",
    "AIAssistRequest", "AIAssistResponse", "AIStatusResponse",
    "FlashcardGenerateRequest", "MethodologyRequest", "MethodologyResponse"
]
