from thesisflow.models.models import (
    User, UserSession, Thesis, Chapter, Task, Milestone, Comment,
    Reference, SharedAccess, Document, JournalEntry, Flashcard,
    ThesisStatus, ChapterStatus, TaskStatus, TaskPriority,
    CitationStyle, PermissionLevel, JournalEntryType
)

__all__ = [
    "User", "UserSession", "Thesis", "Chapter", "Task", "Milestone", "Comment",
    "Reference", "SharedAccess", "Document", "JournalEntry", "Flashcard",
    "ThesisStatus", "ChapterStatus", "TaskStatus", "TaskPriority",
    "CitationStyle", "PermissionLevel", "JournalEntryType"
]
