from fastapi import APIRouter
from thesisflow.api.v1 import (
    auth, onboarding, theses, chapters, tasks, milestones, references, matrix,
    settings, shared, documents, journal, flashcards, pages, ai
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(onboarding.router, prefix="/onboarding", tags=["onboarding"])
router.include_router(theses.router, prefix="/thesis", tags=["thesis"])
router.include_router(chapters.router, prefix="/chapters", tags=["chapters"])
router.include_router(chapters.comments_router, prefix="/comments", tags=["comments"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(milestones.router, prefix="/milestones", tags=["milestones"])
router.include_router(references.router, prefix="/references", tags=["references"])
router.include_router(matrix.router, prefix="/matrix", tags=["matrix"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])
router.include_router(shared.router, prefix="/shared", tags=["shared"])
router.include_router(documents.router, prefix="/documents", tags=["documents"])
router.include_router(journal.router, prefix="/journal", tags=["journal"])
router.include_router(flashcards.router, prefix="/flashcards", tags=["flashcards"])
router.include_router(ai.router, prefix="/ai", tags=["ai"])
router.include_router(pages.router, tags=["pages"])
