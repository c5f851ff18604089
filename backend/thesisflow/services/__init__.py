from thesisflow.services.ai_provider import (
    AIProvider,
    AIProviderConfig,
    AIProviderError,
    AIProviderNotConfigured,
    create_provider,
)
from thesisflow.services.citations import format_citation, export_citations
from thesisflow.services.documents import (
    DocumentTooLarge,
    UnsupportedDocumentType,
    DocumentExtractionError,
    read_upload,
    extract_text,
)
from thesisflow.services.generation import FlashcardParseError
from thesisflow.services.milestones import DEFAULT_MILESTONES

__all__ = [
    "AIProvider",
    "AIProviderConfig",
    "AIProviderError",
    "AIProviderNotConfigured",
    "create_provider",
    "format_citation",
    "export_citations",
    "DocumentTooLarge",
    "UnsupportedDocumentType",
    "DocumentExtractionError",
    "read_upload",
    "extract_text",
    "FlashcardParseError",
    "DEFAULT_MILESTONES",
]
