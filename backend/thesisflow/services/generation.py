import json
import logging
import re
from typing import Iterable, Sequence
from thesisflow.core.config import get_settings
from thesisflow.models import Chapter, Document, Thesis
from thesisflow.services.ai_provider import AIProvider, AIProviderError

logger = logging.getLogger(__name__)
settings = get_settings()

ASSISTANT_PREAMBLE = (
    "You are an academic writing assistant helping PhD and Master's students with their thesis. "
)

ASSIST_INSTRUCTIONS = {
    "outline": (
        "Generate a detailed outline for the chapter. Include main sections, subsections, "
        "and key points to cover. Format as a structured outline."
    ),
    "academic": (
        "Rewrite the provided text in a formal academic tone. Maintain the original meaning "
        "while improving clarity, precision, and scholarly language."
    ),
    "summarize": "Summarize the content into 3-5 concise bullet points that capture the key ideas.",
    "structure": (
        "Suggest the best structure for this section. Recommend how to organize the content, "
        "what subheadings to use, and how to improve the flow."
    ),
    "humanize": (
        "Rewrite the provided text so it reads naturally, as written by a careful human author. "
        "Vary sentence length, remove formulaic phrasing and keep every claim and citation intact."
    ),
    "ghostwrite": (
        "Draft new prose for this chapter following the user's request. Write in a formal "
        "academic register, continue from the existing content and do not repeat it."
    ),
}

DEFAULT_INSTRUCTION = "Provide helpful suggestions to improve the academic writing."

METHODOLOGY_OPTIONS: dict[str, dict[str, str]] = {
    "qualitative": {
        "case_study": "Case Study",
        "phenomenology": "Phenomenology",
        "grounded_theory": "Grounded Theory",
        "ethnography": "Ethnography",
    },
    "quantitative": {
        "survey": "Survey Research",
        "experimental": "Experimental (RCT)",
        "correlational": "Correlational",
    },
    "mixed": {
        "explanatory": "Explanatory Sequential",
        "exploratory": "Exploratory Sequential",
        "convergent": "Convergent Parallel",
    },
}

METHODOLOGY_CHAPTER_TITLE = "Methodology"

_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*|\s*```$")
_FLASHCARD_KEYS = ("flashcards", "cards", "questions")


class FlashcardParseError(AIProviderError):
    pass


def build_assist_system_prompt(action: str) -> str:
    return ASSISTANT_PREAMBLE + ASSIST_INSTRUCTIONS.get(action, DEFAULT_INSTRUCTION)


def build_document_context(documents: Sequence[Document], limit: int | None = None) -> str:
    """Numbered reference block appended to the system prompt; empty without documents."""
    if not documents:
        return ""
    limit = limit or settings.document_context_chars

    blocks = [
        f"[{i}] {doc.title} (Filename: {doc.filename}):\n{doc.content[:limit]}..."
        for i, doc in enumerate(documents, start=1)
    ]
    return (
        "\n\nREFERENCE DOCUMENTS:\n"
        + "\n\n".join(blocks)
        + "\n\nINSTRUCTIONS FOR USING REFERENCES:\n"
        "- Use the information from the documents above to answer the user request.\n"
        "- Cite the documents using the format [N] where N is the reference number, e.g. [1].\n"
        "- If you use information from a document, you MUST cite it.\n"
        "- At the end of your response, list the references you used."
    )


def build_assist_prompt(chapter_title: str, content: str | None, prompt: str) -> str:
    return f"Chapter: {chapter_title}\n\nContent:\n{content or '(empty)'}\n\nRequest: {prompt}"


async def assist(
    provider: AIProvider,
    action: str,
    chapter_title: str,
    content: str | None,
    prompt: str,
    documents: Sequence[Document] = (),
) -> str:
    system_prompt = build_assist_system_prompt(action) + build_document_context(documents)
    return await provider.generate(build_assist_prompt(chapter_title, content, prompt), system_prompt)


def build_chapter_context(chapters: Iterable[Chapter], limit: int | None = None) -> str:
    limit = limit or settings.chapter_context_chars
    parts = [
        f"## {chapter.title}\n{chapter.content[:limit]}"
        for chapter in chapters
        if chapter.content and chapter.content.strip()
    ]
    return "\n\n".join(parts)


def parse_flashcards(raw: str) -> list[dict[str, str]]:
    """
    Pull question/answer pairs out of a model reply.

    Accepts a bare JSON array or an object wrapping the array under
    ``flashcards``, ``cards`` or ``questions``, optionally inside a markdown
    code fence. Items may use ``question``/``answer`` or ``front``/``back``.
    Raises ``FlashcardParseError`` when nothing usable comes back.
    """
    text = _CODE_FENCE.sub("", raw.strip()).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FlashcardParseError("Model reply is not valid JSON") from e

    if isinstance(data, dict):
        for key in _FLASHCARD_KEYS:
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            raise FlashcardParseError("No flashcard list in model reply")

    if not isinstance(data, list):
        raise FlashcardParseError("Model reply is not a list")

    cards = []
    for item in data:
        if not isinstance(item, dict):
            continue
        front = item.get("question") or item.get("front")
        back = item.get("answer") or item.get("back")
        if isinstance(front, str) and isinstance(back, str) and front.strip() and back.strip():
            cards.append({"front": front.strip(), "back": back.strip()})

    if not cards:
        raise FlashcardParseError("Model reply contained no question/answer pairs")
    return cards


async def generate_flashcards(
    provider: AIProvider,
    thesis: Thesis,
    chapters: Iterable[Chapter],
    amount: int | None = None,
) -> list[dict[str, str]]:
    amount = amount or settings.flashcard_batch_size
    context = build_chapter_context(chapters) or "(no chapter content yet)"
    system_prompt = (
        "You are a thesis examiner preparing a student for their defense. "
        "Reply with JSON only: an array of objects with \"question\" and \"answer\" keys."
    )
    prompt = (
        f"Thesis: {thesis.title}\n"
        f"Topic: {thesis.topic or 'not specified'}\n\n"
        f"{context}\n\n"
        f"Write {amount} defense questions an examiner is likely to ask, each with a concise model answer."
    )
    raw = await provider.generate(prompt, system_prompt)
    cards = parse_flashcards(raw)
    logger.info("Generated %d flashcards for thesis %s", len(cards), thesis.id)
    return cards[:amount]


def methodology_label(methodology_type: str, specific: str) -> str | None:
    return METHODOLOGY_OPTIONS.get(methodology_type, {}).get(specific)


async def generate_methodology(
    provider: AIProvider,
    thesis: Thesis,
    methodology_type: str,
    specific_methodology: str,
) -> str:
    label = methodology_label(methodology_type, specific_methodology) or specific_methodology
    system_prompt = (
        ASSISTANT_PREAMBLE
        + "Write a structured methodology chapter outline in Markdown with headings "
        "for research design, participants or sample, data collection, data analysis, "
        "validity and reliability, ethical considerations and limitations."
    )
    questions = "\n".join(f"- {q}" for q in thesis.research_questions or []) or "- not specified"
    prompt = (
        f"Thesis title: {thesis.title}\n"
        f"Topic: {thesis.topic or 'not specified'}\n"
        f"Research questions:\n{questions}\n\n"
        f"Approach: {methodology_type} research using a {label} design."
    )
    return await provider.generate(prompt, system_prompt)
