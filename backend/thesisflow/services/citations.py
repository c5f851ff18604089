from typing import Iterable, Protocol
from thesisflow.models import CitationStyle


class Citable(Protocol):
    title: str
    authors: list[str] | None
    year: int | None
    source: str | None


TEMPLATES: dict[CitationStyle, str] = {
    CitationStyle.APA: "{authors} ({year}). {title}. {source}",
    CitationStyle.MLA: '{authors}. "{title}." {source}, {year}.',
    CitationStyle.CHICAGO: '{authors}. "{title}." {source} ({year}).',
}


def format_citation(reference: Citable, style: CitationStyle | str = CitationStyle.APA) -> str:
    """Render one reference with the fixed template for ``style``."""
    template = TEMPLATES[CitationStyle(style)]
    authors = [a for a in (reference.authors or []) if a]
    return template.format(
        authors=", ".join(authors) if authors else "Unknown Author",
        year=reference.year if reference.year is not None else "n.d.",
        title=reference.title or "Untitled",
        source=reference.source or "",
    )


def export_citations(references: Iterable[Citable], style: CitationStyle | str = CitationStyle.APA) -> str:
    return "\n\n".join(format_citation(ref, style) for ref in references)
