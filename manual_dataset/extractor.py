"""Extraction du texte intégré des pages d'un PDF (pdfplumber)."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import pdfplumber
from pdfplumber.pdf import PDF

from .errors import ExtractionError

PathLike = Union[str, Path]


def open_document(pdf_path: PathLike) -> PDF:
    """Ouvre le PDF en lecture ; à utiliser comme context manager (`with open_document(...)`)."""
    path = Path(pdf_path).expanduser()
    if not path.is_file():
        raise ExtractionError(f"PDF introuvable: {path}")
    return pdfplumber.open(str(path))


def page_count(document: PDF) -> int:
    return len(document.pages)


def extract_page_text(document: PDF, page_index: int) -> str:
    """Texte brut de la page `page_index` (1-based) d'un document déjà ouvert."""
    total = page_count(document)
    if page_index < 1 or page_index > total:
        raise ExtractionError(f"Page {page_index} hors du document ({total} pages)")
    page = document.pages[page_index - 1]
    try:
        return page.extract_text() or ""
    except Exception as e:
        raise ExtractionError(f"Page {page_index} illisible: {e}") from e
    finally:
        # libère le cache de mise en page : le document reste ouvert pour tout le run
        page.close()


def extract(pdf_path: PathLike, page_index: int) -> str:
    """Même résultat que `extract_page_text`, en rouvrant le fichier."""
    with open_document(pdf_path) as document:
        return extract_page_text(document, page_index)
