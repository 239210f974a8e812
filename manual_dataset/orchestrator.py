import logging
import time
from pathlib import Path
from typing import Callable, Optional

from .correction_service import CorrectionService
from .extractor import extract_page_text, open_document, page_count
from .normalizer import normalize
from .renderer import PageRenderer, get_renderer
from .storage import ensure_output_dirs, write_status
from .types import PageRecord, ProcessConfig, ProcessReport, StepResult
from .writer import append_record

logger = logging.getLogger(__name__)


def resolve_page_range(total: int, first_page: int = 1, last_page: Optional[int] = None, skip_last_page: bool = False) -> range:
    """
    Pages (1-based) à traiter.

    `skip_last_page` reproduit l'ancien comportement de la boucle, qui
    s'arrêtait avant la dernière page du document.
    """
    last = total if last_page is None else min(last_page, total)
    if skip_last_page:
        last = min(last, total - 1)
    return range(max(first_page, 1), last + 1)


def _run_step(name: str, page_number: int, fn: Callable, *args) -> StepResult:
    """Exécute une étape feuille et convertit son exception éventuelle en StepResult."""
    t0 = time.time()
    try:
        value = fn(*args)
    except Exception as e:
        return StepResult(
            name=name,
            ok=False,
            duration_sec=time.time() - t0,
            page_number=page_number,
            error=f"{type(e).__name__}: {e}",
        )
    return StepResult(name=name, ok=True, duration_sec=time.time() - t0, page_number=page_number, value=value)


def _emit(page_number: int, text: str, image_name: str, output_csv: Path) -> PageRecord:
    record = PageRecord.build(page_number, text, image_name)
    append_record(record, output_csv)
    return record


def process_page(document, page_number: int, cfg: ProcessConfig, renderer: PageRenderer, corrector, report: ProcessReport) -> StepResult:
    """
    Extraction → nettoyage → rendu → correction → écriture d'une page.

    Retourne le résultat de l'écriture, ou celui de la première étape
    bloquante en échec (extraction, rendu, écriture). L'échec de la
    correction n'est pas bloquant : le texte nettoyé est écrit tel quel.
    """
    extracted = _run_step("extract", page_number, extract_page_text, document, page_number)
    report.steps.append(extracted)
    if not extracted.ok:
        return extracted
    text = normalize(extracted.value)
    extracted.value = None

    rendered = _run_step("render", page_number, renderer.render, cfg.pdf_path, page_number, cfg.output_image_dir)
    report.steps.append(rendered)
    if not rendered.ok:
        return rendered
    rendered.output_paths = {"image": str(Path(cfg.output_image_dir) / rendered.value)}

    correction = corrector.request_correction(text, page_number)
    report.steps.append(correction)
    if not correction.ok:
        report.corrections_failed += 1
        logger.error("Page %s: correction indisponible, texte non corrigé conservé → %s", page_number, correction.error)

    written = _run_step("append", page_number, _emit, page_number, correction.value, rendered.value, cfg.output_csv)
    # le texte de la page ne reste pas dans le rapport pour toute la durée du run
    correction.value = None
    written.value = None
    written.output_paths = {"csv": str(cfg.output_csv)}
    report.steps.append(written)
    return written


def _run_pages(cfg: ProcessConfig, renderer: PageRenderer, corrector, report: ProcessReport) -> None:
    ensure_output_dirs(cfg.output_csv, cfg.output_image_dir)

    with open_document(cfg.pdf_path) as document:
        total = page_count(document)
        pages = resolve_page_range(total, cfg.first_page, cfg.last_page, cfg.skip_last_page)
        if len(pages) == 0:
            logger.warning("Aucune page à traiter (%s pages dans le document, plage %s-%s)", total, cfg.first_page, cfg.last_page)
            return
        report.page_range = (pages[0], pages[-1])
        logger.info("%s: %s page(s), traitement des pages %s à %s", cfg.pdf_path.name, total, pages[0], pages[-1])

        for page_number in pages:
            logger.info("[%s/%s] Page %s", page_number - pages[0] + 1, len(pages), page_number)
            result = process_page(document, page_number, cfg, renderer, corrector, report)
            if not result.ok:
                report.aborted = True
                report.error = f"page {page_number} ({result.name}): {result.error}"
                logger.error("Arrêt du traitement à la page %s (%s) → %s", page_number, result.name, result.error)
                return
            report.pages_written += 1


def run_pdf_pipeline(
    cfg: ProcessConfig,
    renderer: Optional[PageRenderer] = None,
    corrector: Optional[CorrectionService] = None,
) -> ProcessReport:
    """
    Orchestrateur principal : PDF → (texte corrigé + image) par page → CSV.

    Les pages sont traitées une à une. Toute erreur non absorbée par une
    étape interrompt la boucle et est journalisée, sans être relevée : les
    lignes déjà écrites restent valides. Le rapport décrit ce qui a été fait.
    """
    report = ProcessReport(
        pdf=str(cfg.pdf_path),
        output_csv=str(cfg.output_csv),
        output_image_dir=str(cfg.output_image_dir),
    )
    owns_corrector = corrector is None
    try:
        if renderer is None:
            renderer = get_renderer(cfg.render_backend, dpi=cfg.dpi, ghostscript_path=cfg.ghostscript_path)
        if corrector is None:
            corrector = CorrectionService(cfg.correction_endpoint, timeout=cfg.correction_timeout)
        _run_pages(cfg, renderer, corrector, report)
    except Exception as e:
        report.aborted = True
        report.error = str(e)
        logger.exception("Erreur lors du traitement du PDF %s", cfg.pdf_path)
    finally:
        if owns_corrector and corrector is not None:
            corrector.close()

    if cfg.status_file:
        try:
            write_status(cfg.status_file, report)
        except OSError as e:
            logger.error("Impossible d'écrire le status %s: %s", cfg.status_file, e)

    logger.info(
        "Terminé: %s page(s) écrite(s) dans %s, %s correction(s) en échec%s",
        report.pages_written,
        cfg.output_csv,
        report.corrections_failed,
        " (interrompu)" if report.aborted else "",
    )
    return report


def run(pdf_path, output_csv_path, output_image_dir) -> None:
    """Point d'entrée minimal : valeurs par défaut pour tout le reste (service, rendu, plage)."""
    cfg = ProcessConfig(
        pdf_path=Path(pdf_path),
        output_csv=Path(output_csv_path),
        output_image_dir=Path(output_image_dir),
    )
    run_pdf_pipeline(cfg)
