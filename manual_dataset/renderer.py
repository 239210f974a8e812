import logging
import subprocess
from pathlib import Path
from typing import List, Union

from pdf2image import convert_from_path
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from PIL import Image

from .errors import RenderError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def image_filename(page_index: int, fmt: str = "png") -> str:
    return f"page_{page_index}.{fmt}"


class PageRenderer:
    """Rend une seule page d'un PDF en image raster dans `output_dir`."""

    fmt = "png"

    def __init__(self, dpi: int = 300):
        self.dpi = dpi

    def render(self, pdf_path: PathLike, page_index: int, output_dir: PathLike) -> str:
        """Retourne le nom du fichier image (sans le dossier)."""
        if page_index < 1:
            raise RenderError(f"Numéro de page invalide: {page_index}")
        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        target = out_dir / image_filename(page_index, self.fmt)
        # une image d'un run précédent ne doit pas valider un rendu qui n'a rien écrit
        target.unlink(missing_ok=True)
        self._render_to(Path(pdf_path), page_index, target)
        if not target.is_file():
            raise RenderError(f"Aucune image produite pour la page {page_index} ({target})")
        return target.name

    def _render_to(self, pdf_path: Path, page_index: int, target: Path) -> None:
        raise NotImplementedError


class Pdf2ImageRenderer(PageRenderer):
    """Rendu via pdf2image (poppler), sauvegarde PNG via Pillow."""

    def _render_to(self, pdf_path: Path, page_index: int, target: Path) -> None:
        try:
            pages: List[Image.Image] = convert_from_path(
                str(pdf_path),
                dpi=self.dpi,
                first_page=page_index,
                last_page=page_index,
            )
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as e:
            raise RenderError(f"pdf2image: échec du rendu de la page {page_index}: {e}") from e
        if not pages:
            raise RenderError(f"pdf2image: page {page_index} absente de {pdf_path.name}")
        with pages[0] as img:
            img.save(str(target), format="PNG")


class GhostscriptRenderer(PageRenderer):
    """Rendu via l'exécutable Ghostscript (device png16m)."""

    def __init__(self, dpi: int = 300, executable: str = "gs"):
        super().__init__(dpi=dpi)
        self.executable = executable

    def command(self, pdf_path: Path, page_index: int, target: Path) -> List[str]:
        return [
            self.executable,
            "-dSAFER",
            "-dBATCH",
            "-dNOPAUSE",
            "-dQUIET",
            "-sDEVICE=png16m",
            f"-r{self.dpi}",
            f"-dFirstPage={page_index}",
            f"-dLastPage={page_index}",
            f"-sOutputFile={target}",
            str(pdf_path),
        ]

    def _render_to(self, pdf_path: Path, page_index: int, target: Path) -> None:
        try:
            proc = subprocess.run(
                self.command(pdf_path, page_index, target),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise RenderError(f"Ghostscript introuvable: {self.executable}") from e

        if proc.stdout:
            logger.debug("gs stdout (page %s): %s", page_index, proc.stdout.strip())
        if proc.returncode != 0:
            raise RenderError(
                f"Ghostscript a échoué sur la page {page_index} (code {proc.returncode}): {proc.stderr.strip()}"
            )


def get_renderer(backend: str = "pdf2image", dpi: int = 300, ghostscript_path: str = "gs") -> PageRenderer:
    name = (backend or "").lower()
    if name == "pdf2image":
        return Pdf2ImageRenderer(dpi=dpi)
    if name in ("ghostscript", "gs"):
        return GhostscriptRenderer(dpi=dpi, executable=ghostscript_path)
    raise ValueError(f"Backend de rendu inconnu: {backend!r} (pdf2image|ghostscript)")
