from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


CSV_COLUMNS: Tuple[str, str, str] = ("PageNumber", "Text", "ImagePaths")


@dataclass
class ProcessConfig:
    """Configuration de haut niveau pour exécuter le pipeline."""
    pdf_path: Path
    output_csv: Path = Path("output.csv")
    output_image_dir: Path = Path("images")
    correction_endpoint: str = "http://localhost:3000/ia"
    correction_timeout: float = 900.0     # 15 minutes, inférence lente côté modèle
    render_backend: str = "pdf2image"     # "pdf2image" | "ghostscript"
    dpi: int = 300
    ghostscript_path: str = "gs"
    first_page: int = 1
    last_page: Optional[int] = None       # None = dernière page du document
    skip_last_page: bool = False          # comportement historique : s'arrête avant la dernière page
    status_file: Optional[Path] = None


@dataclass(frozen=True)
class PageRecord:
    """Une ligne du CSV : numéro de page, texte corrigé, nom du fichier image."""
    page_number: int
    text: str
    image_reference: str

    @classmethod
    def build(cls, page_number: int, corrected_text: str, image_path: str) -> "PageRecord":
        if page_number < 1:
            raise ValueError(f"Numéro de page invalide: {page_number}")
        # Fins de ligne au format de l'hôte dans le champ texte
        text = corrected_text.replace("\r\n", "\n").replace("\n", os.linesep)
        return cls(page_number=page_number, text=text, image_reference=Path(image_path).name)

    def as_row(self) -> List[Any]:
        return [self.page_number, self.text, self.image_reference]


@dataclass
class StepResult:
    name: str
    ok: bool
    duration_sec: float
    page_number: Optional[int] = None
    value: Any = None
    output_paths: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # `value` peut contenir le texte complet d'une page : pas dans le status
        data = asdict(self)
        data.pop("value", None)
        return data


@dataclass
class ProcessReport:
    pdf: str
    output_csv: str
    output_image_dir: str
    page_range: Optional[Tuple[int, int]] = None
    pages_written: int = 0
    corrections_failed: int = 0
    steps: List[StepResult] = field(default_factory=list)
    aborted: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pdf": self.pdf,
            "output_csv": self.output_csv,
            "output_image_dir": self.output_image_dir,
            "page_range": list(self.page_range) if self.page_range else None,
            "pages_written": self.pages_written,
            "corrections_failed": self.corrections_failed,
            "aborted": self.aborted,
            "error": self.error,
            "steps": [s.to_dict() for s in self.steps],
        }
