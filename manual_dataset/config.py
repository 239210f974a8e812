import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError
from .types import ProcessConfig


def load_env_file() -> None:
    """Charge le fichier .env du répertoire courant sans écraser l'environnement réel."""
    path = find_dotenv(usecwd=True)
    if path:
        load_dotenv(path, override=False)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in ("1", "true", "yes", "on")


def _as_int(name: str, value, minimum: int = 1) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} doit être un entier (reçu: {value!r})") from None
    if number < minimum:
        raise ConfigError(f"{name} doit être >= {minimum} (reçu: {number})")
    return number


def _as_float(name: str, value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} doit être un nombre (reçu: {value!r})") from None
    if number <= 0:
        raise ConfigError(f"{name} doit être > 0 (reçu: {number})")
    return number


def load_config(
    pdf_path: Optional[str] = None,
    output_csv: Optional[str] = None,
    output_image_dir: Optional[str] = None,
    correction_endpoint: Optional[str] = None,
    correction_timeout: Optional[float] = None,
    render_backend: Optional[str] = None,
    dpi: Optional[int] = None,
    ghostscript_path: Optional[str] = None,
    first_page: Optional[int] = None,
    last_page: Optional[int] = None,
    skip_last_page: bool = False,
    status_file: Optional[str] = None,
) -> ProcessConfig:
    """Arguments explicites > variables d'environnement > valeurs par défaut."""
    pdf = pdf_path or os.getenv("PDF_PATH")
    if not pdf:
        raise ConfigError("Chemin du PDF manquant (--pdf ou PDF_PATH)")

    status = status_file or os.getenv("STATUS_FILE")
    first = _as_int("first_page", first_page if first_page is not None else os.getenv("FIRST_PAGE", "1"))
    last = _as_int("last_page", last_page if last_page is not None else os.getenv("LAST_PAGE"))
    if last is not None and last < first:
        raise ConfigError(f"last_page ({last}) < first_page ({first})")

    cfg = ProcessConfig(
        pdf_path=Path(pdf).expanduser().resolve(),
        output_csv=Path(output_csv or os.getenv("OUTPUT_CSV", "output.csv")).expanduser().resolve(),
        output_image_dir=Path(output_image_dir or os.getenv("OUTPUT_IMAGE_DIR", "images")).expanduser().resolve(),
        correction_endpoint=correction_endpoint or os.getenv("CORRECTION_ENDPOINT", "http://localhost:3000/ia"),
        correction_timeout=_as_float(
            "correction_timeout",
            correction_timeout if correction_timeout is not None else os.getenv("CORRECTION_TIMEOUT", "900"),
        ),
        render_backend=(render_backend or os.getenv("RENDER_BACKEND", "pdf2image")).lower(),
        dpi=_as_int("dpi", dpi if dpi is not None else os.getenv("RENDER_DPI", "300")),
        ghostscript_path=ghostscript_path or os.getenv("GHOSTSCRIPT_PATH", "gs"),
        first_page=first,
        last_page=last,
        skip_last_page=skip_last_page or _env_flag("SKIP_LAST_PAGE"),
        status_file=Path(status).expanduser().resolve() if status else None,
    )
    return cfg
