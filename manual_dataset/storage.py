import json
from pathlib import Path
from typing import Union

from .types import ProcessReport

PathLike = Union[str, Path]


def ensure_output_dirs(output_csv: PathLike, image_dir: PathLike) -> Path:
    """Crée le dossier des images et le dossier parent du CSV ; retourne le dossier images."""
    Path(output_csv).expanduser().parent.mkdir(parents=True, exist_ok=True)
    images = Path(image_dir).expanduser()
    images.mkdir(parents=True, exist_ok=True)
    return images


def write_status(path: PathLike, report: ProcessReport) -> Path:
    """Rapport d'exécution en JSON indenté (UTF-8, sans échappement des accents)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as fp:
        json.dump(report.to_dict(), fp, ensure_ascii=False, indent=2)
        fp.write("\n")
    return p
