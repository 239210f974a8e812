import csv
import os
from pathlib import Path
from typing import List, Union

from .errors import SinkError
from .types import CSV_COLUMNS, PageRecord

PathLike = Union[str, Path]


def _csv_writer(fp):
    return csv.writer(
        fp,
        quotechar='"',
        doublequote=True,                # " échappé en ""
        quoting=csv.QUOTE_NONNUMERIC,    # Text / ImagePaths toujours entre guillemets
        lineterminator=os.linesep,
    )


def append_record(record: PageRecord, output_csv: PathLike) -> None:
    """
    Ajoute une ligne au CSV (ouverture / écriture / fermeture à chaque appel).

    L'en-tête n'est écrit que si le fichier n'existait pas avant l'ouverture :
    un fichier partiel d'un run précédent est complété sans réécrire l'en-tête.
    """
    path = str(output_csv)
    file_exists = os.path.exists(path)

    # Les séquences littérales "\n" renvoyées par le service deviennent de vrais retours à la ligne
    text = record.text.replace("\\n", "\n")

    try:
        with open(path, "a", encoding="utf-8", newline="") as fp:
            writer = _csv_writer(fp)
            if not file_exists:
                writer.writerow(CSV_COLUMNS)
            writer.writerow([record.page_number, text, record.image_reference])
    except OSError as e:
        raise SinkError(f"Écriture impossible dans {path} (page {record.page_number}): {e}") from e


def read_records(output_csv: PathLike) -> List[PageRecord]:
    """Relit le CSV produit (en-tête ignoré)."""
    with open(str(output_csv), "r", encoding="utf-8", newline="") as fp:
        rows = list(csv.reader(fp))
    if not rows:
        return []
    header, data = rows[0], rows[1:]
    if tuple(header) != CSV_COLUMNS:
        raise SinkError(f"En-tête inattendu dans {output_csv}: {header}")
    return [PageRecord(page_number=int(r[0]), text=r[1], image_reference=r[2]) for r in data]
