import argparse
import logging
import sys

from .config import load_config, load_env_file
from .errors import ConfigError
from .logging_setup import setup_logging
from .orchestrator import run_pdf_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pipeline: PDF → texte corrigé + image par page → CSV (PageNumber, Text, ImagePaths)."
    )
    parser.add_argument("--pdf", required=False, help="PDF à traiter (défaut: env PDF_PATH)")
    parser.add_argument("--output-csv", required=False, help="CSV de sortie (défaut: output.csv)")
    parser.add_argument("--output-image-dir", required=False, help="Dossier des images de pages (défaut: images)")
    parser.add_argument(
        "--correction-endpoint",
        required=False,
        help="URL du service de correction (défaut: http://localhost:3000/ia)",
    )
    parser.add_argument(
        "--correction-timeout",
        required=False,
        type=float,
        default=None,
        help="Timeout HTTP en secondes (défaut: 900)",
    )
    parser.add_argument("--renderer", required=False, help="Backend de rendu: pdf2image|ghostscript (défaut: pdf2image)")
    parser.add_argument("--dpi", required=False, type=int, default=None, help="Résolution des images (défaut: 300)")
    parser.add_argument("--ghostscript", required=False, help="Exécutable Ghostscript (défaut: gs)")
    parser.add_argument("--first-page", required=False, type=int, default=None, help="Première page (1-based)")
    parser.add_argument("--last-page", required=False, type=int, default=None, help="Dernière page incluse")
    parser.add_argument(
        "--skip-last-page",
        action="store_true",
        help="Ne traite pas la dernière page du document (ancien comportement)",
    )
    parser.add_argument("--status-file", required=False, help="Écrit le rapport d'exécution (JSON) à ce chemin")
    parser.add_argument("--log-level", required=False, help="DEBUG|INFO|WARNING|ERROR (défaut: env LOG_LEVEL ou INFO)")
    return parser


def main(argv=None) -> None:
    # Charger .env avant toute lecture d'os.getenv
    load_env_file()

    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        cfg = load_config(
            pdf_path=args.pdf,
            output_csv=args.output_csv,
            output_image_dir=args.output_image_dir,
            correction_endpoint=args.correction_endpoint,
            correction_timeout=args.correction_timeout,
            render_backend=args.renderer,
            dpi=args.dpi,
            ghostscript_path=args.ghostscript,
            first_page=args.first_page,
            last_page=args.last_page,
            skip_last_page=args.skip_last_page,
            status_file=args.status_file,
        )
    except ConfigError as e:
        print(f"Erreur de configuration: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        report = run_pdf_pipeline(cfg)
    except KeyboardInterrupt:
        print("Interrompu par l'utilisateur.")
        sys.exit(130)

    if report.aborted:
        print(f"⚠️ Traitement interrompu ({report.error}) → {report.pages_written} page(s) dans {cfg.output_csv}")
    else:
        print(f"✅ {report.pages_written} page(s) → {cfg.output_csv} / {cfg.output_image_dir}")


if __name__ == "__main__":
    main()
