import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
    # urllib3 est très bavard en DEBUG (une ligne par connexion)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
