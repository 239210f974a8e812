import logging
import time
from typing import Optional

import requests

from .types import StepResult

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:3000/ia"
DEFAULT_TIMEOUT = 900.0
UNRESOLVED_SENTINEL = "Não entendi essa etapa do texto"


def build_prompt(text: str, source: str = "um manual de veículo") -> str:
    """Instruction de correction (Português Brasil) + texte de la page."""
    return (
        "Você é um corretor ortográfico de Português Brasil, revise o texto preservando a formatação "
        "original e melhorando a legibilidade, seguindo as seguintes regras:\n"
        "- Não adicione nenhum texto de resposta além da correção, envie apenas a correção;\n"
        f"- O texto foi retirado de {source};\n"
        "- Corrija as listas que tiverem em formatação errada;\n"
        "- O que for sumário, corrija de forma que fique com formatação de sumário, "
        "mas não envie nada além da correção;\n"
        "- Remova todo hífen ('-') que você encontrar durante a transcrição, juntando as palavras também;\n"
        f"- Caso não consiga corrigir algo, apenas aponte a parte não corrigida com a frase: '{UNRESOLVED_SENTINEL}';\n"
        "\n"
        "Faça isso no seguinte texto:\n"
        f"{text}"
    )


def _response_text(resp: requests.Response) -> str:
    # Sans charset déclaré, requests suppose ISO-8859-1 pour text/* : le service répond en UTF-8
    if "charset" not in resp.headers.get("Content-Type", "").lower():
        return resp.content.decode("utf-8", errors="replace")
    return resp.text


class CorrectionService:
    """
    Client du service distant de correction orthographique.

    Un appel = un POST JSON `{"text": <prompt + texte>}` bloquant, avec un
    timeout long. Aucune relance : en cas d'échec le texte d'origine est
    renvoyé tel quel. La session HTTP est créée ici (ou injectée) et fermée
    par `close()` / la sortie du `with`.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        source: str = "um manual de veículo",
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.source = source
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

    def __enter__(self) -> "CorrectionService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def request_correction(self, text: str, page_number: int) -> StepResult:
        t0 = time.time()
        try:
            resp = self.session.post(
                self.endpoint,
                json={"text": build_prompt(text, self.source)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            # raise_for_status laisse passer les 3xx non suivies (300, 304...)
            if not 200 <= resp.status_code < 300:
                raise requests.HTTPError(f"{resp.status_code} réponse non 2xx du service", response=resp)
            corrected = _response_text(resp)
        except requests.RequestException as e:
            return StepResult(
                name="correct",
                ok=False,
                duration_sec=time.time() - t0,
                page_number=page_number,
                value=text,
                error=str(e),
            )
        logger.info("Page %s corrigée (%.1fs)", page_number, time.time() - t0)
        return StepResult(
            name="correct",
            ok=True,
            duration_sec=time.time() - t0,
            page_number=page_number,
            value=corrected,
        )

    def correct(self, text: str, page_number: int) -> str:
        """Texte corrigé, ou `text` inchangé si le service échoue."""
        result = self.request_correction(text, page_number)
        if not result.ok:
            logger.error("Erreur du service de correction (page %s): %s", page_number, result.error)
        return result.value
