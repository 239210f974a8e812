from typing import Callable, Iterable, Optional

Rule = Callable[[str], str]


def normalize(text: Optional[str], rules: Iterable[Rule] = ()) -> str:
    """
    Nettoyage local du texte extrait.

    Aujourd'hui : suppression des espaces en début et fin de texte uniquement.
    `rules` permet de brancher des règles supplémentaires (césures, listes...)
    sans changer l'interface ; le résultat est de nouveau rogné après elles.
    """
    cleaned = (text or "").strip()
    rules = list(rules)
    if not rules:
        return cleaned
    for rule in rules:
        cleaned = rule(cleaned)
    return cleaned.strip()
