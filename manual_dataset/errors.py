class PipelineError(RuntimeError):
    """Erreur de base du pipeline PDF → dataset."""


class ExtractionError(PipelineError):
    """Page illisible ou introuvable dans le PDF."""


class RenderError(PipelineError):
    """Le backend de rendu n'a pas produit l'image de la page."""


class SinkError(PipelineError):
    """Écriture du CSV impossible."""


class ConfigError(ValueError):
    """Valeur de configuration invalide."""
