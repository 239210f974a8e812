"""manual_dataset: PDF manual → dataset (texte corrigé + image par page + CSV).

Ce package fournit :
- Le chargement de la configuration (arguments, variables d'environnement, .env)
- Les structures typées (configuration, enregistrement de page, rapport)
- L'extraction et le nettoyage du texte des pages
- Le rendu des pages en images (pdf2image ou Ghostscript)
- Le client du service de correction orthographique
- L'écriture incrémentale du CSV
- Un orchestrateur qui enchaîne le tout page par page, et une CLI
"""

__version__ = "0.2.0"

__all__ = [
    "config",
    "types",
    "errors",
    "extractor",
    "normalizer",
    "renderer",
    "correction_service",
    "writer",
    "storage",
    "orchestrator",
]
