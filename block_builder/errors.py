"""
Taxonomie d'erreurs du block builder.
Toutes dérivent de BlockError ; l'API HTTP les traduit en codes de statut.
"""


class BlockError(Exception):
    """Erreur de base (jamais levée directement)."""


class ValidationError(BlockError):
    """Entrée mal formée : contenu vide, colonnes hors [1, 12], axe inconnu…"""


class NotFoundError(BlockError):
    """Bloc, item ou adresse (ligne/colonne) inexistant ou non possédé."""


class UnauthenticatedError(BlockError):
    """Pas de session valide."""


class PersistenceError(BlockError):
    """Échec du stockage (réseau, base, contrainte)."""


class SaveInProgressError(BlockError):
    """Une sauvegarde est déjà en cours pour ce bloc."""
