# src/chashavshavon/exceptions.py


class ChashavshavonError(Exception):
    """Basisklasse aller Fehler dieses Pakets."""


class InvalidArgument(ChashavshavonError, ValueError):
    """Pflichtfeld fehlt oder ist ungültig (z.B. Onah ohne Datum)."""


class PreconditionViolation(ChashavshavonError):
    """Operation ist noch nicht erlaubt, z.B. Kavuah speichern bevor der Setting-Entry eine id hat."""
