class GameError(Exception):
    """Base for failures surfaced to HTTP callers; ``status_code`` picks the response."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GameNotFound(GameError):
    status_code = 404

    def __init__(self, message: str = 'Game not found'):
        super().__init__(message)


class GameConflict(GameError):
    status_code = 400


class StoreError(GameError):
    """The game store could not read or commit a record."""
    status_code = 500
