class ChessDuelError(ValueError):
    pass


class IllegalMoveError(ChessDuelError):
    pass


class InvalidCodeError(ChessDuelError):
    pass
