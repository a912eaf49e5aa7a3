class Position:
    offset: int
    line: int
    column: int

    def __init__(self, offset: int, line: int, column: int):
        self.offset = offset
        self.line = line
        self.column = column

    @classmethod
    def locate(cls, source: str, offset: int) -> 'Position':
        line = source.count('\n', 0, offset) + 1
        column = offset - (source.rfind('\n', 0, offset) + 1) + 1
        return cls(offset, line, column)

    def __str__(self) -> str:
        return f'{self.line}:{self.column}'


class TranslationError(Exception):
    position: Position

    def __init__(self, message: str, position: Position):
        super().__init__(f'{position}: {message}')
        self.position = position


class UnmatchedClose(TranslationError):
    def __init__(self, position: Position):
        super().__init__("']' without matching '['", position)


class UnmatchedOpen(TranslationError):
    def __init__(self, position: Position):
        super().__init__("'[' is never closed", position)


class NestingTooDeep(TranslationError):
    limit: int

    def __init__(self, position: Position, limit: int):
        super().__init__(f'Loops nested deeper than {limit}', position)
        self.limit = limit
