class ExecutionError(Exception):
    ''' Reportable failure of a single program run '''
    pass


class TapeFault(ExecutionError):
    pointer: int
    pc: int

    def __init__(self, pointer: int, pc: int, tape_size: int):
        super().__init__(f'Tape pointer {pointer} out of range [0, {tape_size}) at {pc}')
        self.pointer = pointer
        self.pc = pc


class StreamError(ExecutionError):
    pass


class InvariantViolation(Exception):
    ''' Broken contract between the translator and the interpreter '''
    pass
