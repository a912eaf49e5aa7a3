''' Direct interpretation of source text, one character at a time '''

import logging as lg

import bfbc.common.ops as ops
from bfbc.common.conf import MAX_NESTING, EOF_MAX
from bfbc.common.program import Program
from bfbc.translate.translator import CALLS
from bfbc.translate.errors import Position, UnmatchedClose, UnmatchedOpen, NestingTooDeep
from bfbc.runtime.machine import Machine
from bfbc.runtime.errors import TapeFault


def match_brackets(source: str, max_nesting: int = MAX_NESTING) -> dict[int, int]:
    ''' Maps offsets of `[` and `]` to the offset of their partner '''
    pending: list[int] = []
    pairs: dict[int, int] = {}

    for offset, c in enumerate(source):
        if c == '[':
            if max_nesting and len(pending) >= max_nesting:
                raise NestingTooDeep(Position.locate(source, offset), max_nesting)

            pending.append(offset)
        elif c == ']':
            if not pending:
                raise UnmatchedClose(Position.locate(source, offset))

            start = pending.pop()
            pairs[start] = offset
            pairs[offset] = start

    if pending:
        raise UnmatchedOpen(Position.locate(source, pending[-1]))

    return pairs


class NaiveMachine(Machine):
    ''' Shares registers and I/O with the bytecode machine, `pc` indexes the source '''

    def __init__(self, source: str, tape: bytearray, max_nesting: int = MAX_NESTING, **kwargs):
        super().__init__(Program([ops.END]), tape, **kwargs)
        self.source = source
        self.pairs = match_brackets(source, max_nesting)

    def step(self, delta: int):
        self.tape[self.ptr] = self.cur
        ptr = self.ptr + delta

        if ptr < 0 or ptr >= len(self.tape):
            raise TapeFault(ptr, self.pc, len(self.tape))

        self.ptr = ptr
        self.cur = self.tape[ptr]

    def run(self):
        source = self.source
        lg.debug(f'Interpreting {len(source)} characters')

        try:
            while self.pc < len(source):
                self.exec_symbol(source[self.pc])
                self.pc += 1
        finally:
            self.tape[self.ptr] = self.cur

        self.flush()
        return self.stats

    def exec_symbol(self, c: str):
        stats = self.stats

        match c:
            case '+' | '-':
                stats.adds += 1
                self.cur = (self.cur + (1 if c == '+' else -1)) & 0xFF
            case '>' | '<':
                stats.movs += 1
                self.step(1 if c == '>' else -1)
            case '[':
                stats.beqz += 1

                if self.cur == 0:
                    stats.beqz_taken += 1
                    self.pc = self.pairs[self.pc]
            case ']':
                stats.bnez += 1

                if self.cur != 0:
                    stats.bnez_taken += 1
                    self.pc = self.pairs[self.pc]
            case '.' | ',' | '?':
                self.call(CALLS[c])
            case _:
                return

        stats.ops += 1


def run_source(
    source: str,
    tape: bytearray,
    max_nesting: int = MAX_NESTING,
    eof: str = EOF_MAX,
    **kwargs
):
    return NaiveMachine(source, tape, max_nesting, eof=eof, **kwargs).run()
