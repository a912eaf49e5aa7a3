''' Source text to bytecode '''

import logging as lg

import bfbc.common.ops as ops
from bfbc.common.conf import MAX_NESTING
from bfbc.common.program import Program
from bfbc.translate.errors import (
    Position, UnmatchedClose, UnmatchedOpen, NestingTooDeep
)

WHITESPACE = ' \t\n\v\f\r'

# Symbol -> (opcode, increasing symbol, decreasing symbol)
FOLDABLE = {
    '+': (ops.ADD, '+', '-'),
    '-': (ops.ADD, '+', '-'),
    '>': (ops.MOV, '>', '<'),
    '<': (ops.MOV, '>', '<'),
}

CALLS = {symbol: func for func, symbol in ops.FUNC_SYMBOLS.items()}


class Translator:
    source: str
    max_nesting: int
    code: list[int]
    loops: list[tuple[int, int]]  # (instruction index, source offset)
    p: int  # Scan position

    def __init__(self, source: str, max_nesting: int = MAX_NESTING):
        self.source = source
        self.max_nesting = max_nesting
        self.code = []
        self.loops = []
        self.p = 0

    def position(self, offset: int | None = None) -> Position:
        return Position.locate(self.source, self.p if offset is None else offset)

    def issue(self, op: int, imm: int = 0):
        self.code.append(ops.make_insn(op, imm))

    def on_open(self):
        if self.max_nesting and len(self.loops) >= self.max_nesting:
            raise NestingTooDeep(self.position(), self.max_nesting)

        self.loops.append((len(self.code), self.p))
        self.code.append(ops.END)  # patched on close
        self.p += 1

    def on_close(self):
        if not self.loops:
            raise UnmatchedClose(self.position())

        start, _ = self.loops.pop()
        here = len(self.code)
        self.code[start] = ops.make_insn(ops.BEQZ, ops.branch_offset(start, here))
        self.issue(ops.BNEZ, ops.branch_offset(here, start))
        self.p += 1

    def on_fold(self, op: int, c_inc: str, c_dec: str):
        n = 0
        source = self.source

        while self.p < len(source):
            c = source[self.p]

            if c == c_inc:
                n += 1
            elif c == c_dec:
                n -= 1
            elif c not in WHITESPACE:
                break

            self.p += 1

        if op == ops.ADD:
            # Cells wrap, keep the delta within a signed byte
            n = ((n + 0x80) & 0xFF) - 0x80

        if n != 0:
            self.issue(op, n)

    def on_call(self, func: int):
        self.issue(ops.CALL, func)
        self.p += 1

    def translate(self) -> Program:
        source = self.source

        while self.p < len(source):
            c = source[self.p]

            if c == '[':
                self.on_open()
            elif c == ']':
                self.on_close()
            elif c in FOLDABLE:
                self.on_fold(*FOLDABLE[c])
            elif c in CALLS:
                self.on_call(CALLS[c])
            else:
                self.p += 1

        if self.loops:
            _, offset = self.loops[-1]
            raise UnmatchedOpen(self.position(offset))

        lg.debug(f'Translated {len(source)} characters into {len(self.code)} instructions')

        self.code.append(ops.END)
        return Program(self.code)


def translate(source: str, max_nesting: int = MAX_NESTING) -> Program:
    return Translator(source, max_nesting).translate()
