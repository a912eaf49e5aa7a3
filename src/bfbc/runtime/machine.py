import sys
import logging as lg
from typing import BinaryIO, Callable

import bfbc.common.ops as ops
from bfbc.common.conf import WORD_SIZE, EOF_MAX, EOF_ZERO, EOF_UNCHANGED, EOF_POLICIES
from bfbc.common.program import Program
from bfbc.runtime.stats import Stats
from bfbc.runtime.errors import TapeFault, StreamError, InvariantViolation


DebugHook = Callable[['Machine'], None]


class Machine:
    pc: int  # Program counter
    ptr: int  # Tape pointer
    cur: int  # Cached value of tape[ptr]

    def __init__(
        self,
        program: Program,
        tape: bytearray,
        stats: Stats | None = None,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
        debug_hook: DebugHook | None = None,
        eof: str = EOF_MAX
    ):
        if not tape:
            raise ValueError('Tape must have at least one cell')

        if eof not in EOF_POLICIES:
            raise ValueError(f'Unknown EOF policy {eof}')

        self.code = program.code
        self.tape = tape
        self.stats = stats if stats is not None else Stats()
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.debug_hook = debug_hook
        self.eof = eof

        self.pc = 0
        self.ptr = 0
        self.cur = tape[0]

    # - Helpers - #

    def debug_dump(self):
        lg.debug(f'{self.pc:4}: cur={self.cur} ptr={self.ptr}')

    def getc(self):
        try:
            data = self.stdin.read(1)
        except OSError as e:
            raise StreamError(f'Input failed at {self.pc}: {e}') from e

        if data:
            self.cur = data[0]
            return

        if self.eof == EOF_MAX:
            self.cur = 0xFF
        elif self.eof == EOF_ZERO:
            self.cur = 0
        else:
            assert self.eof == EOF_UNCHANGED

    def putc(self):
        try:
            self.stdout.write(bytes((self.cur,)))
        except OSError as e:
            raise StreamError(f'Output failed at {self.pc}: {e}') from e

    def flush(self):
        try:
            self.stdout.flush()
        except OSError as e:
            raise StreamError(f'Output failed: {e}') from e

    def jump(self, imm: int):
        target = ops.branch_target(self.pc, imm)

        if target < 0 or target >= len(self.code):
            raise InvariantViolation(f'Branch at {self.pc} escapes the program ({target})')

        self.pc += imm // WORD_SIZE

    # - Operations - #

    def mov(self, imm: int):
        self.stats.movs += 1
        self.tape[self.ptr] = self.cur
        ptr = self.ptr + imm

        if ptr < 0 or ptr >= len(self.tape):
            raise TapeFault(ptr, self.pc, len(self.tape))

        self.ptr = ptr
        self.cur = self.tape[ptr]

    def add(self, imm: int):
        self.stats.adds += 1
        self.cur = (self.cur + imm) & 0xFF

    def beqz(self, imm: int):
        self.stats.beqz += 1

        if self.cur == 0:
            self.stats.beqz_taken += 1
            self.jump(imm)

    def bnez(self, imm: int):
        self.stats.bnez += 1

        if self.cur != 0:
            self.stats.bnez_taken += 1
            self.jump(imm)

    def call(self, imm: int):
        self.stats.calls += 1

        match imm:
            case ops.FUNC_PUTC:
                self.putc()
            case ops.FUNC_GETC:
                self.getc()
            case ops.FUNC_DEBUG:
                if self.debug_hook is not None:
                    self.debug_hook(self)
            case _:
                raise InvariantViolation(f'Unknown call {imm} at {self.pc}')

    HANDLERS = {
        ops.MOV: mov,
        ops.ADD: add,
        ops.BEQZ: beqz,
        ops.BNEZ: bnez,
        ops.CALL: call,
    }

    # -- Implementation -- #

    def exec_next(self):
        insn = self.code[self.pc]
        handler = self.HANDLERS.get(ops.insn_op(insn))

        if handler is None:
            raise InvariantViolation(f'Unknown instruction 0x{insn:X} at {self.pc}')

        self.stats.ops += 1
        handler(self, ops.insn_imm(insn))
        self.pc += 1

    def run(self) -> Stats:
        try:
            while self.code[self.pc] != ops.END:
                self.exec_next()
        finally:
            # Leave the tape in its final state even on failure
            self.tape[self.ptr] = self.cur

        self.flush()
        return self.stats


def execute(
    program: Program,
    tape: bytearray,
    stats: Stats | None = None,
    **kwargs
) -> Stats:
    return Machine(program, tape, stats, **kwargs).run()
