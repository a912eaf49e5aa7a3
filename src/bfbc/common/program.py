import struct
import logging as lg
from typing import Iterator, Sequence

import bfbc.common.ops as ops
from bfbc.common.conf import WORD_SIZE


class ProgramFormatError(ValueError):
    pass


class Program:
    ''' Translated instruction stream, terminated by a single END '''
    code: tuple[int, ...]

    def __init__(self, code: Sequence[int]):
        if not code or code[-1] != ops.END:
            raise ProgramFormatError('Program is not terminated by END')

        if ops.END in code[:-1]:
            raise ProgramFormatError(f'Premature END at {list(code).index(ops.END)}')

        self.code = tuple(code)

    def __len__(self) -> int:
        return len(self.code)

    def __getitem__(self, pc: int) -> int:
        return self.code[pc]

    def __iter__(self) -> Iterator[int]:
        return iter(self.code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Program):
            return NotImplemented

        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def __repr__(self) -> str:
        return f'Program({len(self.code) - 1} instructions)'

    def instructions(self) -> tuple[int, ...]:
        ''' Everything but the terminator '''
        return self.code[:-1]

    def to_bytes(self) -> bytes:
        return struct.pack(f'>{len(self.code)}i', *self.code)

    @classmethod
    def from_bytes(cls, buf: bytes) -> 'Program':
        if len(buf) % WORD_SIZE:
            raise ProgramFormatError(f'Binary size {len(buf)} is not a multiple of {WORD_SIZE}')

        count = len(buf) // WORD_SIZE
        code = struct.unpack(f'>{count}i', buf)
        lg.debug(f'Loaded {count} words')
        program = cls(code)
        program.validate()
        return program

    def validate(self):
        ''' Checks what translation guarantees: known instructions, paired loops '''
        pending: list[int] = []

        for pc, insn in enumerate(self.instructions()):
            op = ops.insn_op(insn)
            imm = ops.insn_imm(insn)

            if op not in ops.OPCODES:
                raise ProgramFormatError(f'Unknown instruction 0x{insn:X} at {pc}')

            if op == ops.CALL and imm not in ops.FUNC_SYMBOLS:
                raise ProgramFormatError(f'Unknown call {imm} at {pc}')

            if op == ops.BEQZ:
                pending.append(pc)

            if op == ops.BNEZ:
                if not pending:
                    raise ProgramFormatError(f'Loop end at {pc} without a start')

                start = pending.pop()
                start_imm = ops.insn_imm(self.code[start])

                if ops.branch_target(start, start_imm) != pc + 1 \
                        or ops.branch_target(pc, imm) != start + 1:
                    raise ProgramFormatError(f'Loop at {start}..{pc} has inconsistent targets')

        if pending:
            raise ProgramFormatError(f'Loop start at {pending[-1]} is never closed')
