''' Human-readable program listing '''

import sys
from typing import TextIO

import bfbc.common.ops as ops
from bfbc.common.program import Program
from bfbc.runtime.errors import InvariantViolation


def signed(n: int, pos: str, neg: str) -> str:
    return f'{pos if n > 0 else neg}{abs(n)}'


def format_insn(pc: int, insn: int) -> str:
    n = ops.insn_imm(insn)

    match ops.insn_op(insn):
        case ops.BEQZ:
            return f'[{ops.branch_target(pc, n)}'
        case ops.BNEZ:
            return f']{ops.branch_target(pc, n)}'
        case ops.ADD:
            return signed(n, '+', '-')
        case ops.MOV:
            return signed(n, '>', '<')
        case ops.CALL if n in ops.FUNC_SYMBOLS:
            return ops.FUNC_SYMBOLS[n]

    raise InvariantViolation(f'Cannot format 0x{insn:X} at {pc}')


def dump_lines(program: Program) -> list[str]:
    return [
        f' {pc:4}: {format_insn(pc, insn)}'
        for pc, insn in enumerate(program.instructions())
    ]


def dump_program(program: Program, stream: TextIO | None = None):
    if stream is None:
        stream = sys.stderr

    print('  Bytecode:', file=stream)

    for line in dump_lines(program):
        print(line, file=stream)

    print(file=stream)
