''' Bytecode to C source, optionally built with an external compiler '''

import os
import sys
import subprocess
import tempfile
import logging as lg
from pathlib import Path
from typing import Sequence

import click

import bfbc.common.ops as ops
from bfbc.common.conf import TAPE_SIZE, MAX_NESTING, EOF_MAX, EOF_ZERO, EOF_POLICIES
from bfbc.common.program import Program
from bfbc.runtime.errors import InvariantViolation
from bfbc.asm.basm import load_program, LOAD_ERRORS

EXIT_OK = 0
EXIT_FAILED = 1

INDENT = '    '

PROLOGUE = '''\
#include <stdio.h>
#include <stdlib.h>

#define TAPE_SIZE {tape_size}L

static unsigned char tape[TAPE_SIZE];

static void fault(long i, int pc)
{{
    fflush(stdout);
    fprintf(stderr, "Tape pointer %ld out of range [0, %ld) at %d\\n", i, TAPE_SIZE, pc);
    exit(1);
}}

int main(void)
{{
    long i = 0;
    int c;
'''

EPILOGUE = '''\
    return 0;
}
'''


class BuildError(Exception):
    pass


def emit_getc(eof: str) -> str:
    if eof == EOF_MAX:
        return 'c = getchar(); tape[i] = c == EOF ? 0xFF : c;'

    if eof == EOF_ZERO:
        return 'c = getchar(); tape[i] = c == EOF ? 0 : c;'

    return 'c = getchar(); if (c != EOF) tape[i] = c;'


def emit_insn(pc: int, insn: int, eof: str) -> str:
    n = ops.insn_imm(insn)

    match ops.insn_op(insn):
        case ops.BEQZ:
            return 'while (tape[i]) {'
        case ops.BNEZ:
            return '}'
        case ops.ADD:
            return f'tape[i] += {n};'
        case ops.MOV:
            return f'i += {n}; if (i < 0 || i >= TAPE_SIZE) fault(i, {pc});'
        case ops.CALL:
            match n:
                case ops.FUNC_PUTC:
                    return 'putchar(tape[i]);'
                case ops.FUNC_GETC:
                    return emit_getc(eof)
                case ops.FUNC_DEBUG:
                    return f'/* debug trap at {pc} */'

    raise InvariantViolation(f'Cannot emit 0x{insn:X} at {pc}')


def emit_c(program: Program, tape_size: int = TAPE_SIZE, eof: str = EOF_MAX) -> str:
    if eof not in EOF_POLICIES:
        raise ValueError(f'Unknown EOF policy {eof}')

    lines = [PROLOGUE.format(tape_size=tape_size)]
    depth = 1

    for pc, insn in enumerate(program.instructions()):
        if ops.insn_op(insn) == ops.BNEZ:
            depth -= 1

        lines.append(INDENT * depth + emit_insn(pc, insn, eof) + '\n')

        if ops.insn_op(insn) == ops.BEQZ:
            depth += 1

    lines.append(EPILOGUE)
    return ''.join(lines)


def build(
    c_source: str,
    output: Path,
    cc: str | None = None,
    cflags: Sequence[str] = ('-O2',)
):
    ''' Compiles `c_source` into the executable `output` '''
    if cc is None:
        cc = os.environ.get('CC', 'cc')

    with tempfile.TemporaryDirectory() as tmp:
        c_path = Path(tmp) / 'program.c'
        c_path.write_text(c_source)
        cmd = [cc, *cflags, '-o', str(output), str(c_path)]

        lg.info(f'Running {" ".join(cmd)}')

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise BuildError(f'Unable to run {cc}: {e}') from e

    if result.returncode != 0:
        raise BuildError(f'{cc} failed with {result.returncode}:\n{result.stderr}')


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--build', 'do_build', is_flag=True, help='Build an executable with $CC')
@click.option('--cc', type=str, help='C compiler, overrides $CC')
@click.option('--tape-size', type=click.IntRange(min=1), default=TAPE_SIZE)
@click.option('--max-nesting', type=int, default=MAX_NESTING, help='Loop nesting limit, 0 for none')
@click.option('--eof', type=click.Choice(EOF_POLICIES), default=EOF_MAX, help='Value read at end of input')
@click.argument('input', type=Path)
@click.argument('output', type=Path, required=False)
def compile(
    verbose: bool, do_build: bool, cc: str | None, tape_size: int,
    max_nesting: int, eof: str, input: Path, output: Path | None
):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)

    if not output:
        output = input.with_suffix('.c')

    lg.info(f'Generating {output.name} from {input.name}')

    try:
        program = load_program(input, max_nesting)
        c_source = emit_c(program, tape_size, eof)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(c_source)

        if do_build:
            build(c_source, output.with_suffix(''), cc)

    except (*LOAD_ERRORS, BuildError) as e:
        lg.error(f'{input}: {e}')
        sys.exit(EXIT_FAILED)

    sys.exit(EXIT_OK)


if __name__ == '__main__':
    compile()
