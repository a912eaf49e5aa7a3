import sys
from pathlib import Path
import logging as lg

import click

from bfbc.common.conf import MAX_NESTING
import bfbc.common.ops as ops
from bfbc.common.program import Program, ProgramFormatError
from bfbc.asm.asm import assemble
from bfbc.asm.fpp import AssemblyError
from bfbc.translate.translator import translate
from bfbc.translate.errors import TranslationError

LISTING_SUFFIX = '.bcs'
BINARY_SUFFIX = '.bfc'

EXIT_OK = 0
EXIT_FAILED = 1

# Problems with the input itself, reported per file
LOAD_ERRORS = (TranslationError, AssemblyError, ProgramFormatError, ops.EncodingError)


def read_source(path: Path) -> str:
    # Every byte is a character, non-symbols are skipped anyway
    return path.read_text(encoding='latin-1')


def load_program(path: Path, max_nesting: int = MAX_NESTING) -> Program:
    ''' Translates, assembles or loads `path` depending on its suffix '''
    lg.debug(f'Loading {path}')

    if path.suffix == BINARY_SUFFIX:
        return Program.from_bytes(path.read_bytes())

    if path.suffix == LISTING_SUFFIX:
        return assemble(path.read_text())

    return translate(read_source(path), max_nesting)


@click.command()
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--max-nesting', type=int, default=MAX_NESTING, help='Loop nesting limit, 0 for none')
@click.argument('source', type=Path)
@click.argument('binary', type=Path, required=False)
def compile(verbose: bool, max_nesting: int, source: Path, binary: Path | None):
    lg.basicConfig(level=lg.DEBUG if verbose else lg.INFO)

    if not binary:
        binary = source.with_suffix(BINARY_SUFFIX)

    lg.info(f'Translating {source.name} to {binary.name}')

    try:
        program = load_program(source, max_nesting)
    except LOAD_ERRORS as e:
        lg.error(f'{source}: {e}')
        sys.exit(EXIT_FAILED)

    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_bytes(program.to_bytes())
    sys.exit(EXIT_OK)


if __name__ == '__main__':
    compile()
