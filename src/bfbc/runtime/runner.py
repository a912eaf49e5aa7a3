import sys
import time
import logging as lg
from pathlib import Path
from typing import Any, BinaryIO

import click

from bfbc.common.conf import TAPE_SIZE, MAX_NESTING, EOF_MAX, EOF_POLICIES
from bfbc.common.settings import RunSettings, MODES, MODE_BC
from bfbc.asm.basm import load_program, read_source, LOAD_ERRORS, BINARY_SUFFIX, LISTING_SUFFIX
from bfbc.tools.dump import dump_program
from bfbc.runtime.stats import Stats, format_stats
from bfbc.runtime.errors import ExecutionError
from bfbc.runtime.machine import Machine, execute
from bfbc.runtime.naive import run_source


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_KEYBOARD = 3


def eprint(*args: Any, **kwargs: Any):
    print(*args, file=sys.stderr, **kwargs)


def format_time(ns: int) -> str:
    if ns > 9000e6:
        return f'  Time: {ns / 1e9:.2f}s'

    return f'  Time: {ns / 1e6:.2f}ms'


def run_file(
    settings: RunSettings,
    path: Path,
    tape: bytearray,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None
) -> Stats | None:
    ''' Translates and runs a single file, returns None when dumping only '''
    debug_hook = Machine.debug_dump if settings.verbose else None

    if settings.mode == MODE_BC:
        program = load_program(path, settings.max_nesting)

        if settings.dump:
            dump_program(program)
    else:
        if path.suffix in (BINARY_SUFFIX, LISTING_SUFFIX):
            raise UserWarning(f'Mode {settings.mode} needs source text')

        source = read_source(path)

        if settings.dump:
            eprint(source)

    if settings.dump_only:
        return None

    stats = Stats()
    tape[:] = bytes(len(tape))
    start = time.monotonic_ns()

    if settings.mode == MODE_BC:
        execute(
            program, tape, stats,
            stdin=stdin, stdout=stdout, debug_hook=debug_hook, eof=settings.eof
        )
    else:
        run_source(
            source, tape, settings.max_nesting,
            stats=stats, eof=settings.eof, stdin=stdin, stdout=stdout, debug_hook=debug_hook
        )

    if settings.time:
        eprint(format_time(time.monotonic_ns() - start))

    if settings.stats:
        for line in format_stats(stats):
            eprint(line)

    return stats


def run_batch(settings: RunSettings, paths: list[Path], **streams: BinaryIO) -> int:
    ''' Runs files one after another, returns the number of failed ones '''
    tape = bytearray(settings.tape_size)
    failed = 0

    for path in paths:
        if settings.dump or settings.time:
            eprint(path)

        try:
            run_file(settings, path, tape, **streams)

        except LOAD_ERRORS as e:
            lg.error(f'{path}: translation failed: {e}')
            failed += 1

        except ExecutionError as e:
            lg.error(f'{path}: execution failed: {e}')
            failed += 1

        except (OSError, UserWarning) as e:
            lg.error(f'{path}: {e}')
            failed += 1

        if settings.dump or settings.time:
            eprint()

    return failed


@click.command()
@click.pass_context
@click.option('-d', '--dump', is_flag=True, help='Print the bytecode before running')
@click.option('-D', '--dump-only', is_flag=True, help='Print the bytecode and do not run')
@click.option('-m', '--mode', type=click.Choice(MODES), default=MODE_BC, help='Execution mode')
@click.option('-t', '--time', is_flag=True, help='Print wall-clock time of each run')
@click.option('-s', '--stats', is_flag=True, help='Print execution statistics')
@click.option('-v', '--verbose', is_flag=True, help='Sets logging level to debug')
@click.option('--tape-size', type=click.IntRange(min=1), default=TAPE_SIZE, help='Cells on the tape')
@click.option(
    '--max-nesting', type=click.IntRange(min=0), default=MAX_NESTING,
    help='Loop nesting limit, 0 for none'
)
@click.option('--eof', type=click.Choice(EOF_POLICIES), default=EOF_MAX, help='Value read at end of input')
@click.argument('files', nargs=-1, required=True, type=Path)
def run(ctx: click.Context, files: tuple[Path, ...], **params):
    ctx.ensure_object(RunSettings)
    ctx.obj.update(**params)

    lg.basicConfig(level=lg.DEBUG if ctx.obj.verbose else lg.INFO)

    try:
        failed = run_batch(ctx.obj, list(files))

    except KeyboardInterrupt:
        lg.info('Execution halted by the user')
        sys.exit(EXIT_KEYBOARD)

    if failed:
        lg.info(f'{failed} of {len(files)} files failed')
        sys.exit(EXIT_FAILED)

    sys.exit(EXIT_OK)


if __name__ == '__main__':
    run()
