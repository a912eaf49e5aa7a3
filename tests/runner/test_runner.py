import logging as lg

from click.testing import CliRunner

import bfbc.common.ops as ops
from bfbc.common.program import Program
from bfbc.common.settings import RunSettings
from bfbc.runtime.runner import run, run_batch, format_time, EXIT_OK, EXIT_FAILED
from bfbc.asm.basm import compile as compile_binary

import unit_utils


def write_source(tmp_path, name: str, source: str):
    path = tmp_path / name
    path.write_text(source)
    return str(path)


def test_hello():
    hello = unit_utils.find_file('testdata/bf/hello.bf')
    result = CliRunner().invoke(run, [str(hello)])

    assert result.exit_code == EXIT_OK
    assert result.stdout_bytes == unit_utils.load_bytes('testdata/bf/hello.log')


def test_input(tmp_path):
    path = write_source(tmp_path, 'inc.bf', ',+.')
    result = CliRunner().invoke(run, [path], input=b'A')

    assert result.exit_code == EXIT_OK
    assert result.stdout_bytes == b'B'


def test_naive_mode():
    hello = unit_utils.find_file('testdata/bf/hello.bf')
    result = CliRunner().invoke(run, ['-m', 'naive', str(hello)])

    assert result.exit_code == EXIT_OK
    assert result.stdout_bytes == unit_utils.load_bytes('testdata/bf/hello.log')


def test_batch_continues_after_failure(tmp_path, caplog):
    bad = write_source(tmp_path, 'bad.bf', '+]')
    good = write_source(tmp_path, 'good.bf', '++++++++[>++++++++<-]>+.')

    with caplog.at_level(lg.ERROR):
        result = CliRunner().invoke(run, [bad, good])

    assert result.exit_code == EXIT_FAILED
    assert result.stdout_bytes == b'A'
    assert 'translation failed' in caplog.text


def test_batch_continues_after_bad_binary(tmp_path, caplog):
    bad = tmp_path / 'bad.bfc'
    bad.write_bytes(Program([ops.make_insn(0x20, 1), ops.END]).to_bytes())
    good = write_source(tmp_path, 'good.bf', '++++++++[>++++++++<-]>+.')

    with caplog.at_level(lg.ERROR):
        result = CliRunner().invoke(run, [str(bad), good])

    assert result.exit_code == EXIT_FAILED
    assert result.stdout_bytes == b'A'
    assert 'translation failed' in caplog.text


def test_tape_fault_fails(tmp_path, caplog):
    path = write_source(tmp_path, 'left.bf', '<')

    with caplog.at_level(lg.ERROR):
        result = CliRunner().invoke(run, [path])

    assert result.exit_code == EXIT_FAILED
    assert 'execution failed' in caplog.text


def test_missing_file(tmp_path):
    result = CliRunner().invoke(run, [str(tmp_path / 'nothing.bf')])
    assert result.exit_code == EXIT_FAILED


def test_dump_only(tmp_path):
    path = write_source(tmp_path, 'out.bf', '+++.')
    result = CliRunner().invoke(run, ['-D', path])

    assert result.exit_code == EXIT_OK
    assert result.stdout_bytes == b''
    assert result.stderr == f'{path}\n  Bytecode:\n    0: +3\n    1: .\n\n\n'


def test_stats_and_time(tmp_path):
    path = write_source(tmp_path, 'out.bf', '+++.')
    result = CliRunner().invoke(run, ['-s', '-t', path])

    assert result.exit_code == EXIT_OK
    assert result.stdout_bytes == b'\x03'
    assert '         ops: 2\n' in result.stderr
    assert '  Time: ' in result.stderr


def test_naive_stats(tmp_path):
    path = write_source(tmp_path, 'out.bf', '+++.')
    result = CliRunner().invoke(run, ['-m', 'naive', '-s', path])

    assert result.exit_code == EXIT_OK
    assert '         ops: 4\n' in result.stderr


def test_small_tape(tmp_path):
    path = write_source(tmp_path, 'right.bf', '>>')

    assert CliRunner().invoke(run, ['--tape-size', '3', path]).exit_code == EXIT_OK
    assert CliRunner().invoke(run, ['--tape-size', '2', path]).exit_code == EXIT_FAILED


def test_binary_program(tmp_path):
    source = write_source(tmp_path, 'out.bf', '++++++++[>++++++++<-]>++.')
    binary = str(tmp_path / 'out.bfc')

    assert CliRunner().invoke(compile_binary, [source, binary]).exit_code == EXIT_OK

    result = CliRunner().invoke(run, [binary])
    assert result.exit_code == EXIT_OK
    assert result.stdout_bytes == b'B'


def test_naive_rejects_binary(tmp_path):
    binary = tmp_path / 'x.bfc'
    binary.write_bytes(b'\x00\x00\x00\x00')

    assert CliRunner().invoke(run, ['-m', 'naive', str(binary)]).exit_code == EXIT_FAILED


def test_tape_reset_between_files(tmp_path):
    first = tmp_path / 'first.bf'
    first.write_text('+++')
    second = tmp_path / 'second.bf'
    second.write_text('.')

    settings = RunSettings().update(eof='zero')
    out = _Sink()
    assert run_batch(settings, [first, second], stdout=out) == 0
    assert out.data == b'\x00'


class _Sink:
    def __init__(self):
        self.data = b''

    def write(self, b):
        self.data += bytes(b)

    def flush(self):
        pass


def test_format_time():
    assert format_time(1_500_000) == '  Time: 1.50ms'
    assert format_time(12_000_000_000) == '  Time: 12.00s'
