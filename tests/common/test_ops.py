import pytest

import bfbc.common.ops as ops
from bfbc.common.program import Program, ProgramFormatError
from bfbc.translate.translator import translate


def test_fields():
    insn = ops.make_insn(ops.MOV, -3)
    assert ops.insn_op(insn) == ops.MOV
    assert ops.insn_imm(insn) == -3

    insn = ops.make_insn(ops.ADD, 200)
    assert ops.insn_op(insn) == ops.ADD
    assert ops.insn_imm(insn) == 200


def test_end_is_zero():
    assert ops.make_insn(ops.END) == 0


def test_categories():
    for op in (ops.MOV, ops.ADD):
        assert op & ops.EXE
        assert not op & ops.BR

    for op in (ops.BEQZ, ops.BNEZ):
        assert op & ops.BR
        assert not op & ops.EXE

    assert not ops.CALL & (ops.EXE | ops.BR)


def test_immediate_range():
    assert ops.insn_imm(ops.make_insn(ops.ADD, ops.IMM_MAX)) == ops.IMM_MAX
    assert ops.insn_imm(ops.make_insn(ops.ADD, ops.IMM_MIN)) == ops.IMM_MIN

    with pytest.raises(ops.EncodingError):
        ops.make_insn(ops.ADD, ops.IMM_MAX + 1)

    with pytest.raises(ops.EncodingError):
        ops.make_insn(ops.MOV, ops.IMM_MIN - 1)


def test_invalid_opcode():
    with pytest.raises(ops.EncodingError):
        ops.make_insn(0x40, 1)


def test_branch_encoding():
    imm = ops.branch_offset(3, 10)
    assert imm == 28
    assert ops.branch_target(3, imm) == 11
    assert ops.branch_target(10, ops.branch_offset(10, 3)) == 4


def test_program_requires_end():
    with pytest.raises(ProgramFormatError):
        Program([ops.make_insn(ops.ADD, 1)])

    with pytest.raises(ProgramFormatError):
        Program([])

    with pytest.raises(ProgramFormatError):
        Program([ops.END, ops.make_insn(ops.ADD, 1), ops.END])


def test_program_bytes():
    program = Program([
        ops.make_insn(ops.ADD, -5),
        ops.make_insn(ops.MOV, 7),
        ops.make_insn(ops.CALL, ops.FUNC_PUTC),
        ops.END
    ])

    buf = program.to_bytes()
    assert len(buf) == 16
    assert buf[-4:] == b'\x00\x00\x00\x00'
    assert Program.from_bytes(buf) == program


def test_program_bad_bytes():
    with pytest.raises(ProgramFormatError):
        Program.from_bytes(b'\x00\x00\x00')

    with pytest.raises(ProgramFormatError):
        Program.from_bytes(b'\x00\x00\x00\x42')


def words(*code: int) -> bytes:
    return b''.join(insn.to_bytes(4, 'big', signed=True) for insn in code)


def test_binary_unknown_opcode():
    with pytest.raises(ProgramFormatError):
        Program.from_bytes(words(ops.make_insn(0x20, 1), ops.END))

    with pytest.raises(ProgramFormatError):
        Program.from_bytes(words(ops.make_insn(ops.EXE, 1), ops.END))


def test_binary_unknown_call():
    with pytest.raises(ProgramFormatError):
        Program.from_bytes(words(ops.make_insn(ops.CALL, 7), ops.END))


def test_binary_unpaired_loops():
    beqz = ops.make_insn(ops.BEQZ, ops.branch_offset(0, 1))
    bnez = ops.make_insn(ops.BNEZ, ops.branch_offset(1, 0))

    assert Program.from_bytes(words(beqz, bnez, ops.END)) == translate('[]')

    with pytest.raises(ProgramFormatError):
        Program.from_bytes(words(beqz, ops.END))

    with pytest.raises(ProgramFormatError):
        Program.from_bytes(words(ops.make_insn(ops.BNEZ, -4), ops.END))


def test_binary_inconsistent_targets():
    beqz = ops.make_insn(ops.BEQZ, ops.branch_offset(0, 2))
    add = ops.make_insn(ops.ADD, 1)
    bnez = ops.make_insn(ops.BNEZ, ops.branch_offset(1, 0))

    with pytest.raises(ProgramFormatError):
        Program.from_bytes(words(beqz, bnez, add, ops.END))
