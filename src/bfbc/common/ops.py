''' Instruction encoding

An instruction is a 32-bit signed word: the opcode lives in the low 6 bits,
the signed immediate in the remaining 26 bits.
'''

from bfbc.common.conf import WORD_SIZE

# Opcodes are bit flags so categories can be tested with a single AND
END = 0x00
MOV = 0x01  # ptr += imm
ADD = 0x02  # cur += imm
BEQZ = 0x04  # if cur == 0: pc += imm / WORD_SIZE
BNEZ = 0x08  # if cur != 0: pc += imm / WORD_SIZE
CALL = 0x10  # FUNC[imm]

OP_MASK = 0x3F
OP_BITS = 6
EXE = MOV | ADD
BR = BEQZ | BNEZ

OPCODES = (MOV, ADD, BEQZ, BNEZ, CALL)

# CALL selectors
FUNC_PUTC = 0
FUNC_GETC = 1
FUNC_DEBUG = 2

# CALL selector -> source symbol
FUNC_SYMBOLS = {
    FUNC_PUTC: '.',
    FUNC_GETC: ',',
    FUNC_DEBUG: '?',
}

IMM_MIN = -(1 << (31 - OP_BITS))
IMM_MAX = (1 << (31 - OP_BITS)) - 1


class EncodingError(ValueError):
    pass


def make_insn(op: int, imm: int = 0) -> int:
    if op & ~OP_MASK:
        raise EncodingError(f'Invalid opcode 0x{op:X}')

    if imm < IMM_MIN or imm > IMM_MAX:
        raise EncodingError(f'Immediate {imm} does not fit into {32 - OP_BITS} bits')

    return (imm << OP_BITS) | op


def insn_op(insn: int) -> int:
    return insn & OP_MASK


def insn_imm(insn: int) -> int:
    return insn >> OP_BITS


def branch_offset(source: int, target: int) -> int:
    ''' Immediate of a branch at `source` that resumes right after `target` '''
    return (target - source) * WORD_SIZE


def branch_target(pc: int, imm: int) -> int:
    ''' Index of the next instruction executed when the branch at `pc` is taken '''
    return pc + imm // WORD_SIZE + 1
