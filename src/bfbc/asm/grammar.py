# type: ignore
''' Listing grammar, as produced by bfbc.tools.dump '''

import pyparsing as pp

import bfbc.common.ops as ops
from bfbc.asm.fpp import FPP


uint = pp.Word(pp.nums).setParseAction(lambda r: int(r[0]))

header = pp.Suppress(pp.Literal('Bytecode:'))
index = (uint + pp.Suppress(':')).setParseAction(lambda r: (FPP.on_index, r[0]))


def g_fold(c_inc, c_dec, op):
    return (pp.Char(c_inc + c_dec) + uint).setParseAction(
        lambda r: (FPP.issue_fold, (op, r[1] if r[0] == c_inc else -r[1]))
    )


def g_branch(literal, op):
    return (pp.Suppress(literal) + uint).setParseAction(
        lambda r: (FPP.issue_branch, (op, r[0]))
    )


add_cmd = g_fold('+', '-', ops.ADD)
mov_cmd = g_fold('>', '<', ops.MOV)
beqz_cmd = g_branch('[', ops.BEQZ)
bnez_cmd = g_branch(']', ops.BNEZ)
call_cmd = pp.Char(''.join(ops.FUNC_SYMBOLS.values())).setParseAction(
    lambda r: (FPP.issue_call, r[0])
)

cmd = add_cmd | mov_cmd | beqz_cmd | bnez_cmd | call_cmd

program = pp.Optional(header) + pp.ZeroOrMore(pp.Optional(index) + cmd) + pp.StringEnd()
