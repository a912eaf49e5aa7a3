import logging as lg

import pyparsing as pp

import bfbc.common.ops as ops
import bfbc.asm.grammar as grammar
from bfbc.asm.fpp import FPP, AssemblyError
from bfbc.common.program import Program


def assemble(listing: str) -> Program:
    first_pass = FPP()

    try:
        actions = grammar.program.parse_string(listing)
    except pp.ParseException as e:
        raise AssemblyError(f'{e.lineno}:{e.col}: {e.msg}') from e

    for (func, arg) in actions:
        func(first_pass, arg)

    first_pass.resolve()

    lg.debug(f'Assembled {len(first_pass.code)} instructions')

    first_pass.code.append(ops.END)
    return Program(first_pass.code)
