''' First pass processor for listings '''

import logging as lg
from typing import Any

import bfbc.common.ops as ops

Tokens = list[Any]


class AssemblyError(Exception):
    pass


class FPP:
    code: list[int]
    branches: dict[int, tuple[int, int]]  # index -> (opcode, resume index)

    def __init__(self):
        self.code = list()
        self.branches = dict()

    # Handlers
    def on_index(self, index: int):
        if index != len(self.code):
            raise AssemblyError(f'Listing index {index} where {len(self.code)} expected')

    def issue_fold(self, arg: tuple[int, int]):
        (op, n) = arg

        try:
            self.code.append(ops.make_insn(op, n))
        except ops.EncodingError as e:
            raise AssemblyError(str(e)) from e

    def issue_branch(self, arg: tuple[int, int]):
        (op, target) = arg
        lg.debug(f'Branch 0x{op:X} @ {len(self.code)} -> {target}')
        self.branches[len(self.code)] = (op, target)
        self.code.append(ops.END)  # placeholder

    def issue_call(self, symbol: str):
        func = next(f for f, s in ops.FUNC_SYMBOLS.items() if s == symbol)
        self.code.append(ops.make_insn(ops.CALL, func))

    # Second pass
    def resolve(self):
        pending: list[int] = []

        for index, (op, target) in sorted(self.branches.items()):
            partner = target - 1

            if op == ops.BEQZ:
                pending.append(index)
                continue

            if not pending:
                raise AssemblyError(f"']' at {index} without matching '['")

            start = pending.pop()
            (_, start_target) = self.branches[start]

            if start_target - 1 != index or partner != start:
                raise AssemblyError(
                    f'Loop at {start}..{index} has inconsistent targets '
                    f'{start_target} and {target}'
                )

            self.code[start] = ops.make_insn(ops.BEQZ, ops.branch_offset(start, index))
            self.code[index] = ops.make_insn(ops.BNEZ, ops.branch_offset(index, start))

        if pending:
            raise AssemblyError(f"'[' at {pending[-1]} is never closed")
