from dataclasses import dataclass

import bfbc.common.ops as ops


@dataclass
class Stats:
    ops: int = 0
    adds: int = 0
    movs: int = 0
    calls: int = 0
    beqz: int = 0
    beqz_taken: int = 0
    bnez: int = 0
    bnez_taken: int = 0

    @property
    def branches(self) -> int:
        return self.beqz + self.bnez

    @property
    def taken_branches(self) -> int:
        return self.beqz_taken + self.bnez_taken

    def total(self, kind: int) -> int:
        match kind:
            case ops.BEQZ:
                return self.beqz
            case ops.BNEZ:
                return self.bnez

        raise ValueError(f'Not a branch kind 0x{kind:X}')

    def taken(self, kind: int) -> int:
        match kind:
            case ops.BEQZ:
                return self.beqz_taken
            case ops.BNEZ:
                return self.bnez_taken

        raise ValueError(f'Not a branch kind 0x{kind:X}')

    def not_taken(self, kind: int) -> int:
        return self.total(kind) - self.taken(kind)


def percent(part: int, whole: int) -> str:
    if whole == 0:
        return '-'

    return f'{100.0 * part / whole:.1f}%'


def format_stats(stats: Stats) -> list[str]:
    ops_count = stats.ops

    return [
        '  Stats',
        f'         ops: {ops_count}',
        f'        adds: {stats.adds} ({percent(stats.adds, ops_count)})',
        f'        movs: {stats.movs} ({percent(stats.movs, ops_count)})',
        f'       calls: {stats.calls} ({percent(stats.calls, ops_count)})',
        f'    branches: {stats.branches} (taken {stats.taken_branches}, '
        f'{percent(stats.taken_branches, stats.branches)})',
        f'        beqz: {stats.beqz} (taken {stats.beqz_taken}, '
        f'{percent(stats.beqz_taken, stats.beqz)})',
        f'        bnez: {stats.bnez} (taken {stats.bnez_taken}, '
        f'{percent(stats.bnez_taken, stats.bnez)})',
    ]
