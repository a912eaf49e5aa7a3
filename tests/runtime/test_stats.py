import pytest

import bfbc.common.ops as ops
from bfbc.runtime.stats import Stats, format_stats, percent

from unit_utils import execute_source, load_file


def test_counts():
    (_, _, stats) = execute_source('++[-]')

    assert stats.ops == 6
    assert stats.adds == 3
    assert stats.beqz == 1 and stats.beqz_taken == 0
    assert stats.bnez == 2 and stats.bnez_taken == 1
    assert stats.branches == 3
    assert stats.taken_branches == 1


def test_branch_balance():
    (_, _, stats) = execute_source(load_file('testdata/bf/hello.bf'))

    for kind in (ops.BEQZ, ops.BNEZ):
        assert stats.taken(kind) <= stats.total(kind)
        assert stats.taken(kind) + stats.not_taken(kind) == stats.total(kind)

    assert stats.ops == stats.adds + stats.movs + stats.calls + stats.branches
    assert stats.calls == 13


def test_not_a_branch():
    with pytest.raises(ValueError):
        Stats().total(ops.ADD)


def test_percent():
    assert percent(1, 4) == '25.0%'
    assert percent(0, 0) == '-'


def test_format():
    (_, _, stats) = execute_source('+++.')
    lines = format_stats(stats)

    assert lines[0] == '  Stats'
    assert lines[1] == '         ops: 2'
    assert '       calls: 1 (50.0%)' in lines
    assert '    branches: 0 (taken 0, -)' in lines
