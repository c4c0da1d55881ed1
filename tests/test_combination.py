"""
Tests for the combination engine (joint refinement of two partitions).
"""

import operator

import pytest
import torch

from piecewise_constant import (
    Interval,
    Piecewise,
    SmallPiecewise,
    ValueOpFailed,
    add,
    combine,
    multiply,
    subtract,
)


def _segs(fn):
    return list(fn.segments())


A_SEGMENTS = [(Interval.closed_open(0, 10), 1), (Interval.closed(10, 20), 2)]
B_SEGMENTS = [(Interval.closed_open(5, 15), 10)]


class TestScenario:

    def test_multiply_overlapping_partitions(self):
        result = combine(Piecewise(A_SEGMENTS), Piecewise(B_SEGMENTS), operator.mul)
        assert _segs(result) == [
            (Interval.closed_open(5, 10), 10),
            (Interval.closed_open(10, 15), 20),
        ]
        for p in [0, 2.5, 4.999, 15, 17, 20]:
            assert result.value_at(p) is None

    @pytest.mark.parametrize("make_a, make_b", [
        (lambda s: Piecewise(s), lambda s: SmallPiecewise(4, s)),
        (lambda s: SmallPiecewise(4, s), lambda s: Piecewise(s)),
        (lambda s: SmallPiecewise(4, s), lambda s: SmallPiecewise(4, s)),
    ])
    def test_storage_variant_does_not_matter(self, make_a, make_b):
        expected = multiply(Piecewise(A_SEGMENTS), Piecewise(B_SEGMENTS))
        result = multiply(make_a(A_SEGMENTS), make_b(B_SEGMENTS))
        assert isinstance(result, Piecewise)
        assert result == expected


class TestPointwiseLaws:

    A = Piecewise([
        (Interval.less_than(-5), 7),
        (Interval.closed_open(-5, 0), 1),
        (Interval.closed(0, 3), 2),
        (Interval.open(4, 9), 3),
        (Interval.closed_open(9, 12), 4),
    ])
    B = Piecewise([
        (Interval.closed(-8, -1), 10),
        (Interval.open(-1, 2), 20),
        (Interval.closed_open(2.5, 10), 30),
        (Interval.greater_than(11), 40),
    ])

    def test_add_matches_pointwise_sum(self):
        result = add(self.A, self.B)
        for p in [x / 8 for x in range(-120, 160)]:
            va, vb = self.A.value_at(p), self.B.value_at(p)
            if va is None or vb is None:
                assert result.value_at(p) is None
            else:
                assert result.value_at(p) == va + vb

    def test_subtract(self):
        assert subtract(self.A, self.B).value_at(0) == 2 - 20

    def test_segment_count_bound(self):
        result = add(self.A, self.B)
        assert len(result) <= len(self.A) + len(self.B) - 1

    def test_output_is_sorted_and_non_overlapping(self):
        segs = list(add(self.A, self.B))
        for prev, nxt in zip(segs[:-1], segs[1:]):
            assert not prev.domain.overlaps(nxt.domain)
            assert prev.domain.lower_key() < nxt.domain.lower_key()

    def test_identity_with_zero(self):
        zero = self.A.map_values(lambda v: 0)
        assert add(self.A, zero) == self.A

    def test_disjoint_inputs_give_empty_result(self):
        left = Piecewise([(Interval.closed_open(0, 1), 1)])
        right = Piecewise([(Interval.closed(1, 2), 1)])
        assert len(add(left, right)) == 0

    def test_empty_input(self):
        assert len(add(Piecewise(), self.A)) == 0


class TestCoalescing:

    def test_equal_adjacent_outputs_merge(self):
        a = Piecewise([(Interval.closed_open(0, 5), 1), (Interval.closed(5, 10), 1)])
        b = Piecewise([(Interval.closed(0, 10), 3)])
        assert _segs(multiply(a, b)) == [(Interval.closed(0, 10), 3)]

    def test_gap_prevents_merge(self):
        a = Piecewise([(Interval.closed_open(0, 5), 1), (Interval.open_closed(5, 10), 1)])
        b = Piecewise([(Interval.closed(0, 10), 3)])
        assert len(multiply(a, b)) == 2


class TestTensorValues:
    """Vector-valued segments, as produced from (M, d) value tables."""

    ZERO = Piecewise([(Interval.closed(0, 2), torch.zeros(2))])

    def test_distinct_adjacent_tensors_stay_separate(self):
        a = Piecewise([
            (Interval.closed_open(0, 1), torch.tensor([1.0, 2.0])),
            (Interval.closed(1, 2), torch.tensor([3.0, 4.0])),
        ])
        result = add(a, self.ZERO)
        assert len(result) == 2
        assert torch.equal(result.value_at(0.5), torch.tensor([1.0, 2.0]))
        assert torch.equal(result.value_at(1.5), torch.tensor([3.0, 4.0]))

    def test_equal_adjacent_tensors_merge(self):
        a = Piecewise([
            (Interval.closed_open(0, 1), torch.tensor([1.0, 2.0])),
            (Interval.closed(1, 2), torch.tensor([1.0, 2.0])),
        ])
        result = add(a, self.ZERO)
        assert [domain for domain, _ in result.segments()] == [Interval.closed(0, 2)]

    def test_failing_comparison_does_not_merge(self):
        class Opaque:
            def __eq__(self, other):
                raise RuntimeError("not comparable")

        a = Piecewise([(Interval.closed_open(0, 1), 1), (Interval.closed(1, 2), 1)])
        b = Piecewise([(Interval.closed(0, 2), 0)])
        result = combine(a, b, lambda x, y: Opaque())
        assert len(result) == 2


class TestOperatorFailure:

    def test_failure_is_wrapped(self):
        a = Piecewise([(Interval.closed(0, 1), 1)])
        b = Piecewise([(Interval.closed(0, 1), 0)])
        with pytest.raises(ValueOpFailed) as excinfo:
            combine(a, b, operator.truediv)
        assert isinstance(excinfo.value.inner, ZeroDivisionError)
        assert excinfo.value.__cause__ is excinfo.value.inner

    def test_uncovered_regions_never_reach_op(self):
        calls = []

        def op(x, y):
            calls.append((x, y))
            return x + y

        a = Piecewise([(Interval.closed(0, 1), 1), (Interval.closed(5, 6), 2)])
        b = Piecewise([(Interval.closed(5.5, 8), 3)])
        combine(a, b, op)
        assert calls == [(2, 3)]
