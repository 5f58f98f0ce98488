# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for kalc.operations.assignment - the 'inputs -> output' DSL."""

from __future__ import annotations

import pytest

from kalc.operations import Operation
from kalc.operations.assignment import parse_assignment

# =============================================================================
# Tests: parse_assignment
# =============================================================================


class TestParseAssignment:
    """Tests for parse_assignment DSL parser."""

    def test_simple_assignment(self):
        """Parse simple 'a -> b' assignment."""
        inputs, output = parse_assignment("a -> b")
        assert inputs == ("a",)
        assert output == "b"

    def test_multiple_inputs_keep_order(self):
        """Inputs keep declared order, which is the call order."""
        inputs, output = parse_assignment("c, a, b -> d")
        assert inputs == ("c", "a", "b")
        assert output == "d"

    def test_whitespace_trimmed(self):
        """Whitespace around names is stripped."""
        inputs, output = parse_assignment("  a  ,  b  ->  c  ")
        assert inputs == ("a", "b")
        assert output == "c"

    def test_no_inputs(self):
        """An operation may take no inputs at all."""
        inputs, output = parse_assignment(" -> constant")
        assert inputs == ()
        assert output == "constant"


# =============================================================================
# Tests: opaque value names
# =============================================================================


class TestOpaqueNames:
    """Characters other than '->' and ',' belong to the names."""

    def test_colon_in_input_kept(self):
        """A ':' inside an input name is not a label separator."""
        inputs, output = parse_assignment("rate:base -> total")
        assert inputs == ("rate:base",)
        assert output == "total"

    def test_colon_in_output_kept(self):
        """A ':' inside the output name survives."""
        _, output = parse_assignment("x -> ns:double")
        assert output == "ns:double"

    def test_pipe_in_names_kept(self):
        """A '|' inside names is kept verbatim."""
        inputs, output = parse_assignment("a|b, c -> d|e")
        assert inputs == ("a|b", "c")
        assert output == "d|e"

    def test_operation_from_assignment_keeps_names(self):
        """Operation.from_assignment passes names through untouched."""
        op = Operation.from_assignment("rate:base, fee|flat -> total", lambda r, f: r + f)
        assert op.inputs == ("rate:base", "fee|flat")
        assert op.output == "total"


# =============================================================================
# Tests: invalid syntax
# =============================================================================


class TestInvalidAssignment:
    """Malformed assignments raise ValueError."""

    def test_missing_arrow_raises(self):
        """An assignment without '->' is rejected."""
        with pytest.raises(ValueError, match="missing '->'"):
            parse_assignment("a, b")

    def test_double_arrow_raises(self):
        """Chained arrows are rejected."""
        with pytest.raises(ValueError, match="Invalid assignment syntax"):
            parse_assignment("a -> b -> c")

    def test_multiple_outputs_rejected(self):
        """Each operation produces exactly one value."""
        with pytest.raises(ValueError, match="exactly one output"):
            parse_assignment("a -> b, c")

    def test_empty_output_rejected(self):
        """An empty right-hand side names no output."""
        with pytest.raises(ValueError, match="exactly one output"):
            parse_assignment("a ->")
