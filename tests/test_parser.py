"""
Tests for the date expression parser.
"""

from datetime import date

import pytest

from backend.taskmachine.dateexpr import ExpressionParser, eval_int, parse_bool, parse_int, render
from backend.taskmachine.dateexpr.nodes import (
    Add,
    And,
    BoolLiteral,
    Divide,
    Equal,
    Greater,
    IntLiteral,
    Less,
    Modulo,
    Multiply,
    Negate,
    Not,
    Or,
    Quantity,
    QuantityRef,
    Same,
    Statement,
    StatementRef,
    Subtract,
    depth,
)
from backend.taskmachine.dateexpr.parser import MAX_DEPTH

DAY = QuantityRef(Quantity.DAY)
WEEKDAY = QuantityRef(Quantity.WEEKDAY)
TRUE = BoolLiteral(True)
FALSE = BoolLiteral(False)


def lit(value):
    return IntLiteral(value)


class TestParseIntKeywords:
    """Tests for calendar quantity and weekday keywords."""

    @pytest.mark.parametrize("text,quantity", [
        ("julian", Quantity.JULIAN),
        ("year", Quantity.YEAR),
        ("month", Quantity.MONTH),
        ("day", Quantity.DAY),
        ("yearday", Quantity.YEAR_DAY),
        ("weekday", Quantity.WEEKDAY),
        ("yearcount", Quantity.YEAR_COUNT),
        ("monthcount", Quantity.MONTH_COUNT),
        ("easter", Quantity.EASTER),
    ])
    def test_quantities(self, text, quantity):
        """Test every quantity keyword parses to its own leaf."""
        assert parse_int(text) == QuantityRef(quantity)

    def test_monthcount_is_not_month(self):
        """Test the longer keyword is not split into a shorter one."""
        assert parse_int("monthcount") == QuantityRef(Quantity.MONTH_COUNT)
        assert parse_int("month") == QuantityRef(Quantity.MONTH)
        assert parse_int("monthcount") != parse_int("month")

    @pytest.mark.parametrize("text,value", [
        ("monday", 1), ("mon", 1),
        ("tuesday", 2), ("tue", 2),
        ("wednesday", 3), ("wed", 3),
        ("thursday", 4), ("thu", 4),
        ("friday", 5), ("fri", 5),
        ("saturday", 6), ("sat", 6),
        ("sunday", 7), ("sun", 7),
    ])
    def test_weekday_names(self, text, value):
        """Test weekday names are integer literals."""
        assert parse_int(text) == lit(value)


class TestParseIntOperators:
    """Tests for integer operator precedence and associativity."""

    def test_multiplicative_binds_tighter(self):
        """Test * binds tighter than +."""
        assert parse_int("1 + 2 * 3") == Add(lit(1), Multiply(lit(2), lit(3)))

    def test_left_associative(self):
        """Test operators of one tier associate to the left."""
        assert parse_int("10 - 3 - 2") == Subtract(Subtract(lit(10), lit(3)), lit(2))
        assert parse_int("20 / 5 % 3") == Modulo(Divide(lit(20), lit(5)), lit(3))

    def test_parentheses(self):
        """Test parentheses override precedence."""
        assert parse_int("(1 + 2) * 3") == Multiply(Add(lit(1), lit(2)), lit(3))

    def test_prefix_binds_tightest(self):
        """Test unary minus applies to the operand, not the product."""
        assert parse_int("-day * 2") == Multiply(Negate(DAY), lit(2))
        assert parse_int("2 * -3") == Multiply(lit(2), Negate(lit(3)))

    def test_unary_plus_is_identity(self):
        """Test unary plus adds no node."""
        assert parse_int("+5") == lit(5)

    def test_prefix_applies_once(self):
        """Test stacked prefix operators need parentheses."""
        assert parse_int("--1") is None
        assert parse_int("-(-1)") == Negate(Negate(lit(1)))


class TestParseIntFailures:
    """Tests for rejected integer expressions."""

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "1 2",
        "(1",
        "1)",
        "1 +",
        "* 2",
        "isweekend",
        "day == 1",
        "Month",
        "monthx",
    ])
    def test_rejected(self, text):
        """Test malformed or boolean input yields None."""
        assert parse_int(text) is None

    def test_surrounding_whitespace(self):
        """Test whitespace around the expression is ignored."""
        assert parse_int("  day  ") == DAY


class TestParseBool:
    """Tests for boolean expressions."""

    def test_statements(self):
        """Test date statement keywords."""
        assert parse_bool("isleapyear") == StatementRef(Statement.IS_LEAP_YEAR)
        assert parse_bool("isweekend") == StatementRef(Statement.IS_WEEKEND)
        assert parse_bool("iseaster") == StatementRef(Statement.IS_EASTER)

    def test_literals(self):
        """Test boolean literals."""
        assert parse_bool("true") == TRUE
        assert parse_bool("false") == FALSE

    def test_relations(self):
        """Test comparisons and their derived forms."""
        assert parse_bool("weekday == mon") == Equal(WEEKDAY, lit(1))
        assert parse_bool("day > 1") == Greater(DAY, lit(1))
        assert parse_bool("day < 1") == Less(DAY, lit(1))
        assert parse_bool("day != 1") == Not(Equal(DAY, lit(1)))
        assert parse_bool("day >= 1") == Not(Less(DAY, lit(1)))
        assert parse_bool("day <= 1") == Not(Greater(DAY, lit(1)))

    def test_and_or_share_a_tier(self):
        """Test && and || evaluate left to right."""
        assert parse_bool("true && false || true") == Or(And(TRUE, FALSE), TRUE)
        assert parse_bool("true || false && true") == And(Or(TRUE, FALSE), TRUE)

    def test_not_binds_tightest(self):
        """Test ! applies to its operand only."""
        assert parse_bool("!true && false") == And(Not(TRUE), FALSE)
        assert parse_bool("!day == 1") == Not(Equal(DAY, lit(1)))

    def test_not_applies_once(self):
        """Test stacked ! needs parentheses."""
        assert parse_bool("!!true") is None
        assert parse_bool("!(!true)") == Not(Not(TRUE))

    def test_same_binds_loosest(self):
        """Test boolean == groups looser than && and ||."""
        assert parse_bool("true == false && false") == Same(TRUE, And(FALSE, FALSE))
        assert parse_bool("isweekend != true") == Not(Same(StatementRef(Statement.IS_WEEKEND), TRUE))

    def test_relation_then_same(self):
        """Test a comparison can be compared to a boolean."""
        assert parse_bool("day == 1 == true") == Same(Equal(DAY, lit(1)), TRUE)

    def test_relations_combined(self):
        """Test comparisons joined by connectives."""
        assert parse_bool("day==1&&isweekend") == And(
            Equal(DAY, lit(1)), StatementRef(Statement.IS_WEEKEND)
        )

    def test_parenthesised_integer_operand(self):
        """Test "(" may open the integer side of a comparison."""
        assert parse_bool("(day + 1) % 2 == 0") == Equal(Modulo(Add(DAY, lit(1)), lit(2)), lit(0))
        assert parse_bool("((day)) == 1") == Equal(DAY, lit(1))

    def test_parenthesised_boolean(self):
        """Test "(" may open a boolean group."""
        assert parse_bool("(isweekend)") == StatementRef(Statement.IS_WEEKEND)
        assert parse_bool("(day == 1) == (month == 2)") == Same(
            Equal(DAY, lit(1)), Equal(QuantityRef(Quantity.MONTH), lit(2))
        )

    @pytest.mark.parametrize("text", [
        "",
        "day",
        "isweekend == 1",
        "day == 1 &&",
        "(true",
        "true false",
        "day === 1",
        "day == 1 == 2",
    ])
    def test_rejected(self, text):
        """Test malformed or integer input yields None."""
        assert parse_bool(text) is None

    def test_non_string_input(self):
        """Test non-string input yields None instead of raising."""
        assert parse_bool(None) is None
        assert parse_int(42) is None


class TestDiagnostics:
    """Tests for parse error reporting."""

    def test_diagnose_valid(self):
        """Test valid input has no diagnostic."""
        parser = ExpressionParser()
        assert parser.diagnose_bool("isweekend") is None
        assert parser.diagnose_int("day + 1") is None

    def test_diagnose_position(self):
        """Test the diagnostic points at the offending token."""
        parser = ExpressionParser()
        error = parser.diagnose_bool("day == 1 &&")
        assert error is not None
        assert error.position == 11
        assert "end of input" in error.message
        assert error.expression == "day == 1 &&"

    def test_diagnose_trailing_input(self):
        """Test trailing tokens are reported."""
        error = ExpressionParser().diagnose_int("1 2")
        assert error.position == 2

    def test_validate(self):
        """Test validate returns a flag and message."""
        parser = ExpressionParser()
        assert parser.validate("isweekend") == (True, None)
        assert parser.validate("day * 2", kind="int") == (True, None)

        valid, message = parser.validate("day == @")
        assert valid is False
        assert "Unexpected character" in message

    def test_validate_unknown_kind(self):
        """Test an unknown expression kind is rejected."""
        with pytest.raises(ValueError):
            ExpressionParser().validate("day", kind="float")


class TestRender:
    """Tests for rendering trees back to source."""

    @pytest.mark.parametrize("text", [
        "weekday == mon && monthcount == 1",
        "(julian - 3) % 14 == 0 || easter == 1",
        "!(day > 1) == isleapyear",
        "-(-day) * 2 <= 10",
        "true != (year / 4 == 0)",
    ])
    def test_reparses_to_same_tree(self, text):
        """Test rendered text parses back to an equal tree."""
        expr = parse_bool(text)
        assert expr is not None
        assert parse_bool(render(expr)) == expr

    def test_render_int(self):
        """Test integer rendering."""
        assert render(parse_int("1 + 2 * -day")) == "(1 + (2 * -day))"


class TestNestingLimit:
    """Tests for the limit on expression tree depth."""

    def test_long_sum_rejected(self):
        """Test a 3000-term sum is too deep to hand out."""
        assert parse_int(" + ".join(["1"] * 3000)) is None

    def test_long_conjunction_rejected(self):
        """Test a 3000-term conjunction is too deep to hand out."""
        assert parse_bool(" && ".join(["true"] * 3000)) is None
        assert parse_bool(" + ".join(["1"] * 3000) + " == 3000") is None

    def test_limit_reported(self):
        """Test the diagnostic names the nesting limit."""
        error = ExpressionParser().diagnose_int(" + ".join(["1"] * (MAX_DEPTH + 1)))
        assert error is not None
        assert "nested too deeply" in error.message

    def test_chain_at_limit_accepted(self):
        """Test a chain exactly as deep as the limit parses."""
        expr = parse_int(" + ".join(["1"] * MAX_DEPTH))
        assert expr is not None
        assert depth(expr) == MAX_DEPTH

    def test_deep_parentheses_rejected(self):
        """Test deeply nested parentheses yield None instead of raising."""
        assert parse_int("(" * 3000 + "1" + ")" * 3000) is None

    def test_depth(self):
        """Test depth counts nodes on the longest path."""
        assert depth(lit(1)) == 1
        assert depth(parse_int("1 + 2 * -day")) == 4
        assert depth(parse_bool("!(day == 1)")) == 3


class TestRenderNegativeLiteral:
    """Tests for rendering hand-built negative literals."""

    def test_value_preserved(self):
        """Test a negative literal renders to text with the same value."""
        text = render(lit(-3))
        assert parse_int(text) == Negate(lit(3))
        assert eval_int(parse_int(text), date(2024, 1, 1)) == -3
