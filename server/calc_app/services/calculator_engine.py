from __future__ import annotations

import logging
import math
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

logger = logging.getLogger("calc_app.calculator.engine")

ERROR_RESULT = "Error"
EMPTY_RESULT = "0"

SCIENTIFIC_UPPER_BOUND = 1e15
SCIENTIFIC_LOWER_BOUND = 1e-10

_FRACTION_QUANTUM = Decimal("1E-10")
_SIGNIFICAND_QUANTUM = Decimal("1.000000000")
_MANTISSA_QUANTUM = Decimal("1.0000000000")

_GLYPH_REPLACEMENTS = {
    "\n": "",
    " ": "",
    "×": "*",
    "÷": "/",
    "−": "-",
}
_OPERATORS = frozenset("+-*/")
_NUMBER_CHARS = frozenset("0123456789.")
_PREVIEW_OPERATORS = frozenset("+-*/×÷−")


class ExpressionSyntaxError(ValueError):
    """Raised when an expression does not match the arithmetic grammar."""


def substitute_glyphs(raw: str) -> str:
    text = raw
    for glyph, replacement in _GLYPH_REPLACEMENTS.items():
        text = text.replace(glyph, replacement)
    return text


def strip_dangling_operator(text: str) -> str:
    # Only the very last character is dropped; "10++" still ends in "+".
    if text and text[-1] in _OPERATORS:
        return text[:-1]
    return text


def normalize(raw: str) -> str:
    return strip_dangling_operator(substitute_glyphs(raw))


def _divide(dividend: float, divisor: float) -> float:
    if divisor == 0.0:
        if dividend == 0.0 or math.isnan(dividend):
            return math.nan
        return math.copysign(math.inf, dividend) * math.copysign(1.0, divisor)
    return dividend / divisor


class ExpressionParser:
    """
    Recursive-descent evaluator that works directly on the character stream.

    Each grammar level returns a fully reduced float before its caller
    continues, and the cursor only ever moves forward:

        expression := term (('+' | '-') term)*
        term       := factor (('*' | '/') factor)*
        factor     := '+' factor | '-' factor | '(' expression ')' | number
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.position = -1
        self.current_char = ""

    def advance(self) -> None:
        self.position += 1
        if self.position < len(self.text):
            self.current_char = self.text[self.position]
        else:
            self.current_char = ""

    def consume_if_matches(self, char: str) -> bool:
        while self.current_char == " ":
            self.advance()
        if self.current_char == char:
            self.advance()
            return True
        return False

    def parse(self) -> float:
        self.position = -1
        self.advance()
        value = self.parse_expression()
        if self.position < len(self.text):
            raise ExpressionSyntaxError(
                f"Unexpected character {self.current_char!r} at position {self.position}."
            )
        return value

    def parse_expression(self) -> float:
        value = self.parse_term()
        while True:
            if self.consume_if_matches("+"):
                value += self.parse_term()
            elif self.consume_if_matches("-"):
                value -= self.parse_term()
            else:
                return value

    def parse_term(self) -> float:
        value = self.parse_factor()
        while True:
            if self.consume_if_matches("*"):
                value *= self.parse_factor()
            elif self.consume_if_matches("/"):
                value = _divide(value, self.parse_factor())
            else:
                return value

    def parse_factor(self) -> float:
        if self.consume_if_matches("+"):
            return self.parse_factor()
        if self.consume_if_matches("-"):
            return -self.parse_factor()

        start = self.position
        if self.consume_if_matches("("):
            value = self.parse_expression()
            # A missing closing parenthesis is tolerated.
            self.consume_if_matches(")")
            return value

        if self.current_char in _NUMBER_CHARS:
            while self.current_char in _NUMBER_CHARS:
                self.advance()
            literal = self.text[start:self.position]
            try:
                return float(literal)
            except ValueError as exc:
                raise ExpressionSyntaxError(f"Malformed number {literal!r}.") from exc

        if not self.current_char:
            raise ExpressionSyntaxError("Unexpected end of expression.")
        raise ExpressionSyntaxError(
            f"Unexpected character {self.current_char!r} at position {self.position}."
        )


def evaluate(expression: str) -> float:
    return ExpressionParser(expression).parse()


def _format_scientific(value: float) -> str:
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    decimal_value = Decimal(repr(value))
    exponent = decimal_value.adjusted()
    # Ten significant digits, truncated, then padded to ten fractional digits:
    # 9.99999999999999E15 -> 9.9999999990E15.
    mantissa = decimal_value.scaleb(-exponent).quantize(_SIGNIFICAND_QUANTUM, rounding=ROUND_DOWN)
    return f"{format(mantissa.quantize(_MANTISSA_QUANTUM), 'f')}E{exponent}"


def _format_fixed(value: float) -> str:
    rounded = Decimal(repr(value)).quantize(_FRACTION_QUANTUM, rounding=ROUND_HALF_UP)
    return format(rounded, "f").rstrip("0").rstrip(".")


def format_result(value: float) -> str:
    """
    Render a float for display.

    Magnitudes of 1e15 and above, or below 1e-10, use scientific notation with
    ten mantissa digits. Whole numbers drop the decimal point and everything
    else keeps at most ten fractional digits with trailing zeros trimmed.
    """

    if math.isnan(value):
        return "NaN"

    magnitude = abs(value)
    if magnitude != 0.0 and (magnitude >= SCIENTIFIC_UPPER_BOUND or magnitude < SCIENTIFIC_LOWER_BOUND):
        return _format_scientific(value)

    if value.is_integer():
        if value == 0.0:
            return EMPTY_RESULT
        return f"{value:.0f}"

    return _format_fixed(value)


def calculate(expression: str) -> str:
    """Evaluate a typed expression and return its display string, or ``"Error"``."""

    try:
        text = substitute_glyphs(expression)
        if not text:
            return EMPTY_RESULT
        return format_result(evaluate(strip_dangling_operator(text)))
    except Exception:
        logger.debug("calculator.evaluation_failed", extra={"expression": expression}, exc_info=True)
        return ERROR_RESULT


def preview(expression: str) -> str:
    """Return the live result for a partially typed expression, or an empty string."""

    if not expression:
        return ""

    operator_count = sum(1 for char in expression if char in _PREVIEW_OPERATORS)
    if operator_count == 0 or expression[-1] in _PREVIEW_OPERATORS:
        return ""
    if expression[0] in "-−" and operator_count == 1:
        return ""

    result = calculate(expression)
    return "" if result == ERROR_RESULT else result


def _group_number(number: str) -> str:
    integer_part, dot, fraction = number.partition(".")
    if integer_part:
        integer_part = f"{int(integer_part):,}"
    return f"{integer_part}{dot}{fraction}"


def group_thousands(text: str) -> str:
    if not text or text == ERROR_RESULT:
        return text

    pieces: list[str] = []
    number: list[str] = []
    for char in text:
        if char in _NUMBER_CHARS:
            number.append(char)
            continue
        if number:
            pieces.append(_group_number("".join(number)))
            number.clear()
        pieces.append(char)

    if number:
        pieces.append(_group_number("".join(number)))
    return "".join(pieces)
