"""
Pricing formula evaluator.

A formula is a chain of operator/operand tokens such as ``+10x1.16-5%``
applied strictly left to right to a running value that starts at the
base price. There is no operator precedence: ``+5x2`` on 10 gives 30.

Operators are ``+ - x /`` (``*`` is accepted as an alias of ``x``).
Operands are decimal numbers, optionally followed by ``%``. How a percent
operand combines with the running value depends on the percent mode:

- ``literal``: ``N%`` is the plain number N/100, so ``+5%`` adds 0.05.
- ``relative``: ``+N%`` / ``-N%`` add or subtract N% of the running value;
  ``xN%`` and ``/N%`` multiply or divide by N/100.
"""
import logging
import re
from decimal import Decimal, DivisionByZero, InvalidOperation, Overflow
from typing import List, Optional, Tuple

from huastex.exceptions import InvalidFormulaResult, MalformedFormulaToken
from huastex.utils.number_format import to_decimal, MAX_AMOUNT

logger = logging.getLogger(__name__)

PERCENT_LITERAL = 'literal'
PERCENT_RELATIVE = 'relative'
PERCENT_MODES = (PERCENT_LITERAL, PERCENT_RELATIVE)

TOKEN_PATTERN = re.compile(r'([+\-x*/])(\d+(?:\.\d+)?|\.\d+)(%?)')
WHITESPACE = re.compile(r'\s+')

HUNDRED = Decimal('100')


def normalize_expression(expression: Optional[str]) -> str:
    """Strip whitespace and add the implicit leading `+` to an unsigned first term."""
    if not expression:
        return ''
    cleaned = WHITESPACE.sub('', str(expression)).replace('X', 'x')
    if cleaned and (cleaned[0].isdigit() or cleaned[0] == '.'):
        cleaned = '+' + cleaned
    return cleaned


def tokenize(expression: Optional[str], strict: bool = False) -> List[Tuple[str, Decimal, bool]]:
    """
    Split an expression into (operator, operand, is_percent) tuples.

    Text between valid tokens is skipped. With `strict`, any skipped text
    raises MalformedFormulaToken instead.
    """
    cleaned = normalize_expression(expression)
    tokens = []
    position = 0
    for match in TOKEN_PATTERN.finditer(cleaned):
        _check_gap(expression, cleaned[position:match.start()], strict)
        operator, number, percent = match.groups()
        tokens.append(('x' if operator == '*' else operator, Decimal(number), bool(percent)))
        position = match.end()
    _check_gap(expression, cleaned[position:], strict)
    return tokens


def _check_gap(expression, gap, strict):
    if not gap:
        return
    if strict:
        raise MalformedFormulaToken(expression, gap)
    logger.debug(f"Ignoring unrecognized formula text {gap!r} in {expression!r}")


def evaluate(base, expression: Optional[str], percent_mode: str = PERCENT_LITERAL,
             strict: bool = False) -> Decimal:
    """
    Apply `expression` to `base` and return the result.

    Raises:
        InvalidFormulaResult: the base is not a number, a step divides by zero
            or overflows, or the result is not finite or larger than a stored
            amount can be.
        MalformedFormulaToken: only in strict mode, for unrecognized text.
        ValueError: unknown percent_mode.
    """
    if percent_mode not in PERCENT_MODES:
        raise ValueError(f'Modo de porcentaje inválido: {percent_mode}')

    value = to_decimal(base)
    if value is None:
        raise InvalidFormulaResult(expression or '', 'el valor base no es numérico')

    for operator, operand, is_percent in tokenize(expression, strict=strict):
        try:
            if is_percent:
                operand = operand / HUNDRED
                if percent_mode == PERCENT_RELATIVE and operator in '+-':
                    operand = value * operand
            if operator == '+':
                value = value + operand
            elif operator == '-':
                value = value - operand
            elif operator == 'x':
                value = value * operand
            else:
                value = value / operand
        except (DivisionByZero, ZeroDivisionError):
            raise InvalidFormulaResult(expression, 'división entre cero')
        except Overflow:
            raise InvalidFormulaResult(expression, 'resultado fuera de rango')
        except InvalidOperation:
            raise InvalidFormulaResult(expression)
        if not value.is_finite():
            raise InvalidFormulaResult(expression)

    if abs(value) > MAX_AMOUNT:
        raise InvalidFormulaResult(expression, 'resultado fuera de rango')
    return value


def apply_formula(base, expression: Optional[str], percent_mode: str = PERCENT_LITERAL,
                  strict: bool = False) -> Decimal:
    """
    Evaluate `expression` on `base`, falling back to the base itself when the
    result is not a valid number. MalformedFormulaToken still propagates in
    strict mode.
    """
    base_value = to_decimal(base)
    if not expression:
        return base_value
    try:
        return evaluate(base_value, expression, percent_mode=percent_mode, strict=strict)
    except InvalidFormulaResult as e:
        logger.warning(f"Formula fallback to base {base_value}: {e.message}")
        return base_value
