"""G-code compiler -- Program IR to instruction lines.

Flattens a nested :class:`~router_control.program.operations.Program`
and renders one line per instruction::

    G0 X31.11 Y0
    M0 Start Spindle

Number format:
    Integral values render without a decimal point (``300``, ``5``).
    Everything else renders with exactly two decimals, rounding half
    away from zero on the shortest decimal representation of the value
    (``3.005 -> 3.01``).

Quantities in axis arguments are converted to the ambient unit at
compile time.  Lines are produced lazily: when rendering fails part way,
every line yielded before the failure has already been handed out.
"""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Iterator, Mapping
from decimal import ROUND_HALF_UP, Decimal
from io import StringIO
from typing import TextIO

from router_control.program.operations import (
    Arg,
    Instruction,
    Operation,
    Program,
    Token,
)
from router_control.units.quantity import Quantity, convert

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


class CompileError(Exception):
    """Raised when a program cannot be rendered."""

    pass


class UnknownOperand(CompileError):
    """Raised for an argument or value the compiler cannot render.

    Attributes
    ----------
    operand : object
        The offending value.
    """

    def __init__(self, operand: object) -> None:
        self.operand = operand
        super().__init__(f"Unrecognized operand {operand!r}")


# ---------------------------------------------------------------------------
# Values and arguments
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Render *value* as an integer string or with two decimals."""
    if isinstance(value, int) or (math.isfinite(value) and value == int(value)):
        return str(int(value))
    rounded = Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{rounded:.2f}"


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compile_value(value: object) -> str:
    """Render one axis value (number or quantity in the ambient unit)."""
    number = value
    if isinstance(value, Quantity):
        try:
            number = convert(value)
        except TypeError:
            raise UnknownOperand(value) from None
    if _is_number(number) and math.isfinite(number):
        return format_number(number)
    raise UnknownOperand(value)


def compile_keyword(name: str) -> str:
    return name.upper()


def compile_arg(arg: Arg) -> str:
    """Render one instruction argument.

    Raises
    ------
    UnknownOperand
        If *arg* is not a mapping, :class:`Token`, or string.
    """
    if isinstance(arg, Mapping):
        return " ".join(
            f"{compile_keyword(key)}{compile_value(value)}"
            for key, value in arg.items()
        )
    if isinstance(arg, Token):
        return compile_keyword(arg.name)
    if isinstance(arg, str):
        return arg
    raise UnknownOperand(arg)


def compile_instruction(instruction: Instruction) -> str:
    """Render an instruction as ``MNEMONIC ARG ...``."""
    head = compile_keyword(instruction.mnemonic)
    if not instruction.args:
        return head
    return head + " " + " ".join(compile_arg(a) for a in instruction.args)


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------


def compile_program(program: Program) -> Iterator[str]:
    """Yield one rendered line per instruction, in emission order.

    Raises
    ------
    CompileError
        On an operation that is neither an instruction nor a program.
    UnknownOperand
        On an argument or value that cannot be rendered.
    """
    for op in program.flatten():
        if not isinstance(op, Instruction):
            raise CompileError(f"Unsupported operation: {type(op).__name__}")
        yield compile_instruction(op)


def emit(program: Program, stream: TextIO | None = None) -> int:
    """Write compiled lines to *stream* (stdout by default).

    Returns
    -------
    int
        Number of lines written.
    """
    if stream is None:
        stream = sys.stdout
    count = 0
    for line in compile_program(program):
        stream.write(line + "\n")
        count += 1
    logger.debug("Emitted %d lines", count)
    return count


def render(program: Program) -> str:
    """Compile *program* into a single newline-terminated string."""
    buf = StringIO()
    emit(program, buf)
    return buf.getvalue()


def format_tree(op: Operation, indent: str = "  ") -> str:
    """Indented outline of a program, one line per node.

    Programs render as ``[n]`` with their children indented beneath;
    instructions render as compiled lines.
    """
    buf = StringIO()

    def walk(node: Operation, depth: int) -> None:
        pad = indent * depth
        if isinstance(node, Program):
            buf.write(f"{pad}[{len(node)}]\n")
            for child in node:
                walk(child, depth + 1)
        elif isinstance(node, Instruction):
            buf.write(f"{pad}{compile_instruction(node)}\n")
        else:
            raise CompileError(f"Unsupported operation: {type(node).__name__}")

    walk(op, 0)
    return buf.getvalue()
