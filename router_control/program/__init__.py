"""
Program intermediate representation.

Defines machine programs as an immutable tree of instructions and nested
programs.  This vocabulary is the contract between the toolpath
generators and the G-code compiler.
"""

from router_control.program.operations import (
    Arg,
    Axes,
    Instruction,
    Operation,
    Program,
    Token,
    await_moves_complete,
    move,
    probe,
    program,
    prompt,
    rapid,
    reset_coords,
)

__all__ = [
    "Arg",
    "Axes",
    "Instruction",
    "Operation",
    "Program",
    "Token",
    "await_moves_complete",
    "move",
    "probe",
    "program",
    "prompt",
    "rapid",
    "reset_coords",
]
