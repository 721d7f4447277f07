"""
G-code compilation module.

Flattens Program IR trees and renders them to G-code text lines.
"""

from router_control.gcode.compiler import (
    CompileError,
    UnknownOperand,
    compile_program,
    emit,
    format_number,
    format_tree,
    render,
)

__all__ = [
    "CompileError",
    "UnknownOperand",
    "compile_program",
    "emit",
    "format_number",
    "format_tree",
    "render",
]
