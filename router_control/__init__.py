"""
Router Control Package.

Toolpath generation for a CNC router: describe joint geometry with unit
quantities, build a nested program of machine instructions, and compile
it to G-code text.

Subpackages:
    units: Quantities, unit conversion, ambient unit/positioning scopes
    program: Intermediate representation for machine programs
    toolpath: Joint toolpath generators (dado)
    gcode: G-code compilation from Program IR
    configs: Job configuration loading and validation
    utils: Filesystem and logging helpers
"""

__version__ = "0.1.0"

__all__ = ["units", "program", "toolpath", "gcode", "configs", "utils"]
