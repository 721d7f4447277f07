"""Toolpath generators producing Program IR."""

from router_control.toolpath.dado import (
    DadoParams,
    MachineSettings,
    dado_depths,
    generate_dado_path,
)

__all__ = [
    "DadoParams",
    "MachineSettings",
    "dado_depths",
    "generate_dado_path",
]
