"""Compiler for a small Oberon subset, with a stack virtual machine to run the code."""

__version__ = "0.1.0"