"""Tokens, expression nodes, commands, runtime values, an IR control flow graph and an IR evaluator for a small calculator language."""

__version__ = "0.1.0"