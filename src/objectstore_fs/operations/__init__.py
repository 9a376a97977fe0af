"""
Operations package - glue between the CLI and the adapter.

Centralizes error mapping and output formatting so CLI commands stay thin
and testable.
"""
from .mappers import exit_code_for, run_and_exit

__all__ = ["exit_code_for", "run_and_exit"]
