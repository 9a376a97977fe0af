"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and a CLI command
wrapper so every Typer command handles errors the same way.
"""
from __future__ import annotations

import logging
from typing import Callable, TypeVar

import typer

T = TypeVar('T')

logger = logging.getLogger(__name__)

EXIT_CODES = {
    "ObjectNotFound": 1,
    "FileNotFoundError": 1,
    "ValidationError": 2,
    "ValueError": 2,
    "TransportError": 3,
    "UnexpectedStatus": 4,
}


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    - 0: Success
    - 1: Object or local file not found
    - 2: Invalid input or configuration (ValueError, ValidationError)
    - 3: Transport failure (TransportError) or unknown error
    - 4: Unexpected HTTP status from the store (UnexpectedStatus)

    Args:
        exc: Exception to map

    Returns:
        Exit code, with 3 as fallback for unknown exceptions
    """
    return EXIT_CODES.get(type(exc).__name__, 3)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exception to an exit code via
    typer.Exit, printing the error message to stderr first.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        from .printers import print_error
        logger.debug("Command failed", exc_info=True)
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e
