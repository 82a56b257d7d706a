# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Logging interface for asdfplug.

Library modules log through a small Logger protocol instead of printing
directly, so they stay usable without the CLI. The version manager reads
command results from stdout (for example the version list printed by
list-all), so the default logger writes to stderr.

The logger supports four output levels:
- Step: Always printed ("[2/5] Cloning source...")
- Info: Always printed, in the "* message" style of asdf plugins
- Verbose: Only printed when verbose mode is enabled
- Debug: Only printed when debug mode is enabled (implies verbose)

Example:
    Configure the global logger (the CLI does this):
        ```python
        from asdfplug.logging import get_logger, set_global_logger

        set_global_logger(get_logger(verbose=True))
        ```

    Use in library code:
        ```python
        from asdfplug.logging import get_global_logger

        logger = get_global_logger()
        logger.info("Resolving latest version...")
        logger.verbose("CATALOG", "Fetched 212 tags")
        ```

Note:
    The default global logger is silent, so library functions print
    nothing unless a caller opts in.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def info(self, message: str) -> None:
        """Print a progress line that is always shown."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message.

        Args:
            prefix: Message prefix (e.g., "CATALOG", "BUILD").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message.

        Args:
            prefix: Message prefix (e.g., "HTTP", "GIT").
            message: Log message.
        """
        ...


class DefaultLogger:
    """Logger that writes to a text stream (stderr unless told otherwise)."""

    def __init__(
        self,
        verbose: bool = False,
        debug: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        """Initialize logger with verbosity settings.

        Args:
            verbose: If True, print verbose messages.
            debug: If True, print debug messages (implies verbose).
            stream: Output stream. Defaults to sys.stderr, resolved at
                write time so test capture works.
        """
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _write(self, line: str) -> None:
        print(line, file=self._stream or sys.stderr)

    def step(self, step: int, total: int, message: str) -> None:
        self._write(f"[{step}/{total}] {message}")

    def info(self, message: str) -> None:
        self._write(f"* {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            self._write(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            self._write(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that suppresses all output."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass


# Global logger instance (defaults to silent)
_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Get a stderr logger with the given verbosity.

    Args:
        verbose: If True, logger will print verbose messages.
        debug: If True, logger will print debug messages (implies verbose).

    Returns:
        A DefaultLogger configured with the specified verbosity.
    """
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the current global logger (silent until configured)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Set the global logger instance.

    Args:
        logger: Logger instance to use as the global logger.

    Note:
        This affects every library function that calls get_global_logger().
        Tests that install a logger should restore SilentLogger afterwards.
    """
    global _global_logger
    _global_logger = logger
