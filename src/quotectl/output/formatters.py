"""Output mode selection for ServiceResult.

The CLI renders a result for humans (Rich tables), for scripts (``-q``,
ids only) or for machines (``--json``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from quotectl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from quotectl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Resolved output flags for one invocation."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    currency: str = ""


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult according to *settings* (human by default)."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose, currency=settings.currency)
