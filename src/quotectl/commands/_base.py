"""Custom Click base classes with --examples support, and shared param types.

QuoteCommand and QuoteGroup accept an ``examples`` parameter. When
``--examples`` is passed, the command prints usage examples and exits.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import click

from quotectl.domain.money import to_decimal


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class QuoteCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class QuoteGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Subcommands default to :class:`QuoteCommand`.
    """

    command_class = QuoteCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class DecimalParamType(click.ParamType):
    """Exact decimal option; accepts ``12.5`` and ``12,5``."""

    name = "decimal"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Decimal:
        try:
            return to_decimal(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid number", param, ctx)


DECIMAL = DecimalParamType()
