"""
exprlang CLI.

Commands:
- eval: evaluate an expression with optional variable bindings
- rpn: print the postfix (RPN) form of an expression
- ast: print the parenthesised expression tree
- functions: list the built-in functions and constants
"""

from __future__ import annotations

import json
import logging
import platform
from enum import StrEnum

import typer
from rich.console import Console
from rich.table import Table

from exprlang._version import get_version
from exprlang.engine import ExpressionEngine
from exprlang.errors import ExpressionError
from exprlang.tokens import render_tokens
from exprlang.values import Value, render

app = typer.Typer(
    help="exprlang – evaluate arithmetic, boolean and string expressions",
    no_args_is_help=True,
)

console = Console()


class ResultType(StrEnum):
    AUTO = "auto"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"exprlang {get_version()} (Python {platform.python_version()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log pipeline stages to stderr"),
) -> None:
    """exprlang CLI main callback for global options."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def parse_binding(text: str) -> tuple[str, Value]:
    """Parse ``name=value``; the value is a boolean, a number, or else a string."""
    name, sep, raw = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise typer.BadParameter(f"Expected name=value, got {text!r}")
    if raw in ("true", "false"):
        return name, raw == "true"
    try:
        return name, float(raw)
    except ValueError:
        return name, raw


def _make_engine(decimal_separator: str, argument_separator: str, lenient: bool) -> ExpressionEngine:
    try:
        return ExpressionEngine(
            decimal_separator=decimal_separator,
            argument_separator=argument_separator,
            strict=not lenient,
        )
    except ValueError as e:
        typer.echo(f"Error: invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)


# Lexer options shared by every command that parses an expression
_DECIMAL_SEPARATOR_OPTION = typer.Option(".", "--decimal-separator", help="Decimal point character")
_ARGUMENT_SEPARATOR_OPTION = typer.Option(
    ",", "--argument-separator", help="Function argument separator"
)
_LENIENT_OPTION = typer.Option(False, "--lenient", help="Skip unrecognised characters")


@app.command(name="eval")
def eval_command(
    expression: str = typer.Argument(..., help="Expression to evaluate"),
    var: list[str] = typer.Option(  # noqa: B008
        [],
        "--var",
        "-D",
        help="Variable binding name=value (repeatable)",
    ),
    result_type: ResultType = typer.Option(
        ResultType.AUTO,
        "--type",
        "-t",
        help="Required result type",
    ),
    decimal_separator: str = _DECIMAL_SEPARATOR_OPTION,
    argument_separator: str = _ARGUMENT_SEPARATOR_OPTION,
    lenient: bool = _LENIENT_OPTION,
) -> None:
    """
    Evaluate an expression and print the result.

    Examples:
        exprlang eval "2 + 3 * 4"
        exprlang eval "x > 1 ? 'big' : 'small'" -D x=3
        exprlang eval "length(name)" -D name=Ada --type number
    """
    engine = _make_engine(decimal_separator, argument_separator, lenient)
    bindings = dict(parse_binding(item) for item in var)

    try:
        if result_type == ResultType.NUMBER:
            result: Value = engine.evaluate_number(expression, bindings)
        elif result_type == ResultType.BOOLEAN:
            result = engine.evaluate_boolean(expression, bindings)
        elif result_type == ResultType.STRING:
            result = engine.evaluate_string(expression, bindings)
        else:
            result = engine.evaluate(expression, bindings)
    except ExpressionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(render(result))


@app.command(name="rpn")
def rpn_command(
    expression: str = typer.Argument(..., help="Expression to convert"),
    decimal_separator: str = _DECIMAL_SEPARATOR_OPTION,
    argument_separator: str = _ARGUMENT_SEPARATOR_OPTION,
    lenient: bool = _LENIENT_OPTION,
) -> None:
    """Print the postfix (reverse Polish) form of an expression."""
    engine = _make_engine(decimal_separator, argument_separator, lenient)
    try:
        postfix = engine.to_postfix(expression)
    except ExpressionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(render_tokens(postfix))


@app.command(name="ast")
def ast_command(
    expression: str = typer.Argument(..., help="Expression to parse"),
    decimal_separator: str = _DECIMAL_SEPARATOR_OPTION,
    argument_separator: str = _ARGUMENT_SEPARATOR_OPTION,
    lenient: bool = _LENIENT_OPTION,
) -> None:
    """Print the fully parenthesised expression tree."""
    engine = _make_engine(decimal_separator, argument_separator, lenient)
    try:
        expr = engine.preprocess(expression)
    except ExpressionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(expr))


@app.command(name="functions")
def functions_command(
    output_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List built-in functions with their arity, then constants."""
    registry = ExpressionEngine().registry

    if output_json:
        console.print_json(
            json.dumps(
                {
                    "functions": {
                        name: registry.functions[name].arity for name in registry.function_names()
                    },
                    "constants": {
                        name: registry.constants[name].value for name in registry.constant_names()
                    },
                }
            )
        )
        return

    table = Table(title="Functions")
    table.add_column("Name")
    table.add_column("Arguments", style="dim")
    for name in registry.function_names():
        table.add_row(name, registry.functions[name].arity)
    console.print(table)

    for name in registry.constant_names():
        console.print(f"{name} = {render(registry.constants[name].value)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
