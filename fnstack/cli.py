"""Command-line interface for fnstack."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from fnstack.config import AmbientParameters
from fnstack.errors import StackBuildError
from fnstack.export import assembly_to_dict
from fnstack.logging import get_logger, set_global_log_level
from fnstack.stack import Stack

logger = get_logger(__name__)

# Errors that mean "fix the declarations", reported without a traceback
_BUILD_ERRORS = (StackBuildError, jsonschema.ValidationError, yaml.YAMLError)


def _clip(value: Any, limit: Optional[int]) -> str:
    text = str(value)
    if limit is not None and len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _format_table(
    headers: List[str],
    rows: List[List[str]],
    min_width: int = 8,
    max_col_width: Optional[int] = None,
) -> str:
    """Render the ``inspect`` function table as indented ASCII.

    Code locations can be long, so cells wider than ``max_col_width`` are
    clipped with ``...``. Columns are at least ``min_width`` wide.

    Returns:
        The table, or an empty string for a stack with no functions.
    """
    if not rows:
        return ""

    cells = [[_clip(c, max_col_width) for c in line] for line in [headers, *rows]]
    widths = [max(min_width, *(len(c) for c in column)) for column in zip(*cells)]

    def render(line: List[str]) -> str:
        return "   " + " | ".join(c.ljust(w) for c, w in zip(line, widths))

    separator = "   " + "-+-".join("-" * w for w in widths)
    return "\n".join([render(cells[0]), separator, *(render(r) for r in cells[1:])])


def _format_duration(seconds: float) -> str:
    """``0.123`` -> ``"123.0 ms"``, ``1.234`` -> ``"1.23 s"``."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    return f"{seconds:.2f} s"


def _plural(n: int, singular: str, plural: Optional[str] = None) -> str:
    if n == 1:
        return singular
    return plural or f"{singular}s"


def _parse_params(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Parse ``key=value`` pairs from ``--param``.

    Raises:
        ValueError: If a pair has no ``=`` or an empty key.
    """
    params: Dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid --param '{pair}': expected key=value")
        params[key.strip()] = value
    return params


def _render_tree(stack: Stack) -> List[str]:
    """Render the route tree as indented lines, one per resource."""
    lines: List[str] = []
    for depth, node in stack.tree.walk():
        if node.is_root:
            lines.append("/")
            continue
        methods = ", ".join(
            f"{b.verb}[{b.auth.value}]" for b in (node.bindings[v] for v in node.methods)
        )
        suffix = f"  {methods}" if methods else ""
        lines.append(f"{'  ' * depth}{node.segment}{suffix}")
    return lines


def _load_stack(path: Path, params: Dict[str, str]) -> Stack:
    """Build ``path``; ``--param`` wins over document and environment values."""
    yaml_text = path.read_text()
    return Stack.from_yaml(
        yaml_text, params=AmbientParameters.from_env(), overrides=params
    )


def _build_stack(
    path: Path,
    output: Optional[Path],
    stdout: bool,
    params: Dict[str, str],
) -> None:
    """Build a stack file and write the exported assembly as JSON.

    Args:
        path: Stack YAML file.
        output: Where to write the JSON; defaults to ``<stack_name>.build.json``
            in the current directory.
        stdout: Print the JSON. Without an explicit output, no file is written.
        params: Ambient parameter overrides from the command line.
    """
    logger.info(f"Loading stack from: {path}")
    _start_time = perf_counter()

    try:
        stack = _load_stack(path, params)
    except FileNotFoundError:
        logger.error(f"Stack file not found: {path}")
        sys.exit(1)
    except _BUILD_ERRORS as e:
        logger.error(f"Failed to build stack: {type(e).__name__}: {e}")
        sys.exit(1)

    json_str = json.dumps(assembly_to_dict(stack.assembly), indent=2)

    if output is None and stdout:
        print(json_str)
    else:
        target = output or Path(f"{path.stem}.build.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json_str)
        logger.info(f"Build written to: {target}")
        if stdout:
            print(json_str)

    logger.info(
        f"Stack build completed successfully in "
        f"{_format_duration(perf_counter() - _start_time)}"
    )


def _inspect_stack(path: Path, detail: bool, params: Dict[str, str]) -> None:
    """Validate a stack file and print routes, functions and identities.

    Args:
        path: Stack YAML file.
        detail: Also print each identity's policy statements.
        params: Ambient parameter overrides from the command line.
    """
    logger.info(f"Inspecting stack from: {path}")

    try:
        stack = _load_stack(path, params)
    except FileNotFoundError:
        logger.error(f"Stack file not found: {path}")
        sys.exit(1)
    except _BUILD_ERRORS as e:
        logger.error(f"Stack is invalid: {type(e).__name__}: {e}")
        sys.exit(1)

    n_funcs = len(stack.registry)
    n_ids = len(stack.identities)
    n_res = len(stack.tree) - 1
    n_methods = sum(1 for _ in stack.tree.bindings())

    print("\n" + "=" * 60)
    print("FNSTACK INSPECTION")
    print("=" * 60)
    print(
        f"{n_funcs} {_plural(n_funcs, 'function')}, "
        f"{n_ids} {_plural(n_ids, 'identity', 'identities')}, "
        f"{n_res} {_plural(n_res, 'resource')}, "
        f"{n_methods} {_plural(n_methods, 'method')}"
    )

    print("\nRoutes:")
    for line in _render_tree(stack):
        print(f"   {line}")

    print("\nFunctions:")
    rows = [
        [
            u.name,
            u.code,
            str(u.budget.memory_mb),
            str(u.budget.timeout_s),
            u.identity.name,
            ", ".join(sorted(u.extensions)) or "-",
        ]
        for u in stack.registry
    ]
    print(
        _format_table(
            ["Name", "Code", "Memory", "Timeout", "Role", "Layers"],
            rows,
            max_col_width=None if detail else 40,
        )
    )

    print("\nIdentities:")
    for identity in stack.identities.values():
        print(
            f"   {identity.name} (trust: {identity.trust.principal}, "
            f"{len(identity.grants)} {_plural(len(identity.grants), 'grant')})"
        )
        if detail:
            for grant in identity.grants:
                print(
                    f"      {grant.effect.value}: {', '.join(sorted(grant.actions))}"
                    f" on {', '.join(sorted(grant.resources))}"
                )


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``fnstack`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="fnstack",
        description="Compose function routes and identities from a stack file.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{build,inspect}",
        help="Available commands",
    )

    build_parser = subparsers.add_parser("build", help="Build a stack to JSON")
    build_parser.add_argument("stack", type=Path, help="Path to stack YAML")
    build_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the build JSON here (default: <stack_name>.build.json)",
    )
    build_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the build JSON to stdout",
    )

    inspect_parser = subparsers.add_parser(
        "inspect", help="Validate a stack and show its routes and identities"
    )
    inspect_parser.add_argument("stack", type=Path, help="Path to stack YAML")
    inspect_parser.add_argument(
        "--detail",
        "-d",
        action="store_true",
        help="Show grant statements and unclipped tables",
    )

    for p in (build_parser, inspect_parser):
        p.add_argument(
            "--param",
            "-p",
            action="append",
            metavar="KEY=VALUE",
            help="Ambient parameter override (repeatable), e.g. region=eu-west-1",
        )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    try:
        params = _parse_params(args.param)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "build":
        _build_stack(args.stack, args.output, args.stdout, params)
    elif args.command == "inspect":
        _inspect_stack(args.stack, args.detail, params)


if __name__ == "__main__":
    main()
