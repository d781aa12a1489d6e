"""Main CLI entry point for path-acl.

Defines the CLI group and registers all subcommands.

Commands:
    check        - Decide whether a capability is allowed on a path
    capabilities - List capabilities granted on a path
    paths        - List patterns granting a capability
    policy       - Policy file inspection (validate, show)

Subcommand help:
    path-acl COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys
from pathlib import Path

import click

from path_acl import __version__

from .commands.check import capabilities, check, paths
from .commands.policy import policy


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  path-acl policy validate policies.yml
  path-acl check read /users/42 -f policies.yml
  path-acl check update /customers/7 -f policies.yml -c customer_id=7 --explain

Policy Sources:
  -f/--policy-file FILE    Evaluate against the given file(s)
  --config FILE            Use the sources listed in a config file
  (neither)                Use the default config file location
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: OS app dir config.json)",
)
@click.pass_context
def cli(ctx: click.Context, version: bool, config_path: Path | None) -> None:
    """path-acl: Path-based access control policy evaluation."""
    if version:
        click.echo(f"path-acl {__version__}")
        sys.exit(0)
    ctx.ensure_object(dict)["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(check)
cli.add_command(capabilities)
cli.add_command(paths)
cli.add_command(policy)


def main() -> None:
    """Entry point for the path-acl command."""
    cli()


if __name__ == "__main__":
    main()
