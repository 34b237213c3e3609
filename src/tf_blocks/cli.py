"""
tf-blocks command line tool.

Render, validate and inspect YAML blueprints::

    tf-blocks render blueprint.yaml -o main.tf
    tf-blocks validate blueprint.yaml
    tf-blocks graph blueprint.yaml
    tf-blocks example --region eu-west-1
"""

import functools
import logging
from typing import Any, Callable

import click

from tf_blocks import __version__
from tf_blocks._blueprint import load_blueprint
from tf_blocks._configuration import Configuration
from tf_blocks._errors import TfBlocksError
from tf_blocks._logging import setup_logger
from tf_blocks._render import render as render_configuration
from tf_blocks._render import write
from tf_blocks._settings import Settings
from tf_blocks._validate import Severity, check, validate as validate_configuration
from tf_blocks.samples import ec2_tutorial

logger = logging.getLogger(__name__)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report tf-blocks errors as CLI errors (exit status 1)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TfBlocksError as e:
            logger.debug("Command failed", exc_info=True)
            raise click.ClickException(str(e)) from e

    return wrapper


def _emit(ctx: click.Context, config: Configuration, output: str | None) -> None:
    options = ctx.obj["settings"].get_render_options()
    if output:
        path = write(config, output, **options)
        click.echo(f"Wrote {len(config)} blocks to {path}", err=True)
    else:
        click.echo(render_configuration(config, **options), nl=False)


@click.group()
@click.option(
    "--settings",
    "settings_file",
    type=click.Path(dir_okay=False),
    help="Settings YAML file (default: $TF_BLOCKS_SETTINGS)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, settings_file: str | None, verbose: bool) -> None:
    """Generate Terraform configuration from typed blocks."""
    settings = Settings(settings_file) if settings_file else Settings.from_env()
    try:
        level = "DEBUG" if verbose else settings.get_logging_level()
        setup_logger(
            "tf_blocks",
            settings.get_logging_file(),
            level,
            log_dir=settings.get_logging_dir(),
        )
    except (TfBlocksError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("blueprint", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output .tf file")
@click.option("--no-validate", is_flag=True, help="Render even if validation fails")
@click.pass_context
@handle_errors
def render(ctx: click.Context, blueprint: str, output: str | None, no_validate: bool) -> None:
    """Render a YAML blueprint as Terraform configuration."""
    config = load_blueprint(blueprint)
    if config.terraform is None:
        names = {p.name for p in config.providers}
        names.update(r.provider_name for r in config.resources)
        config.add(ctx.obj["settings"].terraform_settings(names))
    if not no_validate:
        check(config)
    _emit(ctx, config, output)


@cli.command()
@click.argument("blueprint", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
@handle_errors
def validate(ctx: click.Context, blueprint: str) -> None:
    """Check a blueprint's references; exit 1 on errors."""
    config = load_blueprint(blueprint)
    issues = validate_configuration(config)
    for issue in issues:
        click.echo(str(issue))
    errors = sum(1 for issue in issues if issue.severity is Severity.ERROR)
    if errors:
        click.echo(f"{errors} error(s) in {blueprint}", err=True)
        ctx.exit(1)
    click.echo(f"OK: {len(config)} blocks, {len(issues)} warning(s)")


@cli.command()
@click.argument("blueprint", type=click.Path(exists=True, dir_okay=False))
@handle_errors
def graph(blueprint: str) -> None:
    """List resources in dependency order."""
    config = load_blueprint(blueprint)
    for res in config.dependency_order():
        deps = config.dependencies(res)
        if deps:
            click.echo(f"{res.address} <- {', '.join(deps)}")
        else:
            click.echo(res.address)


@cli.command()
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Output .tf file")
@click.option("--region", default="us-east-1", show_default=True, help="Default AWS region")
@click.pass_context
@handle_errors
def example(ctx: click.Context, output: str | None, region: str) -> None:
    """Render the built-in EC2 getting-started configuration."""
    config = ec2_tutorial(region=region)
    check(config)
    _emit(ctx, config, output)


@cli.command()
def version() -> None:
    """Show version information."""
    click.echo(f"tf-blocks {__version__}")


if __name__ == "__main__":
    cli()
