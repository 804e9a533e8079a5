"""
envstruct command-line tools.

- envstruct schema MODULE:CLASS: list the environment keys a config class reads
- envstruct check MODULE:CLASS: populate a config class from the current
  environment and print the result
"""

import dataclasses
import importlib
import json
import logging

import click
from pydantic import BaseModel, ValidationError

from envstruct.errors import EnvStructError
from envstruct.populator import PresencePolicy
from envstruct.schema import LeafBinding, is_struct_type, walk
from envstruct.settings import get_settings

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, level: str = "WARNING"):
    """Configure logging for CLI."""
    numeric = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")
    logging.basicConfig(
        level=numeric,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def load_target(spec: str) -> type:
    """Import ``package.module:ClassName`` and return the class."""
    module_name, sep, attr_path = spec.partition(':')
    if not sep or not module_name or not attr_path:
        raise click.BadParameter(f"expected MODULE:CLASS, got {spec!r}")

    try:
        obj = importlib.import_module(module_name)
        for attr in attr_path.split('.'):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as e:
        raise click.BadParameter(f"cannot load {spec}: {e}")

    if not is_struct_type(obj):
        raise click.BadParameter(f"{spec} is not a dataclass or pydantic model")
    return obj


def dump(config) -> dict:
    if isinstance(config, BaseModel):
        return config.model_dump()
    return dataclasses.asdict(config)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx, verbose):
    """Populate configuration classes from environment variables."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    try:
        settings = get_settings()
    except ValidationError as e:
        raise click.UsageError(f"invalid ENVSTRUCT_* settings: {e}")
    try:
        setup_logging(verbose, settings.log_level)
    except ValueError as e:
        raise click.UsageError(f"invalid ENVSTRUCT_LOG_LEVEL: {e}")


@cli.command()
@click.argument('target')
@click.option('--join-keys/--no-join-keys', default=None, help='Namespace keys under group prefixes')
@click.option('--separator', type=str, default=None, help='Separator for joined keys')
def schema(target, join_keys, separator):
    """Show the environment keys read by TARGET (MODULE:CLASS)."""
    settings = get_settings()
    struct_type = load_target(target)
    if join_keys is None:
        join_keys = settings.join_keys

    for path, key, binding in walk(
        struct_type,
        tag=settings.tag,
        join_keys=join_keys,
        separator=separator or settings.separator,
    ):
        if isinstance(binding, LeafBinding):
            kind = binding.type_name if binding.settable else f"{binding.type_name} (read-only)"
        else:
            kind = f"skip: {binding.reason.value}"
        click.echo(f"{path}\t{key or '-'}\t{kind}")


@cli.command()
@click.argument('target')
@click.option('--strict/--permissive', default=None, help='Fail on the first missing variable')
@click.option('--join-keys/--no-join-keys', default=None, help='Namespace keys under group prefixes')
@click.option('--separator', type=str, default=None, help='Separator for joined keys')
def check(target, strict, join_keys, separator):
    """Populate TARGET (MODULE:CLASS) from the environment and print it as JSON."""
    struct_type = load_target(target)

    policy = None
    if strict is not None:
        policy = PresencePolicy.STRICT if strict else PresencePolicy.PERMISSIVE
    populator = get_settings().make_populator(
        policy=policy,
        join_keys=join_keys,
        separator=separator,
    )

    try:
        config = struct_type()
    except (TypeError, ValidationError) as e:
        raise click.UsageError(f"cannot construct {struct_type.__name__} with defaults: {e}")

    try:
        populator.populate(config)
    except EnvStructError as e:
        logger.debug(f"Check failed for {target}", exc_info=True)
        raise click.ClickException(str(e))

    leaves = [b for _, _, b in walk(struct_type, tag=populator.tag) if isinstance(b, LeafBinding)]
    logger.info(f"Populated {struct_type.__name__} ({len(leaves)} keys, {populator.policy.value})")
    click.echo(json.dumps(dump(config), indent=2, default=str))


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
