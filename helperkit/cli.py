"""
Main entry point for helperkit. Accessed by 'helperkit' in the command line.
"""
from functools import update_wrapper
from importlib import import_module
import json
from pathlib import Path
import click
import yaml

from helperkit.core.crypto import EncryptionError
from helperkit.core.runtime import build_runtime, Runtime
from helperkit.core.settings import read_tree, write_tree
from helperkit.utils.dict_path import PathError, data_get, data_set

_MISSING = object()


def pass_runtime(f):
    """
    Decorator to pass a Runtime to Click commands that need it.
    Ensures a Runtime is created and passed as the first argument.
    """
    @click.pass_context
    def new_func(ctx: click.Context, *args, **kwargs):
        ctx.ensure_object(dict)
        rt = ctx.obj.get('rt')
        if rt is None:
            opts = ctx.obj.get('global_opts', {})  # user overrides
            rt = build_runtime(**opts)
            ctx.obj['rt'] = rt
        # call the function with the Runtime context
        return f(ctx.obj['rt'], *args, **kwargs)
    return update_wrapper(new_func, f)


def echo_value(val) -> None:
    """Print a resolved value as JSON (strings stay bare)."""
    if isinstance(val, str):
        click.echo(val)
    else:
        click.echo(json.dumps(val, indent=2, default=str))


def load_file(file: Path) -> dict:
    try:
        return read_tree(file)
    except (json.JSONDecodeError, yaml.YAMLError, ValueError) as e:
        raise click.ClickException(f"Could not read {file}: {e}") from e


def resolve(tree, key: str, default: str | None):
    try:
        val = data_get(tree, key, _MISSING)
    except PathError as e:
        raise click.BadParameter(str(e)) from e
    if val is _MISSING:
        if default is None:
            raise click.ClickException(f"'{key}' not found.")
        return default
    return val


@click.group()
@click.option('--document-root', type=click.Path(path_type=Path), default=None,
              help="Application directory holding .env, config.yaml, views/, storage/.")
@click.option('-v', '--verbose', is_flag=True, default=False,
              help="Very very detailed logging for debugging purposes.")
@click.version_option(package_name="helperkit")
@click.pass_context
def main(ctx, document_root, verbose):
    """helperkit: dot-path data access and small web-app helpers."""
    ctx.ensure_object(dict)
    ctx.obj['global_opts'] = {
        'document_root': document_root,
        'verbose': verbose,
    }


@main.command("get")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("key")
@click.option("--default", default=None, help="Printed when the key doesn't resolve.")
def get_cmd(file: Path, key: str, default: str | None):
    """Print the value at a dot path in a YAML or JSON file."""
    echo_value(resolve(load_file(file), key, default))


@main.command("set")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("key")
@click.argument("value")
@click.option("--no-overwrite", is_flag=True, default=False,
              help="Leave an existing value untouched.")
def set_cmd(file: Path, key: str, value: str, no_overwrite: bool):
    """Set the value at a dot path in a YAML or JSON file (value parsed as YAML)."""
    tree = load_file(file) if file.exists() else {}
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        parsed = value
    tree = data_set(tree, key, parsed, overwrite=not no_overwrite)
    write_tree(file, tree)
    click.echo(f"Set {key} in {file}")


@main.command()
@pass_runtime
@click.argument("key")
@click.option("--default", default=None, help="Printed when the key doesn't resolve.")
def config(rt: Runtime, key: str, default: str | None):
    """Look up a setting in the application's config file."""
    echo_value(resolve(rt.config.all(), key, default))


@main.command()
@pass_runtime
@click.argument("key")
@click.option("--default", default=None, help="Printed when the variable isn't set.")
def env(rt: Runtime, key: str, default: str | None):
    """Look up a value from .env or the process environment."""
    val = rt.env.get(key, default)
    if val is None:
        raise click.ClickException(f"'{key}' is not set.")
    click.echo(val)


@main.command("cache-clear")
@pass_runtime
def cache_clear(rt: Runtime):
    """Remove every entry from the file cache."""
    removed = rt.cache.clear()
    click.echo(f"Removed {removed} cache entries from {rt.cache.directory}")


@main.command()
@pass_runtime
@click.argument("value")
def encrypt(rt: Runtime, value: str):
    """Encrypt a string with the application key."""
    try:
        click.echo(rt.encrypt(value))
    except EncryptionError as e:
        raise click.ClickException(str(e)) from e


@main.command()
@pass_runtime
@click.argument("payload")
def decrypt(rt: Runtime, payload: str):
    """Decrypt a payload produced by 'encrypt'."""
    try:
        echo_value(rt.decrypt(payload))
    except EncryptionError as e:
        raise click.ClickException(str(e)) from e


def load_dispatcher(spec: str):
    """Import 'package.module:attribute' and return the attribute."""
    module_name, _, attr = spec.partition(":")
    try:
        module = import_module(module_name)
        return getattr(module, attr or "dispatcher")
    except (ImportError, AttributeError) as e:
        raise click.BadParameter(f"Cannot load dispatcher '{spec}': {e}") from e


@main.command()
@pass_runtime
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=None)
@click.option("--handlers", default=None,
              help="Dispatcher to route requests to, as 'module:attribute'.")
def serve(rt: Runtime, host: str, port: int | None, handlers: str | None):
    """Run the web application."""
    # pylint: disable=import-outside-toplevel
    from helperkit.web.app import run_app
    dispatcher = load_dispatcher(handlers) if handlers else None
    click.echo("helperkit app is starting...")
    run_app(rt, host=host, port=port, dispatcher=dispatcher)
