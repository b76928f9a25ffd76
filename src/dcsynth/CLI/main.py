"""
Command Line Interface for dcsynth.
"""
import click
import os
from ..PARSERS.spec_parser import ComposeSpecParser
from ..errors import ConfigurationError
from ..UTILS.defaults import DEFAULT_SPEC_FILE

@click.group()
@click.option('--file', '-f', default=DEFAULT_SPEC_FILE, help='Project spec file path')
@click.pass_context
def cli(ctx, file):
    """
    dcsynth - docker-compose synthesizer.

    Builds a validated docker-compose.yml from a declarative project spec.
    """
    ctx.ensure_object(dict)
    ctx.obj['file'] = file

def _load(ctx, name_suffix=None):
    """
    Parses the project file, exiting with an error message when it is missing or invalid.

    :return: The populated DockerCompose builder.
    """
    file = ctx.obj['file']
    if not os.path.exists(file):
        click.echo(f"Error: {file} not found.")
        ctx.exit(1)
    try:
        return ComposeSpecParser().parse(file, name_suffix=name_suffix)
    except ConfigurationError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

@cli.command()
@click.option('--out', '-o', default='.', help='Output directory')
@click.option('--name-suffix', default=None, help='Write docker-compose.<suffix>.yml')
@click.pass_context
def synth(ctx, out, name_suffix):
    """Write the compose file."""
    compose = _load(ctx, name_suffix=name_suffix)
    try:
        path = compose.synth(out)
    except ConfigurationError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)
    click.echo(f"Wrote {path}")

@cli.command()
@click.pass_context
def show(ctx):
    """Print the compose document"""
    compose = _load(ctx)
    try:
        document = compose.synthesize_document()
    except ConfigurationError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)
    click.echo(compose.writer.encode(document), nl=False)

@cli.command()
@click.pass_context
def validate(ctx):
    """Check the project spec without writing anything"""
    compose = _load(ctx)
    try:
        document = compose.synthesize_document()
    except ConfigurationError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)
    click.echo(f"{ctx.obj['file']} is valid ({len(document['services'])} services).")

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
