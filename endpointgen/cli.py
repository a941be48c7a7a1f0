import logging
import traceback
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from endpointgen.codegen.codegen import Codegen
from endpointgen.config import PipelineConfig, RunConfig, get_config
from endpointgen.exceptions import ConfigurationError, EndpointGenError

USAGE = (
    'Usage: endpointgen generate <projectName> <endpointsPath> [outputDir] '
    '[--no-mocks] [--no-tests] [--no-vtl]'
)

console = Console()
app = typer.Typer(
    name='endpointgen',
    help='Generate typed TypeScript API clients from endpoint declarations',
    no_args_is_help=True,
)


def configure_logging(level: str) -> None:
    """Route library logging through rich at ``level``."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ConfigurationError(f"Unknown log level '{level}'", field='log_level')
    logging.basicConfig(
        level=numeric,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def generate(
    project_name: Annotated[
        str | None,
        typer.Argument(help='Project name; names the client classes', show_default=False),
    ] = None,
    endpoints_path: Annotated[
        str | None,
        typer.Argument(help='Path to the endpoint declaration module', show_default=False),
    ] = None,
    output_dir: Annotated[
        str | None,
        typer.Argument(help='Output directory [default: generatedClient]', show_default=False),
    ] = None,
    no_mocks: Annotated[
        bool, typer.Option('--no-mocks', help='Do not generate the mock client')
    ] = False,
    no_tests: Annotated[
        bool, typer.Option('--no-tests', help='Do not generate contract tests')
    ] = False,
    no_vtl: Annotated[
        bool, typer.Option('--no-vtl', help='Do not generate mapping templates')
    ] = False,
    config: Annotated[
        str | None,
        typer.Option('--config', '-c', help='Path to configuration file (YAML)'),
    ] = None,
    log_level: Annotated[
        str | None, typer.Option('--log-level', help='Logging level, e.g. DEBUG')
    ] = None,
) -> None:
    """Generate the API client package for an endpoint declaration module.

    Examples:
        endpointgen generate toppings lib/routes/internal.ts
        endpointgen generate toppings lib/routes/internal.ts ./client --no-vtl
        endpointgen generate toppings lib/routes/internal.ts -c endpointgen.yaml
    """
    if not project_name or not endpoints_path:
        console.print(f'[red]Error:[/red] {escape(USAGE)}')
        raise typer.Exit(1)

    try:
        settings = get_config(config)
        configure_logging(log_level or settings.log_level)
    except ConfigurationError as e:
        console.print(f'[red]Error:[/red] {escape(str(e))}')
        raise typer.Exit(1)

    run = RunConfig(
        project_name=project_name,
        endpoints_path=endpoints_path,
        output=output_dir or 'generatedClient',
        pipeline=PipelineConfig(
            mocks=not no_mocks, templates=not no_vtl, contract_tests=not no_tests
        ),
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn('[progress.description]{task.description}'),
            console=console,
        ) as progress:
            task = progress.add_task(
                f'Generating client for {endpoints_path} in {run.output}...',
                total=None,
            )
            result = Codegen(run, settings).generate()
            progress.update(task, description='Code generation completed!')
    except EndpointGenError as e:
        console.print(f'[red]Error:[/red] {escape(str(e))}')
        raise typer.Exit(1)
    except Exception as e:
        console.print(f'[red]Error:[/red] {str(e)}')
        traceback.print_exc()
        raise typer.Exit(1)

    for failure in result.failed_phases:
        console.print(f'[yellow]Warning:[/yellow] {failure}')
    for type_name in result.unresolved_types:
        console.print(f'[yellow]Warning:[/yellow] type {type_name} not found; typed as any')

    console.print('[dim]Generated files:[/dim]')
    for path in result.generated_files:
        console.print(f'  - {path}')
    console.print(
        f'[green]Successfully generated code for {len(result.endpoints)} endpoint(s)[/green]'
    )


@app.command()
def version() -> None:
    """Show the version of endpointgen."""
    from endpointgen import __version__

    console.print(f'endpointgen version: {__version__}')


if __name__ == '__main__':
    app()
