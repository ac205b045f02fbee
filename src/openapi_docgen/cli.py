"""CLI entry point for openapi-docgen."""

import re
from pathlib import Path

import click

from openapi_docgen.config import GeneratorConfig, load_config
from openapi_docgen.errors import InputValidationError
from openapi_docgen.filters import sort_paths
from openapi_docgen.generator.document import OpenApiDocumentGenerator
from openapi_docgen.log import configure_logging
from openapi_docgen.operation.base import DocumentedOperation, GenerationDiagnostic, VariantKey
from openapi_docgen.operation.loader import load_operations
from openapi_docgen.resolver import RegistryTypeResolver, load_registry
from openapi_docgen.serialization import OpenApiFormat


def _load_inputs(operations_path: Path, types_path: Path | None) -> tuple[list[DocumentedOperation], RegistryTypeResolver]:
    """Load operations and the type registry, turning input errors into CLI errors."""
    try:
        operations = load_operations(operations_path)
        resolver = load_registry(types_path) if types_path else RegistryTypeResolver({})
    except InputValidationError as e:
        raise click.ClickException(str(e)) from e
    return operations, resolver


def _document_filename(key: VariantKey, fmt: OpenApiFormat) -> str:
    if key.is_default:
        return f"openapi.{fmt.extension}"
    suffix = "_".join(re.sub(r"[^\w\-]+", "-", tag) for tag in key.tags)
    return f"openapi.{suffix}.{fmt.extension}"


def _echo_diagnostic(diagnostic: GenerationDiagnostic) -> None:
    for failed in diagnostic.failed_operations:
        for error in failed.errors:
            click.echo(f"  FAILED {failed.method} {failed.path}: [{error.kind}] {error.message}", err=True)
    for error in diagnostic.document_errors:
        click.echo(f"{error.kind}: {error.message}", err=True)


@click.group()
def main():
    """openapi-docgen — generate OpenAPI documents from documented operations."""
    pass


@main.command()
@click.argument("operations_path", type=click.Path(exists=True, path_type=Path))
@click.option("--types", "types_path", type=click.Path(exists=True, path_type=Path), help="Type registry file (YAML or JSON).")
@click.option("-o", "--output", required=True, type=click.Path(path_type=Path), help="Output directory for the documents.")
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path), help="Generator config file.")
@click.option("--spec-version", default=None, type=click.Choice(["2.0", "3.0"]), help="Target OpenAPI version.")
@click.option("--format", "fmt", default=None, type=click.Choice(["json", "yaml"]), help="Output format.")
@click.option("--title", default=None, help="Document title.")
@click.option("--api-version", default=None, help="Version of the documented API.")
@click.option("--server", "servers", multiple=True, help="Server URL; repeat for several.")
@click.option("--sort-paths", "sort_paths_flag", is_flag=True, help="Order paths alphabetically.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def generate(
    operations_path: Path,
    types_path: Path | None,
    output: Path,
    config_path: Path | None,
    spec_version: str | None,
    fmt: str | None,
    title: str | None,
    api_version: str | None,
    servers: tuple[str, ...],
    sort_paths_flag: bool,
    verbose: bool,
):
    """Generate OpenAPI documents, one per variant."""
    configure_logging(verbose)
    operations, resolver = _load_inputs(operations_path, types_path)

    try:
        config = load_config(config_path) if config_path else GeneratorConfig()
    except InputValidationError as e:
        raise click.ClickException(str(e)) from e
    config = config.merged(
        title=title,
        version=api_version,
        spec_version=spec_version,
        output_format=fmt,
        servers=servers,
    )

    click.echo(f"Generating from {len(operations)} operations in {operations_path}...")
    generator = OpenApiDocumentGenerator(resolver, config, filters=[sort_paths] if sort_paths_flag else [])
    rendered, diagnostic = generator.generate_serialized_documents(operations)

    output.mkdir(parents=True, exist_ok=True)
    (output / "diagnostics.json").write_text(diagnostic.model_dump_json(indent=2), encoding="utf-8")
    for key, text in rendered.items():
        file_path = output / _document_filename(key, config.output_format)
        file_path.write_text(text, encoding="utf-8")
        click.echo(f"  Created {file_path} ({key})")

    _echo_diagnostic(diagnostic)
    if not rendered:
        raise click.ClickException("No document was generated.")
    click.echo(
        f"Done! {diagnostic.succeeded_count} of {len(diagnostic.operation_diagnostics)} operations "
        f"in {len(rendered)} document(s)."
    )


@main.command()
@click.argument("operations_path", type=click.Path(exists=True, path_type=Path))
@click.option("--types", "types_path", type=click.Path(exists=True, path_type=Path), help="Type registry file (YAML or JSON).")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def check(operations_path: Path, types_path: Path | None, verbose: bool):
    """Validate documented operations without writing documents."""
    configure_logging(verbose)
    operations, resolver = _load_inputs(operations_path, types_path)

    result = OpenApiDocumentGenerator(resolver).generate_documents(operations)
    diagnostic = result.diagnostic
    _echo_diagnostic(diagnostic)
    if diagnostic.document_errors:
        raise SystemExit(1)
    click.echo(f"All {len(diagnostic.operation_diagnostics)} operations are valid.")
