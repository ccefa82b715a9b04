"""
tabledoc command line — bootstrap, update, diff and clean up the metadata file,
export table definition documents and serve the HTTP API.
"""
import logging

import typer

from config import settings
from core.exceptions import TabledocError
from core.table_document import TableDocumentService, get_service

app = typer.Typer(help="Table definition documents and metadata maintenance")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# ---------------------------
# Core utilities
# ---------------------------
def _service() -> TableDocumentService:
    try:
        return get_service()
    except TabledocError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)


def _print_stats(stats) -> None:
    typer.echo(f"  new tables       {stats.new_tables}")
    typer.echo(f"  new columns      {stats.new_columns}")
    typer.echo(f"  removed tables   {stats.removed_tables}")
    typer.echo(f"  removed columns  {stats.removed_columns}")
    typer.echo(f"  preserved items  {stats.preserved_items}")
    if stats.backup_path:
        typer.echo(f"💾 Backup written to {stats.backup_path}")
    if stats.backup_failed:
        typer.echo("⚠️  Backup failed; the metadata file was updated without one.", err=True)
    if stats.removed_tables or stats.removed_columns:
        typer.echo('Removed tables/columns are kept with a "_removed_" prefix. Run `cleanup` to purge them.')


# ---------------------------
# Commands
# ---------------------------
@app.command(help="Create the metadata file from the database (merges into an existing one unless --force).")
def generate(force: bool = typer.Option(False, "--force", help="Overwrite an existing metadata file")):
    service = _service()
    try:
        stats = service.reconciler.generate(service.get_schema(), force=force)
    except TabledocError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    if stats is None:
        typer.echo(f"✅ Metadata file generated: {service.reconciler.store.path}")
    else:
        typer.echo(f"✅ Metadata file updated: {service.reconciler.store.path}")
        _print_stats(stats)


@app.command(help="Merge the current schema into the metadata file, keeping edited entries.")
def update(
    backup: bool = typer.Option(settings.BACKUP_ON_UPDATE, "--backup/--no-backup", help="Copy the file before writing"),
):
    service = _service()
    try:
        stats = service.reconciler.update(service.get_schema(), backup=backup)
    except TabledocError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Metadata file updated: {service.reconciler.store.path}")
    _print_stats(stats)


@app.command(help="Show differences between the database and the metadata file.")
def diff():
    service = _service()
    try:
        result = service.reconciler.get_diff(service.get_schema())
    except TabledocError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    if not result.has_changes:
        typer.echo("✅ Database and metadata are in sync.")
        return
    if result.new_tables:
        typer.echo("New tables:")
        for name in result.new_tables:
            typer.echo(f"  + {name}")
    if result.removed_tables:
        typer.echo("Removed tables:")
        for name in result.removed_tables:
            typer.echo(f"  - {name}")
    if result.modified_tables:
        typer.echo("Modified tables:")
        for name, changes in result.modified_tables.items():
            typer.echo(f"  * {name}")
            for column in changes.new_columns:
                typer.echo(f"    + {column}")
            for column in changes.removed_columns:
                typer.echo(f"    - {column}")
    typer.echo("Run `update` to apply these changes to the metadata file.")


@app.command(help="Permanently delete removed tables/columns from the metadata file.")
def cleanup(yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation")):
    if not yes and not typer.confirm("Permanently delete all removed tables/columns from the metadata file?"):
        typer.echo("Cancelled.")
        raise typer.Exit(code=1)
    service = _service()
    count = service.reconciler.cleanup_removed_items()
    if count:
        typer.echo(f"✅ Cleaned up {count} items.")
    else:
        typer.echo("Nothing to clean up.")


@app.command(help="Write the table definition document to the output directory.")
def export(
    format: str = typer.Option("markdown", "--format", help="json | markdown"),
    output_dir: str = typer.Option(settings.OUTPUT_DIR, "--output-dir", help="Target directory"),
    force: bool = typer.Option(False, "--force", help="Regenerate an existing document"),
):
    service = _service()
    try:
        info = service.export(format, output_dir=output_dir, force=force)
    except (TabledocError, ValueError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=2 if isinstance(e, ValueError) else 1)
    verb = "Generated" if info.regenerated else "Existing document kept"
    typer.echo(f"✅ {verb}: {info.path} ({info.file_size} bytes, {info.table_count} tables)")


@app.command(help="Run the HTTP API.")
def serve(
    host: str = typer.Option(settings.API_HOST, "--host"),
    port: int = typer.Option(settings.API_PORT, "--port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    import uvicorn

    typer.echo(f"🚀 Serving tabledoc on http://{host}:{port}")
    uvicorn.run("main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
