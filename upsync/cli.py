"""Click-based CLI for upsync - mirror a local directory into S3."""

from __future__ import annotations

import sys
from itertools import islice
from pathlib import Path
from typing import Optional

import click
import yaml

from upsync import __version__
from upsync.config import (
    CONFIG_FILE_NAME,
    UpsyncConfig,
    find_config_path,
    load_config,
    validate_config_file,
    write_default_config,
)
from upsync.exceptions import ConfigurationError, NotFoundError, UpsyncError
from upsync.output.console import Console, ConsoleObserver, create_console
from upsync.session import StoreSession
from upsync.sync.executor import SyncExecutor
from upsync.sync.local import validate_root


def _get_config(ctx: click.Context) -> UpsyncConfig:
    """Load configuration once per invocation, exiting on errors."""
    config = ctx.obj.get("config")
    if config is None:
        try:
            config = load_config(ctx.obj.get("config_path"))
        except UpsyncError as e:
            create_console().print_error(str(e))
            sys.exit(1)
        ctx.obj["config"] = config
    return config


def _get_console(config: UpsyncConfig, verbose: bool = False) -> Console:
    return create_console(
        verbose=verbose or config.output.verbose,
        colored=config.output.colored,
        log_file=config.output.log_file,
    )


@click.group()
@click.version_option(version=__version__, prog_name="upsync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Config file (default: $UPSYNC_CONFIG, ./{CONFIG_FILE_NAME} or ./tmp/{CONFIG_FILE_NAME})",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """Upsync - mirror a local directory into an S3 bucket.

    Uploads only files whose modification time and content changed, and
    optionally prunes old remote snapshots with a day/week/month
    retention schedule.

    \b
    Examples:
        upsync sync my-bucket ./dumps
        upsync sync my-bucket ./dumps --glob '*.sql.gz' --backups-retain
        upsync sync my-bucket ./site --public --noprompt
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("bucket")
@click.argument("directory", type=click.Path(path_type=Path))
@click.option("--glob", default=None, help="Glob selecting files to upload (default: **/*)")
@click.option("--public/--private", default=None, help="Upload with public-read visibility")
@click.option("--noprompt/--prompt", "no_prompt", default=None, help="Don't ask for confirmation")
@click.option(
    "--backups-retain/--no-backups-retain",
    default=None,
    help="Delete remote objects outside the day/week/month retention windows",
)
@click.option("--days-retain", type=int, default=None, help="Daily snapshots to keep (default: 30)")
@click.option("--weeks-retain", type=int, default=None, help="Weekly snapshots to keep (default: 5)")
@click.option("--months-retain", type=int, default=None, help="Monthly snapshots to keep (default: 3)")
@click.option(
    "--dry-run/--no-dry-run",
    "-n",
    default=None,
    help="Report what would change without changing the bucket",
)
@click.option("--workers", type=int, default=None, help="Parallel uploads and deletions (default: 1)")
@click.option("--region", default=None, help="Store region (default: from config)")
@click.option("--verbose", "-v", is_flag=True, help="Show skipped and retained files")
@click.pass_context
def sync(
    ctx: click.Context,
    bucket: str,
    directory: Path,
    glob: Optional[str],
    public: Optional[bool],
    no_prompt: Optional[bool],
    backups_retain: Optional[bool],
    days_retain: Optional[int],
    weeks_retain: Optional[int],
    months_retain: Optional[int],
    dry_run: Optional[bool],
    workers: Optional[int],
    region: Optional[str],
    verbose: bool,
) -> None:
    """Push files from DIRECTORY into BUCKET, skipping unchanged ones.

    A file is skipped when the modification time stored with the remote
    object matches the local one. Otherwise its MD5 is compared with the
    object's ETag: a different body is uploaded again, an identical body
    only gets its stored modification time refreshed.

    With --backups-retain, for each of the last N days, weeks and months
    the earliest file modified on or after the start of that period is
    kept, and every other object matching --glob is deleted.
    """
    config = _get_config(ctx)
    console = _get_console(config, verbose)

    try:
        options = config.sync_options(
            glob=glob,
            public=public,
            no_prompt=no_prompt,
            backups_retain=backups_retain,
            days_retain=days_retain,
            weeks_retain=weeks_retain,
            months_retain=months_retain,
            dry_run=dry_run,
            workers=workers,
        )
        root = validate_root(directory)

        if options.dry_run:
            console.print_info("This is a dry run.")

        with StoreSession(config.store, region=region) as session:
            store = session.bucket(bucket)
            console.print_info(f"Found bucket named {bucket}")

            executor = SyncExecutor(
                store,
                root,
                options,
                confirm=lambda: console.confirm("Proceed?"),
                observer=ConsoleObserver(console),
            )
            result = executor.run()

        console.print_sync_result(result)
    except UpsyncError as e:
        console.print_error(str(e))
        sys.exit(1)
    finally:
        console.close()

    if not result.success:
        sys.exit(1)


@cli.command("list")
@click.option("--region", default=None, help="Store region (default: from config)")
@click.pass_context
def list_buckets(ctx: click.Context, region: Optional[str]) -> None:
    """Show all buckets."""
    config = _get_config(ctx)
    console = _get_console(config)

    try:
        with StoreSession(config.store, region=region) as session:
            console.print_bucket_list(session.list_buckets())
    except UpsyncError as e:
        console.print_error(str(e))
        sys.exit(1)
    finally:
        console.close()


@cli.command()
@click.argument("bucket")
@click.option("--count", "-c", default=5, show_default=True, help="Number of keys to show")
@click.option("--region", default=None, help="Store region (default: from config)")
@click.pass_context
def afew(ctx: click.Context, bucket: str, count: int, region: Optional[str]) -> None:
    """Show the first few keys in BUCKET."""
    config = _get_config(ctx)
    console = _get_console(config)

    try:
        with StoreSession(config.store, region=region) as session:
            for obj in islice(session.bucket(bucket).list(), max(count, 0)):
                console.print_plain(obj.key)
    except UpsyncError as e:
        console.print_error(str(e))
        sys.exit(1)
    finally:
        console.close()


@cli.command()
@click.argument("bucket")
@click.option("--one", default=None, help="Download only this key")
@click.option(
    "--dest",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Target directory (default: current directory)",
)
@click.option("--region", default=None, help="Store region (default: from config)")
@click.pass_context
def download(ctx: click.Context, bucket: str, one: Optional[str], dest: Path, region: Optional[str]) -> None:
    """Download every object in BUCKET, or a single one with --one.

    Keys become paths below --dest; missing directories are created.
    """
    config = _get_config(ctx)
    console = _get_console(config)
    dest = dest.resolve()

    try:
        with StoreSession(config.store, region=region) as session:
            store = session.bucket(bucket)

            if one is not None:
                if store.get_metadata(one) is None:
                    raise NotFoundError(f"Could not find {one}. No action taken.")
                target = _download_target(dest, one)
                if target is None:
                    raise ConfigurationError(f"Key {one} resolves outside {dest}")
                store.download(one, target)
                console.print_success(f"Downloaded {one}")
                return

            if not console.confirm(f"Are you sure you want to download all files into {dest}?"):
                console.print_warning("No action taken.")
                return

            for obj in store.list():
                target = _download_target(dest, obj.key)
                if target is None:
                    console.print_warning(f"Skipping {obj.key}: resolves outside {dest}")
                    continue
                console.print(f"Creating path for and downloading {obj.key}")
                store.download(obj.key, target)
    except UpsyncError as e:
        console.print_error(str(e))
        sys.exit(1)
    finally:
        console.close()


def _download_target(dest: Path, key: str) -> Path | None:
    """Map a key below dest, refusing keys that escape it."""
    target = (dest / key).resolve()
    if dest != target and dest not in target.parents:
        return None
    return target


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.group("config")
def config_group() -> None:
    """Create, show and validate the configuration file."""
    pass


@config_group.command("init")
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(CONFIG_FILE_NAME),
    help=f"Where to write the file (default: ./{CONFIG_FILE_NAME})",
)
def config_init(path: Path) -> None:
    """Write a commented default configuration file."""
    console = create_console()
    if write_default_config(path):
        console.print_success(f"Created {path}")
    else:
        console.print_warning(f"{path} already exists. No action taken.")


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration (secrets masked)."""
    config = _get_config(ctx)
    console = _get_console(config)

    source = ctx.obj.get("config_path") or find_config_path()
    console.print_info(f"Config: {source or 'defaults'}")

    data = config.model_dump(mode="json")
    if data["store"].get("secret_key"):
        data["store"]["secret_key"] = "********"
    console.print_plain(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())
    console.close()


@config_group.command("validate")
@click.argument("path", type=click.Path(path_type=Path), required=False)
@click.pass_context
def config_validate(ctx: click.Context, path: Optional[Path]) -> None:
    """Validate a configuration file."""
    console = create_console()
    target = path or ctx.obj.get("config_path") or find_config_path()

    if target is None:
        console.print_error("No configuration file found.")
        sys.exit(1)

    ok, errors = validate_config_file(target)
    if ok:
        console.print_success(f"{target} is valid")
        return

    for error in errors:
        console.print_error(error)
    sys.exit(1)


if __name__ == "__main__":
    cli()
