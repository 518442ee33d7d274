#!/usr/bin/env python3
"""
Validate the catalog data files before shipping an edit.

Checks, per file, what the running server would check on reload:
- the file exists and is UTF-8 text
- it parses (comments and trailing commas allowed)
- it deserializes into the expected catalog shape

and a few cross-file consistency hints:
- services referenced by errors and flags exist in system.json
- service owners and dependencies resolve
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from fastfood_mcp.app.core.config import load_settings
from fastfood_mcp.app.schemas.catalog import ErrorCatalog, FlagsData, SystemData
from fastfood_mcp.app.store.errors import FatalLoadError
from fastfood_mcp.app.store.reloading import read_snapshot, typed_loader


def load_snapshot(path: Path, shape: Any) -> Tuple[Optional[Any], Optional[str]]:
    try:
        return read_snapshot(path, typed_loader(shape), FatalLoadError), None
    except FatalLoadError as exc:
        return None, str(exc)


def cross_check(errors: ErrorCatalog, system: SystemData, flags: FlagsData) -> List[str]:
    warnings: List[str] = []
    known = {name.lower() for name in system.services}
    for code, entry in errors.items():
        for svc in entry.services:
            if svc.lower() not in known:
                warnings.append(f"errors: {code} references unknown service '{svc}'")
    for flag in flags.flags:
        if flag.service and flag.service.lower() not in known:
            warnings.append(f"flags: {flag.key} references unknown service '{flag.service}'")
    for name, svc in system.services.items():
        for dep in svc.depends_on:
            if dep.lower() not in known:
                warnings.append(f"system: {name} depends on unknown service '{dep}'")
        for owner in svc.owners:
            if owner not in system.owners:
                warnings.append(f"system: {name} owner '{owner}' has no contact details")
    return warnings


@click.command()
@click.option(
    "--data-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory with errors.json, system.json and flags.json (default: FASTFOOD_DATA_DIR or data/)",
)
@click.option("--strict", is_flag=True, default=False, help="Treat cross-file warnings as errors")
@click.pass_context
def main(ctx: click.Context, data_dir: Optional[Path], strict: bool) -> None:
    settings = load_settings(data_dir=data_dir)

    click.echo(f"Validating data files in {settings.data_dir}")
    click.echo("=" * 50)

    snapshots: Dict[str, Any] = {}
    failed = False
    for name, path, shape in (
        ("errors", settings.errors_path, ErrorCatalog),
        ("system", settings.system_path, SystemData),
        ("flags", settings.flags_path, FlagsData),
    ):
        snapshot, error = load_snapshot(path, shape)
        if error:
            failed = True
            click.echo(f"FAIL {name}: {error}")
            continue
        snapshots[name] = snapshot
        click.echo(f"ok   {name}: {path}")

    if failed:
        click.echo("=" * 50)
        click.echo("Data files are not loadable; the server would refuse to start.")
        ctx.exit(1)

    warnings = cross_check(snapshots["errors"], snapshots["system"], snapshots["flags"])
    for w in warnings:
        click.echo(f"warn {w}")
    click.echo("=" * 50)
    if warnings and strict:
        click.echo(f"{len(warnings)} consistency warning(s) in strict mode.")
        ctx.exit(1)
    click.echo("Data files are valid.")


if __name__ == "__main__":
    main()
