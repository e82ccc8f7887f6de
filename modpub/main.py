"""
modpub — CLI entrypoint.

Usage:
    python -m modpub.main --help
    python -m modpub.main config check
    python -m modpub.main publish -C runtime -t local
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from modpub import __version__
from modpub.core.observability.logging_config import setup_logging

_STATUS_COLORS = {
    "ok": "green",
    "partial": "yellow",
    "cancelled": "yellow",
    "failed": "red",
    "not_attempted": "red",
}


@click.group()
@click.version_option(version=__version__, prog_name="modpub")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to modpub.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """modpub — publish module descriptors and artifacts."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(debug=debug, verbose=verbose, quiet=quiet)


def _project_root(ctx: click.Context) -> Path:
    from modpub.core.config.loader import find_project_file

    config_path: Path | None = ctx.obj.get("config_path") or find_project_file()
    return config_path.parent.resolve() if config_path else Path.cwd()


# ── config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Publish configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate modpub.yml and flatten every configuration."""
    from modpub.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        assert result.project is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   Module: {result.project.module}")
        click.echo(f"   Configurations: {len(result.project.configurations)}")
        click.echo(f"   Targets: {len(result.project.targets)}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings and not ctx.obj.get("quiet"):
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


# ── hierarchy / describe ────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def hierarchy(ctx: click.Context, name: str, as_json: bool) -> None:
    """Show the flattened view of configuration NAME."""
    from modpub.core.use_cases.describe import describe_hierarchy

    result = describe_hierarchy(name, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    eff = result.effective
    assert eff is not None
    click.secho(f"\n🧬 {eff.name}", fg="cyan", bold=True)
    click.echo(f"   Hierarchy: {' → '.join(eff.hierarchy)}")

    sections = (
        ("Artifacts", eff.artifacts),
        ("Dependencies", eff.dependencies),
        ("Excludes", eff.excludes),
    )
    for title, items in sections:
        click.echo()
        click.secho(f"   {title}: {len(items)}", fg="white", bold=True)
        for item in items:
            click.echo(f"     • {item}")

    click.echo()


@cli.command()
@click.option(
    "--configuration", "-C", "configurations", multiple=True,
    help="Configuration to publish (repeatable). Default: publish.configurations.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def describe(ctx: click.Context, configurations: tuple[str, ...], as_json: bool) -> None:
    """Build the module descriptor without publishing it."""
    from modpub.core.use_cases.describe import describe_module

    result = describe_module(
        configurations=list(configurations) or None,
        config_path=ctx.obj.get("config_path"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    descriptor = result.descriptor
    assert descriptor is not None
    click.secho(f"\n📦 {descriptor.module} [{descriptor.status}]", fg="cyan", bold=True)

    for conf in descriptor.configurations.values():
        extends = f" extends {', '.join(sorted(conf.extends_from))}" if conf.extends_from else ""
        click.echo()
        click.secho(f"   {conf.name}{extends}", fg="white", bold=True)
        if conf.description and ctx.obj.get("verbose"):
            click.echo(f"     {conf.description}")
        for artifact in descriptor.artifacts_for(conf.name):
            click.echo(f"     ◆ {artifact}")
        for dep in descriptor.dependencies_for(conf.name):
            click.echo(f"     → {dep}")

    click.echo()


# ── publish ─────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--configuration", "-C", "configurations", multiple=True,
    help="Configuration to publish (repeatable). Default: publish.configurations.",
)
@click.option(
    "--target", "-t", "targets", multiple=True,
    help="Target to publish to, in order (repeatable). Default: all declared targets.",
)
@click.option("--mock", is_flag=True, help="Use mock targets (nothing is copied).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def publish(
    ctx: click.Context,
    configurations: tuple[str, ...],
    targets: tuple[str, ...],
    mock: bool,
    as_json: bool,
) -> None:
    """Publish the descriptor and artifacts to the targets.

    Examples:

        modpub publish

        modpub publish -C runtime -t local -t shared

        modpub publish --mock
    """
    from modpub.core.use_cases.publish import run_publish

    result = run_publish(
        config_path=ctx.obj.get("config_path"),
        configurations=list(configurations) or None,
        targets=list(targets) or None,
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    outcome = result.outcome
    assert outcome is not None
    assert result.project is not None

    mode_label = "[mock] " if mock else ""
    click.secho(f"\n🚀 {mode_label}{result.project.module}", fg="cyan", bold=True)
    click.echo(
        f"   Configurations: {', '.join(result.configurations)} | "
        f"Targets: {len(result.targets)}"
    )
    if outcome.descriptor_written:
        click.echo(f"   Descriptor: {result.descriptor_path}")
    click.echo()

    for receipt in outcome.receipts:
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.ok:
            click.secho(f"   ✓ {receipt.target}", fg="green", nl=False)
            click.echo(timing)
            if ctx.obj.get("verbose") and receipt.output:
                click.echo(f"     │ {receipt.output}")
        elif receipt.failed:
            click.secho(f"   ✗ {receipt.target}", fg="red", nl=False)
            click.echo(timing)
            if receipt.error:
                for line in receipt.error.split("\n")[:5]:
                    click.echo(f"     │ {line}")
        else:
            click.secho(f"   ⊘ {receipt.target} ", fg="yellow", nl=False)
            click.echo(f"({receipt.output})")

    click.echo()
    click.secho(
        f"   Result: {outcome.status} "
        f"({len(outcome.succeeded_targets)}/{len(result.targets)} targets)",
        fg=_STATUS_COLORS.get(outcome.status, "white"),
        bold=True,
    )
    if outcome.cause is not None and not outcome.receipts:
        click.echo(f"   {outcome.cause}")

    if not outcome.ok:
        click.echo()
        sys.exit(1)

    click.echo()


# ── targets / history ───────────────────────────────────────────


@cli.command("targets")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def targets_cmd(ctx: click.Context, as_json: bool) -> None:
    """List declared targets and whether they are reachable."""
    from modpub.adapters.registry import TargetRegistry
    from modpub.core.config.loader import ConfigError, load_project

    try:
        project = load_project(ctx.obj.get("config_path"))
        registry = TargetRegistry.from_specs(project.targets, base_dir=_project_root(ctx))
    except (ConfigError, ValueError) as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    status = registry.target_status()

    if as_json:
        click.echo(json.dumps(list(status.values()), indent=2))
        return

    if not status:
        click.echo("No targets declared.")
        return

    click.echo()
    for name, info in status.items():
        marker = click.style("●", fg="green") if info["available"] else click.style("○", fg="red")
        click.echo(f"   {marker} {name}  [{info['type']}]")
    click.echo()


@cli.command()
@click.option("-n", "count", default=10, type=int, help="Number of entries to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent publish runs from the audit ledger."""
    from modpub.core.persistence.audit import AuditWriter

    entries = AuditWriter(project_root=_project_root(ctx)).read_recent(count)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No publish history yet.")
        return

    click.echo()
    for entry in entries:
        color = _STATUS_COLORS.get(entry.status, "white")
        mock = " [mock]" if entry.mock else ""
        click.echo(f"   {entry.timestamp}  {entry.module}{mock} — ", nl=False)
        click.secho(entry.status, fg=color)
        click.echo(
            f"     {', '.join(entry.configurations)} → {', '.join(entry.targets)}"
            f" ({entry.duration_ms}ms)"
        )
        if entry.error:
            click.echo(f"     │ {entry.error}")
    click.echo()


if __name__ == "__main__":
    cli()
