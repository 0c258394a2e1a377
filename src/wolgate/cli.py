"""Command-line interface for wolgate."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from wolgate import __version__
from wolgate.config.loader import ConfigError, Settings, load_settings
from wolgate.core.interfaces import InterfaceRecord
from wolgate.core.network import NetworkConfig

DEFAULT_CONFIG = Path("/etc/wolgate/config.yaml")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_settings(config: str) -> Settings:
    try:
        return load_settings(Path(config))
    except ConfigError as exc:
        click.echo(f"Config error: {exc}", err=True)
        sys.exit(1)


def _init_network(settings: Settings) -> NetworkConfig:
    return NetworkConfig.initialize(settings)


def _describe(label: str, iface: Optional[InterfaceRecord]) -> None:
    if iface is None:
        click.echo(f"{label}: not configured")
        return
    click.echo(f"{label}: {iface.name}  ip={iface.address}  broadcast={iface.broadcast}")


# ── Root group ────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=__version__, prog_name="wolgate")
@click.option(
    "--config",
    "-c",
    default=str(DEFAULT_CONFIG),
    envvar="WOLGATE_CONFIG",
    show_default=True,
    help="Path to wolgate config.yaml (optional; environment variables override it)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config: str, verbose: bool) -> None:
    """wolgate — Wake-on-LAN gateway for LAN and Docker networks."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ── interfaces command ───────────────────────────────────────────────────────


@main.command()
@click.pass_context
def interfaces(ctx: click.Context) -> None:
    """List the host's IPv4 interfaces and how they are classified."""
    from wolgate.core.interfaces import enumerate_interfaces

    settings = _load_settings(ctx.obj["config"])
    found = enumerate_interfaces(
        exclude=settings.exclude_interfaces, local_prefix=settings.local_network_prefix
    )
    if not found:
        click.echo("No IPv4 interfaces found.")
        return
    click.echo(f"{'NAME':<18} {'ADDRESS':<16} {'BROADCAST':<16} {'MAC':<18} {'LOCAL':<6} DOCKER")
    click.echo("─" * 82)
    for i in found:
        click.echo(
            f"{i.name:<18} {i.address:<16} {i.broadcast:<16} {i.mac:<18} "
            f"{'yes' if i.is_local else 'no':<6} {'yes' if i.is_docker else 'no'}"
        )


# ── detect command ───────────────────────────────────────────────────────────


@main.command()
@click.pass_context
def detect(ctx: click.Context) -> None:
    """Auto-detect the local and Docker interfaces and save the selection."""
    settings = _load_settings(ctx.obj["config"])
    selection = NetworkConfig(settings).detect()
    _describe("Local ", selection.local)
    _describe("Docker", selection.docker)
    click.echo(f"Saved to {settings.state_file}")


# ── wake command ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("mac")
@click.option(
    "--interface",
    "-i",
    "target",
    default=None,
    help="'local', 'docker' or an interface name (default: local)",
)
@click.option("--all", "wake_both", is_flag=True, help="Send on both local and Docker interfaces")
@click.pass_context
def wake(ctx: click.Context, mac: str, target: Optional[str], wake_both: bool) -> None:
    """Send a Wake-on-LAN packet to MAC."""
    from wolgate.core.wol import InvalidMacAddress, WakeError, wake_all
    from wolgate.core.wol import wake as do_wake

    settings = _load_settings(ctx.obj["config"])
    net = _init_network(settings)

    if wake_both:
        results = asyncio.run(
            wake_all(mac, net.local_interface, net.docker_interface, settings.wol_port)
        )
        for kind, r in results.items():
            status = "✓" if r.success else f"✗  {r.error}"
            click.echo(f"{kind:<6} {r.interface:<16} {status}")
        if not any(r.success for r in results.values()):
            sys.exit(2)
        return

    iface = net.lookup(target)
    if iface is None:
        click.echo(f"Interface '{target or 'local'}' not found or not configured.", err=True)
        sys.exit(1)
    try:
        do_wake(mac, iface, settings.wol_port)
    except InvalidMacAddress as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)
    except WakeError as exc:
        click.echo(f"✗  WOL send failed on {iface.name}: {exc}", err=True)
        sys.exit(2)
    click.echo(f"WOL packet sent to {mac} via {iface.name}")


# ── keygen command ───────────────────────────────────────────────────────────


@main.command()
def keygen() -> None:
    """Print a random API key suitable for API_KEY."""
    from wolgate.auth.apikey import generate_api_key

    click.echo(generate_api_key())


# ── serve command ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default=None, help="Bind host (default: SERVER_IP or 0.0.0.0)")
@click.option("--port", default=None, type=int, help="Bind port (default: SERVER_PORT or 3000)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Start the wolgate API server."""
    import uvicorn

    from wolgate.api.routes import create_app

    logger = logging.getLogger("wolgate")
    settings = _load_settings(ctx.obj["config"])
    bind_host = host or settings.host
    bind_port = port or settings.port

    net = _init_network(settings)
    app = create_app(settings, network=net)

    click.echo("=" * 60)
    click.echo("wolgate Wake-on-LAN server")
    click.echo("=" * 60)
    click.echo(f"Listening on: {bind_host}:{bind_port}")
    click.echo(f"API key:      {'configured' if settings.api_key else 'NOT CONFIGURED'}")
    click.echo(f"Auto-detect:  {'enabled' if settings.auto_detect else 'disabled'}")
    click.echo(f"WOL port:     {settings.wol_port}")
    _describe("Local ", net.local_interface)
    _describe("Docker", net.docker_interface)
    click.echo("=" * 60)

    if not settings.api_key:
        logger.warning("API_KEY is not set: every endpoint is open to the network")
    if settings.docker_network_prefix:
        logger.info(
            "DOCKER_NETWORK_PREFIX=%s is informational; Docker interfaces are matched by name",
            settings.docker_network_prefix,
        )

    uvicorn.run(app, host=bind_host, port=bind_port)


if __name__ == "__main__":
    main()
