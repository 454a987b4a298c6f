"""Command-line interface for token holder analysis."""

import sys
import json
import asyncio
from datetime import datetime
from typing import Optional
import click
import structlog

from holder_intel.core.countdown import format_countdown
from holder_intel.core.exceptions import HolderIntelError, RateLimitedError
from holder_intel.models.config import HolderIntelConfig
from holder_intel.models.token_data import AnalysisEvent, AnalysisStage
from holder_intel.service import HolderIntelService
from holder_intel.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

STAGE_LABELS = {
    AnalysisStage.FETCHING_TOKEN: "🔍 Fetching token info...",
    AnalysisStage.PRIVACY_ANALYSIS: "🔒 Analyzing orderbook microstructure...",
    AnalysisStage.CLASSIFYING_HOLDERS: "📋 Classifying holders...",
    AnalysisStage.SCORING: "🧠 Analyzing wallets...",
    AnalysisStage.AGGREGATING: "📊 Calculating coin intelligence...",
}

# Print the countdown on ticks divisible by this many seconds
COUNTDOWN_PRINT_EVERY = 30


@click.group()
@click.option('--config-file', '-c', type=click.Path(exists=True),
              help='Path to configuration file')
@click.option('--log-level', '-l', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.pass_context
def cli(ctx, config_file: Optional[str], log_level: Optional[str]):
    """Token holder intelligence CLI."""
    ctx.ensure_object(dict)

    try:
        if config_file:
            config = HolderIntelConfig(_env_file=config_file)
        else:
            config = HolderIntelConfig()

        if log_level:
            config.log_level = log_level

        setup_logging(config)
        ctx.obj['config'] = config

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


def _print_event(event: AnalysisEvent, last_stage: Optional[AnalysisStage]) -> None:
    if event.is_countdown_tick:
        if event.countdown % COUNTDOWN_PRINT_EVERY == 0:
            click.echo(f"⏳ Estimated time remaining: {format_countdown(event.countdown)}")
        return

    if event.stage != last_stage and event.stage in STAGE_LABELS:
        click.echo(STAGE_LABELS[event.stage])
        if event.token is not None:
            click.echo(f"   {event.token.symbol} ({event.token.name}) {event.token.address}")
        return

    if event.stage == AnalysisStage.SCORING and event.total:
        click.echo(f"   Wallet {event.current}/{event.total}")


def _print_result(event: AnalysisEvent) -> None:
    result = event.result
    click.echo("")
    click.echo("🧠 Coin Intelligence")
    click.echo("=" * 40)
    click.echo(f"Score: {result.overall} IQ")
    click.echo(f"Rating: {result.rating}")
    if result.privacy_metrics is not None:
        click.echo(f"Action: {result.privacy_metrics.get('action', 'N/A')}")
        click.echo(f"State: {result.privacy_metrics.get('state', 'N/A')}")
        return

    click.echo(f"Smart Money: {result.smart_money_percent:.1f}%")
    click.echo(f"Avg Win Rate: {result.avg_win_rate:.1f}%")

    pools = [w for w in event.wallets if w.is_liquidity_pool]
    if pools:
        click.echo(f"Liquidity Pools: {len(pools)} ({sum(w.holding_percent for w in pools):.2f}% of supply)")

    if event.wallets:
        click.echo("")
        click.echo(f"{'WALLET':<46} {'IQ':>5} {'WIN%':>6} {'HOLD%':>7}  PATTERN")
        for wallet in event.wallets:
            click.echo(f"{wallet.address:<46} {wallet.iq:>5} {wallet.win_rate:>6} "
                       f"{wallet.holding_percent:>7.2f}  {wallet.pattern}")


def format_reset_time(resets_at) -> str:
    """Local time for a unix timestamp in seconds; anything else is shown as sent."""
    try:
        return str(datetime.fromtimestamp(resets_at))
    except (TypeError, ValueError, OverflowError, OSError):
        return str(resets_at)


def _print_error(event: AnalysisEvent) -> None:
    error = event.error
    if isinstance(error, RateLimitedError):
        click.echo("❌ Daily analysis limit exceeded!", err=True)
        if error.limit is not None:
            click.echo(f"   You've used all {error.limit} analyses for today.", err=True)
        if error.resets_at:
            click.echo(f"   Your limit will reset at: {format_reset_time(error.resets_at)}", err=True)
        return
    click.echo(f"❌ {event.message or 'Error analyzing token'}", err=True)


async def _analyze(config: HolderIntelConfig, identifier: str, force_refresh: bool,
                   privacy: Optional[bool], as_json: bool) -> int:
    async with HolderIntelService(config) as service:
        last_stage = None
        final = None

        async for event in service.orchestrator.run(identifier, force_refresh=force_refresh,
                                                    privacy_mode=privacy):
            if not as_json:
                _print_event(event, last_stage)
            last_stage = event.stage
            final = event

    if final.stage == AnalysisStage.CANCELLED:
        click.echo(f"🛑 {final.message}", err=True)
        return 1

    if final.error is not None:
        if as_json:
            payload = {"error": str(final.error)}
            if isinstance(final.error, RateLimitedError):
                payload["resets_at"] = final.error.resets_at
            click.echo(json.dumps(payload, indent=2))
        else:
            _print_error(final)
        return 1

    if as_json:
        click.echo(json.dumps({
            "token": final.token.to_dict(),
            "score": final.result.to_dict(),
            "wallets": [w.to_dict() for w in final.wallets],
        }, indent=2))
    else:
        _print_result(final)
    return 0


@cli.command()
@click.argument('identifier')
@click.option('--force-refresh', '-f', is_flag=True, help='Ignore cached token and holder data')
@click.option('--privacy/--wallets', default=None,
              help='Use orderbook analysis instead of wallet scoring (default: from config)')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
@click.pass_context
def analyze(ctx, identifier: str, force_refresh: bool, privacy: Optional[bool], as_json: bool):
    """Analyze a token by contract address or symbol."""
    config = ctx.obj['config']

    try:
        exit_code = asyncio.run(_analyze(config, identifier, force_refresh, privacy, as_json))
    except KeyboardInterrupt:
        click.echo("\n🛑 Scanning stopped by user")
        exit_code = 1

    sys.exit(exit_code)


@cli.command()
@click.option('--limit', '-n', type=int, default=20, help='Number of tokens to show')
@click.pass_context
def trending(ctx, limit: int):
    """Show recently promoted tokens."""
    config = ctx.obj['config']

    async def _trending():
        async with HolderIntelService(config) as service:
            return await service.dexscreener.trending()

    tokens = asyncio.run(_trending())
    if not tokens:
        click.echo("❌ Failed to load tokens", err=True)
        sys.exit(1)

    for token in tokens[:limit]:
        click.echo(f"{token.symbol:<16} {token.address}  {token.name}")


def _backend_call(ctx, call):
    """Run one backend call and print its JSON payload; upstream failures exit 1."""
    config = ctx.obj['config']

    async def _run():
        async with HolderIntelService(config) as service:
            return await call(service.backend)

    try:
        payload = asyncio.run(_run())
    except HolderIntelError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(payload, indent=2, default=str))
    return payload


@cli.command()
@click.argument('address')
@click.option('--force-refresh', '-f', is_flag=True, help='Recompute instead of using the cached signal')
@click.option('--explain', is_flag=True, help='Show the natural-language breakdown instead')
@click.pass_context
def signal(ctx, address: str, force_refresh: bool, explain: bool):
    """Show the fused signal for a token."""
    if explain:
        _backend_call(ctx, lambda backend: backend.signal_explanation(address))
    else:
        _backend_call(ctx, lambda backend: backend.fused_signal(address, force_refresh=force_refresh))


@cli.command()
@click.argument('addresses', nargs=-1, required=True)
@click.pass_context
def signals(ctx, addresses):
    """Fused signals for several tokens at once."""
    _backend_call(ctx, lambda backend: backend.batch_fused_signals(list(addresses)))


@cli.command()
@click.argument('address')
@click.pass_context
def metrics(ctx, address: str):
    """Show real-time metrics and phase predictions for a token."""
    config = ctx.obj['config']

    async def _metrics():
        async with HolderIntelService(config) as service:
            return await service.backend.realtime_metrics(address)

    snapshot = asyncio.run(_metrics())
    if snapshot is None:
        click.echo(f"No metrics available yet for {address}")
        return

    click.echo(json.dumps(snapshot, indent=2, default=str))


@cli.group()
def alerts():
    """Manage token alerts."""
    pass


@alerts.command('enable')
@click.argument('address')
@click.pass_context
def alerts_enable(ctx, address: str):
    """Enable alerts for a token."""
    _backend_call(ctx, lambda backend: backend.enable_alerts(address))


@alerts.command('disable')
@click.argument('address')
@click.pass_context
def alerts_disable(ctx, address: str):
    """Disable alerts for a token."""
    _backend_call(ctx, lambda backend: backend.disable_alerts(address))


@alerts.command('status')
@click.argument('address')
@click.pass_context
def alerts_status(ctx, address: str):
    """Check whether alerts are enabled for a token."""
    _backend_call(ctx, lambda backend: backend.alert_status(address))


@alerts.command('list')
@click.argument('address')
@click.option('--limit', '-n', type=int, default=20, help='Number of alerts to show')
@click.pass_context
def alerts_list(ctx, address: str, limit: int):
    """Show recent alerts for a token."""
    _backend_call(ctx, lambda backend: backend.token_alerts(address, limit=limit))


@alerts.command('clear')
@click.argument('address')
@click.pass_context
def alerts_clear(ctx, address: str):
    """Clear alerts for a token."""
    _backend_call(ctx, lambda backend: backend.clear_alerts(address))


@cli.group()
def tracking():
    """Manage real-time token tracking."""
    pass


@tracking.command('status')
@click.pass_context
def tracking_status(ctx):
    """List tokens currently tracked."""
    _backend_call(ctx, lambda backend: backend.tracking_status())


@tracking.command('start')
@click.argument('address')
@click.pass_context
def tracking_start(ctx, address: str):
    """Start tracking a token."""
    _backend_call(ctx, lambda backend: backend.start_tracking(address))


@tracking.command('stop')
@click.argument('address')
@click.pass_context
def tracking_stop(ctx, address: str):
    """Stop tracking a token."""
    _backend_call(ctx, lambda backend: backend.stop_tracking(address))


@cli.command()
@click.pass_context
def health(ctx):
    """Check that the intelligence backend is reachable."""
    config = ctx.obj['config']

    async def _health():
        async with HolderIntelService(config) as service:
            return await service.backend.check_health()

    click.echo(f"🔍 Checking {config.backend_base_url}...")
    if asyncio.run(_health()):
        click.echo("✅ Backend is healthy")
    else:
        click.echo("❌ Backend is not reachable", err=True)
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    from holder_intel import __version__, __description__

    click.echo(f"Holder Intelligence v{__version__}")
    click.echo(__description__)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
