import asyncio, logging, time
from decimal import Decimal, InvalidOperation
import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import config
from .adapters.checkpoint_json import JSONCheckpoint
from .adapters.csv_sink import CSVRecordSink
from .adapters.pricing import ConstantPrice
from .adapters.rpc_httpx import HttpxRPC
from .application.use_cases import run_scrape
from .domain.amounts import plain
from .domain.models import PoolOutcome
from .domain.value_types import Address

console = Console()
log = logging.getLogger("lpsift")

ENV_PREFIX = "LPSIFT"


class DecimalType(click.ParamType):
    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            d = Decimal(str(value))
        except InvalidOperation:
            self.fail(f"{value!r} is not a decimal number", param, ctx)
        if not d.is_finite():
            self.fail(f"{value!r} is not a finite number", param, ctx)
        return d


def _block_arg(value: str) -> int | None:
    if value.lower() == "latest":
        return None
    try:
        return int(value)
    except ValueError:
        raise click.BadParameter(f"expected a block number or 'latest', got {value!r}")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # keep transport chatter out of INFO output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _print_outcome(outcome: PoolOutcome) -> None:
    if not outcome.records:
        return
    table = Table(title=f"Qualifying LP token holders in {outcome.pool}")
    table.add_column("holder")
    table.add_column("balance", justify="right")
    table.add_column("holding value (USD)", justify="right")
    for rec in outcome.records:
        table.add_row(rec.holder, plain(rec.balance), plain(rec.holding_value))
    console.print(table)


@click.command()
@click.option("--rpc", default=config.DEFAULT_RPC_URL, show_default=True, help="JSON-RPC endpoint URL")
@click.option("--factory", default=config.DEFAULT_FACTORY, show_default=True, help="Pair factory address")
@click.option("--from-block", type=int, default=config.DEFAULT_START_BLOCK, show_default=True)
@click.option("--to-block", default="latest", show_default=True, help="Last block, or 'latest'")
@click.option("--batch-size", type=int, default=config.DEFAULT_BATCH_SIZE, show_default=True,
              help="Blocks per eth_getLogs request")
@click.option("--pool-threshold", type=DecimalType(), default=config.POOL_THRESHOLD, show_default=True,
              help="USD pool value gate")
@click.option("--holder-threshold", type=DecimalType(), default=config.HOLDER_THRESHOLD, show_default=True,
              help="Minimum USD holding value (inclusive)")
@click.option("--pool-gate", type=click.Choice(["above", "below"]), default=config.DEFAULT_POOL_GATE,
              show_default=True, help="Process pools whose value is above or below --pool-threshold")
@click.option("--price", type=DecimalType(), default=config.DEFAULT_PRICE_USD, show_default=True,
              help="Fixed USD price per LP token")
@click.option("--decimals", type=int, default=config.DEFAULT_DECIMALS, show_default=True)
@click.option("--retries", type=int, default=config.BALANCE_MAX_ATTEMPTS, show_default=True,
              help="Attempts per balanceOf read")
@click.option("--retry-delay", type=float, default=config.BALANCE_RETRY_DELAY_S, show_default=True,
              help="Seconds between balanceOf attempts after a timeout")
@click.option("--timeout", type=float, default=config.RPC_TIMEOUT_S, show_default=True, help="HTTP timeout (s)")
@click.option("--output", default=config.CSV_FILENAME, show_default=True, help="CSV output path")
@click.option("--checkpoint", "checkpoint_path", default=config.CHECKPOINT_FILENAME, show_default=True,
              help="JSON checkpoint path")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default="INFO", show_default=True)
def cli(rpc, factory, from_block, to_block, batch_size, pool_threshold, holder_threshold, pool_gate,
        price, decimals, retries, retry_delay, timeout, output, checkpoint_path, log_level):
    """Find LP token holders whose position clears a USD threshold, resumably."""
    _setup_logging(log_level)
    try:
        settings = config.Settings(
            factory=Address(factory),
            start_block=from_block,
            end_block=_block_arg(to_block),
            batch_size=batch_size,
            pool_threshold=pool_threshold,
            holder_threshold=holder_threshold,
            pool_gate=pool_gate,
            decimals=decimals,
            max_attempts=retries,
            retry_delay=retry_delay,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    async def run():
        async with HttpxRPC(rpc, timeout_s=timeout) as client:
            return await run_scrape(
                source=client,
                reader=client,
                pricing=ConstantPrice(price),
                checkpoint=JSONCheckpoint(checkpoint_path),
                sink=CSVRecordSink(output),
                settings=settings,
                on_pool=_print_outcome,
            )

    t0 = time.time()
    try:
        stats = asyncio.run(run())
    except Exception as e:
        log.exception("Error during scraping")
        raise click.ClickException(f"{type(e).__name__}: {e}")

    console.print(f"[bold]done[/]: blocks {stats.from_block:,}-{stats.to_block:,} • {time.time() - t0:.2f}s")
    console.print(
        f"[bold]summary[/]: "
        f"pools={stats.pools_discovered}  "
        f"[yellow]skipped[/]={stats.pools_skipped}  "
        f"rejected={stats.pools_rejected}  "
        f"[green]processed[/]={stats.pools_processed}  "
        f"[red]failed[/]={stats.pools_failed}  "
        f"holders={stats.holders_checked}  "
        f"records={stats.records_written}  "
        f"[red]failed_batches[/]={stats.failed_batches}"
    )


def main() -> None:
    load_dotenv()
    cli(auto_envvar_prefix=ENV_PREFIX)


if __name__ == "__main__":
    main()
