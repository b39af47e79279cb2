"""CLI entry point for stopwatchd."""

from pathlib import Path
from typing import Annotated

import typer
from mm_clikit import TyperPlus

from stopwatchd.app_context import AppContext
from stopwatchd.commands.daemon import daemon
from stopwatchd.commands.delete import delete
from stopwatchd.commands.health import health
from stopwatchd.commands.info import info
from stopwatchd.commands.lap import lap
from stopwatchd.commands.pause import pause
from stopwatchd.commands.play import play
from stopwatchd.commands.shutdown import shutdown
from stopwatchd.commands.start import start
from stopwatchd.commands.stop import stop
from stopwatchd.config import Config
from stopwatchd.log import setup_logging
from stopwatchd.output import Output

app = TyperPlus(package_name="stopwatchd")


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    json_output: Annotated[bool, typer.Option("--json", help="Output results as JSON.")] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path.")] = None,
) -> None:
    """Named stopwatches kept by a background daemon."""
    cfg = Config.build(data_dir)
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(cfg)
    ctx.obj = AppContext(out=Output(json_mode=json_output, datetime_format=cfg.datetime_format), cfg=cfg)


# Stopwatches
app.command(aliases=["s", "new", "n"])(start)
app.command(aliases=["i", "get", "g"])(info)
app.command(aliases=["end", "e"])(stop)
app.command(aliases=["l"])(lap)
app.command()(pause)
app.command()(play)
app.command(aliases=["d", "rm"])(delete)

# Daemon
app.command(hidden=True)(daemon)
app.command(aliases=["h"])(health)
app.command()(shutdown)
