import os
import signal
import time

import click
from rich.console import Console
from rich.table import Table

from fileguard import config
from fileguard import daemon as daemon_module
from fileguard import logger as fileguard_logger
from fileguard.channel import InotifyChannel
from fileguard.dispatch import ActionDispatcher
from fileguard.errors import FileguardError
from fileguard.events import CanonicalEvent
from fileguard.notify import DesktopNotifier
from fileguard.rules import build_rule
from fileguard.session import WatchSession

LOGGER_NAME = "FileGuard"
LOG_FILENAME = "fileguard.log"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--settings", "-s", "settings_path", default=None, help="Path to settings TOML file.")
@click.option("--verbose", "-v", is_flag=True, help="Turn on verbose (debug) logging.")
@click.option("--notify", "-n", is_flag=True, help="Turn on desktop notifications.")
@click.pass_context
def main(ctx, settings_path, verbose, notify):
    """
    FileGuard: run a command or log a line when a watched path changes.
    """
    try:
        settings = config.load_settings(settings_path)
    except (OSError, FileguardError) as e:
        click.echo(f"Error loading settings: {e}", err=True)
        ctx.exit(1)
    if notify:
        settings["notifications"]["enabled"] = True
    ctx.obj = {"settings": settings, "verbose": verbose}


def get_logger(ctx):
    settings = ctx.obj["settings"]
    return fileguard_logger.setup_logger(
        LOGGER_NAME,
        config.get_log_dir(settings),
        LOG_FILENAME,
        level=settings["logging"].get("level", "INFO"),
        verbose=ctx.obj["verbose"],
    )


def load_rule(ctx, config_file, logger):
    """Select, load and validate the rule file; exits with status 1 on failure."""
    config_path, used_argument = config.select_config_path(config_file)
    if config_file and not used_argument:
        logger.warning(
            f"{config_file} is not a .yaml/.yml file, using default configuration {config_path}"
        )
    logger.info(f"yaml file: {config_path}")

    try:
        raw = config.load_rule_config(config_path)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        if config.write_default_config(config.DEFAULT_CONFIG_PATH):
            click.echo(f"Created configuration template at {config.DEFAULT_CONFIG_PATH}", err=True)
        ctx.exit(1)
    except (OSError, FileguardError) as e:
        logger.error(f"Unable to load configuration {config_path}: {e}")
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        rule = build_rule(raw)
    except FileguardError as e:
        logger.error(f"Invalid configuration {config_path}: {e}")
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    logger.debug(
        f"Parsed YAML file: inode: {rule.watched_path} event: {rule.trigger_event.value} "
        f"{rule.mode.value}: {rule.target}"
    )
    return rule


@main.command()
@click.argument("config_file", required=False)
@click.option("--daemon", "as_daemon", is_flag=True, help="Detach and run as a daemon.")
@click.pass_context
def watch(ctx, config_file, as_daemon):
    """
    Watch the configured path and act on the configured event.
    """
    click.echo("Initializing fileguard!")
    settings = ctx.obj["settings"]
    logger = get_logger(ctx)
    rule = load_rule(ctx, config_file, logger)

    notifier = None
    if settings["notifications"].get("enabled"):
        logger.debug("Desktop notifications enabled")
        notifier = DesktopNotifier(logger=logger)

    session = WatchSession(
        rule,
        dispatcher=ActionDispatcher(notifier=notifier, logger=logger),
        channel=InotifyChannel(),
        buffer_size=settings["watch"]["buffer_size"],
        logger=logger,
    )
    try:
        session.open()
        if as_daemon:
            pid_file = daemon_module.get_pid_file(config.get_log_dir(settings))
            click.echo("Starting daemon...")
            daemon_module.run_daemon(session, pid_file, logger)
        else:
            session.install_signal_handlers()
            session.run()
    except FileguardError as e:
        logger.error(str(e))
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    finally:
        session.close()


@main.command()
@click.pass_context
def stop(ctx):
    """
    Stop the FileGuard daemon.
    """
    pid_file = daemon_module.get_pid_file(config.get_log_dir(ctx.obj["settings"]))
    pid = daemon_module.read_pid(pid_file)
    if pid is None:
        click.echo("Daemon is not running (pid file not found).")
        return
    try:
        os.kill(pid, signal.SIGTERM)
        click.echo(f"Sent SIGTERM to daemon (pid {pid}).")
    except ProcessLookupError:
        click.echo(f"Daemon process {pid} not found, removing stale pid file.")
        os.remove(pid_file)
    except OSError as e:
        click.echo(f"Error stopping daemon: {e}", err=True)
        ctx.exit(1)


@main.command()
@click.pass_context
def status(ctx):
    """
    Check the status of the FileGuard daemon.
    """
    pid_file = daemon_module.get_pid_file(config.get_log_dir(ctx.obj["settings"]))
    pid = daemon_module.read_pid(pid_file)
    if pid is None:
        click.echo("Daemon is not running (pid file not found).")
        return

    info = daemon_module.process_status(pid)
    if info is None:
        click.echo("Daemon process not found.")
        return

    info["Started At"] = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(info["Started At"]))
    table = Table(title="FileGuard Daemon Status")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="magenta")
    for key, value in info.items():
        table.add_row(key, str(value))
    Console().print(table)


@main.command(name="show-config")
@click.argument("config_file", required=False)
@click.pass_context
def show_config(ctx, config_file):
    """
    Show the validated rule and the effective settings.
    """
    logger = get_logger(ctx)
    rule = load_rule(ctx, config_file, logger)
    settings = ctx.obj["settings"]

    table = Table(title="FileGuard Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")
    table.add_row("Watched path", rule.watched_path)
    table.add_row("Trigger event", rule.trigger_event.value)
    table.add_row("Action", rule.mode.value)
    table.add_row("Target", rule.target)
    table.add_row("Log level", "DEBUG" if ctx.obj["verbose"] else str(settings["logging"].get("level")))
    table.add_row("Log directory", config.get_log_dir(settings))
    table.add_row("Buffer size", str(settings["watch"]["buffer_size"]))
    table.add_row("Notifications", str(bool(settings["notifications"].get("enabled"))))
    Console().print(table)


@main.command()
def events():
    """
    List the inode events FileGuard understands, in matching order.
    """
    table = Table(title="Inode Events")
    table.add_column("Event", style="cyan")
    table.add_column("Mask", style="magenta")
    for event in CanonicalEvent:
        table.add_row(event.value, f"{event.mask:#010x}")
    Console().print(table)


if __name__ == "__main__":
    main()
