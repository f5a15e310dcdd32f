"""Command line interface: `pysway outputs`, `pysway raw`."""

import argparse
import dataclasses
import json
import sys

import shtab

from .ansi import OutputStyles, colorize, should_colorize
from .config import load_settings
from .errors import ChannelError, ConfigError, EnvMissing, IpcError, UnknownType
from .ipc import Connection
from .logging_setup import get_logger, init_logger
from .message_types import MessageType
from .models import ExitCode, Output

__all__ = ["format_output", "get_parser", "main"]


def get_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="pysway", description="Query sway through its IPC socket", allow_abbrev=False)
    shtab.add_argument_to(parser, ["--print-completion"])
    parser.add_argument("--socket", help="IPC socket path (default: $SWAYSOCK)", metavar="path").complete = shtab.FILE  # type: ignore[attr-defined]
    parser.add_argument("--config", help="Use a different configuration file", metavar="filename").complete = shtab.FILE  # type: ignore[attr-defined]
    parser.add_argument("--timeout", type=float, help="Read / write timeout in seconds")
    parser.add_argument("--debug", action="store_true", help="Log every frame")
    parser.add_argument("--log", help="Also log to this file", metavar="filename").complete = shtab.FILE  # type: ignore[attr-defined]

    commands = parser.add_subparsers(dest="command")
    outputs = commands.add_parser("outputs", help="List the display outputs (default)")
    outputs.add_argument("--json", action="store_true", help="Print JSON instead of text")

    raw = commands.add_parser("raw", help="Send any message and print the JSON reply")
    raw.add_argument("type", help="Message type, by name (get_tree) or number (4)")
    raw.add_argument("payload", nargs="?", default="", help="Request payload")
    return parser


def format_output(output: Output, color: bool = False) -> str:
    """Render an output as a few lines of text."""

    def style(text: str, codes: tuple[str, ...]) -> str:
        return colorize(text, *codes) if color else text

    state = style("on", OutputStyles.ACTIVE) if output.active else style("off", OutputStyles.INACTIVE)
    lines = [
        f"{style(output.name, OutputStyles.NAME)} ({state})",
        f"  {output.description or 'unknown display'}",
        f"  scale {output.scale:g}, transform {output.transform}",
    ]
    for mode in output.modes:
        text = str(mode)
        if mode == output.current_mode:
            lines.append(f"  * {style(text, OutputStyles.CURRENT_MODE)}")
        else:
            lines.append(f"    {text}")
    if output.current_mode not in output.modes:
        lines.append(f"  * {style(str(output.current_mode), OutputStyles.CURRENT_MODE)}")
    return "\n".join(lines)


def _run(args: argparse.Namespace, conn: Connection, msg_type: MessageType | None) -> None:
    if msg_type is not None:
        response = conn.request(msg_type, args.payload)
        print(json.dumps(response.content, indent=2))
        return

    outputs = conn.query_outputs()
    if getattr(args, "json", False):
        print(json.dumps([dataclasses.asdict(o) for o in outputs], indent=2))
    else:
        color = should_colorize(sys.stdout)
        print("\n\n".join(format_output(o, color) for o in outputs))


def main(argv: list[str] | None = None) -> None:
    """Run the command."""
    args = get_parser().parse_args(argv)
    init_logger(filename=args.log, force_debug=args.debug)
    log = get_logger("pysway")

    msg_type = None
    if args.command == "raw":
        try:
            msg_type = MessageType.from_name(args.type)
        except UnknownType:
            log.critical("Unknown message type: %s (expected one of %s)", args.type, ", ".join(t.name.lower() for t in MessageType))
            sys.exit(ExitCode.USAGE_ERROR)

    exit_code = ExitCode.SUCCESS
    try:
        settings = load_settings(args.config, socket_path=args.socket, log=log)
        if args.timeout:
            settings.timeout = args.timeout
        with Connection.from_settings(settings, logger=get_logger("ipc")) as conn:
            _run(args, conn, msg_type)
    except EnvMissing as e:
        log.critical("%s: is sway running? Use --socket to give the socket path.", e)
        exit_code = ExitCode.ENV_ERROR
    except ConfigError as e:
        log.critical("Invalid configuration: %s", e)
        exit_code = ExitCode.USAGE_ERROR
    except ChannelError as e:
        log.critical("IPC failure: %s", e)
        exit_code = ExitCode.CONNECTION_ERROR
    except IpcError as e:
        log.critical("Protocol error: %s", e)
        exit_code = ExitCode.PROTOCOL_ERROR
    except KeyboardInterrupt:
        pass
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
