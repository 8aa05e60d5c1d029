#!/usr/bin/env python3
"""
AutoPaste CLI entry point with file logging

    autopaste check [--json]     show which paste mechanism would be used
    autopaste paste [TEXT]       paste TEXT (or stdin) into the focused window
"""

from __future__ import annotations
import sys
import argparse
import asyncio
import json
import os
import logging
import logging.handlers
import traceback
from pathlib import Path

from autopaste.__version__ import __version__

# Global logger instance
logger = None


def setup_logging(debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """Setup logging to both console and file

    Args:
        debug: Enable debug level logging
        log_file: Path to log file (default: ~/.autopaste.log)
    """
    global logger

    if logger is not None:
        return logger

    # Package-level logger so every autopaste.* module inherits the handlers
    logger = logging.getLogger('autopaste')
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    # Default log file location
    if log_file is None:
        log_file = os.path.expanduser('~/.autopaste.log')

    # Format for logs
    fmt = logging.Formatter(
        '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File handler (rotate log file when it gets too large)
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5  # Keep 5 old log files
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

    # Console handler (only warnings in production, all in debug)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(fmt)
    logger.addHandler(console_handler)

    return logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='autopaste',
        description='Paste text into the focused application and restore the clipboard',
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug mode with verbose logging'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to config file'
    )
    parser.add_argument(
        '--logfile',
        type=str,
        default=None,
        help='Path to log file (default: ~/.autopaste.log)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version='%(prog)s ' + __version__
    )

    sub = parser.add_subparsers(dest='command')
    check = sub.add_parser('check', help='Show available paste tools')
    check.add_argument('--json', action='store_true', help='Print machine-readable JSON')
    paste = sub.add_parser('paste', help='Paste text into the focused window')
    paste.add_argument('text', nargs='?', default=None, help='Text to paste (default: read stdin)')

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = 'check'
        args.json = False
    return args


def _print_status(status: dict) -> None:
    mark = '✓' if status['available'] else '✗'
    print(f"Platform: {status['platform']}")
    if 'is_wayland' in status:
        server = 'Wayland' if status['is_wayland'] else 'X11'
        bridge = ' (XWayland available)' if status.get('xwayland_available') else ''
        print(f"Display server: {server}{bridge}")
    print(f"{mark} Automatic paste: {status['method'] or 'unavailable'}")
    if status.get('tools'):
        print(f"  Tools: {', '.join(status['tools'])}")
    if status.get('requires_permission'):
        print("  Requires Accessibility permission")
    if status.get('recommended_install'):
        print(f"  Install: {status['recommended_install']}")


async def _run(args: argparse.Namespace, config: dict, log: logging.Logger) -> int:
    from autopaste.core.errors import PasteError
    from autopaste.manager import PasteManager

    manager = PasteManager(config=config)

    if args.command == 'check':
        status = (await manager.check_paste_tools()).to_dict()
        if args.json:
            print(json.dumps(status, indent=2))
        else:
            _print_status(status)
        return 0

    text = args.text if args.text is not None else sys.stdin.read()
    if not text:
        log.error("Nothing to paste")
        return 1

    try:
        result = await manager.paste_text(text)
    except PasteError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        # Keep the process alive until the original clipboard is back
        await manager.wait_for_restore()
        if manager.remediation is not None:
            await manager.remediation.wait_idle()

    log.info("Pasted %d chars via %s", result.text_length, result.mechanism_id)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for AutoPaste"""
    args = parse_args(argv)

    from autopaste.config import load_config

    # Config first: its 'debug' key decides the log level too
    config = load_config(args.config)
    if args.debug:
        config['debug'] = True

    log = setup_logging(debug=config['debug'], log_file=args.logfile)
    log.debug("AutoPaste %s (pid %d): %s", __version__, os.getpid(), args.command)
    log.debug("Config loaded from: %s", args.config or 'default')

    try:
        return asyncio.run(_run(args, config, log))
    except KeyboardInterrupt:
        log.info("Interrupted by user (Ctrl+C)")
        return 130
    except Exception as e:
        log.error(f"❌ Unhandled error: {e}")
        log.debug(traceback.format_exc())
        return 1


if __name__ == '__main__':
    sys.exit(main())
