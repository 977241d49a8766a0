"""
cli.py
-----
Command-line interface for wifispeed.

Features:
- scan: Scan for WiFi networks (root required) and display results in a colorized table.
- speedtest: Measure download/upload speed and latency.
- Uses argparse for flexible command parsing and help output.

Author: wifispeed contributors
18 October 2026
"""
import argparse
import logging
import os
import sys

from colorama import Fore, Style

from . import __version__
from .errors import PermissionDenied, UpstreamServiceError
from .providers import DEFAULT_PROVIDERS, DEFAULT_TIMEOUT, PROVIDERS, build_providers
from .scan import scan
from .speed import speed_test

logger = logging.getLogger(__name__)


def is_elevated():
    """True when running as root. Always False where there is no effective uid."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def require_root():
    if not is_elevated():
        raise PermissionDenied("WiFi scanning requires root privileges.")


def provider_list(value):
    names = [name.strip() for name in value.split(",") if name.strip()]
    unknown = [name for name in names if name not in PROVIDERS]
    if not names or unknown:
        raise argparse.ArgumentTypeError(
            f"invalid provider list '{value}' (choose from {', '.join(PROVIDERS)})"
        )
    return names


def build_parser():
    parser = argparse.ArgumentParser(
        prog="wifispeed",
        description="wifispeed: WiFi signal survey and internet speed test",
        usage="wifispeed [--debug] {scan,speedtest} [options]",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="Scan for WiFi networks (requires sudo)")
    scan_parser.add_argument(
        "--timeout", type=int, default=DEFAULT_TIMEOUT, help="Timeout in seconds for each scanning method"
    )
    scan_parser.add_argument(
        "--providers",
        type=provider_list,
        default=list(DEFAULT_PROVIDERS),
        help=f"Comma separated scanning methods, tried in order (default: {','.join(DEFAULT_PROVIDERS)})",
    )
    scan_parser.add_argument(
        "--terse", action="store_true", help="Use nmcli terse output (SSID, signal and bars only)"
    )

    speed_parser = subparsers.add_parser("speedtest", help="Test internet speed")
    speed_parser.add_argument("--server", type=int, default=None, help="speedtest.net server id to use")
    speed_parser.add_argument("--secure", action="store_true", help="Use HTTPS for speedtest.net")
    return parser


def setup_logging(debug=False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    setup_logging(args.debug)

    if args.command == "scan":
        try:
            require_root()
        except PermissionDenied as e:
            print(f"{Fore.RED}❌ Error: {e}{Style.RESET_ALL}")
            print("Please run the command with sudo: sudo wifispeed scan")
            return
        providers = build_providers(args.providers, timeout=args.timeout, terse=args.terse)
        scan(providers)
    elif args.command == "speedtest":
        try:
            speed_test(server_id=args.server, secure=args.secure)
        except UpstreamServiceError as e:
            logger.debug("Speed test failed", exc_info=True)
            print(f"{Fore.RED}{e}{Style.RESET_ALL}")
            sys.exit(1)


if __name__ == "__main__":
    main()
