"""
speed.py
--------
Internet speed test using the speedtest-cli library.

Features:
- Picks the best (lowest latency) nearby server, or a fixed server id.
- Measures download, upload and ping.
- Prints a summary with a plain-language connection quality assessment.

Author: wifispeed contributors
18 October 2026
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import speedtest
from colorama import Fore, Style

from .errors import UpstreamServiceError

logger = logging.getLogger(__name__)

# speedtest-cli reports throughput in bits per second
BITS_PER_MEGABIT = 1_000_000
# anything above 10 Gbps from a consumer link means the units are off
MAX_PLAUSIBLE_MBPS = 10_000

# (minimum Mbps, label)
DOWNLOAD_LEVELS = (
    (100, "Excellent (4K streaming, large downloads)"),
    (25, "Good (HD streaming, video calls)"),
    (5, "Fair (SD streaming, web browsing)"),
)
DOWNLOAD_FLOOR = "Poor (basic web browsing)"

UPLOAD_LEVELS = (
    (20, "Excellent (video uploads, live streaming)"),
    (5, "Good (video calls, file uploads)"),
    (1, "Fair (photo uploads, email)"),
)
UPLOAD_FLOOR = "Poor (basic web tasks)"

# (latency below ms, label)
LATENCY_LEVELS = (
    (20, "Excellent (competitive gaming)"),
    (50, "Good (online gaming, video calls)"),
    (100, "Fair (web browsing, streaming)"),
)
LATENCY_FLOOR = "Poor (may experience lag)"


@dataclass
class SpeedResult:
    server_name: str
    country: str
    sponsor: str
    distance_km: float
    download_mbps: float
    upload_mbps: float
    latency_ms: float


def bits_to_mbps(bits_per_second):
    """
    Convert bits per second (speedtest-cli's unit) to megabits per second.
    Implausibly high results are logged, not rescaled.
    """
    mbps = float(bits_per_second or 0) / BITS_PER_MEGABIT
    if mbps > MAX_PLAUSIBLE_MBPS:
        logger.warning(
            "Measured %.2f Mbps is above %d Mbps; check the speedtest library's units",
            mbps,
            MAX_PLAUSIBLE_MBPS,
        )
    return mbps


def _step(description, func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except (speedtest.SpeedtestException, OSError) as e:
        logger.debug("Speed test step failed: %s", description, exc_info=True)
        raise UpstreamServiceError(description, e) from e


def run_speedtest(server_id=None, secure=False):
    """
    Run a full speed test.
    Args:
        server_id (int): Test against this server id instead of the best one.
        secure (bool): Use HTTPS to talk to speedtest.net.
    Returns:
        SpeedResult: Server details and measured values.
    Raises:
        UpstreamServiceError: A step (config, servers, download, upload) failed.
    """
    tester = _step("fetching user info", speedtest.Speedtest, secure=secure)
    servers = [server_id] if server_id is not None else []
    _step("fetching servers", tester.get_servers, servers)
    server = _step("selecting a server", tester.get_best_server)
    if not server:
        raise UpstreamServiceError("selecting a server", "no servers available for testing")

    print(f"Selected Server: {server.get('name', 'Unknown')} ({server.get('country', 'Unknown')})")
    print(f"Server Sponsor: {server.get('sponsor', 'Unknown')}")
    print(f"Distance: {float(server.get('d', 0.0)):.2f} km")
    print(f"\n{Fore.YELLOW}Running tests...{Style.RESET_ALL}")

    download = _step("during download test", tester.download)
    upload = _step("during upload test", tester.upload)

    return SpeedResult(
        server_name=server.get("name", "Unknown"),
        country=server.get("country", "Unknown"),
        sponsor=server.get("sponsor", "Unknown"),
        distance_km=float(server.get("d", 0.0)),
        download_mbps=bits_to_mbps(download),
        upload_mbps=bits_to_mbps(upload),
        latency_ms=float(tester.results.ping),
    )


def _at_least(value, levels, floor):
    for minimum, label in levels:
        if value >= minimum:
            return label
    return floor


def _below(value, levels, floor):
    for limit, label in levels:
        if value < limit:
            return label
    return floor


def assess_connection(download_mbps, upload_mbps, latency_ms) -> List[Tuple[str, str]]:
    """
    Rate a connection for everyday use.
    Returns:
        List[Tuple[str, str]]: (aspect, label) for download, upload and latency.
    """
    return [
        ("Download", _at_least(download_mbps, DOWNLOAD_LEVELS, DOWNLOAD_FLOOR)),
        ("Upload", _at_least(upload_mbps, UPLOAD_LEVELS, UPLOAD_FLOOR)),
        ("Latency", _below(latency_ms, LATENCY_LEVELS, LATENCY_FLOOR)),
    ]


def print_speed_report(result):
    print(f"\n{Fore.GREEN}Download Speed: {result.download_mbps:.2f} Mbps{Style.RESET_ALL}")
    print(f"{Fore.GREEN}Upload Speed: {result.upload_mbps:.2f} Mbps{Style.RESET_ALL}")
    print(f"{Fore.GREEN}Ping (Latency): {result.latency_ms:.2f} ms{Style.RESET_ALL}")

    print(f"\n{Fore.CYAN}Connection Quality Assessment:{Style.RESET_ALL}")
    print("-----------------------------")
    for aspect, label in assess_connection(result.download_mbps, result.upload_mbps, result.latency_ms):
        print(f"{aspect}: {label}")


def speed_test(server_id: Optional[int] = None, secure=False):
    """
    Run the speed test and print the report.
    Raises:
        UpstreamServiceError: Propagated from run_speedtest.
    """
    print(f"{Fore.YELLOW}Testing network speed...{Style.RESET_ALL}")
    result = run_speedtest(server_id=server_id, secure=secure)
    print_speed_report(result)
    return result
