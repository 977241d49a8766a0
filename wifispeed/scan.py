#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
WiFi scanning and reporting functions for the wifispeed CLI tool.

Features:
- Tries each scan provider in order (nmcli first, pywifi as fallback by default).
- Merges results: duplicate SSIDs collapse to the first one seen, strongest signal first.
- Colorized fixed-width table output using colorama.
- Troubleshooting hints when no provider could scan.

Author: wifispeed contributors
18 October 2026
"""
import logging

from colorama import Fore, Style, init

from .errors import AllSourcesExhausted, ScanFailed
from .providers import DEFAULT_PROVIDERS, DEFAULT_TIMEOUT, build_providers, unique_entries
from .quality import tier_color

init(autoreset=True)

logger = logging.getLogger(__name__)

NO_NETWORKS_MESSAGE = "No WiFi networks found. Make sure your WiFi adapter is enabled."

# (header, width)
TABLE_COLUMNS = (
    ("SSID", 30),
    ("MAC Address", 20),
    ("Signal Strength", 20),
    ("Quality", 15),
)
TABLE_RULE = "-" * 73


def scan_networks(providers):
    """
    Return the entries of the first provider that succeeds.
    Args:
        providers (List[ScanProvider]): Providers in the order to try them.
    Returns:
        List[NetworkEntry]: Entries from the successful provider (may be empty).
    Raises:
        AllSourcesExhausted: Every provider failed.
    """
    failures = []
    for i, provider in enumerate(providers):
        try:
            entries = provider.scan()
        except ScanFailed as e:
            logger.debug("Provider %s failed", provider.name, exc_info=True)
            failures.append((provider.name, e))
            print(f"{Fore.RED}Error with {provider.name} scanning method: {e}{Style.RESET_ALL}")
            if i < len(providers) - 1:
                print(f"{Fore.YELLOW}Trying alternative scanning method...{Style.RESET_ALL}")
            continue
        logger.debug("Provider %s returned %d networks", provider.name, len(entries))
        return entries
    raise AllSourcesExhausted(failures)


def reconcile(entries):
    """
    De-duplicate entries by identifier (first seen wins) and sort by signal,
    strongest first. Entries with equal signal keep their discovery order.
    """
    return sorted(unique_entries(entries), key=lambda e: e.signal_percent, reverse=True)


def format_row(values):
    return " ".join(f"{value:<{width}}" for value, (_, width) in zip(values, TABLE_COLUMNS))


def print_table(entries):
    """
    Print a colorized table of WiFi networks.
    Args:
        entries (List[NetworkEntry]): Networks to print, already sorted.
    """
    if not entries:
        print(f"{Fore.RED}{NO_NETWORKS_MESSAGE}{Style.RESET_ALL}")
        return

    print("Available Wi-Fi Networks:")
    print("-------------------------")
    print(f"{Fore.CYAN}{format_row([name for name, _ in TABLE_COLUMNS])}{Style.RESET_ALL}")
    print(TABLE_RULE)
    for entry in entries:
        signal = f"{entry.signal_percent}% ({entry.signal_dbm} dBm)"
        quality = f"{entry.bars} ({entry.quality})"
        name = entry.display_name
        if entry.in_use:
            name = f"* {name}"
        row = format_row([name, entry.display_address, signal, quality])
        color = Fore.GREEN if entry.in_use else tier_color(entry.quality)
        print(f"{color}{row.rstrip()}{Style.RESET_ALL}")


def print_troubleshooting(error):
    """
    Print every provider failure followed by possible causes and fixes.
    """
    print(f"{Fore.RED}Unable to scan for WiFi networks: {error}{Style.RESET_ALL}")
    for name, failure in error.failures:
        print(f"{Fore.RED}- {name}: {failure}{Style.RESET_ALL}")
    print("\nPossible causes:")
    print("- WiFi adapter might be disabled")
    print("- Required dependencies might be missing (try: sudo apt install network-manager)")
    print("- Permission issues with network interfaces")
    print("\nTroubleshooting:")
    print("1. Ensure WiFi is enabled: rfkill unblock wifi")
    print("2. Check if NetworkManager is running: systemctl status NetworkManager")
    print("3. Check available WiFi adapters: ip link show")


def scan(providers=None, timeout=DEFAULT_TIMEOUT, terse=False):
    """
    Scan for WiFi networks and print them as a table.
    Args:
        providers (List[ScanProvider]): Providers to try, defaults to nmcli then pywifi.
        timeout (int): Per-provider timeout in seconds (used for default providers).
        terse (bool): Use the terse nmcli layout (used for default providers).
    Returns:
        List[NetworkEntry]: Networks shown, or an empty list if every provider failed.
    """
    print(f"{Fore.YELLOW}Scanning for WiFi networks...{Style.RESET_ALL}")
    if providers is None:
        providers = build_providers(DEFAULT_PROVIDERS, timeout=timeout, terse=terse)
    try:
        entries = scan_networks(providers)
    except AllSourcesExhausted as e:
        print_troubleshooting(e)
        return []
    networks = reconcile(entries)
    if networks:
        print(f"{Fore.GREEN}Found {len(networks)} networks.{Style.RESET_ALL}")
    print()
    print_table(networks)
    return networks
