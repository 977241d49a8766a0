"""
providers.py
------------
Scan providers: each one knows how to get a list of NetworkEntry objects from
one source.

Features:
- NmcliProvider: runs NetworkManager's nmcli and parses its table output.
- PyWiFiProvider: asks the pywifi library for scan results.
- Provider registry and builder used by the scan command (--providers).

A provider either returns a list of entries or raises a ScanFailed subclass.

Author: wifispeed contributors
18 October 2026
"""
import logging
import shutil
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from typing import List

import pywifi

from .errors import ScanFailed, ToolExecutionFailed, ToolUnavailable
from .parser import (
    NetworkEntry,
    entry_from_record,
    parse_lines,
    parse_network_line,
    parse_terse_line,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
# seconds pywifi needs between triggering a scan and reading the results
DEFAULT_SCAN_WAIT = 3

NMCLI_VERBOSE_FIELDS = "IN-USE,BSSID,SSID,MODE,CHAN,RATE,SIGNAL,BARS,SECURITY"
NMCLI_TERSE_FIELDS = "SSID,SIGNAL,BARS"


class ScanProvider(ABC):
    name = "provider"

    @abstractmethod
    def scan(self) -> List[NetworkEntry]:
        pass


def unique_entries(entries):
    """
    Drop entries whose identifier was already seen, keeping the first one.
    """
    seen = set()
    unique = []
    for entry in entries:
        if entry.identifier in seen:
            continue
        seen.add(entry.identifier)
        unique.append(entry)
    return unique


class NmcliProvider(ScanProvider):
    """
    Scan with 'nmcli device wifi list'.

    The verbose layout (default) has a header row and carries BSSID, in-use
    marker, mode, channel, rate and security. The terse layout (terse=True)
    only has SSID, SIGNAL and BARS and no header.
    """

    name = "nmcli"

    def __init__(self, timeout=DEFAULT_TIMEOUT, terse=False, command="nmcli", rescan=True):
        self.timeout = timeout
        self.terse = terse
        self.command = command
        self.rescan = rescan

    def build_command(self, executable):
        if self.terse:
            cmd = [executable, "-t", "-f", NMCLI_TERSE_FIELDS, "device", "wifi", "list"]
        else:
            cmd = [executable, "-c", "no", "-f", NMCLI_VERBOSE_FIELDS, "device", "wifi", "list"]
        if self.rescan:
            cmd += ["--rescan", "yes"]
        return cmd

    def run(self):
        """
        Run nmcli and return its combined stdout/stderr.
        Raises:
            ToolUnavailable: nmcli is not installed.
            ToolExecutionFailed: nmcli timed out, could not start or exited non-zero.
        """
        executable = shutil.which(self.command)
        if executable is None:
            raise ToolUnavailable(f"{self.command} not found", provider=self.name)

        cmd = self.build_command(executable)
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolExecutionFailed(
                f"{self.command} timed out after {self.timeout}s", provider=self.name
            ) from e
        except (subprocess.SubprocessError, OSError) as e:
            raise ToolExecutionFailed(
                f"{self.command} could not be run: {e}", provider=self.name
            ) from e

        output = result.stdout or ""
        if result.returncode != 0:
            raise ToolExecutionFailed(
                f"{self.command} failed (exit status {result.returncode})\n{output.strip()}",
                provider=self.name,
                output=output,
            )
        return output

    def scan(self) -> List[NetworkEntry]:
        output = self.run()
        if not output.strip():
            raise ToolExecutionFailed(f"no output from {self.command} command", provider=self.name)

        lines = output.splitlines()
        if not self.terse:
            # first line is the column header
            lines = lines[1:]
        lines = [line for line in lines if line.strip()]
        if not lines:
            raise ToolExecutionFailed(
                f"no networks found in {self.command} output", provider=self.name, output=output
            )

        parse = parse_terse_line if self.terse else parse_network_line
        entries = parse_lines(lines, parse)
        logger.debug("%s: parsed %d of %d lines", self.name, len(entries), len(lines))
        if not entries:
            raise ToolExecutionFailed(
                f"could not parse any network from {self.command} output",
                provider=self.name,
                output=output,
            )
        return entries


class PyWiFiProvider(ScanProvider):
    """
    Scan with the pywifi library on the first wireless interface.

    pywifi does not report a separate hidden flag, so names that look like a
    hardware address are treated as hidden networks.
    """

    name = "pywifi"

    def __init__(self, timeout=DEFAULT_TIMEOUT, scan_wait=DEFAULT_SCAN_WAIT):
        self.timeout = timeout
        self.scan_wait = scan_wait

    def _scan_records(self):
        wifi = pywifi.PyWiFi()
        interfaces = wifi.interfaces()
        if not interfaces:
            raise ToolUnavailable("no wireless interface found", provider=self.name)
        iface = interfaces[0]
        logger.debug("Scanning on interface %s", iface.name())
        iface.scan()
        time.sleep(self.scan_wait)
        return iface.scan_results()

    def scan(self) -> List[NetworkEntry]:
        outcome = {}

        def run():
            try:
                outcome["records"] = self._scan_records()
            except Exception as e:
                outcome["error"] = e

        # daemon so a hung library call cannot keep the process alive
        worker = threading.Thread(target=run, name="pywifi-scan", daemon=True)
        worker.start()
        worker.join(self.timeout)
        if worker.is_alive():
            raise ToolExecutionFailed(
                f"pywifi scan timed out after {self.timeout}s", provider=self.name
            )
        error = outcome.get("error")
        if isinstance(error, ScanFailed):
            raise error
        if error is not None:
            raise ToolExecutionFailed(f"pywifi scan failed: {error}", provider=self.name) from error
        records = outcome.get("records")

        entries = []
        for record in records or []:
            try:
                entries.append(entry_from_record(record.ssid, record.signal))
            except (AttributeError, TypeError, ValueError) as e:
                logger.debug("Skipping pywifi record %r: %s", record, e)
        return unique_entries(entries)


PROVIDERS = {
    NmcliProvider.name: NmcliProvider,
    PyWiFiProvider.name: PyWiFiProvider,
}

DEFAULT_PROVIDERS = (NmcliProvider.name, PyWiFiProvider.name)


def build_providers(names=DEFAULT_PROVIDERS, timeout=DEFAULT_TIMEOUT, terse=False):
    """
    Instantiate providers by name, in the given order.
    Args:
        names (Iterable[str]): Provider names, tried first to last.
        timeout (int): Per-provider timeout in seconds.
        terse (bool): Use the terse nmcli layout.
    Returns:
        List[ScanProvider]: Providers ready to scan.
    Raises:
        ValueError: Unknown provider name.
    """
    providers = []
    for name in names:
        if name not in PROVIDERS:
            raise ValueError(f"Unknown scan provider: {name} (choose from {', '.join(PROVIDERS)})")
        if name == NmcliProvider.name:
            providers.append(NmcliProvider(timeout=timeout, terse=terse))
        else:
            providers.append(PROVIDERS[name](timeout=timeout))
    return providers
