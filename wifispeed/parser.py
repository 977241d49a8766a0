"""
parser.py
---------
Parse raw scan records into NetworkEntry objects.

Features:
- NetworkEntry dataclass shared by every scan provider.
- Verbose nmcli table lines (IN-USE, BSSID, SSID, MODE, CHAN, RATE, SIGNAL, BARS, SECURITY).
- Terse nmcli lines (SSID:SIGNAL:BARS, colons inside the SSID escaped as \\:).
- Hidden network detection from names that look like hardware addresses.
- Parallel parsing of many lines, keeping input order.

A line that cannot be parsed returns None and is dropped by the caller.

Author: wifispeed contributors
18 October 2026
"""
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .quality import (
    QualityTier,
    classify,
    clamp_percent,
    dbm_to_percent,
    percent_to_bars,
    percent_to_dbm,
)

logger = logging.getLogger(__name__)

HIDDEN_LABEL = "[Hidden Network]"
# nmcli prints this in place of an empty SSID
NMCLI_EMPTY = "--"
IN_USE_MARKER = "*"
MODE_KEYWORDS = ("Infra", "Ad-Hoc", "Mesh")
# Verbose layout: BSSID + at least one SSID token + MODE CHAN RATE SIGNAL BARS (SECURITY optional)
MIN_VERBOSE_FIELDS = 7
# MODE, CHAN, RATE, SIGNAL, BARS, SECURITY
TRAILING_FIELDS = 6
TERSE_FIELDS = 3

_HEX12 = re.compile(r"^[0-9A-Fa-f]{12}$")


@dataclass
class NetworkEntry:
    identifier: str
    signal_percent: int
    signal_dbm: int
    quality: QualityTier
    is_hidden: bool = False
    hardware_address: Optional[str] = None
    in_use: bool = False
    bars: str = ""
    mode: str = ""
    channel: str = ""
    rate: str = ""
    security: str = ""

    @property
    def display_name(self):
        return HIDDEN_LABEL if self.is_hidden else self.identifier

    @property
    def display_address(self):
        if self.hardware_address:
            return self.hardware_address
        if self.is_hidden and self.identifier != HIDDEN_LABEL:
            # the library source only gives us the MAC-like name
            return self.identifier
        return "N/A"


def is_likely_hardware_address(name):
    """
    Guess whether a network name is really a hardware address.

    True when the name contains a colon or is exactly 12 hexadecimal characters.
    This is a heuristic: a real SSID made of 12 hex characters is reported as
    hidden too.
    Args:
        name (str): Network name as reported by the scanner.
    Returns:
        bool: True if the name looks like a MAC address.
    """
    if not name:
        return False
    return ":" in name or bool(_HEX12.match(name))


def make_entry(identifier, percent, is_hidden=False, dbm=None, **extra_fields):
    """
    Build a NetworkEntry from a percentage, deriving dBm (when missing) and quality.
    Empty identifiers are replaced by the hidden label.
    """
    percent = clamp_percent(percent)
    if not identifier:
        identifier = HIDDEN_LABEL
        is_hidden = True
    if dbm is None:
        dbm = percent_to_dbm(percent)
    if not extra_fields.get("bars"):
        extra_fields["bars"] = percent_to_bars(percent)
    return NetworkEntry(
        identifier=identifier,
        signal_percent=percent,
        signal_dbm=int(dbm),
        quality=classify(percent),
        is_hidden=is_hidden,
        **extra_fields,
    )


def entry_from_record(name, signal_dbm):
    """
    Convert a scanning library record (name + signal power) into a NetworkEntry.
    Names that look like hardware addresses are kept as identifier but flagged hidden.
    Args:
        name (str): SSID reported by the library (may be empty).
        signal_dbm (int or float): Signal power in dBm.
    Returns:
        NetworkEntry: Normalized entry, without hardware address.
    """
    name = (name or "").strip()
    dbm = int(round(float(signal_dbm)))
    hidden = not name or is_likely_hardware_address(name)
    return make_entry(name, dbm_to_percent(dbm), is_hidden=hidden, dbm=dbm)


def _split_trailing(fields, mode_idx):
    """
    Split the fields that follow the mode keyword into channel, rate, signal, bars, security.
    Returns None when the line is too short.
    """
    idx = mode_idx + 1
    if len(fields) < idx + 4:
        return None
    channel = fields[idx]
    rate = fields[idx + 1]
    idx += 2
    # RATE is printed as "270 Mbit/s" by newer nmcli versions
    if fields[idx].endswith("/s"):
        rate = f"{rate} {fields[idx]}"
        idx += 1
    if len(fields) < idx + 2:
        return None
    return channel, rate, fields[idx], fields[idx + 1], " ".join(fields[idx + 2:])


def parse_network_line(line):
    """
    Parse one row of verbose 'nmcli device wifi list' output.

    Layout: [*] BSSID SSID... MODE CHAN RATE SIGNAL BARS SECURITY
    The SSID may contain spaces; it ends at the first mode keyword (Infra, ...)
    that is followed by a numeric channel.
    Without a mode keyword the last six fields are taken as the fixed columns.
    Args:
        line (str): Raw output line.
    Returns:
        NetworkEntry or None: Parsed entry, or None if the line should be skipped.
    """
    fields = line.split()
    if len(fields) < MIN_VERBOSE_FIELDS:
        return None

    in_use = False
    start = 0
    if fields[0] == IN_USE_MARKER:
        in_use = True
        start = 1
    bssid = fields[start]

    mode_idx = None
    for i in range(start + 2, len(fields) - 1):
        # a mode word inside the SSID is not followed by a channel number
        if fields[i] in MODE_KEYWORDS and fields[i + 1].isdigit():
            mode_idx = i
            break

    if mode_idx is not None:
        ssid = " ".join(fields[start + 1:mode_idx])
        mode = fields[mode_idx]
        trailing = _split_trailing(fields, mode_idx)
        if trailing is None:
            return None
        channel, rate, signal_str, bars, security = trailing
    else:
        ssid_end = len(fields) - TRAILING_FIELDS
        if ssid_end < start + 1:
            return None
        ssid = " ".join(fields[start + 1:ssid_end])
        mode, channel, rate, signal_str, bars, security = fields[ssid_end:]

    try:
        signal = int(signal_str)
    except ValueError:
        return None

    hidden = ssid in ("", NMCLI_EMPTY)
    return make_entry(
        HIDDEN_LABEL if hidden else ssid,
        signal,
        is_hidden=hidden,
        hardware_address=bssid,
        in_use=in_use,
        bars=bars,
        mode=mode,
        channel=channel,
        rate=rate,
        security=security or NMCLI_EMPTY,
    )


def split_terse(line):
    """
    Split an 'nmcli -t' line on unescaped colons and unescape the fields.
    """
    fields = []
    current = []
    chars = iter(line.rstrip("\r\n"))
    for char in chars:
        if char == "\\":
            # backslash escapes the next character (":" or "\\")
            current.append(next(chars, "\\"))
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def parse_terse_line(line):
    """
    Parse one line of 'nmcli -t -f SSID,SIGNAL,BARS device wifi list' output.
    Args:
        line (str): Raw output line, e.g. "MyNet:80:▂▄▆█".
    Returns:
        NetworkEntry or None: Parsed entry, or None if the line should be skipped.
    """
    fields = split_terse(line)
    if len(fields) != TERSE_FIELDS:
        return None
    ssid, signal_str, bars = fields
    try:
        signal = int(signal_str.strip())
    except ValueError:
        return None
    ssid = ssid.strip()
    hidden = ssid in ("", NMCLI_EMPTY)
    return make_entry(
        HIDDEN_LABEL if hidden else ssid,
        signal,
        is_hidden=hidden,
        bars=bars.strip(),
    )


def parse_lines(
    lines: Iterable[str],
    parse: Callable[[str], Optional[NetworkEntry]] = parse_network_line,
    workers: Optional[int] = None,
) -> List[NetworkEntry]:
    """
    Parse many lines in parallel and return the entries in input order.
    Blank and unparseable lines are dropped.
    Args:
        lines: Raw output lines (header already removed).
        parse: Single-line parser.
        workers: Thread pool size (None lets the executor decide).
    Returns:
        List[NetworkEntry]: Parsed entries.
    """
    lines = [line for line in lines if line.strip()]
    if not lines:
        return []
    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(parse, lines))
    entries = []
    for line, entry in zip(lines, results):
        if entry is None:
            logger.debug("Skipping unparseable line: %r", line)
            continue
        entries.append(entry)
    return entries
