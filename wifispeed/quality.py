"""
quality.py
----------
Signal quality helpers for wifispeed.

Features:
- Classifies a signal percentage into a quality tier (Excellent .. Very Poor).
- Converts between signal power (dBm) and percent.
- Renders nmcli-style signal bars and picks a table color per tier.

The dBm/percent conversions are rough linear approximations used for display,
not a physical model of received power. They are intentionally not inverse to
each other.

Author: wifispeed contributors
18 October 2026
"""
from enum import Enum

from colorama import Fore

# dBm at or above which a signal counts as 100%
DBM_FULL = -30
# dBm at or below which a signal counts as 0%
DBM_FLOOR = -100

BAR_CHARS = "▂▄▆█"
BAR_EMPTY = "_"


class QualityTier(Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    VERY_POOR = "Very Poor"

    def __str__(self):
        return self.value


# (minimum percent, tier), strongest first
TIER_THRESHOLDS = (
    (80, QualityTier.EXCELLENT),
    (60, QualityTier.GOOD),
    (40, QualityTier.FAIR),
    (20, QualityTier.POOR),
)

TIER_COLORS = {
    QualityTier.EXCELLENT: Fore.GREEN,
    QualityTier.GOOD: Fore.LIGHTGREEN_EX,
    QualityTier.FAIR: Fore.YELLOW,
    QualityTier.POOR: Fore.LIGHTRED_EX,
    QualityTier.VERY_POOR: Fore.RED,
}


def clamp_percent(value):
    """
    Clamp a signal percentage to the range 0-100.
    Args:
        value (int): Raw percentage.
    Returns:
        int: Percentage between 0 and 100.
    """
    return max(0, min(100, int(value)))


def classify(percent):
    """
    Map a signal percentage to a quality tier.
    Values outside 0-100 are clamped first.
    Args:
        percent (int): Signal percentage.
    Returns:
        QualityTier: Tier for the percentage.
    """
    percent = clamp_percent(percent)
    for minimum, tier in TIER_THRESHOLDS:
        if percent >= minimum:
            return tier
    return QualityTier.VERY_POOR


def dbm_to_percent(dbm):
    """
    Convert signal power in dBm to an approximate percentage.
    -30 dBm (or stronger) is 100%, -100 dBm (or weaker) is 0%, linear in between.
    Args:
        dbm (int or float): Signal power in dBm.
    Returns:
        int: Percentage between 0 and 100.
    """
    percent = round(100 - (dbm - DBM_FULL) / (DBM_FLOOR - DBM_FULL) * 100)
    return clamp_percent(percent)


def percent_to_dbm(percent):
    """
    Convert a signal percentage to an approximate dBm value.
    0% maps to -100 dBm and 100% to -40 dBm.
    Args:
        percent (int): Signal percentage.
    Returns:
        int: Signal power in dBm.
    """
    return DBM_FLOOR + clamp_percent(percent) * 60 // 100


def percent_to_bars(percent):
    """
    Render a four-step signal bar string, using the same cut-offs as nmcli.
    """
    percent = clamp_percent(percent)
    if percent > 80:
        filled = 4
    elif percent > 55:
        filled = 3
    elif percent > 30:
        filled = 2
    elif percent > 5:
        filled = 1
    else:
        filled = 0
    return BAR_CHARS[:filled] + BAR_EMPTY * (4 - filled)


def tier_color(tier):
    """Colorama color for a quality tier."""
    return TIER_COLORS.get(tier, Fore.WHITE)
