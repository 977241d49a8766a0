"""
wifispeed
---------
WiFi signal survey and internet speed test from the command line.

Author: wifispeed contributors
18 October 2026
"""
__version__ = "0.1.0"
__author__ = "wifispeed contributors"
