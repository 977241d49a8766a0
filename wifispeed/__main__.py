# __main__.py
# ------------
# Entry point for wifispeed when run with 'python -m wifispeed'.
# Imports and runs the main CLI logic from cli.py.
#
# Author: wifispeed contributors
# 18 October 2026
from wifispeed import __version__
from .cli import main

print(f"wifispeed {__version__}")
print()


if __name__ == "__main__":
    main()
