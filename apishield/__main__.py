"""Main entry point when executing apishield as a package.

This allows running the package using python -m apishield.
"""

from apishield.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
