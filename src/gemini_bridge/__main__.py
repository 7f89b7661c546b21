"""Entry point for `python -m gemini_bridge`."""

import sys


def main():
    from gemini_bridge.app import run
    sys.exit(run())


if __name__ == "__main__":
    main()
