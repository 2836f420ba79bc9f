"""
Entry point for running the llogger demo as a module: `python -m llogger`

Runs a few concurrent spinners with log lines interleaved, which is the
quickest way to see the multiplexer at work in a real terminal. Pipe the
output (`python -m llogger | cat`) to see the non-interactive fallback.
"""

from .main import main

if __name__ == "__main__":
    main()
