"""Package entry point for ``python -m irclog_converter``."""

from irclog_converter.cli import main

if __name__ == "__main__":
    main()
