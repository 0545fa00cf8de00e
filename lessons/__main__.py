import sys

from lessons.cli import configure_logging, main

if __name__ == "__main__":
    configure_logging()
    sys.exit(main(prog="python -m lessons"))
