# mindmap_canvas/main.py
import argparse
import logging
import sys
from .cli import build_session, main_cli
from .interactive_cli import interactive_session

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    # No command, or only -i/-f/--svg/-v options: interactive mode
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("-i", "--interactive", action="store_true")
    pre.add_argument("-f", "--file")
    pre.add_argument("--svg")
    pre.add_argument("-v", "--verbose", action="store_true")
    known, rest = pre.parse_known_args(argv)

    if known.interactive or not rest:
        if known.verbose:
            logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
        interactive_session(build_session(known.file, known.svg))
        return
    main_cli(argv)

if __name__ == "__main__":
    main()
