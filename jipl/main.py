"""Runs .jipl files or the interactive shell. Also uses error handling context manager. Called from the jipl executable
script.
"""

import argparse
import logging
import sys

from jipl.lang.error import ErrorHandler
from jipl.lang.session import Session
from jipl.lang.shell import Shell
from jipl.runtime.context import RunContext


def main():
    """Runs JIPL interpreter. Called from jipl executable script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="jipl")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--debug", help="print debug logs to stderr", action="store_true")
        parser.add_argument("--seed", help="seed for random and randomBetween", type=int, default=None)
        args = parser.parse_args()

        if args.debug:
            logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s")

        context = RunContext(seed=args.seed)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, context=context)
            if not sess.run():
                sys.exit(1)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, context=context)).cmdloop()


if __name__ == "__main__":
    main()
