"""Package entry point for ``python -m recitation_checker``.

WHY: Users run a check as ``python -m recitation_checker --surah 1
--transcript ...``, or start the HTTP API with
``python -m recitation_checker --serve``.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
API server. Otherwise, delegates to the CLI's main() function.
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from recitation_checker.server.app import run_api
        run_api()
    else:
        from recitation_checker.cli import main
        main()
