"""Package entry point for ``python -m caption_studio``.

WHY: Users run the captioner as ``python -m caption_studio input.mp4``
for CLI mode, or ``python -m caption_studio --serve`` for the HTTP API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from caption_studio.server.app import run_api
        run_api()
    else:
        from caption_studio.cli import main
        main()
