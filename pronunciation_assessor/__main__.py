"""Package entry point for ``python -m pronunciation_assessor``.

WHY: Users run the HTTP API with ``python -m pronunciation_assessor
--serve`` and assess a single file with ``python -m
pronunciation_assessor recording.wav --reference "..."``.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().

RULES:
- ``--serve`` starts the API server (host/port from ASSESSOR_HOST/ASSESSOR_PORT)
- Without ``--serve``, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from pronunciation_assessor.server.app import run_api
        run_api()
    else:
        from pronunciation_assessor.cli import main
        main()
