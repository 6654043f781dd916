"""
Vercel serverless entry point.

`@vercel/python` detects the module-level ASGI `app`. Both `/api/ai` and
`/api/data` are served by the same FastAPI application.
"""

from __future__ import annotations

import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    # `api/index.py` lives at `<repo>/api/index.py`; the package lives under `<repo>/src/`.
    src = Path(__file__).resolve().parents[1] / "src"
    if src.is_dir() and str(src) not in sys.path:
        sys.path.insert(0, str(src))


_ensure_src_on_path()

from award_tracker.api.main import create_app  # noqa: E402

app = create_app()
