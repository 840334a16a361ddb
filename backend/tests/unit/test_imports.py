"""
Unit Tests: Package Imports
═════════════════════════════
Each entry module is imported in a fresh interpreter, so an import cycle
cannot hide behind modules the test session already loaded.

Coverage targets:
  ✅ record store imported first (db → processing → enrichment → db)
  ✅ indexing service imported first
  ✅ processing package and Celery tasks import cleanly
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[2]


@pytest.mark.unit
@pytest.mark.parametrize("module", [
    "ris_search.db.records",
    "ris_search.services.indexing",
    "ris_search.processing",
    "ris_search.processing.enrichment",
    "ris_search.workers.tasks",
])
def test_module_imports_in_fresh_interpreter(module):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(BACKEND_DIR), env.get("PYTHONPATH")]))

    proc = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=BACKEND_DIR,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert proc.returncode == 0, proc.stderr
