"""Each entry module must import on its own, in a fresh interpreter."""
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize(
    "module",
    [
        "api.di.container",
        "api.shared.db",
        "api.features.conversation.service",
        "api.features.conversation.router",
        "api.main",
    ],
)
def test_module_imports_cleanly(module):
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=ROOT,
        env={**os.environ, "OPENAI_API_KEY": "test-key"},
        capture_output=True,
        text=True,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
