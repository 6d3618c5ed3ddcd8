from __future__ import annotations

import os

import pytest

_ISOLATED_ENV = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY")


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.upper().startswith("LEONARD_") or name in _ISOLATED_ENV:
            monkeypatch.delenv(name, raising=False)
