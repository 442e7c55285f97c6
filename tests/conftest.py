from __future__ import annotations

import pytest

_ENV_VARS = (
    "LETTA_API_KEY",
    "LETTA_BASE_URL",
    "LETTA_PROJECT",
    "WARDEN_CONCURRENCY",
    "WARDEN_PACKAGE_VERSION",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's shell or ``.env`` configuration out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
