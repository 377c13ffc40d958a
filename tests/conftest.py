import pytest

_PATHFINDER_ENV = (
    "XAI_API_KEY",
    "PATHFINDER_API_URL",
    "PATHFINDER_MODEL",
    "PATHFINDER_TEMPERATURE",
    "PATHFINDER_TOP_P",
    "PATHFINDER_MAX_TOKENS",
)


@pytest.fixture(autouse=True)
def _clear_pathfinder_env(monkeypatch) -> None:
    # .env values loaded at import must not leak into tests.
    for key in _PATHFINDER_ENV:
        monkeypatch.delenv(key, raising=False)


class ScriptedCompletionClient:
    """Stands in for CompletionClient; replays scripted texts or raises scripted errors."""

    def __init__(self, script=None) -> None:
        self.script = list(script or [])
        self.calls = []

    def complete(self, prompt, auth_token, effort, *, timeout_ms, max_retries=0, **_kwargs):
        from pf_engine.ai.client import CompletionText

        self.calls.append(
            {
                "prompt": prompt,
                "auth_token": auth_token,
                "effort": effort,
                "timeout_ms": timeout_ms,
                "max_retries": max_retries,
            }
        )
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return CompletionText(content=item)


@pytest.fixture
def scripted_client():
    return ScriptedCompletionClient
