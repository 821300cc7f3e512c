from collections.abc import Callable

import pytest

from docs_agent.config import ProviderConfig
from docs_agent.providers.base import GenerationOptions, ProviderClient

SECRET_KEY = "sk-secret-test-key"


class ScriptedProvider(ProviderClient):
    """Returns canned responses in order and records every prompt."""

    provider_name = "scripted"
    display_name = "Scripted"

    def __init__(
        self,
        responses: tuple[str, ...] = ("Stub response.",),
        *,
        context_window: int | None = None,
        fail_with: Exception | None = None,
    ) -> None:
        self.responses = list(responses)
        self.fail_with = fail_with
        self.prompts: list[str] = []
        self.options: list[GenerationOptions] = []
        super().__init__(
            ProviderConfig(api_key=SECRET_KEY, model="gpt-4", context_window=context_window)
        )

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def _complete(self, prompt: str, options: GenerationOptions) -> str:
        self.prompts.append(prompt)
        self.options.append(options)
        if self.fail_with is not None:
            raise self.fail_with
        return self.responses[min(len(self.prompts), len(self.responses)) - 1]


@pytest.fixture
def secret_key() -> str:
    return SECRET_KEY


@pytest.fixture
def make_provider() -> Callable[..., ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()
