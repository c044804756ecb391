"""Shared fixtures for the test suite."""

from typing import List, Optional

import pytest

from translators.base import BaseTranslator, TranslationOutcome

SAMPLE_CATALOG = '''# Web app strings
msgid ""
msgstr ""
"Project-Id-Version: web 1.0\\n"
"Language: pt_BR\\n"

#: src/app.tsx:12
msgid "Hello"
msgstr "Olá"

#. Button label
#: src/editor.tsx:4
msgid "Save"
msgstr ""

msgid "Cancel"
msgstr "Cancel"
'''


class ScriptedTranslator(BaseTranslator):
    """Translator double that replays scripted outcomes, then echoes a fake translation."""

    name = 'Scripted'

    def __init__(self, outcomes: Optional[List] = None):
        super().__init__()
        self.outcomes = list(outcomes or [])
        self.calls = []
        self.initialized_with = None
        self.cleaned_up = False

    async def initialize(self, target_language: Optional[str] = None):
        self.initialized_with = target_language

    async def translate(self, text: str, target_language: str, context: str = "") -> TranslationOutcome:
        self.calls.append((text, target_language, context))
        outcome = self.outcomes.pop(0) if self.outcomes else f"{text} (pt)"
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def cleanup(self):
        self.cleaned_up = True


@pytest.fixture
def catalog_file(tmp_path):
    """Sample catalog with one settled and two pending entries."""
    path = tmp_path / "web.po"
    path.write_text(SAMPLE_CATALOG, encoding="utf-8")
    return path


@pytest.fixture
def output_file(tmp_path):
    return tmp_path / "web_translated.po"
