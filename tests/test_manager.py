"""Tests for the translation manager."""

import logging
from unittest.mock import AsyncMock, call, patch

import pytest

from config.settings import ConfigurationError, TranslationConfig
from conftest import ScriptedTranslator
from manager import TranslationManager, TranslationProgress
from translators.base import TranslationFailure
from utils.catalog import parse_catalog


def make_manager(translator, **overrides) -> TranslationManager:
    settings = {"provider": "openai", "delay": 0.0, "max_retries": 3}
    settings.update(overrides)
    return TranslationManager(TranslationConfig(**settings), translator=translator)


def read_entries(path):
    catalog = parse_catalog(path.read_text(encoding="utf-8"))
    return {e.source_id: e.translation for e in catalog.entries}


class TestSelection:
    """Tests for entry selection."""

    def test_selects_empty_and_untranslated(self, catalog_file) -> None:
        catalog = parse_catalog(catalog_file.read_text(encoding="utf-8"))
        assert [e.source_id for e in catalog.pending_entries()] == ["Save", "Cancel"]

    def test_header_and_one_settled_entry(self) -> None:
        text = 'msgid ""\nmsgstr "Language: pt\\n"\n\nmsgid "A"\nmsgstr "Ahh"\n\nmsgid "B"\nmsgstr ""\n'
        catalog = parse_catalog(text)
        assert [e.source_id for e in catalog.pending_entries()] == ["B"]


class TestProcessFile:
    """Tests for TranslationManager.process_file."""

    @pytest.mark.asyncio
    async def test_translates_pending_entries(self, catalog_file, output_file) -> None:
        translator = ScriptedTranslator()
        manager = make_manager(translator, target_language="German")

        progress = await manager.process_file(str(catalog_file), str(output_file))

        assert isinstance(progress, TranslationProgress)
        assert progress.total == 2
        assert progress.completed == 2
        assert progress.failed == 0
        assert read_entries(output_file) == {
            "Hello": "Olá",
            "Save": "Save (pt)",
            "Cancel": "Cancel (pt)",
        }
        assert translator.initialized_with == "German"
        assert translator.cleaned_up

    @pytest.mark.asyncio
    async def test_preserves_header_and_comments(self, catalog_file, output_file) -> None:
        manager = make_manager(ScriptedTranslator())
        await manager.process_file(str(catalog_file), str(output_file))

        catalog = parse_catalog(output_file.read_text(encoding="utf-8"))
        assert catalog.header == {"Project-Id-Version": "web 1.0", "Language": "pt_BR"}
        assert catalog.header_comments == ["# Web app strings"]
        assert catalog.entries[1].comments == ["#. Button label", "#: src/editor.tsx:4"]

    @pytest.mark.asyncio
    async def test_comments_are_passed_as_context(self, catalog_file, output_file) -> None:
        translator = ScriptedTranslator()
        manager = make_manager(translator, target_language="German")
        await manager.process_file(str(catalog_file), str(output_file))

        calls = {text: (language, context) for text, language, context in translator.calls}
        assert calls["Save"] == ("German", "#. Button label #: src/editor.tsx:4")
        assert calls["Cancel"] == ("German", "")

    @pytest.mark.asyncio
    async def test_recovers_after_two_failures(self, tmp_path, output_file) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        translator = ScriptedTranslator([
            TranslationFailure("boom"),
            TranslationFailure("boom again"),
            "Salvar",
        ])
        manager = make_manager(translator, max_retries=3)

        with patch.object(manager, "_backoff", AsyncMock()) as backoff:
            progress = await manager.process_file(str(source), str(output_file))

        assert read_entries(output_file) == {"Save": "Salvar"}
        assert progress.completed == 1
        assert progress.failed == 0
        assert progress.rate_limit_hits == 0
        assert [c.args[0] for c in backoff.await_args_list] == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_throttled_failure_waits_retry_after(self, tmp_path, output_file) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        translator = ScriptedTranslator([
            TranslationFailure("Too Many Requests", throttled=True, retry_after=2.0, status=429),
            "Salvar",
        ])
        manager = make_manager(translator)

        with patch.object(manager, "_backoff", AsyncMock()) as backoff:
            progress = await manager.process_file(str(source), str(output_file))

        backoff.assert_awaited_once_with(2.0)
        assert progress.rate_limit_hits == 1
        assert progress.completed == 1
        assert len(translator.calls) == 2

    @pytest.mark.asyncio
    async def test_throttled_failure_without_retry_after_backs_off_exponentially(
        self, tmp_path, output_file
    ) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        translator = ScriptedTranslator([
            TranslationFailure("rate limit", throttled=True),
            TranslationFailure("rate limit", throttled=True),
            "Salvar",
        ])
        manager = make_manager(translator)

        with patch.object(manager, "_backoff", AsyncMock()) as backoff:
            progress = await manager.process_file(str(source), str(output_file))

        assert [c.args[0] for c in backoff.await_args_list] == [5.0, 10.0]
        assert progress.rate_limit_hits == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_copy_source(self, tmp_path, output_file) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        translator = ScriptedTranslator([TranslationFailure("nope")] * 5)
        manager = make_manager(translator, max_retries=2)

        with patch.object(manager, "_backoff", AsyncMock()) as backoff:
            progress = await manager.process_file(str(source), str(output_file))

        assert len(translator.calls) == 2
        assert progress.failed == 1
        assert progress.completed == 0
        assert read_entries(output_file) == {"Save": "Save"}
        # no wait after the last attempt
        assert [c.args[0] for c in backoff.await_args_list] == [2.0]

    @pytest.mark.asyncio
    async def test_mixed_failures_share_one_budget(self, tmp_path, output_file) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        translator = ScriptedTranslator([
            TranslationFailure("quota exceeded"),
            TranslationFailure("server error", status=500),
            TranslationFailure("server error", status=500),
            "never reached",
        ])
        manager = make_manager(translator, max_retries=3)

        with patch.object(manager, "_backoff", AsyncMock()) as backoff:
            progress = await manager.process_file(str(source), str(output_file))

        assert len(translator.calls) == 3
        assert progress.rate_limit_hits == 1
        assert progress.failed == 1
        assert read_entries(output_file) == {"Save": "Save"}
        assert [c.args[0] for c in backoff.await_args_list] == [5.0, 4.0]

    @pytest.mark.asyncio
    async def test_backend_exception_is_a_generic_failure(self, tmp_path, output_file) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        translator = ScriptedTranslator([RuntimeError("kaput"), "Salvar"])
        manager = make_manager(translator)

        with patch.object(manager, "_backoff", AsyncMock()) as backoff:
            progress = await manager.process_file(str(source), str(output_file))

        backoff.assert_awaited_once_with(2.0)
        assert progress.completed == 1
        assert progress.rate_limit_hits == 0

    @pytest.mark.asyncio
    async def test_one_failing_entry_does_not_stop_others(self, catalog_file, output_file) -> None:
        class FlakyTranslator(ScriptedTranslator):
            async def translate(self, text, target_language, context=""):
                self.calls.append((text, target_language, context))
                if text == "Save":
                    return TranslationFailure("bad entry")
                return f"{text} (pt)"

        manager = make_manager(FlakyTranslator(), max_retries=1)
        progress = await manager.process_file(str(catalog_file), str(output_file))

        assert progress.completed == 1
        assert progress.failed == 1
        assert read_entries(output_file)["Cancel"] == "Cancel (pt)"
        assert read_entries(output_file)["Save"] == "Save"

    @pytest.mark.asyncio
    async def test_settled_entries_are_written_before_the_next_call(
        self, catalog_file, output_file
    ) -> None:
        snapshots = {}

        class SnapshotTranslator(ScriptedTranslator):
            async def translate(self, text, target_language, context=""):
                if output_file.exists():
                    snapshots[text] = read_entries(output_file)
                return f"{text} (pt)"

        manager = make_manager(
            SnapshotTranslator(), batch_size=1, max_concurrent_requests=1
        )
        await manager.process_file(str(catalog_file), str(output_file))

        assert snapshots["Cancel"]["Save"] == "Save (pt)"

    @pytest.mark.asyncio
    async def test_failed_progress_save_does_not_abort(self, tmp_path, output_file) -> None:
        source = tmp_path / "one.po"
        source.write_text('msgid "Save"\nmsgstr ""\n', encoding="utf-8")
        manager = make_manager(ScriptedTranslator())

        with patch(
            "manager.save_catalog_file", AsyncMock(side_effect=[OSError("disk full"), None])
        ) as save:
            progress = await manager.process_file(str(source), str(output_file))

        assert progress.completed == 1
        assert save.await_count == 2

    @pytest.mark.asyncio
    async def test_nothing_pending(self, tmp_path, output_file) -> None:
        source = tmp_path / "done.po"
        source.write_text('msgid "Save"\nmsgstr "Salvar"\n', encoding="utf-8")
        translator = ScriptedTranslator()
        manager = make_manager(translator)

        progress = await manager.process_file(str(source), str(output_file))

        assert progress.total == 0
        assert translator.calls == []
        assert translator.cleaned_up
        assert read_entries(output_file) == {"Save": "Salvar"}

    @pytest.mark.asyncio
    async def test_missing_input_file(self, tmp_path, output_file) -> None:
        translator = ScriptedTranslator()
        manager = make_manager(translator)

        with pytest.raises(ConfigurationError, match="not found"):
            await manager.process_file(str(tmp_path / "missing.po"), str(output_file))

        assert translator.calls == []
        assert not output_file.exists()

    @pytest.mark.asyncio
    async def test_current_entry_shown_on_progress_bar(self, catalog_file, output_file) -> None:
        manager = make_manager(ScriptedTranslator(), batch_size=1, max_concurrent_requests=1)

        with patch("manager.tqdm") as tqdm_cls:
            progress = await manager.process_file(str(catalog_file), str(output_file))

        pbar = tqdm_cls.return_value.__enter__.return_value
        assert pbar.set_postfix_str.call_args_list == [call("Save"), call("Cancel")]
        assert progress.current == "Cancel"

    @pytest.mark.asyncio
    async def test_limiter_stats_logged_after_first_batch_then_every_fifth(
        self, tmp_path, output_file, caplog
    ) -> None:
        source = tmp_path / "seven.po"
        source.write_text(
            "".join(f'msgid "Entry {i}"\nmsgstr ""\n\n' for i in range(7)), encoding="utf-8"
        )
        manager = make_manager(ScriptedTranslator(), batch_size=1)

        with caplog.at_level(logging.INFO, logger="manager"):
            await manager.process_file(str(source), str(output_file))

        stats_lines = [r.getMessage() for r in caplog.records if "Rate limiter stats" in r.getMessage()]
        assert [line.split(" done.")[0] for line in stats_lines] == ["Batch 1/7", "Batch 6/7"]

    @pytest.mark.asyncio
    async def test_average_delay_tracks_limiter(self, catalog_file, output_file) -> None:
        manager = make_manager(ScriptedTranslator(), delay=0.0)
        progress = await manager.process_file(str(catalog_file), str(output_file))
        assert progress.average_delay == 0.0


class TestConfiguration:
    """Tests for configuration checks at construction."""

    def test_invalid_config(self) -> None:
        with pytest.raises(ConfigurationError):
            make_manager(ScriptedTranslator(), batch_size=0)

    def test_unsupported_provider(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported provider"):
            TranslationManager(TranslationConfig(provider="babelfish"))

    def test_missing_api_key(self, monkeypatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ConfigurationError, match="API key required"):
            TranslationManager(TranslationConfig(provider="anthropic"))

    def test_rate_limiter_uses_overrides(self) -> None:
        manager = make_manager(ScriptedTranslator(), max_concurrent_requests=2, requests_per_second=4)
        assert manager.rate_limiter.max_concurrent_requests == 2
        assert manager.rate_limiter.requests_per_second == 4
        assert manager.rate_limiter.requests_per_minute == 3500
