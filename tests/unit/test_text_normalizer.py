"""Unit tests for normalize_text -- word-boundary, whitespace and punctuation repair."""

from __future__ import annotations

import pytest

from tenant_rag.utils.text_normalizer import normalize_text


class TestNormalizeText:
    def test_empty_string(self) -> None:
        assert normalize_text("") == ""

    def test_whitespace_only(self) -> None:
        assert normalize_text(" \n\t  ") == ""

    def test_splits_camel_joined_words(self) -> None:
        assert normalize_text("endOf the line") == "end Of the line"

    def test_collapses_whitespace_and_newlines(self) -> None:
        assert normalize_text("one\n\ntwo   three\tfour") == "one two three four"

    def test_removes_space_before_punctuation(self) -> None:
        assert normalize_text("Hello , world !") == "Hello, world!"

    def test_adds_space_after_punctuation(self) -> None:
        assert normalize_text("First.Second,third!Fourth?fifth") == "First. Second, third! Fourth? fifth"

    def test_no_trailing_space_after_final_punctuation(self) -> None:
        assert normalize_text("Done.") == "Done."

    def test_combined_example(self) -> None:
        assert normalize_text(" a  b,c .d") == "a b, c. d"

    def test_uppercase_runs_untouched(self) -> None:
        assert normalize_text("NASA and IBM") == "NASA and IBM"

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "plain sentence",
            "glued wordsHere.And there ,too",
            "  Multiple   spaces .\n\nNew paragraph!Really?Yes",
            "a.b.c",
        ],
    )
    def test_idempotent(self, text: str) -> None:
        once = normalize_text(text)
        assert normalize_text(once) == once
