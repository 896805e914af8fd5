import pytest

from isogen.utils.input_utils import (
    MAX_PROMPT_LENGTH,
    calculate_remaining,
    enforce_character_limit,
    is_valid_prompt,
    process_prompt_input,
    sanitize_input,
)


def test_sanitize_escapes_html() -> None:
    assert sanitize_input("<b>\"cat\" & 'dog'</b>") == (
        "&lt;b&gt;&quot;cat&quot; &amp; &#x27;dog&#x27;&lt;/b&gt;"
    )


def test_sanitize_removes_script_vectors() -> None:
    assert "javascript:" not in sanitize_input("JavaScript:alert(1)").lower()
    assert "onerror" not in sanitize_input("img onerror=alert(1)").lower()
    assert "text/html" not in sanitize_input("data: text/html,hi").lower()


def test_sanitize_strips_nul_and_rejects_non_strings() -> None:
    assert sanitize_input("a\0b") == "ab"
    assert sanitize_input(None) == ""
    assert sanitize_input(42) == ""


@pytest.mark.parametrize("prompt, valid", [("cat", True), ("  x ", True), ("", False), ("   \n\t", False), (None, False)])
def test_is_valid_prompt(prompt, valid: bool) -> None:
    assert is_valid_prompt(prompt) is valid


def test_character_limit_and_remaining() -> None:
    long_text = "a" * (MAX_PROMPT_LENGTH + 50)
    assert len(enforce_character_limit(long_text)) == MAX_PROMPT_LENGTH
    assert calculate_remaining(long_text) == 0
    assert calculate_remaining("abc") == MAX_PROMPT_LENGTH - 3
    assert calculate_remaining(None) == MAX_PROMPT_LENGTH
    assert enforce_character_limit("abcdef", 3) == "abc"


def test_process_prompt_input() -> None:
    processed = process_prompt_input("<cat>", limit=10)
    assert processed.sanitized == "&lt;cat"
    assert processed.is_valid is True
    assert processed.remaining == 3

    blank = process_prompt_input("   ")
    assert blank.is_valid is False


@pytest.mark.parametrize(
    "text, expected",
    [
        ("a" * 198 + "&", "a" * 198),
        ("a" * 195 + "&", "a" * 195 + "&amp;"),
        ("a" * 196 + "&", "a" * 196),
        ("a" * 199 + "<", "a" * 199),
    ],
)
def test_truncation_never_splits_html_entities(text: str, expected: str) -> None:
    processed = process_prompt_input(text)
    assert processed.sanitized == expected
    assert len(processed.sanitized) <= MAX_PROMPT_LENGTH
