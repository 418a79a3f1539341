from tutor.gemini.payload import (
    PLAIN_TEXT_DIRECTIVE,
    build_contents,
    build_count_request,
    build_request,
    language_instruction,
    plain_prompt,
    simulate_prompt,
    smart_query_prompt,
)
from tutor.session.store import Turn


def test_build_contents_appends_prompt_without_mutating_history() -> None:
    history = [Turn("user", "q"), Turn("model", "a")]

    contents = build_contents(history, "next")

    assert contents == [
        {"role": "user", "parts": [{"text": "q"}]},
        {"role": "model", "parts": [{"text": "a"}]},
        {"role": "user", "parts": [{"text": "next"}]},
    ]
    assert history == [Turn("user", "q"), Turn("model", "a")]


def test_request_shapes() -> None:
    history = [Turn("user", "q")]
    assert build_request([], "hi") == {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]}
    assert build_count_request(history) == {"contents": [{"role": "user", "parts": [{"text": "q"}]}]}


def test_language_instruction() -> None:
    assert language_instruction("en-us") == "Respond in English."
    assert language_instruction("PT-BR") == "Respond in Portuguese (Brazilian)."
    assert language_instruction("es") == "Respond in Spanish."
    assert language_instruction("fr") == "Respond in fr."


def test_plain_prompt_adds_language_and_plain_text_rule() -> None:
    prompt = plain_prompt("what is a pipe", "es")
    assert prompt.startswith("what is a pipe")
    assert "Respond in Spanish." in prompt
    assert prompt.endswith(PLAIN_TEXT_DIRECTIVE)


def test_smart_query_prompt_describes_protocol() -> None:
    prompt = smart_query_prompt("find big files", "en-us")
    assert "User request: find big files" in prompt
    assert '"type":"execute"' in prompt
    assert '"response":' in prompt


def test_simulate_prompt_context_is_optional() -> None:
    assert "Context:" not in simulate_prompt("ls", "en-us")
    assert "Context: empty dir" in simulate_prompt("ls", "en-us", "empty dir")
    assert "DESTRUCTIVENESS:" in simulate_prompt("ls", "en-us")
