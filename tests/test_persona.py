"""Tests for persona loading."""

from relaybot.config import DEFAULT_PERSONA_PROMPT
from relaybot.domain.models import Persona
from relaybot.domain.persona import load_persona


def test_default_prompt_not_empty():
    assert DEFAULT_PERSONA_PROMPT.strip()


def test_prompt_used_without_file():
    assert load_persona("Be brief.") == Persona("Be brief.")


def test_missing_file_falls_back_to_prompt(tmp_path):
    persona = load_persona("Be brief.", str(tmp_path / "nope.txt"))
    assert persona.prompt == "Be brief."


def test_file_overrides_prompt(tmp_path):
    path = tmp_path / "persona.txt"
    path.write_text("You are a pirate.\n", encoding="utf-8")
    assert load_persona("Be brief.", str(path)).prompt == "You are a pirate.\n"


def test_blank_file_is_ignored(tmp_path):
    path = tmp_path / "persona.txt"
    path.write_text("  \n\t", encoding="utf-8")
    assert load_persona("Be brief.", str(path)).prompt == "Be brief."


def test_directory_is_not_a_persona_file(tmp_path):
    assert load_persona("Be brief.", str(tmp_path)).prompt == "Be brief."
