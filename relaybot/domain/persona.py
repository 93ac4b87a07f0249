"""Bot persona — the system prompt sent with every generation request."""

import sys
from pathlib import Path
from typing import Optional

from relaybot.domain.models import Persona


def _log(msg: str):
    print(msg, file=sys.stderr)


def load_persona(prompt: str, persona_file: Optional[str] = None) -> Persona:
    """Build the Persona from config, letting a non-blank persona file win."""
    if persona_file:
        path = Path(persona_file)
        if path.is_file():
            text = path.read_text(encoding="utf-8")
            if text.strip():
                _log(f"persona loaded from {path}")
                return Persona(text)
    return Persona(prompt)
