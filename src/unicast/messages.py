from __future__ import annotations

import enum
import json
import re
from importlib import resources
from types import MappingProxyType
from typing import Dict, Mapping

_PLACEHOLDER = re.compile(r"\{(\d+)\}")


class Language(enum.Enum):
    EN = "en"
    PT = "pt"

    @classmethod
    def from_code(cls, code: str) -> "Language":
        try:
            return cls(code.lower())
        except ValueError:
            return cls.EN


def _read_catalog(language: Language) -> Dict[str, str]:
    raw = resources.files("unicast").joinpath("locale").joinpath(f"{language.value}.json").read_text(encoding="utf-8")
    return json.loads(raw)


class Messages:
    """Immutable key -> text catalog for one language."""

    def __init__(self, language: Language, catalog: Mapping[str, str]):
        self.language = language
        self._catalog = MappingProxyType(dict(catalog))

    def get(self, key: str) -> str:
        return self._catalog.get(key, f"!{key}!")

    def format(self, key: str, *args: object) -> str:
        template = self.get(key)

        def repl(m: re.Match) -> str:
            idx = int(m.group(1))
            return str(args[idx]) if idx < len(args) else m.group(0)

        return _PLACEHOLDER.sub(repl, template)


def load_messages(code: str = "en") -> Messages:
    """English catalog overlaid with the requested language."""
    language = Language.from_code(code)
    catalog = _read_catalog(Language.EN)
    if language is not Language.EN:
        catalog.update(_read_catalog(language))
    return Messages(language, catalog)
