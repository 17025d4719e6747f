# Kavach — Task Verification Gate
# Copyright (C) 2026 Kavach Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""Per-language rules: declaration/import heuristics, syntax checks, indentation.

Every supported language is a ``Language`` member and has exactly one
``LanguageRules`` entry. The counters are prefix/substring heuristics over
trimmed lines, kept behind ``count_declarations`` / ``count_imports`` so a
real parser can replace them without touching callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from kavach.scanner.syntax_checker import check_balance, check_json_balance


class Language(str, Enum):
    GO = "go"
    RUST = "rust"
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    JSON = "json"
    YAML = "yaml"
    TOON = "toon"
    MARKDOWN = "markdown"


class Indent(str, Enum):
    TABS = "tabs"
    SPACES = "spaces"


_EXTENSIONS: dict[str, Language] = {
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".py": Language.PYTHON,
    ".json": Language.JSON,
    ".yaml": Language.YAML,
    ".yml": Language.YAML,
    ".toon": Language.TOON,
    ".md": Language.MARKDOWN,
}

# Source languages with function/import heuristics (``quality`` command)
ANALYZABLE_LANGUAGES = frozenset({
    Language.GO,
    Language.RUST,
    Language.TYPESCRIPT,
    Language.JAVASCRIPT,
    Language.PYTHON,
})


def _trimmed_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n")]


def _count_prefixed(text: str, prefixes: tuple[str, ...]) -> int:
    return sum(1 for line in _trimmed_lines(text) if line.startswith(prefixes))


def _count_none(text: str) -> int:
    return 0


def _no_syntax_check(text: str) -> str:
    return ""


# ── Declarations ──

def _go_declarations(text: str) -> int:
    return _count_prefixed(text, ("func ",))


def _rust_declarations(text: str) -> int:
    return _count_prefixed(text, ("fn ", "pub fn "))


def _js_declarations(text: str) -> int:
    return sum(
        1
        for line in _trimmed_lines(text)
        if "function " in line or "=> {" in line or "async " in line
    )


def _python_declarations(text: str) -> int:
    return _count_prefixed(text, ("def ", "async def "))


# ── Imports ──

def _go_imports(text: str) -> int:
    count = 0
    for line in _trimmed_lines(text):
        if line.startswith("import ") or line == "import (":
            count += 1
        # Entries inside an import ( ... ) block are bare quoted paths
        if len(line) >= 2 and line.startswith('"') and line.endswith('"'):
            count += 1
    return count


def _rust_imports(text: str) -> int:
    return _count_prefixed(text, ("use ",))


def _js_imports(text: str) -> int:
    return _count_prefixed(text, ("import ", "require("))


def _python_imports(text: str) -> int:
    return _count_prefixed(text, ("import ", "from "))


@dataclass(frozen=True)
class LanguageRules:
    """Capabilities the analyzers need from a language."""

    language: Language
    count_declarations: Callable[[str], int] = _count_none
    count_imports: Callable[[str], int] = _count_none
    check_syntax: Callable[[str], str] = _no_syntax_check
    syntax_code: str = ""  # lint code emitted for a syntax defect
    syntax_label: str = ""
    preferred_indent: Optional[Indent] = None

    @property
    def has_syntax_check(self) -> bool:
        return bool(self.syntax_code)


LANGUAGE_RULES: dict[Language, LanguageRules] = {
    Language.GO: LanguageRules(
        language=Language.GO,
        count_declarations=_go_declarations,
        count_imports=_go_imports,
        check_syntax=check_balance,
        syntax_code="E001",
        syntax_label="Go",
        preferred_indent=Indent.TABS,
    ),
    Language.RUST: LanguageRules(
        language=Language.RUST,
        count_declarations=_rust_declarations,
        count_imports=_rust_imports,
    ),
    Language.TYPESCRIPT: LanguageRules(
        language=Language.TYPESCRIPT,
        count_declarations=_js_declarations,
        count_imports=_js_imports,
    ),
    Language.JAVASCRIPT: LanguageRules(
        language=Language.JAVASCRIPT,
        count_declarations=_js_declarations,
        count_imports=_js_imports,
    ),
    Language.PYTHON: LanguageRules(
        language=Language.PYTHON,
        count_declarations=_python_declarations,
        count_imports=_python_imports,
    ),
    Language.JSON: LanguageRules(
        language=Language.JSON,
        check_syntax=check_json_balance,
        syntax_code="E002",
        syntax_label="JSON",
    ),
    Language.YAML: LanguageRules(language=Language.YAML),
    Language.TOON: LanguageRules(language=Language.TOON),
    Language.MARKDOWN: LanguageRules(language=Language.MARKDOWN),
}


def detect_language(path: Path | str) -> Optional[Language]:
    """Map a file path to its language by extension, or None if unsupported."""
    return _EXTENSIONS.get(Path(path).suffix.lower())


def rules_for(path: Path | str) -> Optional[LanguageRules]:
    language = detect_language(path)
    return LANGUAGE_RULES[language] if language is not None else None


def check_syntax(text: str, language: Language) -> str:
    """Syntax defect for ``text`` in ``language``; empty when valid or unchecked."""
    return LANGUAGE_RULES[language].check_syntax(text)


def lintable_extensions() -> frozenset[str]:
    return frozenset(_EXTENSIONS)


def analyzable_extensions() -> frozenset[str]:
    return frozenset(ext for ext, lang in _EXTENSIONS.items() if lang in ANALYZABLE_LANGUAGES)
