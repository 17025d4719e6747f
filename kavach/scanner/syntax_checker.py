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

"""Brace/paren balance checking for C-like source and JSON.

This is a lexical heuristic, not a parser: it only tracks enough state
(comments, quoted strings, backtick raw strings) to avoid counting
delimiters that are not code.
"""

from __future__ import annotations

from enum import Enum


class _ScanState(Enum):
    NORMAL = "normal"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    STRING = "string"
    RAW_STRING = "raw_string"


UNBALANCED_BRACES = "unbalanced braces"
UNBALANCED_PARENS = "unbalanced parentheses"
UNBALANCED_BRACKETS = "unbalanced brackets"
EMPTY_JSON = "empty JSON"
BAD_JSON_START = "must start with { or ["


def check_balance(text: str) -> str:
    """Check brace and paren nesting in C-like source (Go style).

    Returns an empty string when balanced, otherwise a short description
    of the first defect. Braces are checked before parentheses.
    """
    state = _ScanState.NORMAL
    braces = 0
    parens = 0
    prev = ""
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if state is _ScanState.LINE_COMMENT:
            if ch == "\n":
                state = _ScanState.NORMAL

        elif state is _ScanState.BLOCK_COMMENT:
            if ch == "*" and nxt == "/":
                state = _ScanState.NORMAL
                prev = nxt
                i += 2
                continue

        elif state is _ScanState.STRING:
            if ch == '"' and prev != "\\":
                state = _ScanState.NORMAL

        elif state is _ScanState.RAW_STRING:
            if ch == "`":
                state = _ScanState.NORMAL

        else:
            if ch == "/" and nxt in ("/", "*"):
                state = _ScanState.LINE_COMMENT if nxt == "/" else _ScanState.BLOCK_COMMENT
                prev = nxt
                i += 2
                continue
            if ch == '"' and prev != "\\":
                state = _ScanState.STRING
            elif ch == "`":
                state = _ScanState.RAW_STRING
            elif ch == "{":
                braces += 1
            elif ch == "}":
                braces -= 1
            elif ch == "(":
                parens += 1
            elif ch == ")":
                parens -= 1

        prev = ch
        i += 1

    if braces != 0:
        return UNBALANCED_BRACES
    if parens != 0:
        return UNBALANCED_PARENS
    return ""


def check_json_balance(text: str) -> str:
    """Check structural balance of a JSON document.

    Only strings are tracked; JSON has no comments.
    """
    text = text.strip()
    if not text:
        return EMPTY_JSON
    if text[0] not in "{[":
        return BAD_JSON_START

    in_string = False
    braces = 0
    brackets = 0
    prev = ""

    for ch in text:
        if ch == '"' and prev != "\\":
            in_string = not in_string
        elif not in_string:
            if ch == "{":
                braces += 1
            elif ch == "}":
                braces -= 1
            elif ch == "[":
                brackets += 1
            elif ch == "]":
                brackets -= 1
        prev = ch

    if braces != 0:
        return UNBALANCED_BRACES
    if brackets != 0:
        return UNBALANCED_BRACKETS
    return ""
