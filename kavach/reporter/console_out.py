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

"""Rich consoles for terminal output.

Reports are plain TOON text and are printed with markup and highlighting
disabled so ``[SECTION]`` headers survive verbatim. Errors go to stderr.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(soft_wrap=True, highlight=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False)


def print_report(text: str, *, stderr: bool = False) -> None:
    """Print a TOON report exactly as rendered."""
    target = err_console if stderr else console
    target.print(text, markup=False, highlight=False, end="")


def print_error(message: str) -> None:
    err_console.print(f"[red]error:[/red] {escape(message)}", highlight=False)
