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

"""Exception types for Kavach glue layers.

Core analyzers never raise for bad input: IO problems and syntax defects
become lint issues or metrics, tool failures become exec errors. These
exceptions cover the program boundary (hook payloads, session storage).
"""

from __future__ import annotations


class KavachError(Exception):
    """Base class for Kavach errors."""


class HookInputError(KavachError):
    """The hook payload on stdin could not be read or parsed."""


class SessionError(KavachError):
    """The session state file could not be read or written."""
