# rvcross-builder entry point.

# Copyright 2018 Mentor Graphics Corporation.

# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License as
# published by the Free Software Foundation; either version 2.1 of the
# License, or (at your option) any later version.

# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.

# You should have received a copy of the GNU Lesser General Public
# License along with this program; if not, see
# <https://www.gnu.org/licenses/>.

"""rvcross-builder entry point."""

import sys

from rvcross.context import ScriptContext, ScriptError
from rvcross.toolcfg import ToolchainConfigPathLoader

__all__ = ['main']


def main(argv=None):
    """Run rvcross-builder with the given arguments, exiting on errors."""
    if argv is None:
        argv = sys.argv[1:]
    context = ScriptContext()
    try:
        context.main(ToolchainConfigPathLoader(), argv)
    except ScriptError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
