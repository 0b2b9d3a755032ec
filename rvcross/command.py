# Base class for rvcross-builder commands.

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

"""Base class for rvcross-builder commands."""

__all__ = ['Command']


class Command:
    """Base class from which each command's class inherits."""

    short_desc = None
    """A description of this command for --help output."""

    long_desc = None
    """Additional information about this command for --help output."""

    @staticmethod
    def add_arguments(parser):
        """Add command-specific arguments to the parser.

        If there is a toolchain_config argument (added via
        rvcross.toolcfg.add_toolchain_config_arg), that config will be
        loaded automatically; otherwise, None will be passed as the
        second argument of main.

        """

        raise NotImplementedError

    @staticmethod
    def main(context, tccfg, args):
        """Implement the command.

        The first argument is the context for this script; the second
        is the toolchain config passed, if the script takes one; the
        third is the parsed arguments to the script.

        """

        raise NotImplementedError
