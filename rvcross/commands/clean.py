# rvcross-builder clean command.

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

"""rvcross-builder clean command."""

from rvcross.build import BuildContext
import rvcross.command
from rvcross.toolcfg import add_toolchain_config_arg

__all__ = ['Command']


class Command(rvcross.command.Command):
    """rvcross-builder clean implementation."""

    short_desc = 'Remove build progress.'

    long_desc = """Removes the records of built stages, the working
    directories of stages and the host libraries, so the next build starts
    from the first stage.  Sources and the installed toolchain are not
    removed."""

    @staticmethod
    def add_arguments(parser):
        add_toolchain_config_arg(parser)

    @staticmethod
    def main(context, tccfg, args):
        BuildContext(context, tccfg, args).clean()
