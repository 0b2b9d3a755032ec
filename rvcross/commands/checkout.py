# rvcross-builder checkout command.

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

"""rvcross-builder checkout command."""

from rvcross.build import BuildContext
import rvcross.command
from rvcross.toolcfg import add_toolchain_config_arg

__all__ = ['Command']


class Command(rvcross.command.Command):
    """rvcross-builder checkout implementation."""

    short_desc = 'Download and unpack toolchain sources.'

    long_desc = """Sources already present and not empty are left alone, so
    this may be run again after an interrupted download."""

    @staticmethod
    def add_arguments(parser):
        add_toolchain_config_arg(parser)

    @staticmethod
    def main(context, tccfg, args):
        BuildContext(context, tccfg, args).checkout_sources()
