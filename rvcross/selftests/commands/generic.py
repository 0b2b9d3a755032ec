# rvcross-builder generic command for testing.

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

"""rvcross-builder generic command for testing."""

import rvcross.selftests.command

__all__ = ['Command']


class Command(rvcross.selftests.command.Command):
    """generic command implementation."""

    short_desc = 'Save argument information.'

    long_desc = 'Additional description.'

    @staticmethod
    def add_arguments(parser):
        parser.add_argument('extra')

    @staticmethod
    def main(context, tccfg, args):
        context.called_with_tccfg = tccfg
        context.called_with_args = args
