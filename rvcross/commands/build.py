# rvcross-builder build command.

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

"""rvcross-builder build command."""

from rvcross.build import BuildContext
import rvcross.command
from rvcross.context import add_parallelism_option
from rvcross.hosttools import check_host_tools
from rvcross.toolcfg import add_toolchain_config_arg

__all__ = ['Command']


class Command(rvcross.command.Command):
    """rvcross-builder build implementation."""

    short_desc = 'Build the toolchain.'

    long_desc = """Stages already built are skipped, so a build that failed or
    was interrupted continues from the stage that did not complete.  Set
    RVCROSS_USE_PREBUILT=1 to use prebuilt fallbacks for recoverable stages
    instead of building them."""

    @staticmethod
    def add_arguments(parser):
        add_parallelism_option(parser)
        parser.add_argument('--no-host-check', action='store_true',
                            help='Do not check for host build tools')
        parser.add_argument('--no-checkout', action='store_true',
                            help='Do not download missing sources')
        add_toolchain_config_arg(parser)

    @staticmethod
    def main(context, tccfg, args):
        if not args.no_host_check:
            missing = check_host_tools(context)
            if missing:
                context.error('missing host tools: %s; install them or use '
                              '--no-host-check' % ' '.join(missing))
        build_context = BuildContext(context, tccfg, args)
        if not args.no_checkout:
            build_context.checkout_sources()
        build_context.run_build()
