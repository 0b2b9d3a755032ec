# rvcross-builder status command.

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

"""rvcross-builder status command."""

import os
import os.path

from rvcross.build import BuildContext, latest_log_dir
import rvcross.command
from rvcross.hosttools import check_disk_space, check_host_tools
from rvcross.toolcfg import add_toolchain_config_arg

__all__ = ['Command']


class Command(rvcross.command.Command):
    """rvcross-builder status implementation."""

    short_desc = 'Show the state of a build.'

    long_desc = """Shows missing host tools, free disk space, which sources are
    present, which stages are built (and whether from source or from a
    prebuilt fallback) and the most recent log directory."""

    @staticmethod
    def add_arguments(parser):
        add_toolchain_config_arg(parser)

    @staticmethod
    def main(context, tccfg, args):
        check_host_tools(context)
        check_disk_space(context, args.objdir)
        out_lines = ['Sources:']
        for component in tccfg.list_source_components():
            srcdir = component.vars.srcdir.get()
            if os.path.isdir(srcdir) and os.listdir(srcdir):
                state = 'present'
            else:
                state = 'missing'
            out_lines.append('  %-28s %s' % (os.path.basename(srcdir), state))
        build_context = BuildContext(context, tccfg, args)
        store = build_context.store
        out_lines.append('Stages:')
        for stage in build_context.ordered_stages():
            provenance = store.provenance(stage.name, stage.version)
            if provenance is None:
                state = 'not built'
            else:
                state = 'built (%s)' % provenance
            out_lines.append('  %-28s %s' % ('%s %s' % (stage.name,
                                                        stage.version),
                                             state))
        latest = latest_log_dir(args.logdir)
        out_lines.append('Latest logs: %s' % (latest if latest is not None
                                              else '(none)'))
        if latest is not None:
            for name in sorted(os.listdir(latest)):
                out_lines.append('  %s' % name)
        print('\n'.join(out_lines))
