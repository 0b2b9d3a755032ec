# Check the host has the tools needed for a build.

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

"""Check the host has the tools needed for a build."""

import os
import shutil

__all__ = ['HOST_TOOLS', 'check_host_tools', 'free_space_gb',
           'check_disk_space']


HOST_TOOLS = ('m4', 'autoconf', 'automake', 'libtool', 'pkg-config',
              'bison', 'flex', 'makeinfo', 'make', 'gcc', 'g++', 'tar')
"""Programs that must be found on PATH to build the toolchain."""


DISK_SPACE_OK_GB = 10
DISK_SPACE_LOW_GB = 5


def check_host_tools(context, tools=HOST_TOOLS, path=None):
    """Return the list of tools not found on PATH, warning about each.

    PATH is taken from the script's environment unless given.
    Installing missing tools is left to the user.

    """
    if path is None:
        path = context.environ.get('PATH', os.defpath)
    missing = []
    for tool in tools:
        if shutil.which(tool, path=path) is None:
            context.warning('host tool %s not found' % tool)
            missing.append(tool)
        else:
            context.verbose('host tool %s found' % tool)
    return missing


def free_space_gb(path):
    """Return the free space, in whole gigabytes, of the filesystem
    holding path or its nearest existing parent."""
    path = os.path.abspath(path)
    while not os.path.exists(path):
        path = os.path.dirname(path)
    return shutil.disk_usage(path).free // (1024 * 1024 * 1024)


def check_disk_space(context, path):
    """Report the free space for a build, returning it in gigabytes."""
    free_gb = free_space_gb(path)
    if free_gb > DISK_SPACE_OK_GB:
        context.inform('free space: %dGB' % free_gb)
    elif free_gb > DISK_SPACE_LOW_GB:
        context.warning('free space: %dGB (may not be enough)' % free_gb)
    else:
        context.warning('free space: %dGB (not enough)' % free_gb)
    return free_gb
