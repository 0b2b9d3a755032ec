# Install prebuilt fallbacks for stages that failed to build.

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

"""Install prebuilt fallbacks for stages that failed to build."""

import os
import os.path
import re
import shutil
import stat
import subprocess

from rvcross.context import ScriptError

__all__ = ['ELF_MAGIC', 'AR_MAGIC', 'FallbackError', 'FallbackProvider']


ELF_MAGIC = b'\x7fELF'
AR_MAGIC = b'!<arch>\n'

_SHLIB_RE = re.compile(r'\.so(\.[0-9.]+)?$')


class FallbackError(ScriptError):
    """No usable prebuilt fallback for a stage."""

    def __init__(self, message, stage_name):
        super().__init__(message)
        self.stage_name = stage_name


def _read_magic(path, size):
    """Return the first size bytes of a file."""
    with open(path, 'rb') as file:
        return file.read(size)


class FallbackProvider:
    """Install prebuilt fallbacks in place of failed source builds.

    The prebuilt tree for a stage is fetched into
    SRCDIR/STAGE-prebuilt-VERSION, then the configured subdirectory of
    it is copied into the first install directory of the stage,
    merging with what is there already.  Key files named by the
    stage's fallback are then checked for being present and of the
    right kind.

    """

    def __init__(self, context, srcdir):
        self.context = context
        self.srcdir = srcdir

    def _error(self, stage, message):
        """Return a FallbackError for a stage."""
        return FallbackError('%s: error: no usable prebuilt fallback for %s: '
                             '%s' % (self.context.script, stage.name,
                                     message),
                             stage.name)

    def fetch_dir(self, stage):
        """Return the directory into which a prebuilt tree is fetched."""
        return os.path.join(self.srcdir, '%s-prebuilt-%s' % (stage.name,
                                                              stage.version))

    def supply(self, stage):
        """Install the prebuilt fallback for a stage.

        Raises FallbackError if there is no fallback or it could not
        be installed or failed verification.

        """
        fallback = stage.fallback
        if fallback is None or fallback.vc is None:
            raise self._error(stage, 'no fallback location configured')
        if not stage.installs_to:
            raise self._error(stage, 'stage has no install directory')
        fetch_dir = self.fetch_dir(stage)
        self.context.inform('fetching prebuilt %s from %s'
                            % (stage.name, repr(fallback.vc)))
        try:
            fallback.vc.fetch(fetch_dir)
        except (ScriptError, OSError, subprocess.CalledProcessError) as exc:
            raise self._error(stage, 'fetch failed: %s' % exc) from exc
        src = fetch_dir
        if fallback.subdir:
            src = os.path.join(fetch_dir, fallback.subdir)
        if not os.path.isdir(src):
            raise self._error(stage, '%s is not a directory' % src)
        dest = stage.installs_to[0]
        self.context.inform('installing prebuilt %s into %s'
                            % (stage.name, dest))
        try:
            shutil.copytree(src, dest, symlinks=True, dirs_exist_ok=True)
        except OSError as exc:
            raise self._error(stage, 'copy to %s failed: %s'
                              % (dest, exc)) from exc
        self.verify(stage, dest, fallback.check)

    def verify(self, stage, dest, check):
        """Check the key files of an installed fallback."""
        for rel_path in check:
            path = os.path.join(dest, rel_path)
            problem = self._check_file(path, rel_path)
            if problem is not None:
                raise self._error(stage, '%s %s' % (path, problem))
            self.context.verbose('verified %s' % path)

    @staticmethod
    def _check_file(path, rel_path):
        """Return what is wrong with a key file, or None."""
        if not os.path.exists(path):
            return 'is missing'
        dir_parts = os.path.normpath(os.path.dirname(rel_path)).split(os.sep)
        basename = os.path.basename(path)
        try:
            mode = os.stat(path).st_mode
            if 'bin' in dir_parts:
                if not stat.S_ISREG(mode):
                    return 'is not a regular file'
                if not os.access(path, os.X_OK):
                    return 'is not executable'
            if _SHLIB_RE.search(basename):
                if _read_magic(path, len(ELF_MAGIC)) != ELF_MAGIC:
                    return 'is not an ELF file'
            elif basename.endswith('.a'):
                if _read_magic(path, len(AR_MAGIC)) != AR_MAGIC:
                    return 'is not an archive'
        except OSError as exc:
            return 'could not be read: %s' % exc
        return None
