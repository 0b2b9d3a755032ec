# Support code for rvcross-builder self-tests.

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

"""Support code for rvcross-builder self-tests."""

import contextlib
import os
import os.path
import sys

__all__ = ['redirect_file', 'create_files', 'read_files', 'make_executable']


@contextlib.contextmanager
def redirect_file(fd, filename):
    """Redirect a file descriptor (such as 1 for standard output) to a
    named file, for code in a 'with' statement.

    This also works for output from child processes, unlike
    contextlib.redirect_stdout.  sys.stdout may have been
    replaced by a test runner capturing output, so a descriptor
    number is used.

    """
    sys.stdout.flush()
    sys.stderr.flush()
    saved_fd = os.dup(fd)
    try:
        with open(filename, 'w', encoding='utf-8') as newfile:
            os.dup2(newfile.fileno(), fd)
            try:
                yield
            finally:
                os.dup2(saved_fd, fd)
    finally:
        os.close(saved_fd)


def create_files(topdir, dirs, files, symlinks):
    """Create a directory tree for testing.

    dirs is a list of directories to create, relative to topdir, in
    order; files maps file names to contents (str or bytes); symlinks
    maps symlink names to their targets.  topdir is created if it does
    not already exist.

    """
    os.makedirs(topdir, exist_ok=True)
    for dirname in dirs:
        os.mkdir(os.path.join(topdir, dirname))
    for filename, contents in files.items():
        path = os.path.join(topdir, filename)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        if isinstance(contents, bytes):
            with open(path, 'wb') as file:
                file.write(contents)
        else:
            with open(path, 'w', encoding='utf-8') as file:
                file.write(contents)
    for linkname, target in symlinks.items():
        os.symlink(target, os.path.join(topdir, linkname))


def read_files(topdir):
    """Read a directory tree, returning (dirs, files, symlinks).

    dirs is a set of directory names, files maps file names to their
    contents (read as text) and symlinks maps symlink names to their
    targets, all relative to topdir.

    """
    dirs = set()
    files = {}
    symlinks = {}
    for dirpath, dirnames, filenames in os.walk(topdir):
        for name in list(dirnames):
            path = os.path.join(dirpath, name)
            rel = os.path.relpath(path, topdir)
            if os.path.islink(path):
                symlinks[rel] = os.readlink(path)
                dirnames.remove(name)
            else:
                dirs.add(rel)
        for name in filenames:
            path = os.path.join(dirpath, name)
            rel = os.path.relpath(path, topdir)
            if os.path.islink(path):
                symlinks[rel] = os.readlink(path)
            else:
                with open(path, 'r', encoding='utf-8') as file:
                    files[rel] = file.read()
    return dirs, files, symlinks


def make_executable(path):
    """Make a file executable."""
    os.chmod(path, 0o755)
