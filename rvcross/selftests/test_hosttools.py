# Test rvcross.hosttools.

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

"""Test rvcross.hosttools."""

import io
import os.path
import tempfile
import unittest
import unittest.mock

from rvcross.context import ScriptContext
from rvcross.hosttools import HOST_TOOLS, check_host_tools, free_space_gb, \
    check_disk_space
from rvcross.selftests.support import create_files, make_executable

__all__ = ['HostToolsTestCase']


class HostToolsTestCase(unittest.TestCase):

    """Test host environment checks."""

    def setUp(self):
        """Set up a host environment test."""
        self.context = ScriptContext()
        self.context.message_file = io.StringIO()
        self.tempdir_td = tempfile.TemporaryDirectory()
        self.tempdir = self.tempdir_td.name

    def tearDown(self):
        """Tear down a host environment test."""
        self.tempdir_td.cleanup()

    def test_check_host_tools(self):
        """Test check_host_tools."""
        bindir = os.path.join(self.tempdir, 'bin')
        create_files(bindir, [], {'m4': '', 'make': '', 'flex': ''}, {})
        make_executable(os.path.join(bindir, 'm4'))
        make_executable(os.path.join(bindir, 'make'))
        missing = check_host_tools(self.context, ('m4', 'bison', 'make',
                                                  'flex'), path=bindir)
        # A file that is not executable does not count.
        self.assertEqual(missing, ['bison', 'flex'])
        self.assertEqual(self.context.message_file.getvalue(),
                         '%s: warning: host tool bison not found\n'
                         '%s: warning: host tool flex not found\n'
                         % (self.context.script, self.context.script))
        self.context.message_file = io.StringIO()
        self.context.verbose_messages = True
        self.assertEqual(check_host_tools(self.context, ('m4',),
                                          path=bindir), [])
        self.assertEqual(self.context.message_file.getvalue(),
                         '%s: host tool m4 found\n' % self.context.script)

    def test_check_host_tools_environ(self):
        """Test check_host_tools uses the script's PATH by default."""
        bindir = os.path.join(self.tempdir, 'bin')
        create_files(bindir, [], {'make': ''}, {})
        make_executable(os.path.join(bindir, 'make'))
        self.context.environ = {'PATH': bindir}
        self.assertEqual(check_host_tools(self.context, ('make', 'm4')),
                         ['m4'])
        missing = check_host_tools(self.context)
        self.assertEqual(missing, [tool for tool in HOST_TOOLS
                                   if tool != 'make'])

    def test_free_space_gb(self):
        """Test free_space_gb."""
        free = free_space_gb(self.tempdir)
        self.assertIsInstance(free, int)
        self.assertGreaterEqual(free, 0)
        # A directory not yet created uses its nearest existing parent.
        self.assertEqual(free_space_gb(os.path.join(self.tempdir, 'a', 'b')),
                         free)

    def test_check_disk_space(self):
        """Test check_disk_space."""
        with unittest.mock.patch('rvcross.hosttools.free_space_gb',
                                 return_value=20):
            self.assertEqual(check_disk_space(self.context, self.tempdir), 20)
        self.assertRegex(self.context.message_file.getvalue(),
                         r'^\[[0-2][0-9]:[0-5][0-9]:[0-6][0-9]\] '
                         r'free space: 20GB\n\Z')
        self.context.message_file = io.StringIO()
        with unittest.mock.patch('rvcross.hosttools.free_space_gb',
                                 return_value=7):
            self.assertEqual(check_disk_space(self.context, self.tempdir), 7)
        self.assertEqual(self.context.message_file.getvalue(),
                         '%s: warning: free space: 7GB (may not be enough)\n'
                         % self.context.script)
        self.context.message_file = io.StringIO()
        with unittest.mock.patch('rvcross.hosttools.free_space_gb',
                                 return_value=5):
            self.assertEqual(check_disk_space(self.context, self.tempdir), 5)
        self.assertEqual(self.context.message_file.getvalue(),
                         '%s: warning: free space: 5GB (not enough)\n'
                         % self.context.script)
