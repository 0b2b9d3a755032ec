# Test rvcross.fallback.

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

"""Test rvcross.fallback."""

import io
import os
import os.path
import tarfile
import tempfile
import unittest

from rvcross.context import ScriptContext
from rvcross.fallback import ELF_MAGIC, AR_MAGIC, FallbackError, \
    FallbackProvider
from rvcross.selftests.support import create_files, make_executable
from rvcross.stage import FallbackSource, Stage
from rvcross.toolcfg import TargetConfig
from rvcross.vc import TarVC

__all__ = ['FallbackProviderTestCase']


TARGET_CFG = TargetConfig('riscv32-linux-musl', 'rv32imfc', 'ilp32f',
                          '/opt/rv', '/opt/rv/riscv32-linux-musl/sysroot')


class FallbackProviderTestCase(unittest.TestCase):

    """Test the FallbackProvider class."""

    def setUp(self):
        """Set up a FallbackProvider test."""
        self.context = ScriptContext()
        self.context.message_file = io.StringIO()
        self.tempdir_td = tempfile.TemporaryDirectory()
        self.tempdir = self.tempdir_td.name
        self.srcdir = os.path.join(self.tempdir, 'src')
        self.dest = os.path.join(self.tempdir, 'sysroot', 'usr')
        self.provider = FallbackProvider(self.context, self.srcdir)

    def tearDown(self):
        """Tear down a FallbackProvider test."""
        self.tempdir_td.cleanup()

    def make_tarball(self, files, executables=()):
        """Create a prebuilt tarball with the given files."""
        tree = os.path.join(self.tempdir, 'prebuilt-tree')
        create_files(os.path.join(tree, 'musl-prebuilt'), [], files, {})
        for name in executables:
            make_executable(os.path.join(tree, 'musl-prebuilt', name))
        tarball = os.path.join(self.tempdir, 'musl-prebuilt.tar.gz')
        with tarfile.open(tarball, 'w:gz') as tar:
            tar.add(os.path.join(tree, 'musl-prebuilt'), 'musl-prebuilt')
        return tarball

    def new_stage(self, vc, subdir='usr', check=()):
        """Return a recoverable stage with the given fallback."""
        return Stage(self.context, 'musl', '1.2.2', TARGET_CFG,
                     os.path.join(self.tempdir, 'musl-build'),
                     installs_to=(self.dest,), recoverable=True,
                     fallback=FallbackSource(vc, subdir, check))

    def test_fetch_dir(self):
        """Test FallbackProvider.fetch_dir."""
        stage = self.new_stage(None)
        self.assertEqual(self.provider.fetch_dir(stage),
                         os.path.join(self.srcdir, 'musl-prebuilt-1.2.2'))

    def test_supply(self):
        """Test installing a prebuilt fallback."""
        tarball = self.make_tarball(
            {'usr/lib/libc.a': AR_MAGIC + b'members',
             'usr/lib/libc.so': ELF_MAGIC + b'\x01\x01',
             'usr/lib/crt1.o': b'',
             'usr/include/stdio.h': '/* stdio */\n',
             'usr/bin/musl-gcc': '#!/bin/sh\n',
             'README': 'not installed\n'},
            executables=['usr/bin/musl-gcc'])
        create_files(self.dest, [], {'lib/existing.a': AR_MAGIC}, {})
        stage = self.new_stage(TarVC(self.context, tarball),
                               check=('lib/libc.a', 'lib/libc.so',
                                      'lib/crt1.o', 'include/stdio.h',
                                      'bin/musl-gcc'))
        self.provider.supply(stage)
        for name in ('lib/libc.a', 'lib/libc.so', 'lib/crt1.o',
                     'include/stdio.h', 'bin/musl-gcc', 'lib/existing.a'):
            self.assertTrue(os.path.isfile(os.path.join(self.dest, name)))
        self.assertFalse(os.path.exists(os.path.join(self.dest, 'README')))
        self.assertTrue(os.path.isdir(os.path.join(self.srcdir,
                                                   'musl-prebuilt-1.2.2')))
        # Supplying again reuses the fetched tree.
        os.remove(tarball)
        self.provider.supply(stage)

    def test_supply_errors(self):
        """Test errors installing a prebuilt fallback."""
        stage = self.new_stage(None)
        self.assertRaisesRegex(FallbackError,
                               'no usable prebuilt fallback for musl: no '
                               'fallback location configured',
                               self.provider.supply, stage)
        stage = Stage(self.context, 'musl', '1.2.2', TARGET_CFG,
                      os.path.join(self.tempdir, 'musl-build'),
                      recoverable=True,
                      fallback=FallbackSource(
                          TarVC(self.context, '/nonexistent.tar.gz'), '', ()))
        self.assertRaisesRegex(FallbackError, 'stage has no install '
                               'directory', self.provider.supply, stage)
        stage = self.new_stage(
            TarVC(self.context, os.path.join(self.tempdir, 'none.tar.gz')))
        self.assertRaisesRegex(FallbackError, 'fetch failed',
                               self.provider.supply, stage)
        tarball = self.make_tarball({'usr/lib/libc.a': AR_MAGIC})
        stage = self.new_stage(TarVC(self.context, tarball), subdir='other')
        self.assertRaisesRegex(FallbackError, 'other is not a directory',
                               self.provider.supply, stage)
        stage = self.new_stage(TarVC(self.context, tarball),
                               check=('lib/libc.so',))
        try:
            self.provider.supply(stage)
        except FallbackError as exc:
            self.assertEqual(exc.stage_name, 'musl')
            self.assertIn('lib/libc.so is missing', str(exc))
        else:
            self.fail('FallbackError not raised')

    def test_verify(self):
        """Test checks of key files of a prebuilt fallback."""
        create_files(self.dest, ['bin', 'bin/dir'],
                     {'lib/libc.a': AR_MAGIC + b'x',
                      'lib/bad.a': b'not an archive',
                      'lib/libc.so': ELF_MAGIC,
                      'lib/libc.so.1.2': ELF_MAGIC,
                      'lib/bad.so': b'/* GNU ld script */',
                      'lib/bad.so.1': b'text',
                      'bin/tool': '#!/bin/sh\n',
                      'bin/notexec': '#!/bin/sh\n',
                      'include/stdio.h': ''},
                     {})
        make_executable(os.path.join(self.dest, 'bin', 'tool'))
        stage = self.new_stage(None)
        self.provider.verify(stage, self.dest,
                             ['lib/libc.a', 'lib/libc.so', 'lib/libc.so.1.2',
                              'bin/tool', 'include/stdio.h'])
        for name, problem in (('lib/bad.a', 'is not an archive'),
                              ('lib/bad.so', 'is not an ELF file'),
                              ('lib/bad.so.1', 'is not an ELF file'),
                              ('bin/notexec', 'is not executable'),
                              ('bin/dir', 'is not a regular file'),
                              ('lib/missing.a', 'is missing')):
            self.assertRaisesRegex(FallbackError,
                                   '%s %s' % (name, problem),
                                   self.provider.verify, stage, self.dest,
                                   ['lib/libc.a', name])
