# Test rvcross.components.

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

"""Test the toolchain components of rvcross-builder."""

import argparse
import os.path
import tempfile
import unittest

from rvcross.build import BuildContext
from rvcross.context import add_common_options, add_parallelism_option, \
    ScriptContext
from rvcross.toolcfg import ToolchainConfig, ToolchainConfigTextLoader

__all__ = ['ComponentsTestCase']


class ComponentsTestCase(unittest.TestCase):

    """Test the stages of the toolchain components."""

    def setUp(self):
        """Set up a toolchain components test."""
        self.context = ScriptContext()
        self.context.environ_orig = {}
        self.tempdir_td = tempfile.TemporaryDirectory()
        self.tempdir = self.tempdir_td.name
        parser = argparse.ArgumentParser()
        add_common_options(parser, self.tempdir)
        add_parallelism_option(parser)
        self.args = parser.parse_args([])
        self.args.logdir = os.path.join(self.tempdir, 'logs')
        self.objdir = self.args.objdir
        self.srcdir = self.args.srcdir

    def tearDown(self):
        """Tear down a toolchain components test."""
        self.tempdir_td.cleanup()

    def stages(self, tccfg_text=''):
        """Return the StageList for a config and the config."""
        tccfg = ToolchainConfig(self.context, tccfg_text,
                                ToolchainConfigTextLoader(), self.args)
        build_context = BuildContext(self.context, tccfg, self.args)
        return build_context.setup_stages(), tccfg

    @staticmethod
    def step_strs(stage, phase):
        """Return the steps of a phase of a stage as strings."""
        return [str(step) for step in stage.steps if step.phase == phase]

    def test_default_order(self):
        """Test the stages of the default toolchain and their order."""
        tccfg = ToolchainConfig(self.context, '', ToolchainConfigTextLoader(),
                                self.args)
        build_context = BuildContext(self.context, tccfg, self.args)
        self.assertEqual([stage.name
                          for stage in build_context.ordered_stages()],
                         ['binutils', 'gmp', 'isl', 'mpfr', 'mpc',
                          'gcc-stage1', 'musl', 'gcc-stage2', 'gdb'])
        stages = build_context.setup_stages()
        self.assertEqual(stages.get('gcc-stage2').depends,
                         {'binutils', 'gcc-stage1', 'musl', 'gmp', 'mpfr',
                          'mpc', 'isl'})
        self.assertEqual(stages.get('gdb').depends,
                         {'gcc-stage2', 'gmp', 'mpfr'})
        # Every stage refers to the same target configuration.
        for stage in stages:
            self.assertIs(stage.target_cfg, tccfg.target_config)

    def test_versions(self):
        """Test the versions of the stages come from the components."""
        stages, _ = self.stages('cfg.add_component("gcc")\n'
                                'cfg.gcc.version.set("8.5.0")\n')
        self.assertEqual(stages.get('gcc-stage1').version, '8.5.0')
        self.assertEqual(stages.get('gcc-stage2').version, '8.5.0')
        self.assertEqual(stages.get('musl').version, '1.2.2')
        self.assertEqual(stages.get('binutils').version, '2.30')
        self.assertNotIn('gdb', stages)

    def test_binutils(self):
        """Test the binutils stage."""
        stages, tccfg = self.stages()
        stage = stages.get('binutils')
        self.assertEqual(stage.depends, set())
        self.assertEqual(self.step_strs(stage, 'configure'),
                         ['%s/binutils-2.30/configure --prefix=%s '
                          '--target=riscv32-linux-musl --disable-multilib '
                          '--disable-werror'
                          % (self.srcdir, tccfg.installdir.get())])
        self.assertEqual(self.step_strs(stage, 'install'),
                         ['make -j1 install'])

    def test_host_libs(self):
        """Test the host library stages."""
        stages, tccfg = self.stages()
        hostlibdir = tccfg.hostlibdir.get()
        self.assertEqual(stages.get('gmp').depends, {'binutils'})
        self.assertEqual(stages.get('mpfr').depends, {'binutils', 'gmp'})
        self.assertEqual(stages.get('mpc').depends,
                         {'binutils', 'gmp', 'mpfr'})
        self.assertEqual(stages.get('isl').depends, {'binutils', 'gmp'})
        self.assertEqual(self.step_strs(stages.get('gmp'), 'configure'),
                         ['%s/gmp-6.1.2/configure --prefix=%s '
                          '--disable-shared' % (self.srcdir, hostlibdir)])
        self.assertEqual(self.step_strs(stages.get('mpc'), 'configure'),
                         ['%s/mpc-1.0.3/configure --prefix=%s '
                          '--with-gmp=%s --with-mpfr=%s --disable-shared'
                          % (self.srcdir, hostlibdir, hostlibdir,
                             hostlibdir)])
        for name in ('gmp', 'mpfr', 'mpc', 'isl'):
            self.assertEqual(stages.get(name).installs_to, (hostlibdir,))
        # Without binutils in the config, there is no dependency on it.
        stages, _ = self.stages('cfg.add_component("mpc")\n')
        self.assertEqual(stages.get('mpc').depends, {'gmp', 'mpfr'})

    def test_gcc(self):
        """Test the GCC stages."""
        stages, tccfg = self.stages('cfg.arch.set("rv32gc")\n'
                                    'cfg.abi.set("ilp32d")\n'
                                    'cfg.add_component("gcc")\n')
        installdir = tccfg.installdir.get()
        hostlibdir = tccfg.hostlibdir.get()
        sysroot = tccfg.sysroot.get()
        gcc_srcdir = os.path.join(self.srcdir, 'gcc-7.3.0')
        lib_opts = ('--with-gmp=%s --with-mpfr=%s --with-mpc=%s --with-isl=%s'
                    % (hostlibdir, hostlibdir, hostlibdir, hostlibdir))
        stage1 = stages.get('gcc-stage1')
        self.assertEqual(stage1.depends,
                         {'binutils', 'gmp', 'mpfr', 'mpc', 'isl'})
        self.assertEqual(stage1.workdir, os.path.join(self.objdir,
                                                      'gcc-build'))
        self.assertFalse(stage1.fresh_workdir)
        self.assertEqual(self.step_strs(stage1, 'configure'),
                         ['%s/configure --prefix=%s '
                          '--target=riscv32-linux-musl '
                          '--with-arch=rv32gc --with-abi=ilp32d '
                          '--disable-multilib --disable-threads '
                          '--disable-shared --disable-libmudflap '
                          '--disable-libitm --disable-libssp '
                          '--disable-libgomp --disable-libquadmath '
                          '--disable-decimal-float --disable-fixed-point '
                          '--enable-languages=c --without-headers '
                          '--with-newlib %s --with-gnu-as --with-gnu-ld'
                          % (gcc_srcdir, installdir, lib_opts)])
        self.assertEqual(self.step_strs(stage1, 'build'),
                         ['make all-gcc', 'make all-target-libgcc'])
        self.assertEqual(self.step_strs(stage1, 'install'),
                         ['make -j1 install-gcc',
                          'make -j1 install-target-libgcc'])
        self.assertEqual(stage1.get_env_overrides(),
                         {'PATH': tccfg.bindir.get()})
        stage2 = stages.get('gcc-stage2')
        self.assertEqual(stage2.workdir, stage1.workdir)
        self.assertTrue(stage2.fresh_workdir)
        self.assertEqual(self.step_strs(stage2, 'configure'),
                         ['%s/configure --prefix=%s '
                          '--target=riscv32-linux-musl '
                          '--with-arch=rv32gc --with-abi=ilp32d '
                          '--disable-multilib --enable-threads=posix '
                          '--enable-shared --enable-libssp --enable-libgomp '
                          '--enable-languages=c,c++ '
                          '--enable-poison-system-directories '
                          '--enable-symvers=gnu --with-sysroot=%s '
                          '--with-headers=%s/usr/include '
                          '--with-build-sysroot=%s %s '
                          '--with-gnu-as --with-gnu-ld'
                          % (gcc_srcdir, installdir, sysroot, sysroot,
                             sysroot, lib_opts)])
        self.assertEqual(self.step_strs(stage2, 'build'), ['make '])
        self.assertEqual(self.step_strs(stage2, 'install'),
                         ['make -j1 install'])

    def test_musl(self):
        """Test the musl stage."""
        stages, tccfg = self.stages('cfg.add_component("musl")\n'
                                    'cfg.musl.fallback_vc.set('
                                    'TarVC("/prebuilt/musl.tar.gz"))\n')
        stage = stages.get('musl')
        sysroot = tccfg.sysroot.get()
        self.assertEqual(stage.depends, {'gcc-stage1'})
        self.assertTrue(stage.recoverable)
        self.assertEqual(stage.installs_to,
                         (os.path.join(sysroot, 'usr'),))
        self.assertEqual(repr(stage.fallback.vc),
                         "TarVC('/prebuilt/musl.tar.gz')")
        self.assertIn('lib/libc.so', stage.fallback.check)
        self.assertEqual(self.step_strs(stage, 'configure'),
                         ['%s/musl-1.2.2/configure --prefix=%s/usr '
                          '--host=riscv32-linux-musl'
                          % (self.srcdir, sysroot)])
        self.assertEqual(stage.get_env_overrides(),
                         {'CC': 'riscv32-linux-musl-gcc',
                          'AR': 'riscv32-linux-musl-ar',
                          'RANLIB': 'riscv32-linux-musl-ranlib',
                          'PATH': tccfg.bindir.get()})
        stages, _ = self.stages('cfg.add_component("musl")\n'
                                'cfg.musl.recoverable.set(False)\n')
        self.assertFalse(stages.get('musl').recoverable)

    def test_gdb(self):
        """Test the GDB stage."""
        stages, tccfg = self.stages()
        stage = stages.get('gdb')
        hostlibdir = tccfg.hostlibdir.get()
        self.assertEqual(self.step_strs(stage, 'configure'),
                         ['%s/gdb-8.1/configure --prefix=%s '
                          '--target=riscv32-linux-musl --disable-werror '
                          '--disable-binutils --disable-gas --disable-gold '
                          '--disable-gprof --disable-ld --disable-sim '
                          '--with-libgmp-prefix=%s --with-libmpfr-prefix=%s'
                          % (self.srcdir, tccfg.installdir.get(), hostlibdir,
                             hostlibdir)])
        stages, _ = self.stages('cfg.add_component("gdb")\n')
        self.assertEqual(stages.get('gdb').depends, {'gmp', 'mpfr'})
