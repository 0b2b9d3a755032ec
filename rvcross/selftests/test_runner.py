# Test rvcross.runner.

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

"""Test rvcross.runner."""

import io
import os
import os.path
import tempfile
import unittest

from rvcross.context import ScriptContext
from rvcross.runner import IN_PROGRESS_FLAG, StageError, ConfigureError, \
    BuildError, InstallError, StageResult, StageRunner
from rvcross.selftests.support import create_files
from rvcross.stage import BuildCommand, BuildPython, Stage
from rvcross.toolcfg import TargetConfig

__all__ = ['StageResultTestCase', 'StageRunnerTestCase']


TARGET_CFG = TargetConfig('riscv32-linux-musl', 'rv32imfc', 'ilp32f',
                          '/opt/rv', '/opt/rv/riscv32-linux-musl/sysroot')


def _bad_int(arg):
    """Convert an argument to int, failing for non-numeric input."""
    return int(arg)


class StageResultTestCase(unittest.TestCase):

    """Test the StageResult class."""

    def test_result(self):
        """Test StageResult."""
        result = StageResult('gmp')
        self.assertTrue(result.ok)
        self.assertIsNone(result.log)
        error = BuildError('failed', 'gmp', 'build', 'make', '/logs/x.log')
        result = StageResult('gmp', error)
        self.assertFalse(result.ok)
        self.assertEqual(result.log, '/logs/x.log')
        self.assertIs(result.error, error)


class StageRunnerTestCase(unittest.TestCase):

    """Test the StageRunner class."""

    def setUp(self):
        """Set up a StageRunner test."""
        self.context = ScriptContext()
        self.context.message_file = io.StringIO()
        self.tempdir_td = tempfile.TemporaryDirectory()
        self.tempdir = self.tempdir_td.name
        self.logdir = os.path.join(self.tempdir, 'logs')
        self.workdir = os.path.join(self.tempdir, 'obj', 'test-build')
        self.environ = {'PATH': self.context.environ.get('PATH', os.defpath),
                        'TEST_BASE': 'base'}
        self.runner = StageRunner(self.context, self.logdir, 3, self.environ)

    def tearDown(self):
        """Tear down a StageRunner test."""
        self.tempdir_td.cleanup()

    def new_stage(self, **kwargs):
        """Return a new stage with configure, build and install phases."""
        stage = Stage(self.context, 'test', '1.0', TARGET_CFG, self.workdir,
                      **kwargs)
        for phase in ('configure', 'build', 'install'):
            stage.add_phase(phase)
        return stage

    def read_log(self, phase):
        """Read the log for a phase of the test stage."""
        with open(os.path.join(self.logdir, 'test_%s.log' % phase), 'r',
                  encoding='utf-8') as file:
            return file.read()

    def test_init(self):
        """Test StageRunner.__init__."""
        self.assertIs(self.runner.context, self.context)
        self.assertEqual(self.runner.logdir, self.logdir)
        self.assertEqual(self.runner.parallelism, 3)
        self.assertIs(self.runner.environ, self.environ)
        runner = StageRunner(self.context, self.logdir)
        self.assertGreaterEqual(runner.parallelism, 1)
        self.assertIs(runner.environ, self.context.environ)

    def test_log_path(self):
        """Test StageRunner.log_path."""
        self.assertEqual(self.runner.log_path(self.new_stage(), 'build'),
                         os.path.join(self.logdir, 'test_build.log'))

    def test_run(self):
        """Test running a stage successfully."""
        stage = self.new_stage()
        stage.env_set('TEST_STAGE', 'stage')
        phase_cmds = {'configure': 'echo "$TEST_BASE $TEST_STAGE" > cfg.txt',
                      'build': 'ls -a',
                      'install': 'echo installed'}
        for step_phase, cmd in phase_cmds.items():
            stage.add_step(BuildCommand(self.context, step_phase,
                                        ['sh', '-c', cmd]))
        result = self.runner.run(stage)
        self.assertTrue(result.ok)
        self.assertEqual(result.stage_name, 'test')
        with open(os.path.join(self.workdir, 'cfg.txt'), 'r',
                  encoding='utf-8') as file:
            self.assertEqual(file.read(), 'base stage\n')
        # The in-progress flag is present while the stage runs and
        # removed afterwards.
        self.assertIn(IN_PROGRESS_FLAG, self.read_log('build'))
        self.assertFalse(os.path.exists(os.path.join(self.workdir,
                                                     IN_PROGRESS_FLAG)))
        self.assertIn('installed\n', self.read_log('install'))
        self.assertEqual(sorted(os.listdir(self.logdir)),
                         ['test_build.log', 'test_configure.log',
                          'test_install.log'])

    def test_run_make(self):
        """Test parallelism passed to make."""
        stage = self.new_stage()
        create_files(self.workdir, [],
                     {'Makefile': 'all:\n\techo "flags: $(MAKEFLAGS)"\n'},
                     {})
        stage.add_phase('check').add_make([])
        result = self.runner.run(stage)
        self.assertTrue(result.ok)
        self.assertIn('make -j3', self.read_log('check'))

    def test_run_workdir(self):
        """Test preparation of a stage's working directory."""
        # An existing working directory is kept.
        create_files(self.workdir, [], {'keep.txt': 'keep'}, {})
        stage = self.new_stage()
        self.assertTrue(self.runner.run(stage).ok)
        self.assertTrue(os.path.exists(os.path.join(self.workdir,
                                                    'keep.txt')))
        # One left by an interrupted build is removed.
        create_files(self.workdir, [], {IN_PROGRESS_FLAG: 'test\n'}, {})
        self.assertTrue(self.runner.run(stage).ok)
        self.assertFalse(os.path.exists(os.path.join(self.workdir,
                                                     'keep.txt')))
        self.assertIn('left by interrupted build of test',
                      self.context.message_file.getvalue())
        # A stage may require a fresh working directory.
        create_files(self.workdir, [], {'keep.txt': 'keep'}, {})
        stage = self.new_stage(fresh_workdir=True)
        self.assertTrue(self.runner.run(stage).ok)
        self.assertEqual(os.listdir(self.workdir), [])

    def test_run_errors(self):
        """Test stages failing in each phase."""
        for phase, err_cls in (('configure', ConfigureError),
                               ('build', BuildError),
                               ('install', InstallError)):
            self.context.message_file = io.StringIO()
            stage = Stage(self.context, 'test', '1.0', TARGET_CFG,
                          self.workdir)
            for step_phase in ('configure', 'build', 'install'):
                phase_obj = stage.add_phase(step_phase)
                phase_obj.add_command(['sh', '-c', 'echo %s ran'
                                       % step_phase])
                if step_phase == phase:
                    phase_obj.add_command(['sh', '-c',
                                           'echo %s broken; exit 1' % phase])
            result = self.runner.run(stage)
            self.assertFalse(result.ok)
            self.assertIsInstance(result.error, err_cls)
            self.assertIsInstance(result.error, StageError)
            self.assertEqual(result.error.stage_name, 'test')
            self.assertEqual(result.error.phase, phase)
            self.assertEqual(result.error.command,
                             "sh -c 'echo %s broken; exit 1'" % phase)
            log = os.path.join(self.logdir, 'test_%s.log' % phase)
            self.assertEqual(result.log, log)
            self.assertIn('stage test failed in %s phase' % phase,
                          str(result.error))
            self.assertIn('%s broken' % phase, self.read_log(phase))
            output = self.context.message_file.getvalue()
            self.assertIn('warning: stage test failed in %s phase' % phase,
                          output)
            self.assertIn('%s broken' % phase, output)
            # The stage stops at the failing step.
            if phase != 'install':
                self.assertFalse(os.path.exists(
                    os.path.join(self.logdir, 'test_install.log')))
            # The in-progress flag is left for the next run.
            self.assertTrue(os.path.exists(os.path.join(self.workdir,
                                                        IN_PROGRESS_FLAG)))
            for name in os.listdir(self.logdir):
                os.remove(os.path.join(self.logdir, name))

    def test_run_missing_program(self):
        """Test a stage running a program that does not exist."""
        stage = self.new_stage()
        stage.add_step(BuildCommand(self.context, 'configure',
                                    ['/nonexistent/configure']))
        result = self.runner.run(stage)
        self.assertIsInstance(result.error, ConfigureError)
        self.assertEqual(result.error.command, '/nonexistent/configure')

    def test_run_python_error(self):
        """Test a stage whose Python step raises an exception."""
        stage = self.new_stage()
        stage.add_step(BuildCommand(self.context, 'configure',
                                    ['sh', '-c', 'echo configured']))
        stage.add_step(BuildPython(self.context, 'build', _bad_int, ['x']))
        stage.add_step(BuildCommand(self.context, 'install',
                                    ['sh', '-c', 'echo installed']))
        result = self.runner.run(stage)
        self.assertFalse(result.ok)
        self.assertIsInstance(result.error, BuildError)
        self.assertEqual(result.error.phase, 'build')
        self.assertEqual(result.error.command, "python: _bad_int('x')")
        self.assertIn('ValueError: invalid literal', str(result.error))
        self.assertIn('ValueError: invalid literal', self.read_log('build'))
        self.assertIn('ValueError: invalid literal',
                      self.context.message_file.getvalue())
        self.assertFalse(os.path.exists(
            os.path.join(self.logdir, 'test_install.log')))

    def test_run_log_tail(self):
        """Test only the end of a long log is reported."""
        stage = self.new_stage()
        stage.add_step(BuildCommand(self.context, 'build',
                                    ['sh', '-c', 'seq 1 1000; exit 1']))
        result = self.runner.run(stage)
        self.assertIsInstance(result.error, BuildError)
        output = self.context.message_file.getvalue()
        self.assertIn('last 25 lines of log:\n976\n977\n', output)
        self.assertTrue(output.endswith('\n999\n1000\n'))
        self.assertNotIn('\n975\n', output)
