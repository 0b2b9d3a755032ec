# Run the steps of a build stage.

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

"""Run the steps of a build stage."""

import collections
import os
import os.path
import shutil
import subprocess

from rvcross.context import ScriptError

__all__ = ['IN_PROGRESS_FLAG', 'StageError', 'ConfigureError', 'BuildError',
           'InstallError', 'StageResult', 'StageRunner']


IN_PROGRESS_FLAG = '.rvcross-in-progress'
"""File present in the working directory of a stage while it runs."""


LOG_TAIL_LINES = 25


class StageError(ScriptError):
    """A step of a build stage failed."""

    def __init__(self, message, stage_name, phase, command, log):
        super().__init__(message)
        self.stage_name = stage_name
        self.phase = phase
        self.command = command
        self.log = log


class ConfigureError(StageError):
    """A configure step of a build stage failed."""


class BuildError(StageError):
    """A build step of a build stage failed."""


class InstallError(StageError):
    """An install step of a build stage failed."""


_PHASE_ERRORS = {'configure': ConfigureError,
                 'build': BuildError,
                 'install': InstallError}


class StageResult:
    """The outcome of running a stage.

    error is None for a stage that ran successfully, and a StageError
    otherwise.

    """

    def __init__(self, stage_name, error=None):
        self.stage_name = stage_name
        self.error = error

    @property
    def ok(self):
        """Whether the stage ran successfully."""
        return self.error is None

    @property
    def log(self):
        """The log of the failing phase, or None."""
        return None if self.error is None else self.error.log

    def __repr__(self):
        return 'StageResult(%s, %s)' % (repr(self.stage_name),
                                        repr(self.error))


def _log_tail(log, num_lines):
    """Return the last lines of a log file, or [] if it cannot be read."""
    try:
        with open(log, 'r', encoding='utf-8', errors='replace') as file:
            lines = collections.deque(file, maxlen=num_lines)
    except FileNotFoundError:
        return []
    return [line.rstrip('\n') for line in lines]


class StageRunner:
    """Run the steps of stages, one stage at a time.

    Output of each phase of a stage goes to LOGDIR/STAGE_PHASE.log.
    make is run with the given parallelism.  Steps run in the
    environment given (normally the cleaned environment of the script)
    with the stage's own overrides applied.

    A failing step stops the stage; the failure is returned in the
    StageResult, never raised, and is also reported with the end of
    the relevant log.

    """

    def __init__(self, context, logdir, parallelism=None, environ=None):
        self.context = context
        self.logdir = logdir
        if parallelism is None:
            parallelism = os.cpu_count() or 1
        self.parallelism = max(parallelism, 1)
        self.environ = context.environ if environ is None else environ

    def log_path(self, stage, phase):
        """Return the log file for a phase of a stage."""
        return os.path.join(self.logdir, '%s_%s.log' % (stage.name, phase))

    def prepare_workdir(self, stage):
        """Set up the working directory of a stage before it runs.

        The directory is removed first if the stage always uses a
        fresh directory, or if a previous attempt was interrupted.

        """
        workdir = stage.workdir
        flag = os.path.join(workdir, IN_PROGRESS_FLAG)
        if os.path.lexists(workdir):
            if stage.fresh_workdir:
                self.context.verbose('removing %s' % workdir)
                shutil.rmtree(workdir)
            elif os.path.exists(flag):
                self.context.inform('removing %s left by interrupted build '
                                    'of %s' % (workdir, stage.name))
                shutil.rmtree(workdir)
        os.makedirs(workdir, exist_ok=True)
        with open(flag, 'w', encoding='utf-8') as file:
            file.write('%s\n' % stage.name)

    def _stage_error(self, stage, phase, command, log, exc):
        """Return the StageError for a failed step."""
        err_cls = _PHASE_ERRORS.get(phase, StageError)
        message = ('%s: error: stage %s failed in %s phase: %s (see %s)'
                   % (self.context.script, stage.name, phase, exc, log))
        return err_cls(message, stage.name, phase, command, log)

    def _report(self, error):
        """Report a failed stage with the end of its log."""
        tail = _log_tail(error.log, LOG_TAIL_LINES)
        msg = ('stage %s failed in %s phase running %s; log: %s'
               % (error.stage_name, error.phase, error.command, error.log))
        if tail:
            msg = '%s\nlast %d lines of log:\n%s' % (msg, len(tail),
                                                     '\n'.join(tail))
        self.context.warning(msg)

    def run(self, stage):
        """Run a stage, returning a StageResult."""
        os.makedirs(self.logdir, exist_ok=True)
        try:
            self.prepare_workdir(stage)
        except OSError as exc:
            log = self.log_path(stage, 'init')
            error = self._stage_error(stage, 'init', 'prepare %s'
                                      % stage.workdir, log, exc)
            self._report(error)
            return StageResult(stage.name, error)
        env = stage.get_full_env(self.environ)
        for step in stage.steps:
            log = self.log_path(stage, step.phase)
            try:
                step.run(env, log, self.parallelism, stage.workdir)
            except (subprocess.CalledProcessError, OSError,
                    ScriptError) as exc:
                error = self._stage_error(stage, step.phase, str(step), log,
                                          exc)
                self._report(error)
                return StageResult(stage.name, error)
        flag = os.path.join(stage.workdir, IN_PROGRESS_FLAG)
        if os.path.exists(flag):
            os.remove(flag)
        return StageResult(stage.name)
