# Support build stages.

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

"""Support build stages."""

import collections
import os
import os.path
import shlex
import shutil

from rvcross.context import ScriptError

__all__ = ['BuildStep', 'BuildCommand', 'BuildMake', 'BuildPython',
           'FallbackSource', 'StagePhase', 'Stage', 'StageList']


FallbackSource = collections.namedtuple('FallbackSource',
                                        ['vc', 'subdir', 'check'])
FallbackSource.__doc__ = """Where to find the prebuilt fallback for a stage.

vc is a VC object, or None if there is no fallback; subdir is the
directory within the fetched tree whose contents are installed; check
lists the files, relative to the stage's first install directory, that
must be present and usable afterwards.

"""


class BuildStep:
    """A BuildStep represents a step run while building a stage.

    That step may be an ordinary command, or arguments to 'make', or a
    Python function and its arguments.  Each step belongs to one
    phase of its stage, and its output goes to the log for that phase.

    """

    def __init__(self, context, phase, cwd=None):
        """Initialize a BuildStep object."""
        self.context = context
        self.phase = phase
        self.cwd = cwd

    def run(self, env, log, parallelism, default_cwd):
        """Run this step.

        The environment passed is the complete environment for the
        step; its output is appended to the file log.  The step runs
        in default_cwd unless it specifies its own directory.
        Failure raises subprocess.CalledProcessError, OSError or
        ScriptError.

        """
        raise NotImplementedError

    def __str__(self):
        """Return the version of a step to use when reporting failure."""
        raise NotImplementedError


class BuildCommand(BuildStep):
    """A BuildCommand represents a command run while building a stage.

    A command may be specified with a directory in which it is run.

    """

    def __init__(self, context, phase, command, cwd=None):
        """Initialize a BuildCommand object.

        The command specified is a list or tuple with the sequence of
        strings that should end up being passed to execve.  If cwd is
        specified, it is a directory to use for running the command.

        """
        super().__init__(context, phase, cwd)
        command = tuple(command)
        for arg in command:
            if '\n' in arg:
                context.error('newline in command: %s' % ' '.join(command))
        self._command = command

    def argv(self, parallelism):  # pylint: disable=unused-argument
        """Return the command to execute."""
        return list(self._command)

    def run(self, env, log, parallelism, default_cwd):
        cwd = self.cwd if self.cwd is not None else default_cwd
        self.context.execute(self.argv(parallelism), cwd=cwd, env=env,
                             log=log)

    def __str__(self):
        return ' '.join([shlex.quote(s) for s in self._command])


class BuildMake(BuildCommand):
    """A BuildMake represents a 'make' command run while building a stage.

    The arguments passed to __init__ are the arguments to make.  Make
    is run with the parallelism of the build unless the arguments
    already include a -j option.

    """

    def argv(self, parallelism):
        args = list(self._command)
        if not any(arg.startswith('-j') for arg in args):
            args.insert(0, '-j%d' % parallelism)
        return ['make'] + args

    def __str__(self):
        return 'make ' + super().__str__()


class BuildPython(BuildStep):
    """A BuildPython represents a Python step while building a stage.

    A Python step consists of a function and its arguments, run in
    this process.  The function signals failure by raising
    ScriptError (normally through context.error) or OSError; any
    other exception is recorded in the log and converted to
    ScriptError.

    """

    def __init__(self, context, phase, function, args):
        """Initialize a BuildPython object."""
        super().__init__(context, phase)
        self._function = function
        self._args = tuple(args)

    def run(self, env, log, parallelism, default_cwd):
        self.context.verbose(str(self))
        with open(log, 'a', encoding='utf-8') as log_file:
            log_file.write('%s\n' % self)
        try:
            self._function(*self._args)
        except (ScriptError, OSError):
            raise
        except Exception as exc:
            msg = '%s: %s' % (type(exc).__name__, exc)
            with open(log, 'a', encoding='utf-8') as log_file:
                log_file.write('%s\n' % msg)
            raise ScriptError(msg) from exc

    def __str__(self):
        py_args_repr = [repr(arg) for arg in self._args]
        return 'python: %s(%s)' % (getattr(self._function, '__name__',
                                           str(self._function)),
                                   ', '.join(py_args_repr))


def _create_dir(directory):
    """Create a directory if it does not already exist."""
    os.makedirs(directory, exist_ok=True)


def _empty_dir(directory):
    """Remove and recreate a directory."""
    if os.path.lexists(directory):
        shutil.rmtree(directory)
    os.makedirs(directory)


class StagePhase:
    """A named phase of a stage, to which steps are added in order."""

    def __init__(self, stage, name):
        """Initialize a StagePhase object."""
        self.stage = stage
        self.context = stage.context
        self.name = name

    def add_command(self, command, cwd=None):
        """Add a command to this phase."""
        self.stage.add_step(BuildCommand(self.context, self.name, command,
                                         cwd=cwd))

    def add_make(self, command, cwd=None):
        """Add a 'make' command to this phase."""
        self.stage.add_step(BuildMake(self.context, self.name, command,
                                      cwd=cwd))

    def add_python(self, py_func, py_args):
        """Add a Python step to this phase."""
        self.stage.add_step(BuildPython(self.context, self.name, py_func,
                                        py_args))

    def add_create_dir(self, directory):
        """Add a step to this phase to create a directory.

        The directory may already be present; if so, it is not
        removed.

        """
        self.add_python(_create_dir, [directory])

    def add_empty_dir(self, directory):
        """Add a step to this phase to remove and recreate a directory."""
        self.add_python(_empty_dir, [directory])


class Stage:
    """A Stage represents one unit of building a toolchain.

    A stage has a name, unique within a build, and a version; together
    they identify the completion marker for the stage.  It has a
    sequence of steps, grouped in phases, run in a working directory;
    dependencies on other stages, by name, that must be built first;
    the directories its installation modifies; and whether its failure
    may be repaired by installing a prebuilt fallback instead.

    Every stage refers to the same TargetConfig object, that of the
    toolchain config it was created from.

    """

    def __init__(self, context, name, version, target_cfg, workdir,
                 installs_to=(), recoverable=False, fresh_workdir=False,
                 fallback=None):
        """Initialize a Stage object."""
        self.context = context
        if not name or '/' in name or '_built_' in name:
            context.error('invalid stage name: %s' % name)
        self.name = name
        self.version = version
        self.target_cfg = target_cfg
        self.workdir = workdir
        self.installs_to = tuple(installs_to)
        self.recoverable = recoverable
        self.fresh_workdir = fresh_workdir
        self.fallback = fallback
        self.depends = set()
        self._steps = []
        self._phases = []
        self._env = {}
        self._env_prepend = {}

    def __repr__(self):
        return 'Stage(%s, %s)' % (repr(self.name), repr(self.version))

    @property
    def steps(self):
        """The steps of this stage, in order."""
        return tuple(self._steps)

    def phases(self):
        """Return the names of the phases of this stage, in order."""
        return list(self._phases)

    def add_phase(self, name):
        """Add a phase to this stage and return it."""
        if name in self._phases:
            self.context.error('duplicate phase %s in stage %s'
                               % (name, self.name))
        if not name or '/' in name:
            self.context.error('invalid phase name: %s' % name)
        self._phases.append(name)
        return StagePhase(self, name)

    def add_step(self, step):
        """Add a step to this stage, in a phase already added."""
        if step.phase not in self._phases:
            self.context.error('unknown phase %s in stage %s'
                               % (step.phase, self.name))
        self._steps.append(step)

    def depend(self, dep_name):
        """Add a dependency on another stage, by name."""
        if dep_name == self.name:
            self.context.error('stage %s depends on itself' % self.name)
        self.depends.add(dep_name)

    def env_set(self, var, value):
        """Add an environment variable setting for this stage.

        This overrides any value of this variable in the environment
        in which the build is run, or any value previously set for
        this stage for this variable.  A variable may not both be set
        and prepended to.

        """
        if '=' in var or '\n' in var or '\n' in value:
            self.context.error('bad character in environment variable '
                               'setting %s=%s' % (var, value))
        if var in self._env_prepend:
            self.context.error('variable %s both set and prepended to' % var)
        self._env[var] = value

    def env_prepend(self, var, value):
        """Add an environment variable prepending for this stage.

        This is for colon-separated variables like PATH; the value
        given is a single string not containing ':'.  This is
        prepended to anything else already prepended for this stage,
        and to any value in the environment in which the build is
        run.  A variable may not both be set and prepended to.

        """
        if '=' in var or '\n' in var or '\n' in value or ':' in value:
            self.context.error('bad character in environment variable '
                               'setting %s prepending %s' % (var, value))
        if var in self._env:
            self.context.error('variable %s both set and prepended to' % var)
        if var not in self._env_prepend:
            self._env_prepend[var] = []
        self._env_prepend[var].append(value)

    def get_env_overrides(self):
        """Return the variables set by this stage, without a base."""
        return self.get_full_env({})

    def get_full_env(self, base):
        """Return the complete environment for this stage's processes.

        The base mapping (normally the cleaned environment of the
        script) is not modified.

        """
        full_env = dict(base)
        full_env.update(self._env)
        for key, val in self._env_prepend.items():
            val_txt = ':'.join(reversed(val))
            if full_env.get(key):
                full_env[key] = '%s:%s' % (val_txt, full_env[key])
            else:
                full_env[key] = val_txt
        return full_env


class StageList:
    """The stages of a build, by name.

    Stages are kept in the order added, but that order has no effect
    on the order in which they run.

    """

    def __init__(self, context):
        """Initialize a StageList object."""
        self.context = context
        self._stages = {}

    def add(self, stage):
        """Add a stage, which must have a name not already used."""
        if stage.name in self._stages:
            self.context.error('duplicate stage name: %s' % stage.name)
        self._stages[stage.name] = stage
        return stage

    def get(self, name):
        """Return the stage with the given name."""
        return self._stages[name]

    def names(self):
        """Return the names of the stages, in the order added."""
        return list(self._stages.keys())

    def __iter__(self):
        return iter(list(self._stages.values()))

    def __len__(self):
        return len(self._stages)

    def __contains__(self, name):
        return name in self._stages
