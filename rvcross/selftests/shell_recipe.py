# Shell-command stages for rvcross-builder test components.

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

"""Shell-command stages for rvcross-builder test components.

A test component's stage runs configure, build and install phases made
of small shell commands in place of a real configure-based build.  The
configure phase records the architecture and ABI it was given in
config.txt; the build phase appends the stage name to
OBJDIR/trace.txt, so tests can see which stages ran and in what
order, and concatenates the built.txt installed by each stage named
in the consumes variable into inputs.txt, failing if one is missing;
the install phase copies these files to INSTALLDIR/NAME.  The
fail_phase variable makes the stage fail at the end of the given
phase.

"""

import os.path
import shlex

from rvcross.autoconf import fallback_source
from rvcross.stage import Stage
from rvcross.toolcfg import ConfigVarType, ConfigVarTypeList

__all__ = ['TRACE_FILE', 'add_shell_vars', 'add_shell_stage']


TRACE_FILE = 'trace.txt'


def add_shell_vars(group):
    """Add the variables used by shell-command stages to a group."""
    context = group.context
    group.source_type.set_implicit('none')
    group.version.set_implicit('1.0')
    group.add_var('fail_phase', ConfigVarType(context, str, type(None)),
                  None,
                  """The phase at the end of which the stage fails, or
                  None.""")
    group.add_var('stage_depends',
                  ConfigVarTypeList(ConfigVarType(context, str)), (),
                  """Stages this stage depends on.""")
    group.add_var('consumes',
                  ConfigVarTypeList(ConfigVarType(context, str)), (),
                  """Stages whose installed built.txt this stage reads
                  while building.""")


def add_shell_stage(cfg, component, stages):
    """Add and return the shell-command stage for a test component."""
    c_vars = component.vars
    name = component.name
    target_cfg = cfg.target_config
    workdir = cfg.objdir_path('%s-build' % name)
    destdir = os.path.join(cfg.installdir.get(), name)
    trace = cfg.objdir_path(TRACE_FILE)
    stage = Stage(cfg.context, name, c_vars.version.get(), target_cfg,
                  workdir, installs_to=(destdir,),
                  recoverable=c_vars.recoverable.get(),
                  fallback=fallback_source(component))
    for dep in c_vars.stage_depends.get():
        stage.depend(dep)
    stage.env_set('RVCROSS_TEST_STAGE', name)
    build_cmd = ('echo "$RVCROSS_TEST_STAGE" >> %s && echo built > built.txt'
                 ' && : > inputs.txt' % shlex.quote(trace))
    for dep in c_vars.consumes.get():
        dep_file = os.path.join(cfg.installdir.get(), dep, 'built.txt')
        build_cmd += ' && cat %s >> inputs.txt' % shlex.quote(dep_file)
    commands = (
        ('configure', 'echo --with-arch=%s --with-abi=%s > config.txt'
         % (shlex.quote(target_cfg.arch), shlex.quote(target_cfg.abi))),
        ('build', build_cmd),
        ('install', 'mkdir -p %s && cp config.txt built.txt inputs.txt %s'
         % (shlex.quote(destdir), shlex.quote(destdir))))
    fail_phase = c_vars.fail_phase.get()
    for phase_name, command in commands:
        phase = stage.add_phase(phase_name)
        phase.add_command(['sh', '-c', command])
        if fail_phase == phase_name:
            phase.add_command(['sh', '-c',
                               'echo injected %s failure; exit 1'
                               % phase_name])
    stages.add(stage)
    return stage
