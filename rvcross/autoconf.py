# Support building autoconf-based components.

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

"""Support building autoconf-based components."""

import os.path

from rvcross.stage import FallbackSource, Stage

__all__ = ['fallback_source', 'add_host_cfg_build_stage',
           'add_host_lib_cfg_build_stage', 'add_host_tool_cfg_build_stage']


def fallback_source(component):
    """Return the FallbackSource for a component's stages."""
    c_vars = component.vars
    return FallbackSource(c_vars.fallback_vc.get(),
                          c_vars.fallback_subdir.get(),
                          c_vars.fallback_check.get())


def add_host_cfg_build_stage(cfg, component, stages, name, srcdir, prefix,
                             pkg_cfg_opts, target, make_targets,
                             install_targets, workdir_name=None,
                             fresh_workdir=False, installs_to=None):
    """Add and return a stage using configure / make / make install.

    The component passed is the ComponentInConfig object.  The name
    passed is the name of the stage; if None, the name of the
    component is used (this is appropriate unless a component is built
    multiple times, e.g. multiple GCC builds for bootstrapping a cross
    compiler).  If srcdir is None, the source directory of that
    component is used.  The configured prefix is prefix, which is also
    the directory the stage installs to unless installs_to is given.
    A --target configure option is passed unless target is None.  Any
    configure options from the component hook and configure_opts
    variable are added automatically after pkg_cfg_opts.  make is run
    once for each of make_targets (once with no target if that is
    empty), then once with -j1 for each of install_targets.

    The working directory is OBJDIR/WORKDIR_NAME-build, where
    workdir_name defaults to the stage name.  Whether the stage is
    recoverable, and its fallback, come from the component's
    variables.

    """
    if name is None:
        name = component.name
    if srcdir is None:
        srcdir = component.vars.srcdir.get()
    if workdir_name is None:
        workdir_name = name
    if installs_to is None:
        installs_to = (prefix,)
    workdir = cfg.objdir_path('%s-build' % workdir_name)
    stage = Stage(cfg.context, name, component.vars.version.get(),
                  cfg.target_config, workdir, installs_to=installs_to,
                  recoverable=component.vars.recoverable.get(),
                  fresh_workdir=fresh_workdir,
                  fallback=fallback_source(component))
    init_phase = stage.add_phase('init')
    for directory in installs_to:
        init_phase.add_create_dir(directory)
    cfg_phase = stage.add_phase('configure')
    cfg_cmd = [os.path.join(srcdir, 'configure'),
               '--prefix=%s' % prefix]
    if target is not None:
        cfg_cmd.append('--target=%s' % target)
    cfg_cmd.extend(pkg_cfg_opts)
    cfg_cmd.extend(component.cls.configure_opts(cfg))
    cfg_cmd.extend(component.vars.configure_opts.get())
    cfg_phase.add_command(cfg_cmd)
    build_phase = stage.add_phase('build')
    if make_targets:
        for make_target in make_targets:
            build_phase.add_make([make_target])
    else:
        build_phase.add_make([])
    install_phase = stage.add_phase('install')
    for install_target in install_targets:
        install_phase.add_make(['-j1', install_target])
    stages.add(stage)
    return stage


def add_host_lib_cfg_build_stage(cfg, component, stages, name=None,
                                 srcdir=None, pkg_cfg_opts=(),
                                 make_targets=(),
                                 install_targets=('install',)):
    """Add and return a stage using configure / make / make install,
    for a host library.

    Host libraries always use --disable-shared, never specify a
    target, and are installed in the host libraries prefix used by
    GCC and GDB.

    """
    cfg_opts = list(pkg_cfg_opts)
    cfg_opts.append('--disable-shared')
    return add_host_cfg_build_stage(cfg, component, stages, name, srcdir,
                                    cfg.hostlibdir.get(), cfg_opts, None,
                                    make_targets, install_targets)


def add_host_tool_cfg_build_stage(cfg, component, stages, name=None,
                                  srcdir=None, pkg_cfg_opts=(), target='',
                                  make_targets=(),
                                  install_targets=('install',),
                                  workdir_name=None, fresh_workdir=False):
    """Add and return a stage using configure / make / make install,
    for a host tool to be installed in the toolchain.

    The configured prefix for a host tool is always installdir from
    the toolchain config.  Normally the target is that from the
    toolchain config, but that may be overridden, or None passed to
    disable using a --target configure option.

    """
    if target == '':
        target = cfg.target_config.triplet
    return add_host_cfg_build_stage(cfg, component, stages, name, srcdir,
                                    cfg.installdir.get(), pkg_cfg_opts,
                                    target, make_targets, install_targets,
                                    workdir_name=workdir_name,
                                    fresh_workdir=fresh_workdir)
