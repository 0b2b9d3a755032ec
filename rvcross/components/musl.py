# rvcross-builder musl component.

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

"""rvcross-builder musl component."""

import os.path

from rvcross.autoconf import add_host_cfg_build_stage
import rvcross.component

__all__ = ['Component']


class Component(rvcross.component.Component):
    """rvcross-builder musl component implementation.

    musl is built with the first GCC build and installed in the
    sysroot.  Its build is known to fail for some targets with
    single-precision floating point only, so by default a failed build
    may be replaced by a prebuilt fallback, if the toolchain config
    says where to find one.

    """

    @staticmethod
    def add_toolchain_config_vars(group):
        group.version.set_implicit('1.2.2')
        group.recoverable.set_implicit(True)
        group.fallback_check.set_implicit(['lib/libc.a', 'lib/libc.so',
                                           'lib/crt1.o', 'include/stdio.h'])

    @staticmethod
    def add_dependencies(tccfg):
        tccfg.add_component('gcc')

    @staticmethod
    def default_url(version):
        return 'https://musl.libc.org/releases/musl-%s.tar.gz' % version

    @staticmethod
    def add_build_stages(cfg, component, stages):
        target = cfg.target_config.triplet
        prefix = os.path.join(cfg.target_config.sysroot, 'usr')
        stage = add_host_cfg_build_stage(
            cfg, component, stages, None, None, prefix,
            ['--host=%s' % target], None, (), ('install',))
        stage.depend('gcc-stage1')
        for var, tool in (('CC', 'gcc'), ('AR', 'ar'), ('RANLIB', 'ranlib')):
            stage.env_set(var, '%s-%s' % (target, tool))
        stage.env_prepend('PATH', cfg.bindir.get())
