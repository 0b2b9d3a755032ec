# rvcross-builder gdb component.

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

"""rvcross-builder gdb component."""

from rvcross.autoconf import add_host_tool_cfg_build_stage
import rvcross.component

__all__ = ['Component']


class Component(rvcross.component.Component):
    """rvcross-builder gdb component implementation."""

    @staticmethod
    def add_toolchain_config_vars(group):
        group.version.set_implicit('8.1')

    @staticmethod
    def add_dependencies(tccfg):
        tccfg.add_component('gmp')
        tccfg.add_component('mpfr')

    @staticmethod
    def default_url(version):
        return 'https://ftp.gnu.org/gnu/gdb/gdb-%s.tar.gz' % version

    @staticmethod
    def add_build_stages(cfg, component, stages):
        stage = add_host_tool_cfg_build_stage(cfg, component, stages)
        if cfg.have_component('gcc'):
            stage.depend('gcc-stage2')
        stage.depend('gmp')
        stage.depend('mpfr')

    @staticmethod
    def configure_opts(cfg):
        hostlibdir = cfg.hostlibdir.get()
        # Only GDB is built from the GDB sources; binutils comes from
        # its own component.
        return ['--disable-werror', '--disable-binutils', '--disable-gas',
                '--disable-gold', '--disable-gprof', '--disable-ld',
                '--disable-sim',
                '--with-libgmp-prefix=%s' % hostlibdir,
                '--with-libmpfr-prefix=%s' % hostlibdir]
