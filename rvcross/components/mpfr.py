# rvcross-builder mpfr component.

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

"""rvcross-builder mpfr component."""

from rvcross.autoconf import add_host_lib_cfg_build_stage
import rvcross.component

__all__ = ['Component']


class Component(rvcross.component.Component):
    """rvcross-builder mpfr component implementation."""

    @staticmethod
    def add_toolchain_config_vars(group):
        group.version.set_implicit('3.1.6')

    @staticmethod
    def add_dependencies(tccfg):
        tccfg.add_component('gmp')

    @staticmethod
    def default_url(version):
        return 'https://ftp.gnu.org/gnu/mpfr/mpfr-%s.tar.gz' % version

    # Various files may be regenerated in the source directory by
    # default unless timestamps are in the right order.
    files_to_touch = ['aclocal.m4', 'configure', '**/Makefile.in',
                      'get_patches.c', 'src/get_patches.c', 'mpfr.info*',
                      'doc/mpfr.info*']

    @staticmethod
    def add_build_stages(cfg, component, stages):
        hostlibdir = cfg.hostlibdir.get()
        stage = add_host_lib_cfg_build_stage(
            cfg, component, stages,
            pkg_cfg_opts=['--with-gmp=%s' % hostlibdir])
        if cfg.have_component('binutils'):
            stage.depend('binutils')
        stage.depend('gmp')
