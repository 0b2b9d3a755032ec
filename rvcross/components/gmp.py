# rvcross-builder gmp component.

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

"""rvcross-builder gmp component."""

from rvcross.autoconf import add_host_lib_cfg_build_stage
import rvcross.component

__all__ = ['Component']


class Component(rvcross.component.Component):
    """rvcross-builder gmp component implementation."""

    @staticmethod
    def add_toolchain_config_vars(group):
        group.version.set_implicit('6.1.2')

    @staticmethod
    def default_url(version):
        return 'https://ftp.gnu.org/gnu/gmp/gmp-%s.tar.bz2' % version

    files_to_touch = ['doc/gmp.info*']

    @staticmethod
    def add_build_stages(cfg, component, stages):
        stage = add_host_lib_cfg_build_stage(cfg, component, stages)
        if cfg.have_component('binutils'):
            stage.depend('binutils')
