# rvcross-builder binutils component.

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

"""rvcross-builder binutils component."""

from rvcross.autoconf import add_host_tool_cfg_build_stage
import rvcross.component

__all__ = ['Component']


class Component(rvcross.component.Component):
    """rvcross-builder binutils component implementation."""

    @staticmethod
    def add_toolchain_config_vars(group):
        group.version.set_implicit('2.30')

    @staticmethod
    def default_url(version):
        return ('https://ftp.gnu.org/gnu/binutils/binutils-%s.tar.gz'
                % version)

    @staticmethod
    def add_build_stages(cfg, component, stages):
        add_host_tool_cfg_build_stage(cfg, component, stages)

    @staticmethod
    def configure_opts(cfg):
        return ['--disable-multilib', '--disable-werror']
