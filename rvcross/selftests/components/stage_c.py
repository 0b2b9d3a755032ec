# rvcross-builder stage_c component for testing.

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

"""rvcross-builder stage_c component for testing."""

import rvcross.selftests.component
from rvcross.selftests.shell_recipe import add_shell_stage, add_shell_vars

__all__ = ['Component']


class Component(rvcross.selftests.component.Component):
    """stage_c component implementation."""

    @staticmethod
    def add_toolchain_config_vars(group):
        add_shell_vars(group)

    @staticmethod
    def add_build_stages(cfg, component, stages):
        add_shell_stage(cfg, component, stages)
