# Base class for rvcross-builder components.

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

"""Base class for rvcross-builder components."""

__all__ = ['Component']


class Component:
    """Base class from which each component's class inherits."""

    @staticmethod
    def add_toolchain_config_vars(group):
        """Set up toolchain config variables for this component.

        Add any toolchain config variables specific to this component.
        Override any variables that are defined for all components but
        where the default is inappropriate to this one (for example,
        the version, or whether a failed build may be replaced by a
        prebuilt fallback).

        """

    @staticmethod
    def add_dependencies(tccfg):
        """Add any components this one depends on to the toolchain config.

        This is called after the config has been read, but before
        ToolchainConfig.__init__ has done any setup of per-component
        variables.  Configs can then list just the components they are
        interested in (for example, only the compiler) and host
        libraries are added automatically through dependencies.

        """

    @staticmethod
    def default_url(version):  # pylint: disable=unused-argument
        """Return the upstream URL of the source tarball for a version.

        None means there is no default and the config must set the url
        or vc variable.

        """
        return None

    files_to_touch = []
    """Files to touch after checkout.

    The names are interpreted as Python glob patterns (recursive, so
    '**' can be used to find files of a given name in any
    subdirectory).  Files are only touched if they exist.  Touching
    files such as generated documentation after unpacking a tarball
    keeps make from trying to regenerate them.

    """

    @staticmethod
    def postcheckout(context, component):
        """Adjust sources after checkout.

        This is passed the ComponentInConfig object, and is run after
        every checkout, including when the sources were already
        present, after files_to_touch have been touched.  It must be
        idempotent.

        """

    @staticmethod
    def add_build_stages(cfg, component, stages):
        """Add the build stages associated with this component.

        Stages are added to 'stages' (a StageList); 'cfg' is the
        toolchain config and 'component' is the ComponentInConfig
        object.  Each stage names the stages it depends on; the order
        in which stages run is determined from those dependencies,
        not from the order in which they are added.

        """

    @staticmethod
    def configure_opts(cfg):  # pylint: disable=unused-argument
        """Return component-specific configure options.

        These go after the options given by the component's recipe and
        before those from the configure_opts variable.  This function
        is a convenience hook for components using the common support
        for configure-based components in rvcross.autoconf.

        """
        return []
