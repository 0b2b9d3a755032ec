# rvcross-builder gcc component.

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

"""rvcross-builder gcc component."""

from rvcross.autoconf import add_host_tool_cfg_build_stage
import rvcross.component

__all__ = ['Component']


_HOST_LIBS = ('gmp', 'mpfr', 'mpc', 'isl')


def _host_lib_opts(cfg):
    """Return the options locating the host libraries."""
    hostlibdir = cfg.hostlibdir.get()
    return ['--with-%s=%s' % (lib, hostlibdir) for lib in _HOST_LIBS]


def _add_common_deps(cfg, stage):
    """Add the dependencies of both GCC stages."""
    if cfg.have_component('binutils'):
        stage.depend('binutils')
    for lib in _HOST_LIBS:
        stage.depend(lib)
    stage.env_prepend('PATH', cfg.bindir.get())


class Component(rvcross.component.Component):
    """rvcross-builder gcc component implementation.

    GCC is built twice: first a C compiler with libgcc only, without
    any C library, which is used to build the C library; then, with
    the same working directory emptied, the full compiler against the
    C library installed in the sysroot.

    """

    @staticmethod
    def add_toolchain_config_vars(group):
        group.version.set_implicit('7.3.0')

    @staticmethod
    def add_dependencies(tccfg):
        for component in ('binutils', 'musl') + _HOST_LIBS:
            tccfg.add_component(component)

    @staticmethod
    def default_url(version):
        return ('https://ftp.gnu.org/gnu/gcc/gcc-%s/gcc-%s.tar.gz'
                % (version, version))

    @staticmethod
    def add_build_stages(cfg, component, stages):
        target_cfg = cfg.target_config
        opts_first = ['--with-arch=%s' % target_cfg.arch,
                      '--with-abi=%s' % target_cfg.abi,
                      '--disable-multilib',
                      '--disable-threads',
                      '--disable-shared',
                      '--disable-libmudflap',
                      '--disable-libitm',
                      '--disable-libssp',
                      '--disable-libgomp',
                      '--disable-libquadmath',
                      '--disable-decimal-float',
                      '--disable-fixed-point',
                      '--enable-languages=c',
                      '--without-headers',
                      '--with-newlib']
        opts_first.extend(_host_lib_opts(cfg))
        opts_first.extend(['--with-gnu-as', '--with-gnu-ld'])
        stage1 = add_host_tool_cfg_build_stage(
            cfg, component, stages, name='gcc-stage1',
            pkg_cfg_opts=opts_first,
            make_targets=('all-gcc', 'all-target-libgcc'),
            install_targets=('install-gcc', 'install-target-libgcc'),
            workdir_name='gcc')
        _add_common_deps(cfg, stage1)
        sysroot = target_cfg.sysroot
        opts_second = ['--with-arch=%s' % target_cfg.arch,
                       '--with-abi=%s' % target_cfg.abi,
                       '--disable-multilib',
                       '--enable-threads=posix',
                       '--enable-shared',
                       '--enable-libssp',
                       '--enable-libgomp',
                       '--enable-languages=c,c++',
                       '--enable-poison-system-directories',
                       '--enable-symvers=gnu',
                       '--with-sysroot=%s' % sysroot,
                       '--with-headers=%s/usr/include' % sysroot,
                       '--with-build-sysroot=%s' % sysroot]
        opts_second.extend(_host_lib_opts(cfg))
        opts_second.extend(['--with-gnu-as', '--with-gnu-ld'])
        # The second build reuses the working directory of the first,
        # which must not keep any configure results from it.
        stage2 = add_host_tool_cfg_build_stage(
            cfg, component, stages, name='gcc-stage2',
            pkg_cfg_opts=opts_second, workdir_name='gcc',
            fresh_workdir=True)
        _add_common_deps(cfg, stage2)
        stage2.depend('gcc-stage1')
        if cfg.have_component('musl'):
            stage2.depend('musl')
