# Support toolchain configurations.

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

"""Support toolchain configurations."""

import collections
import collections.abc
import functools
import os
import os.path

import rvcross.vc
from rvcross.vc import VC, UrlVC, DEFAULT_MIRRORS

__all__ = ['ConfigVarType', 'ConfigVarTypeList', 'ConfigVarTypeDict',
           'ConfigVarTypeStrEnum', 'ConfigVar', 'ConfigVarGroup',
           'ComponentInConfig', 'add_toolchain_config_arg',
           'ToolchainConfigLoader', 'ToolchainConfigPathLoader',
           'ToolchainConfigTextLoader', 'TargetConfig', 'ToolchainConfig',
           'DEFAULT_COMPONENTS']


DEFAULT_COMPONENTS = ('binutils', 'gmp', 'mpfr', 'mpc', 'isl', 'gcc', 'musl',
                      'gdb')
"""Components built when a configuration does not list any."""


_TRUE_VALUES = {'1', 'yes', 'true', 'on'}


TargetConfig = collections.namedtuple('TargetConfig',
                                      ['triplet', 'arch', 'abi', 'prefix',
                                       'sysroot'])
TargetConfig.__doc__ = """The target parameters shared by every stage.

One instance is created per ToolchainConfig, after the configuration
has been read and finalized, and every stage of the build refers to
that same instance.  Stages never derive the architecture or ABI from
anywhere else.

"""


class ConfigVarType:
    """A ConfigVarType describes the values to which a ConfigVar may be set.

    A ConfigVarType may just restrict the values to being instances of
    particular types, or it may also provide checking and conversion
    logic applied to the value specified (for example, to convert a
    list to a tuple, or to verify the values of members of some type).

    The restrictions only apply to values passed to setting methods,
    and not to the initial value specified when the variable is
    created.  Thus the initial value may be None even if that value
    is not valid for setting.

    """

    def __init__(self, context, *args):
        """Initialize a ConfigVarType object.

        The arguments passed, after the context, are valid types for
        this variable.

        """
        self.context = context
        self._types = tuple(args)

    def check(self, name, value):
        """Check whether a value is valid for the specified type.

        Returns the value after any conversions needed.

        """
        if not isinstance(value, self._types):
            self.context.error('bad type for value of toolchain config '
                               'variable %s' % name)
        return value


class ConfigVarTypeList(ConfigVarType):
    """A ConfigVarTypeList describes a list-typed ConfigVar.

    A type is specified for elements of the list.  A list or tuple may
    be passed and is converted to a tuple.  Arbitrary iterables are
    not allowed, to avoid mistakes passing a string when a list of
    strings is expected.

    """

    def __init__(self, elt_type):
        super().__init__(elt_type.context, list, tuple)
        self._elt_type = elt_type

    def check(self, name, value):
        value = super().check(name, value)
        return tuple(self._elt_type.check(name, elt) for elt in value)


class ConfigVarTypeDict(ConfigVarType):
    """A ConfigVarTypeDict describes a dict-typed ConfigVar.

    Types are specified for keys and values of the dict.  Any mapping
    may be passed and is copied.

    """

    def __init__(self, key_type, value_type):
        super().__init__(key_type.context, collections.abc.Mapping)
        self._key_type = key_type
        self._value_type = value_type

    def check(self, name, value):
        value = super().check(name, value)
        return {self._key_type.check(name, key):
                self._value_type.check(name, elt_value)
                for key, elt_value in value.items()}


class ConfigVarTypeStrEnum(ConfigVarType):
    """A ConfigVarTypeStrEnum describes a ConfigVar taking values in a
    given set of strings.

    """

    def __init__(self, context, values):
        super().__init__(context, str)
        self._values = set(values)

    def check(self, name, value):
        value = super().check(name, value)
        if value not in self._values:
            self.context.error('bad value for toolchain config variable %s'
                               % name)
        return value


class ConfigVar:
    """A ConfigVar is a toolchain config variable.

    Before a variable is set in a toolchain config, a ConfigVar must
    first have been defined for that variable (globally or as a
    variable for a particular component).  Some variables have
    defaults that are set by code if not set explicitly by the
    configuration.

    """

    def __init__(self, context, name, var_type, value, doc, internal=False):
        """Initialize a ConfigVar object."""
        self.context = context
        self._name = name
        self._finalized = False
        self._type = var_type
        self._value = value
        self._explicit = False
        self.__doc__ = doc
        self._internal = internal

    def _require_not_finalized(self):
        """Require a function to be called only before finalization."""
        if self._finalized:
            self.context.error('toolchain config variable %s modified after '
                               'finalization' % self._name)

    def set(self, value):
        """Set the value of a ConfigVar object."""
        self._require_not_finalized()
        self._value = self._type.check(self._name, value)
        self._explicit = True

    def set_implicit(self, value):
        """Set the value of a ConfigVar object.

        Unlike the set method, this does not mark it as explicitly
        set.  This is intended for components overriding the default
        for a variable shared between components, and for defaults
        determined by code run after a toolchain config has been read,
        not for direct use by configs.

        """
        self._require_not_finalized()
        self._value = self._type.check(self._name, value)

    def get(self):
        """Get the value of a ConfigVar object."""
        return self._value

    def get_explicit(self):
        """Return whether a ConfigVar object was explicitly set."""
        return self._explicit

    def get_internal(self):
        """Return whether a ConfigVar object is an internal variable.

        Internal variables are only set by logic in the
        ToolchainConfig class after a config has been read, never
        directly by configs.

        """
        return self._internal

    def finalize(self):
        """Finalize this variable.

        Finalization disallows future changes to a variable's value,
        and is run automatically after reading a toolchain config.

        """
        self._finalized = True


class ConfigVarGroup:
    """A collection of related configuration variables.

    Some variables may be directly held in a ConfigVarGroup.  A
    ConfigVarGroup may also contain other ConfigVarGroups, for
    variables associated with a particular component.

    """

    def __init__(self, context, name):
        """Initialize a ConfigVarGroup object."""
        self.context = context
        self._name = name
        self._finalized = False
        self._vars = {}
        self._vargroups = {}
        if name:
            self._name_prefix = '%s.' % name
        else:
            self._name_prefix = ''

    def __getattr__(self, name):
        """Return a member of a ConfigVarGroup."""
        if name.startswith('_'):
            raise AttributeError(name)
        if name in self._vars:
            return self._vars[name]
        if name in self._vargroups:
            return self._vargroups[name]
        raise AttributeError(name)

    def add_var(self, name, var_type, value, doc, internal=False):
        """Add a variable to a ConfigVarGroup."""
        if self._finalized:
            self.context.error('variable %s defined after finalization' % name)
        if name in self._vars:
            self.context.error('duplicate variable %s' % name)
        if name in self._vargroups:
            self.context.error('variable %s duplicates group' % name)
        var_name = '%s%s' % (self._name_prefix, name)
        self._vars[name] = ConfigVar(self.context, var_name, var_type, value,
                                     doc, internal)

    def add_group(self, name):
        """Add a ConfigVarGroup to a ConfigVarGroup.

        For example, for variables for a component.

        """
        if self._finalized:
            self.context.error('variable group %s defined after finalization'
                               % name)
        if name in self._vargroups:
            self.context.error('duplicate variable group %s' % name)
        if name in self._vars:
            self.context.error('variable group %s duplicates variable' % name)
        group_name = '%s%s' % (self._name_prefix, name)
        self._vargroups[name] = ConfigVarGroup(self.context, group_name)
        return self._vargroups[name]

    def list_vars(self):
        """Return a list of the variables in this ConfigVarGroup."""
        return sorted(self._vars.keys())

    def list_groups(self):
        """Return a list of the groups in this ConfigVarGroup."""
        return sorted(self._vargroups.keys())

    def finalize(self):
        """Finalize this ConfigVarGroup.

        Finalization disallows future changes to this group, or groups
        or variables therein, and is run automatically after reading a
        toolchain config.

        """
        self._finalized = True
        for var in self._vars:
            self._vars[var].finalize()
        for var in self._vargroups:
            self._vargroups[var].finalize()

    def add_toolchain_config_vars(self):
        """Set up a ConfigVarGroup to store variables for a toolchain
        config.

        It is assumed the ConfigVarGroup is empty before this function
        is called.

        """
        str_type = ConfigVarType(self.context, str)
        self.add_var('target', str_type, 'riscv32-linux-musl',
                     """A GNU triplet string for the target for which the
                     toolchain generates code.""")
        self.add_var('arch', str_type, 'rv32imfc',
                     """The ISA string passed to GCC as --with-arch.

                     Every stage of a build takes this value from the same
                     TargetConfig record; it is never repeated per
                     component.""")
        self.add_var('abi', str_type, 'ilp32f',
                     """The ABI string passed to GCC as --with-abi.""")
        self.add_var('installdir',
                     ConfigVarType(self.context, str, type(None)),
                     None,
                     """The install prefix of the toolchain.

                     If not specified, this is the install subdirectory of
                     the build directory.""")
        self.add_var('mirrors',
                     ConfigVarTypeDict(str_type, str_type),
                     DEFAULT_MIRRORS,
                     """A mapping from upstream URL prefixes to mirror URL
                     prefixes, used when downloading component sources.

                     The upstream URL is tried if the mirror fails.""")
        self.add_var('use_prebuilt', ConfigVarType(self.context, bool),
                     False,
                     """Whether to use the prebuilt fallback for every
                     recoverable component instead of building it from
                     source.

                     If not set explicitly, this is true when the
                     RVCROSS_USE_PREBUILT environment variable is set to 1,
                     yes, true or on.""")
        self.add_var('env_set',
                     ConfigVarTypeDict(str_type, str_type),
                     {},
                     """Environment variables to set for building this config.

                     This may include settings of PATH and LD_LIBRARY_PATH.
                     Environment variables required only by some stages are
                     set by the recipes of those stages.""")
        for component in self.context.components:
            group = self.add_group(component)
            group.add_var('configure_opts',
                          ConfigVarTypeList(str_type),
                          (),
                          """Extra options to pass to 'configure' for this
                          component.""")
            group.add_var('version', str_type, None,
                          """A version number for this component.

                          It is used in source directory names and in the
                          completion markers of the component's stages.""")
            group.add_var('url', str_type, None,
                          """The upstream URL of the source tarball.

                          If not specified, a default derived from the version
                          is used.""")
            group.add_var('vc', ConfigVarType(self.context, VC), None,
                          """The location (a VC object) from which sources for
                          this component are obtained.

                          If not specified, a UrlVC for the url variable is
                          used.""")
            group.add_var('source_type',
                          ConfigVarTypeStrEnum(self.context,
                                               {'open', 'none'}),
                          'open',
                          """One of 'open' or 'none'.

                          If 'none', this component has no source directory
                          (such components exist only for testing).""")
            group.add_var('srcdirname', str_type, component,
                          """A prefix to use in names of source directories.

                          This is used together with the specified version
                          number to produce source directory names.  The
                          default is the name of the component.""")
            group.add_var('recoverable', ConfigVarType(self.context, bool),
                          False,
                          """Whether a failed source build of this component
                          may be replaced by a prebuilt fallback.""")
            group.add_var('fallback_vc',
                          ConfigVarType(self.context, VC, type(None)),
                          None,
                          """The location (a VC object) of the prebuilt
                          fallback for this component, or None if there is
                          none.""")
            group.add_var('fallback_subdir', str_type, '',
                          """The directory, relative to the top of the
                          prebuilt fallback, whose contents are installed in
                          place of a source build.""")
            group.add_var('fallback_check', ConfigVarTypeList(str_type), (),
                          """Files, relative to the install destination, that
                          must be present and usable after installing the
                          prebuilt fallback.""")
            cls = self.context.components[component]
            cls.add_toolchain_config_vars(group)


class ComponentInConfig:
    """An instance of a component in a toolchain config."""

    def __init__(self, name, vars_group, cls):
        """Initialize a ComponentInConfig object."""
        self.name = name
        self.vars = vars_group
        self.cls = cls


def add_toolchain_config_arg(parser):
    """Add an optional toolchain config argument to an ArgumentParser."""
    parser.add_argument('toolchain_config', nargs='?', default=None,
                        help='The toolchain configuration to read '
                        '(default: build the whole toolchain with default '
                        'settings)')


class ToolchainConfigLoader:
    """How to load a toolchain config.

    A toolchain config is normally loaded from a file specified by
    path, but for testing purposes it may also be specified directly
    as text in Python code.

    """

    def load_config(self, tccfg, name):
        """Load the named config.

        This only implements the core functionality of reading a
        config.  The ToolchainConfig object's preliminary
        initialization is done by ToolchainConfig.__init__, as is
        subsequent setting of derived values of variables.

        """
        contents = self.get_config_text(tccfg, name)
        cfg_vars = {'cfg': tccfg}
        self.add_cfg_vars_extra(tccfg, cfg_vars, name)
        context_wrap = [(rvcross.vc, 'GitVC'),
                        (rvcross.vc, 'TarVC'),
                        (rvcross.vc, 'UrlVC')]
        for mod, clsname in context_wrap:
            cls = getattr(mod, clsname)
            cfg_vars[clsname] = functools.partial(cls, tccfg.context)
        exec(contents, globals(), cfg_vars)  # pylint: disable=exec-used

    def get_config_text(self, tccfg, name):
        """Return the text of the toolchain config specified."""
        raise NotImplementedError

    def add_cfg_vars_extra(self, tccfg, cfg_vars, name):
        """Add any extra variables to set when loading a config.

        Subclasses loading from a file set the name 'include' here for
        configs to be able to include files shared with other configs.

        """


class ToolchainConfigPathLoader(ToolchainConfigLoader):
    """Load a toolchain config from an absolute or relative path.

    A name of None means an empty config, that is, all defaults.

    """

    def get_config_text(self, tccfg, name):
        if name is None:
            return ''
        with open(name, 'r', encoding='utf-8') as file:
            return file.read()

    def add_cfg_vars_extra(self, tccfg, cfg_vars, name):
        if name is None:
            return
        dir_name = os.path.dirname(os.path.abspath(name))

        def include(inc_path):
            """Include a file relative to the current config."""
            nonlocal dir_name
            inc_name = os.path.normpath(os.path.join(dir_name, inc_path))
            save_dir_name = dir_name
            dir_name = os.path.dirname(inc_name)
            with open(inc_name, 'r', encoding='utf-8') as file:
                contents = file.read()
            exec(contents, globals(), cfg_vars)  # pylint: disable=exec-used
            dir_name = save_dir_name

        cfg_vars['include'] = include


class ToolchainConfigTextLoader(ToolchainConfigLoader):
    """Load a toolchain config from a string."""

    def get_config_text(self, tccfg, name):
        return name


class ToolchainConfig:
    """Configuration information for a toolchain.

    A ToolchainConfig holds all the configuration information required
    for fetching sources for and building a toolchain.  Directories
    used during the build come from command-line arguments; everything
    that affects the generated binaries comes from the config.

    """

    def __init__(self, context, toolchain_config, loader, args):
        """Initialize the ToolchainConfig from a file or text."""
        self.args = args
        self.context = context
        self._vg = ConfigVarGroup(context, '')
        self._vg.add_toolchain_config_vars()
        self._components = set()
        loader.load_config(self, toolchain_config)
        if not self._components:
            for component in DEFAULT_COMPONENTS:
                self.add_component(component)
        # Components may add further components they depend on, which
        # may in turn add others.
        done = set()
        while done != self._components:
            for component in sorted(self._components - done):
                done.add(component)
                context.components[component].add_dependencies(self)
        if not self.use_prebuilt.get_explicit():
            toggle = context.environ_orig.get('RVCROSS_USE_PREBUILT', '')
            self.use_prebuilt.set_implicit(toggle.strip().lower()
                                           in _TRUE_VALUES)
        if self.installdir.get() is None:
            self.installdir.set_implicit(os.path.join(args.objdir, 'install'))
        installdir = self.installdir.get()
        target = self.target.get()
        self._vg.add_var('bindir', ConfigVarType(self.context, str),
                         os.path.join(installdir, 'bin'),
                         """Directory for host binaries (starting with
                         installdir).""",
                         internal=True)
        self._vg.add_var('sysroot', ConfigVarType(self.context, str),
                         os.path.join(installdir, target, 'sysroot'),
                         """Directory for the target sysroot (starting with
                         installdir).""",
                         internal=True)
        self._vg.add_var('hostlibdir', ConfigVarType(self.context, str),
                         os.path.join(args.objdir, 'host-libs'),
                         """Prefix into which the host libraries used by GCC
                         and GDB (GMP, MPFR, MPC, ISL) are installed.""",
                         internal=True)
        self._components_full = []
        self._components_full_byname = {}
        mirrors = self.mirrors.get()
        for component in sorted(self._components):
            c_vars = self.get_component_vars(component)
            cls = context.components[component]
            c_in_cfg = ComponentInConfig(component, c_vars, cls)
            self._components_full.append(c_in_cfg)
            self._components_full_byname[component] = c_in_cfg
            if c_vars.source_type.get() != 'none':
                version = c_vars.version.get()
                if version is None:
                    self.context.error('no version specified for %s'
                                       % component)
                if c_vars.url.get() is None:
                    url = cls.default_url(version)
                    if url is not None:
                        c_vars.url.set_implicit(url)
                if c_vars.vc.get() is None:
                    if c_vars.url.get() is None:
                        self.context.error('no source location for %s'
                                           % component)
                    c_vars.vc.set_implicit(UrlVC(context, c_vars.url.get()))
                c_srcdir = '%s-%s' % (c_vars.srcdirname.get(), version)
                c_vars.add_var('srcdir', ConfigVarType(self.context, str),
                               os.path.join(args.srcdir, c_srcdir),
                               """Source directory for this component.""",
                               internal=True)
            for vc_obj in (c_vars.vc.get(), c_vars.fallback_vc.get()):
                if isinstance(vc_obj, UrlVC) and vc_obj.mirrors is None:
                    vc_obj.mirrors = dict(mirrors)
        self._components_full = tuple(self._components_full)
        self._vg.finalize()
        self.target_config = TargetConfig(target, self.arch.get(),
                                          self.abi.get(), installdir,
                                          self.sysroot.get())

    def __getattr__(self, name):
        """Return a variable or group thereof from a toolchain config."""
        if name.startswith('_'):
            raise AttributeError(name)
        return getattr(self._vg, name)

    def list_vars(self):
        """Return a list of the variables in a toolchain config."""
        return self._vg.list_vars()

    def add_component(self, name):
        """Add a component to a toolchain config.

        It is OK to add a component that is already present.

        """
        if name not in self.context.components:
            self.context.error('unknown component %s' % name)
        self._components.add(name)

    def have_component(self, name):
        """Return whether a component is present in a toolchain config."""
        return name in self._components

    def list_components(self):
        """Return a list of the components in a toolchain config."""
        return self._components_full

    def list_source_components(self):
        """Return a list of the components in a toolchain config with
        sources."""
        return tuple(c for c in self._components_full
                     if c.vars.source_type.get() != 'none')

    def get_component(self, component):
        """Get the ComponentInConfig object for a component."""
        return self._components_full_byname[component]

    def get_component_vars(self, component):
        """Get the ConfigVarGroup for per-component variables."""
        if component not in self._components:
            self.context.error('component %s not in config' % component)
        return getattr(self, component)

    def get_component_var(self, component, var):
        """Get the value of a per-component variable."""
        c_vars = self.get_component_vars(component)
        return getattr(c_vars, var).get()

    def objdir_path(self, name):
        """Return the name to use for a working directory."""
        return os.path.join(self.args.objdir, name)

    def state_dir(self):
        """Return the directory holding completion markers."""
        return self.args.objdir
