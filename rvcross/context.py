# Global script context and errors.

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

"""Global script context and errors."""

import argparse
import datetime
import importlib
import locale
import os
import os.path
import shlex
import subprocess
import sys

from rvcross.toolcfg import ToolchainConfig

__all__ = ['add_common_options', 'add_parallelism_option', 'ScriptError',
           'ScriptContext']


def add_common_options(parser, cwd):
    """Add the script-independent options to an argument parser."""
    parser.add_argument('-o', type=os.path.abspath, metavar='DIR',
                        dest='objdir',
                        default=os.path.join(cwd, 'build_riscv32'),
                        help='Use DIR for build directories, host libraries, '
                        'the default install prefix and completion markers '
                        '(default $(pwd)/build_riscv32)')
    parser.add_argument('-s', type=os.path.abspath, metavar='DIR',
                        dest='srcdir',
                        default=os.path.join(cwd, 'src'),
                        help='Use DIR for toolchain source trees '
                        '(default $(pwd)/src)')
    parser.add_argument('-l', type=os.path.abspath, metavar='DIR',
                        dest='logdir', default=None,
                        help='Use DIR for build log files '
                        '(default build directory/logs)')
    parser.add_argument('-v', action='store_true', dest='verbose',
                        help='Emit verbose messages')
    parser.add_argument('--silent', action='store_true', dest='silent',
                        help='Do not emit informational messages')


def _parallelism(value):
    """Convert a -j argument, rejecting values below 1."""
    num = int(value)
    if num < 1:
        raise argparse.ArgumentTypeError('parallelism must be at least 1')
    return num


def add_parallelism_option(parser):
    """Add the -j option for parallelism to an argument parser."""
    parser.add_argument('-j', type=_parallelism, dest='parallelism',
                        default=max(os.cpu_count() or 1, 1),
                        help='Use PARALLELISM jobs for make '
                        '(default = number of CPU cores)')


class ScriptError(Exception):
    """Errors detected by a script."""


class ScriptContext:
    """Global context for a script as a whole."""

    def __init__(self, extra=None):
        """Initialize a context.

        A list of names of extra packages in which to find commands
        and components may be provided.  These are listed in order
        from least to most derived.

        """
        # The script arguments (set in main).
        self.argv = None
        # The name of the script without sub-command to use in
        # diagnostic messages.
        self.script_only = os.path.basename(sys.argv[0])
        # The name of the script to use in diagnostic messages.
        self.script = self.script_only
        # Whether to suppress informational messages.
        self.silent = False
        # Whether to print verbose messages.
        self.verbose_messages = False
        # Where to print messages.
        self.message_file = sys.stderr
        # Whether to suppress output from executed processes that are
        # not redirected to a log file.
        self.execute_silent = False
        # The environment cleaned up by the script (os.environ unless
        # changed for testing purposes).
        self.environ = os.environ
        # The initial environment before cleanup.  Toggles such as
        # RVCROSS_USE_PREBUILT are read from here.
        self.environ_orig = dict(self.environ)
        # How to set locale (locale.setlocale unless changed for
        # testing purposes).
        self.setlocale = locale.setlocale
        # How to set umask (os.umask unless changed for testing
        # purposes).
        self.umask = os.umask
        load_list = ['rvcross']
        if extra is not None:
            load_list.extend(extra)
        # The list of packages from which commands and components are
        # loaded.
        self.package_list = tuple(load_list)
        self._load_commands()
        self._load_components()
        # Set by tests only, otherwise unused.
        self.called_with_args = None
        self.called_with_tccfg = None

    def _load_subunits(self, mod_name, subpkg_name, class_name, do_replace):
        """Load the modules for commands or components.

        Each package (in self.package_list) is expected to have a
        module named mod_name, with a class named class_name, as well
        as to contain a package named subpkg_name, which contains the
        individual subunits (commands or components); if do_replace,
        the logical name of such a subunit contains '-' where the
        module name contains '_'.  A subunit X present in more than one
        package gets a class constructed dynamically that inherits, in
        order from most to least derived, from each package's
        subpkg_name.X.class_name and mod_name.class_name.

        """
        pkgs_base = {}
        pkgs_sub = {}
        subunits = set()
        for pkg in self.package_list:
            base_str = '%s.%s' % (pkg, mod_name)
            base_mod = importlib.import_module(base_str)
            pkgs_base[pkg] = getattr(base_mod, class_name)
            pkg_str = '%s.%s' % (pkg, subpkg_name)
            pkg_mod = importlib.import_module(pkg_str)
            pkgs_sub[pkg] = {}
            for subunit in pkg_mod.__all__:
                mod = importlib.import_module('%s.%s' % (pkg_str, subunit))
                if do_replace:
                    subunit = subunit.replace('_', '-')
                subunits.add(subunit)
                pkgs_sub[pkg][subunit] = getattr(mod, class_name)
        subunits_ret = {}
        for subunit in sorted(subunits):
            bases = []
            last_class = None
            for pkg in self.package_list:
                bases.append(pkgs_base[pkg])
                if subunit in pkgs_sub[pkg]:
                    last_class = pkgs_sub[pkg][subunit]
                    bases.append(last_class)
                else:
                    last_class = None
            for base in bases:
                if last_class is not None:
                    if not issubclass(last_class, base):
                        last_class = None
            bases = tuple(reversed(bases))
            if last_class is None:
                last_class = type(class_name, bases, {})
            else:
                # Construct a class and throw it away to ensure an
                # error if the method resolution order is not as
                # expected.
                type(class_name, bases, {})
            subunits_ret[subunit] = last_class
        return subunits_ret

    def _load_commands(self):
        """Load the modules for all rvcross-builder commands."""
        self.commands = self._load_subunits('command', 'commands', 'Command',
                                            True)

    def _load_components(self):
        """Load the modules for all rvcross-builder components."""
        self.components = self._load_subunits('component', 'components',
                                              'Component', False)

    def _set_script(self, script):
        """Set the name of the script for use in diagnostic messages."""
        self.script = '%s %s' % (self.script_only, script)

    def inform(self, message):
        """Print an informational message."""
        if not self.silent:
            timestamp = datetime.datetime.today()
            timestr = timestamp.strftime('[%H:%M:%S] ')
            print(timestr + message, file=self.message_file)

    def inform_start(self, argv):
        """Print a message about a script starting."""
        self.inform('%s %s starting...' % (self.script_only, ' '.join(argv)))

    def inform_end(self):
        """Print a message about a script ending."""
        self.inform('... %s complete.' % self.script)

    def verbose(self, message):
        """Print a verbose message."""
        if self.verbose_messages:
            print('%s: %s' % (self.script, message), file=self.message_file)

    def warning(self, message):
        """Print a warning message."""
        print('%s: warning: %s' % (self.script, message),
              file=self.message_file)

    def error(self, message):
        """Print an error message and exit.

        This function exists, rather than callers raising an exception
        directly, for interface consistency with the other functions
        printing messages.

        """
        raise ScriptError('%s: error: %s' % (self.script, message))

    def execute(self, cmd, cwd=None, env=None, log=None):
        """Print and execute the given command, checking for errors.

        If log is specified, the command line followed by standard
        output and standard error of the command are appended to that
        file; otherwise they go to the standard output and standard
        error of the calling script.  The current working directory of
        the calling script is used if cwd is not specified, and
        self.environ if env is not specified.  Failure raises
        subprocess.CalledProcessError, or OSError if the program could
        not be run at all.

        """
        cmd_quoted = [shlex.quote(s) for s in cmd]
        cmd_str = ' '.join(cmd_quoted)
        if cwd is not None:
            cmd_str = 'pushd %s; %s; popd' % (shlex.quote(cwd), cmd_str)
        if log is None:
            if not self.silent:
                print(cmd_str, file=self.message_file)
        else:
            self.verbose(cmd_str)
        if env is None:
            env = self.environ
        if log is not None:
            with open(log, 'a', encoding='utf-8') as log_file:
                log_file.write('%s\n' % cmd_str)
                log_file.flush()
                subprocess.run(cmd, stdin=subprocess.DEVNULL, cwd=cwd,
                               env=env, check=True, stdout=log_file,
                               stderr=subprocess.STDOUT)
            return
        if self.execute_silent:
            silent_args = {'stdout': subprocess.DEVNULL,
                           'stderr': subprocess.DEVNULL}
        else:
            silent_args = {}
        subprocess.run(cmd, stdin=subprocess.DEVNULL, cwd=cwd, env=env,
                       check=True, **silent_args)

    def clean_environment(self, extra_vars=None):
        """Clean the environment in which this script is run.

        If extra_vars is specified, it contains extra environment
        variables to set, determined from a toolchain configuration.

        """
        self.setlocale(locale.LC_ALL, 'C')
        self.umask(0o022)
        if extra_vars is None:
            extra_vars = {}
        # Environment variables that are safe to keep and may be
        # required by subprocesses or by downloads.
        env_vars_keep = {'HOME', 'LOGNAME', 'SSH_AUTH_SOCK', 'TERM', 'USER',
                         'TMPDIR', 'http_proxy', 'https_proxy', 'no_proxy',
                         'HTTP_PROXY', 'HTTPS_PROXY', 'NO_PROXY'}
        # Environment variables kept initially, but possibly replaced
        # after a toolchain configuration is loaded.
        env_vars_replace_cfg = {'PATH', 'LD_LIBRARY_PATH'}
        # Environment variables set to fixed values.
        env_vars_replace = {'LANG': 'C', 'LC_ALL': 'C'}
        remove_vars = set()
        for key in self.environ:
            if key in env_vars_keep:
                pass
            elif key in env_vars_replace_cfg:
                if key in extra_vars:
                    remove_vars.add(key)
            elif key not in env_vars_replace:
                remove_vars.add(key)
        for key in remove_vars:
            del self.environ[key]
        for key in env_vars_replace:
            self.environ[key] = env_vars_replace[key]
        for key in extra_vars:
            self.environ[key] = extra_vars[key]

    def main(self, loader, argv):
        """Main rvcross-builder command."""
        self.argv = argv
        self.clean_environment()
        parser = argparse.ArgumentParser(prog=self.script_only)
        add_common_options(parser, os.getcwd())
        subparsers = parser.add_subparsers(dest='cmd_name')
        subparsers.required = True
        for cmd in sorted(self.commands.keys()):
            cls = self.commands[cmd]
            subparser = subparsers.add_parser(cmd, description=cls.short_desc,
                                              help=cls.short_desc,
                                              epilog=cls.long_desc)
            cls.add_arguments(subparser)
        args = parser.parse_args(argv)
        if args.logdir is None:
            args.logdir = os.path.join(args.objdir, 'logs')
        self.silent = args.silent
        self.verbose_messages = args.verbose
        self._set_script(args.cmd_name)
        self.inform_start(argv)
        cmd_cls = self.commands[args.cmd_name]
        if 'toolchain_config' in vars(args):
            tccfg = ToolchainConfig(self, args.toolchain_config, loader, args)
            self.clean_environment(extra_vars=tccfg.env_set.get())
        else:
            tccfg = None
        cmd_cls.main(self, tccfg, args)
        self.inform_end()
