# rvcross-builder self-test command.

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

"""rvcross-builder self-test command."""

import importlib
import unittest

import rvcross.command

__all__ = ['Command']


class Command(rvcross.command.Command):
    """rvcross-builder self-test implementation."""

    short_desc = 'Run self-tests of rvcross-builder.'

    long_desc = """The self-tests build small shell-command stages in temporary
    directories; they do not download or build any toolchain component."""

    @staticmethod
    def add_arguments(parser):
        parser.add_argument('--quiet', action='store_true',
                            help='Do not list each test as it runs')
        parser.add_argument('pattern', nargs='?', default='test*.py',
                            help='Run only test modules matching PATTERN '
                            '(default test*.py)')

    @staticmethod
    def main(context, tccfg, args):
        top_suite = unittest.TestSuite()
        for pkg in context.package_list:
            pkg_str = pkg + '.selftests'
            pkg_str_init = pkg_str + '.__init__'
            pkg_mod = importlib.import_module(pkg_str_init)
            pkg_len = len(pkg_str_init.split('.'))
            pkg_path = pkg_mod.__file__.rsplit('/', pkg_len)[0]
            suite = unittest.defaultTestLoader.discover(
                pkg_str, pattern=args.pattern, top_level_dir=pkg_path)
            top_suite.addTest(suite)
        result = unittest.TextTestRunner(
            verbosity=1 if args.quiet else 2).run(top_suite)
        if not result.wasSuccessful():
            context.error('self-tests failed')
