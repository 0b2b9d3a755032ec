# Support building toolchains.

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

"""Support building toolchains."""

import datetime
import os
import os.path
import shutil

from rvcross.fallback import FallbackProvider
from rvcross.pipeline import Pipeline
from rvcross.runner import StageRunner
from rvcross.stage import StageList
from rvcross.store import FileArtifactStore

__all__ = ['log_subdir_name', 'latest_log_dir', 'BuildContext']


def log_subdir_name(now=None):
    """Return the name of the log directory for a build started now."""
    if now is None:
        now = datetime.datetime.now()
    return now.strftime('%Y%m%d_%H%M%S')


def latest_log_dir(logdir):
    """Return the most recent log directory under logdir, or None."""
    if not os.path.isdir(logdir):
        return None
    subdirs = sorted(entry.name for entry in os.scandir(logdir)
                     if entry.is_dir())
    if not subdirs:
        return None
    return os.path.join(logdir, subdirs[-1])


class BuildContext:
    """A BuildContext represents the configuration for a build.

    It holds the record of built stages, the stage runner and the
    fallback provider for a toolchain config, and runs the stages of
    that config through a Pipeline.  Any of those may be passed in
    place of the defaults, for testing.

    """

    def __init__(self, context, tccfg, args, store=None, runner=None,
                 fallback=None):
        """Initialize a BuildContext for a configuration."""
        self.context = context
        self.tccfg = tccfg
        self.logdir = os.path.join(args.logdir, log_subdir_name())
        self.parallelism = getattr(args, 'parallelism', None)
        if store is None:
            store = FileArtifactStore(context, tccfg.state_dir())
        self.store = store
        if runner is None:
            runner = StageRunner(context, self.logdir, self.parallelism)
        self.runner = runner
        if fallback is None:
            fallback = FallbackProvider(context, args.srcdir)
        self.fallback = fallback

    def setup_stages(self):
        """Return the StageList for the configuration."""
        stages = StageList(self.context)
        for component in self.tccfg.list_components():
            component.cls.add_build_stages(self.tccfg, component, stages)
        return stages

    def pipeline(self):
        """Return the Pipeline for the configuration."""
        return Pipeline(self.context, self.tccfg.target_config, self.store,
                        self.runner, self.fallback,
                        self.tccfg.use_prebuilt.get())

    def ordered_stages(self):
        """Return the stages of the configuration in build order."""
        return self.pipeline().order(self.setup_stages())

    def checkout_sources(self):
        """Fetch the sources of all components not already present."""
        for component in self.tccfg.list_source_components():
            self.context.inform('checking out %s %s'
                                % (component.name,
                                   component.vars.version.get()))
            component.vars.vc.get().checkout_component(component)

    def run_build(self):
        """Run the build, returning the PipelineResult."""
        stages = self.setup_stages()
        self.context.inform('logs in %s' % self.logdir)
        result = self.pipeline().run_all(stages)
        self.context.inform('toolchain installed in %s'
                            % self.tccfg.target_config.prefix)
        return result

    def clean(self):
        """Remove records of built stages and build directories.

        The sources and the install prefix are left alone.

        """
        self.store.reset()
        dirs = set(stage.workdir for stage in self.setup_stages())
        dirs.add(self.tccfg.hostlibdir.get())
        for directory in sorted(dirs):
            if os.path.lexists(directory):
                self.context.inform('removing %s' % directory)
                shutil.rmtree(directory)
