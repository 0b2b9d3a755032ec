# Run the stages of a toolchain build in dependency order.

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

"""Run the stages of a toolchain build in dependency order.

Stages run one at a time, each only after all the stages it depends
on have been built.  A stage already recorded as built is skipped.  A
stage that fails is fatal to the build unless it is recoverable, in
which case its prebuilt fallback is installed instead and the build
continues as if it had been built from source.

"""

import collections
import enum

from rvcross.context import ScriptError
from rvcross.fallback import FallbackError
from rvcross.tsort import tsort

__all__ = ['BuildState', 'PipelineError', 'StageOutcome', 'PipelineResult',
           'Pipeline']


class BuildState(enum.Enum):
    """The state of a stage during one run of a pipeline."""

    PENDING = 'pending'
    RUNNING = 'running'
    BUILT = 'built'
    FAILED = 'failed'


_TRANSITIONS = {
    BuildState.PENDING: {BuildState.RUNNING, BuildState.BUILT},
    BuildState.RUNNING: {BuildState.BUILT, BuildState.FAILED},
    BuildState.FAILED: {BuildState.BUILT},
    BuildState.BUILT: set(),
}


class PipelineError(ScriptError):
    """A stage failed and the build cannot continue."""

    def __init__(self, message, stage_name, log):
        super().__init__(message)
        self.stage_name = stage_name
        self.log = log


StageOutcome = collections.namedtuple('StageOutcome',
                                      ['name', 'version', 'state',
                                       'provenance', 'built_now'])


class PipelineResult:
    """The outcomes of the stages of a completed pipeline run, in order."""

    def __init__(self, outcomes):
        self.outcomes = tuple(outcomes)
        self._byname = {outcome.name: outcome for outcome in self.outcomes}

    def names(self):
        """Return the names of the stages, in the order run."""
        return [outcome.name for outcome in self.outcomes]

    def built_now(self):
        """Return the names of the stages built in this run."""
        return [outcome.name for outcome in self.outcomes
                if outcome.built_now]

    def state(self, name):
        """Return the final state of a stage."""
        return self._byname[name].state

    def provenance(self, name):
        """Return the provenance of a built stage."""
        return self._byname[name].provenance


class Pipeline:
    """Run build stages in order, recording which are built.

    The store records built stages, the runner runs the steps of a
    stage and the fallback provider installs prebuilt fallbacks.  If
    use_prebuilt, recoverable stages use their prebuilt fallback
    without trying to build from source.

    """

    def __init__(self, context, target_cfg, store, runner, fallback,
                 use_prebuilt=False):
        self.context = context
        self.target_cfg = target_cfg
        self.store = store
        self.runner = runner
        self.fallback = fallback
        self.use_prebuilt = use_prebuilt
        self.states = {}

    def order(self, stages):
        """Return the stages in the order in which they are to run."""
        byname = {}
        for stage in stages:
            if stage.name in byname:
                self.context.error('duplicate stage name: %s' % stage.name)
            byname[stage.name] = stage
        deps = {}
        for name, stage in byname.items():
            for dep in stage.depends:
                if dep not in byname:
                    self.context.error('stage %s depends on unknown stage %s'
                                       % (name, dep))
            deps[name] = set(stage.depends)
        return [byname[name] for name in tsort(self.context, deps)]

    def _transition(self, stage, new_state):
        """Move a stage to a new state."""
        old_state = self.states[stage.name]
        if new_state not in _TRANSITIONS[old_state]:
            self.context.error('invalid state transition for %s: %s to %s'
                               % (stage.name, old_state.value,
                                  new_state.value))
        self.states[stage.name] = new_state

    def _supply_fallback(self, stage, log):
        """Install the fallback for a stage, marking it built."""
        try:
            self.fallback.supply(stage)
        except FallbackError as exc:
            if self.states[stage.name] is BuildState.RUNNING:
                self._transition(stage, BuildState.FAILED)
            raise PipelineError('%s: error: stage %s failed and no fallback '
                                'could be used: %s'
                                % (self.context.script, stage.name, exc),
                                stage.name, log) from exc
        self.store.mark_built(stage.name, stage.version, 'fallback')
        self._transition(stage, BuildState.BUILT)

    def run_all(self, stages):
        """Run all stages not already built, returning a PipelineResult.

        Raises PipelineError if a stage fails and cannot be replaced
        by a fallback; stages built before that remain recorded as
        built, and no later stage is run.

        """
        ordered = self.order(stages)
        for stage in ordered:
            if stage.target_cfg is not self.target_cfg:
                self.context.error('stage %s uses a different target '
                                   'configuration' % stage.name)
        self.states = {stage.name: BuildState.PENDING for stage in ordered}
        outcomes = []
        num_stages = len(ordered)
        for num, stage in enumerate(ordered, 1):
            progress = '[%04d/%04d]' % (num, num_stages)
            provenance = self.store.provenance(stage.name, stage.version)
            if provenance is not None:
                self._transition(stage, BuildState.BUILT)
                self.context.inform('%s %s %s already built, skipping'
                                    % (progress, stage.name, stage.version))
                outcomes.append(StageOutcome(stage.name, stage.version,
                                             BuildState.BUILT, provenance,
                                             False))
                continue
            self.context.inform('%s %s start' % (progress, stage.name))
            self._transition(stage, BuildState.RUNNING)
            if self.use_prebuilt and stage.recoverable:
                self.context.inform('using prebuilt fallback for %s'
                                    % stage.name)
                self._supply_fallback(stage, None)
                provenance = 'fallback'
            else:
                result = self.runner.run(stage)
                if result.ok:
                    self.store.mark_built(stage.name, stage.version, 'source')
                    self._transition(stage, BuildState.BUILT)
                    provenance = 'source'
                else:
                    self._transition(stage, BuildState.FAILED)
                    if not stage.recoverable:
                        raise PipelineError('%s: error: stage %s failed; '
                                            'see %s'
                                            % (self.context.script,
                                               stage.name, result.log),
                                            stage.name,
                                            result.log) from result.error
                    self.context.warning('stage %s failed, using prebuilt '
                                         'fallback' % stage.name)
                    self._supply_fallback(stage, result.log)
                    provenance = 'fallback'
            self.context.inform('%s %s end (%s)' % (progress, stage.name,
                                                    provenance))
            outcomes.append(StageOutcome(stage.name, stage.version,
                                         BuildState.BUILT, provenance, True))
        return PipelineResult(outcomes)
