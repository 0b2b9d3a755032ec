# Record which stages have been built.

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

"""Record which stages have been built.

A record (stage name, version) -> provenance is created once, after
the last side effect of a stage has completed, and is never modified
afterwards; a stage is either recorded as built or not recorded at
all.  The provenance is 'source' for a stage built from its sources
and 'fallback' for one whose prebuilt fallback was installed.

"""

import os
import os.path
import tempfile

from rvcross.context import ScriptError

__all__ = ['PROVENANCES', 'StateStoreError', 'ArtifactStore',
           'MemoryArtifactStore', 'FileArtifactStore']


PROVENANCES = ('source', 'fallback')


class StateStoreError(ScriptError):
    """Errors reading or writing the record of built stages."""


class ArtifactStore:
    """Base class for records of built stages."""

    def __init__(self, context):
        self.context = context

    def _check_key(self, name, version):
        """Check a stage name and version are usable as a key."""
        for part in (name, version):
            if not part or '/' in part or '\n' in part:
                self.context.error('invalid stage name or version: %s %s'
                                   % (name, version))

    def _check_provenance(self, provenance):
        """Check a provenance value is valid."""
        if provenance not in PROVENANCES:
            self.context.error('invalid provenance: %s' % provenance)

    def is_built(self, name, version):
        """Return whether the given stage version is recorded as built."""
        return self.provenance(name, version) is not None

    def provenance(self, name, version):
        """Return the provenance of a built stage, or None if not built."""
        raise NotImplementedError

    def mark_built(self, name, version, provenance='source'):
        """Record the given stage version as built."""
        raise NotImplementedError

    def records(self):
        """Return a sorted list of (name, version, provenance) tuples."""
        raise NotImplementedError

    def reset(self):
        """Remove all records."""
        raise NotImplementedError


class MemoryArtifactStore(ArtifactStore):
    """Records of built stages held in memory, for testing."""

    def __init__(self, context):
        super().__init__(context)
        self._records = {}

    def provenance(self, name, version):
        self._check_key(name, version)
        return self._records.get((name, version))

    def mark_built(self, name, version, provenance='source'):
        self._check_key(name, version)
        self._check_provenance(provenance)
        self._records[(name, version)] = provenance

    def records(self):
        return sorted((name, version, prov)
                      for (name, version), prov in self._records.items())

    def reset(self):
        self._records = {}


class FileArtifactStore(ArtifactStore):
    """Records of built stages held as marker files in a directory.

    The marker for a stage is named .NAME_built_VERSION and contains
    the provenance.  Markers are written to a temporary file that is
    then renamed into place, so a marker is always either complete or
    absent.

    """

    _MARKER_INFIX = '_built_'

    def __init__(self, context, root):
        super().__init__(context)
        self.root = root

    def marker_path(self, name, version):
        """Return the path of the marker for a stage version."""
        self._check_key(name, version)
        return os.path.join(self.root, '.%s%s%s' % (name, self._MARKER_INFIX,
                                                    version))

    def provenance(self, name, version):
        path = self.marker_path(name, version)
        try:
            with open(path, 'r', encoding='utf-8') as file:
                provenance = file.read().strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StateStoreError('%s: error: could not read %s: %s'
                                  % (self.context.script, path, exc))
        if provenance not in PROVENANCES:
            raise StateStoreError('%s: error: corrupt marker %s'
                                  % (self.context.script, path))
        return provenance

    def mark_built(self, name, version, provenance='source'):
        self._check_provenance(provenance)
        path = self.marker_path(name, version)
        tmpname = None
        try:
            os.makedirs(self.root, exist_ok=True)
            fd, tmpname = tempfile.mkstemp(dir=self.root, prefix='.tmp-')
            with os.fdopen(fd, 'w', encoding='utf-8') as file:
                file.write('%s\n' % provenance)
            os.replace(tmpname, path)
        except OSError as exc:
            if tmpname is not None and os.path.exists(tmpname):
                os.remove(tmpname)
            raise StateStoreError('%s: error: could not write %s: %s'
                                  % (self.context.script, path, exc))

    def _marker_names(self):
        """Return the names of marker files in the root directory."""
        try:
            names = os.listdir(self.root)
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StateStoreError('%s: error: could not list %s: %s'
                                  % (self.context.script, self.root, exc))
        return sorted(name for name in names
                      if name.startswith('.')
                      and self._MARKER_INFIX in name
                      and not name.startswith('.tmp-'))

    def records(self):
        ret = []
        for marker in self._marker_names():
            name, version = marker[1:].split(self._MARKER_INFIX, 1)
            ret.append((name, version, self.provenance(name, version)))
        return sorted(ret)

    def reset(self):
        for marker in self._marker_names():
            path = os.path.join(self.root, marker)
            try:
                os.remove(path)
            except OSError as exc:
                raise StateStoreError('%s: error: could not remove %s: %s'
                                      % (self.context.script, path, exc))
