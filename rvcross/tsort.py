# Implement topological sort.

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

"""Order build stages by their dependencies."""

__all__ = ['tsort']


def _visit(context, deps, name, path, done, result):
    """Add name to result after everything it depends on.

    path lists the entities whose dependencies are being visited,
    outermost first, for reporting cycles.

    """
    if name in done:
        return
    if name not in deps:
        context.error('unknown dependency %s of %s' % (name, path[-1]))
    if name in path:
        cycle = path[path.index(name):] + [name]
        context.error('circular dependency: %s' % ' -> '.join(cycle))
    path.append(name)
    for dep in sorted(deps[name]):
        _visit(context, deps, dep, path, done, result)
    path.pop()
    done.add(name)
    result.append(name)


def tsort(context, deps):
    """Topologically sort by dependencies.

    Given a mapping from entities to their dependencies, return a
    topologically sorted list in which each entity's dependencies come
    before that entity.  Entities with no ordering between them come
    in sorted order, so the result depends only on the mapping.  A
    dependency that is not itself a key of the mapping is an error, as
    is a cycle, which is reported in full.

    """
    result = []
    done = set()
    for name in sorted(deps):
        _visit(context, deps, name, [], done, result)
    return result
