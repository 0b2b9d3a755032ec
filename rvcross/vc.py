# Support fetching component sources.

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

"""Support fetching component sources."""

import glob
import os
import os.path
import tarfile
import tempfile

import requests

__all__ = ['DEFAULT_MIRRORS', 'TAR_SUFFIXES', 'mirror_url', 'unpack_tarball',
           'VC', 'GitVC', 'TarVC', 'UrlVC']


DEFAULT_MIRRORS = {
    'https://ftp.gnu.org/gnu/': 'https://mirrors.tuna.tsinghua.edu.cn/gnu/',
    'https://musl.libc.org/releases/':
    'https://mirrors.tuna.tsinghua.edu.cn/musl/releases/',
}
"""Default mapping from upstream URL prefixes to mirror URL prefixes."""


TAR_SUFFIXES = ('.tar.gz', '.tgz', '.tar.bz2', '.tar.xz')
"""Suffixes of archives that can be unpacked."""


DOWNLOAD_TIMEOUT = 30
DOWNLOAD_TRIES = 5


def _strip_scheme(url):
    """Return a URL without an http or https scheme, or None."""
    for scheme in ('https://', 'http://'):
        if url.startswith(scheme):
            return url[len(scheme):]
    return None


def mirror_url(url, mirrors):
    """Return the mirror URL to try first for the given URL.

    mirrors maps upstream URL prefixes to mirror prefixes; http and
    https forms of a prefix are treated as the same prefix.  The
    longest matching prefix is used.  If no prefix matches, the URL is
    returned unchanged.

    """
    rest = _strip_scheme(url)
    if rest is None:
        return url
    for prefix in sorted(mirrors, key=len, reverse=True):
        prefix_rest = _strip_scheme(prefix)
        if prefix_rest is None:
            prefix_rest = prefix
        if rest.startswith(prefix_rest):
            return mirrors[prefix] + rest[len(prefix_rest):]
    return url


def unpack_tarball(context, path, dest):
    """Unpack a tarball to a directory that does not yet exist.

    If the tarball unpacked to a single directory, that becomes the
    destination directory.  In any other case, the contents of the
    tarball are the contents of the destination directory.  The parent
    of the destination must exist.

    """
    if not path.endswith(TAR_SUFFIXES):
        context.error('unsupported archive format: %s' % path)
    parent = os.path.dirname(dest)
    with tempfile.TemporaryDirectory(dir=parent) as tempdir:
        thisdir = os.path.join(tempdir, 'tar-contents')
        os.mkdir(thisdir)
        context.verbose('unpacking %s' % path)
        try:
            with tarfile.open(path, 'r:*') as tar:
                tar.extractall(thisdir, filter='tar')
        except (tarfile.TarError, OSError) as exc:
            context.error('could not unpack %s: %s' % (path, exc))
        contents = list(os.scandir(thisdir))
        if len(contents) == 1 and contents[0].is_dir(follow_symlinks=False):
            os.rename(contents[0].path, dest)
        else:
            os.rename(thisdir, dest)


class VC:
    """Support fetching sources.

    This is a base class for classes for particular kinds of source
    location (the vc_checkout method).  In addition, it provides
    operations that are implemented on top of that method but do not
    themselves depend on the kind of location in use.

    """

    def __init__(self, context):
        self.context = context

    def vc_checkout(self, srcdir):
        """Fetch sources into a directory.

        The directory must not exist; it is the caller's
        responsibility to check this, and to ensure that the parent
        directory of the specified directory already exists.

        """
        raise NotImplementedError

    def fetch(self, dest):
        """Fetch sources into dest unless they are already there.

        A destination that exists and is not empty is left alone; an
        empty one is removed and fetched again.

        """
        if os.path.isdir(dest) and os.listdir(dest):
            self.context.verbose('%s already present, not fetching' % dest)
            return
        if os.path.isdir(dest):
            os.rmdir(dest)
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        self.vc_checkout(dest)

    def checkout_component(self, component):
        """Fetch sources for a component unless already present.

        Files the component lists in files_to_touch are then touched,
        and its postcheckout hook run, in any case.

        """
        srcdir = component.vars.srcdir.get()
        self.fetch(srcdir)
        files_to_touch = []
        for filename in component.cls.files_to_touch:
            files_to_touch.extend(sorted(glob.glob(os.path.join(srcdir,
                                                                filename),
                                                   recursive=True)))
        # Calling the touch program gives all the files the same
        # timestamp without dealing with nanosecond timestamps here.
        if files_to_touch:
            self.context.execute(['touch'] + files_to_touch)
        component.cls.postcheckout(self.context, component)


class GitVC(VC):
    """Class for sources coming from git."""

    def __init__(self, context, uri, branch='master'):
        super().__init__(context)
        self._uri = uri
        self._branch = branch

    def __repr__(self):
        """Return a textual representation of a GitVC object.

        The representation is in the form a GitVC call might appear in
        a toolchain config, omitting the context argument.

        """
        return 'GitVC(%s, %s)' % (repr(self._uri), repr(self._branch))

    def vc_checkout(self, srcdir):
        self.context.execute(['git', 'clone', '--depth', '1', '-b',
                              self._branch, '-q', self._uri, srcdir])


class TarVC(VC):
    """Class for sources coming from local tarballs."""

    def __init__(self, context, path):
        super().__init__(context)
        self._path = path

    def __repr__(self):
        """Return a textual representation of a TarVC object.

        The representation is in the form a TarVC call might appear in
        a toolchain config, omitting the context argument.

        """
        return 'TarVC(%s)' % repr(self._path)

    def vc_checkout(self, srcdir):
        unpack_tarball(self.context, self._path, srcdir)


class UrlVC(VC):
    """Class for sources coming from tarballs downloaded over HTTP.

    The mirror for the URL, if any, is tried before the URL itself.
    Downloaded tarballs are kept in a .downloads directory next to
    the directory being fetched, so an interrupted unpack does not
    need a new download.

    """

    def __init__(self, context, url, mirrors=None):
        super().__init__(context)
        self._url = url
        self.mirrors = mirrors

    def __repr__(self):
        """Return a textual representation of a UrlVC object.

        The representation is in the form a UrlVC call might appear in
        a toolchain config, omitting the context argument.

        """
        return 'UrlVC(%s)' % repr(self._url)

    def urls(self):
        """Return the URLs to try, in order."""
        if self.mirrors:
            mirror = mirror_url(self._url, self.mirrors)
            if mirror != self._url:
                return [mirror, self._url]
        return [self._url]

    def _download_one(self, url, filename):
        """Download one URL to a file."""
        self.context.verbose('downloading %s' % url)
        with requests.get(url, stream=True,
                          timeout=DOWNLOAD_TIMEOUT) as response:
            response.raise_for_status()
            with open(filename, 'wb') as file:
                for chunk in response.iter_content(chunk_size=65536):
                    file.write(chunk)

    def download(self, cachedir):
        """Download the tarball into cachedir, returning its name.

        A tarball already in cachedir is not downloaded again.

        """
        basename = self._url.rstrip('/').rsplit('/', 1)[-1]
        filename = os.path.join(cachedir, basename)
        if os.path.isfile(filename):
            return filename
        os.makedirs(cachedir, exist_ok=True)
        tmpname = '%s.part' % filename
        last_exc = None
        for url in self.urls():
            for attempt in range(1, DOWNLOAD_TRIES + 1):
                try:
                    self._download_one(url, tmpname)
                except (requests.RequestException, OSError) as exc:
                    self.context.warning('download of %s failed (attempt %d '
                                         'of %d): %s'
                                         % (url, attempt, DOWNLOAD_TRIES,
                                            exc))
                    last_exc = exc
                    continue
                os.replace(tmpname, filename)
                return filename
        if os.path.exists(tmpname):
            os.remove(tmpname)
        self.context.error('could not download %s: %s' % (self._url, last_exc))

    def vc_checkout(self, srcdir):
        if not self._url.endswith(TAR_SUFFIXES):
            self.context.error('unsupported archive format: %s' % self._url)
        cachedir = os.path.join(os.path.dirname(srcdir), '.downloads')
        filename = self.download(cachedir)
        unpack_tarball(self.context, filename, srcdir)
