"""
ctypes binding of the Linux inotify calls used by FileGuard.

InotifyChannel wraps one inotify file descriptor: it adds and removes watches
and reads raw event bytes into a caller-supplied buffer.
"""

import ctypes
import ctypes.util
import errno
import os

IN_CLOEXEC = 0o2000000

_libc = None


def _get_libc():
    global _libc
    if _libc is None:
        libc = ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)
        libc.inotify_init1.argtypes = [ctypes.c_int]
        libc.inotify_init1.restype = ctypes.c_int
        libc.inotify_add_watch.argtypes = [ctypes.c_int, ctypes.c_char_p, ctypes.c_uint32]
        libc.inotify_add_watch.restype = ctypes.c_int
        libc.inotify_rm_watch.argtypes = [ctypes.c_int, ctypes.c_int]
        libc.inotify_rm_watch.restype = ctypes.c_int
        _libc = libc
    return _libc


def _call(func, *args):
    """Call a libc function, retrying on EINTR and raising OSError on failure."""
    while True:
        res = func(*args)
        if res >= 0:
            return res
        err = ctypes.get_errno()
        if err != errno.EINTR:
            raise OSError(err, os.strerror(err))


class InotifyChannel:
    """
    A single inotify instance.

    Attributes:
        fd: The inotify file descriptor, None until opened or after close.
    """

    def __init__(self):
        self.fd = None

    def open(self):
        self.fd = _call(_get_libc().inotify_init1, IN_CLOEXEC)
        return self.fd

    def add_watch(self, path, mask):
        return _call(_get_libc().inotify_add_watch, self.fd, os.fsencode(path), mask)

    def remove_watch(self, wd):
        _call(_get_libc().inotify_rm_watch, self.fd, wd)

    def readinto(self, buffer):
        """Block until events are available and read them into buffer; returns the byte count."""
        return os.readv(self.fd, [buffer])

    def close(self):
        fd, self.fd = self.fd, None
        if fd is not None:
            os.close(fd)
