"""Helpful utilities for running the alignment pipeline.
"""
import collections
import os
import time


def safe_makedir(dname):
    """Make a directory if it doesn't exist.
    """
    if not dname:
        return dname
    if not os.path.exists(dname):
        os.makedirs(dname)
    return dname

def file_exists(fname):
    """Check if a file exists and is non-empty.
    """
    try:
        return bool(fname) and os.path.exists(fname) and os.path.getsize(fname) > 0
    except OSError:
        return False

def is_exe(fpath):
    return os.path.isfile(fpath) and os.access(fpath, os.X_OK)

def which(program, env=None):
    """ returns the path to an executable or None if it can't be found"""
    if env is None:
        env = os.environ
    fpath, _ = os.path.split(program)
    if fpath:
        if is_exe(program):
            return program
    else:
        for path in env.get("PATH", "").split(os.pathsep):
            exe_file = os.path.join(path, program)
            if is_exe(exe_file):
                return exe_file
    return None

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", "$HOME"))
    except AttributeError:
        return path

def tail(fname, num_lines=100):
    """Retrieve the last lines of a text file, empty if it is missing.
    """
    if not os.path.exists(fname):
        return []
    with open(fname, errors="replace") as in_handle:
        return list(collections.deque(in_handle, maxlen=num_lines))

def timestamp():
    return time.strftime("%Y%m%d_%H%M%S")
