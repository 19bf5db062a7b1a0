"""Registry of external programs, validated before any pipeline step runs.

Each entry declares how its location is checked:

  search  -- a command name resolved on the PATH (java)
  file    -- a regular file run through an interpreter (picard and fgbio jars)
  exe     -- a path that must exist and be executable (bwa, GNU time)
"""
import collections
import collections.abc
import os

from umialign import PipelineError, utils
from umialign.log import logger
from umialign.pipeline.config_utils import ConfigError


class ToolMissingError(PipelineError):
    def __init__(self, missing):
        self.missing = list(missing)
        super(ToolMissingError, self).__init__(
            "Missing required tools: %s" % ", ".join(t.name for t in self.missing))


class SearchPathExecutable(collections.namedtuple("SearchPathExecutable", "name path")):
    __slots__ = ()
    kind = "search"

    def check(self):
        return utils.which(self.path) is not None

    def error(self):
        return "Error: %s not found in PATH." % self.name

    def resolve(self):
        return utils.which(self.path) or self.path


class ExistingFile(collections.namedtuple("ExistingFile", "name path")):
    __slots__ = ()
    kind = "file"

    def check(self):
        return os.path.isfile(self.path)

    def error(self):
        return "Error: %s not found." % self.path

    def resolve(self):
        return self.path


class ExecutableFile(collections.namedtuple("ExecutableFile", "name path")):
    __slots__ = ()
    kind = "exe"

    def check(self):
        return utils.is_exe(self.path)

    def error(self):
        return "Error: %s not found or not executable." % self.path

    def resolve(self):
        return self.path


KINDS = {c.kind: c for c in [SearchPathExecutable, ExistingFile, ExecutableFile]}
DEFAULT_KINDS = {"java": "search", "picard": "file", "fgbio": "file"}

def _default_kind(name, path):
    if name in DEFAULT_KINDS:
        return DEFAULT_KINDS[name]
    elif path.endswith(".jar"):
        return "file"
    elif not os.path.dirname(path):
        return "search"
    else:
        return "exe"

def make_tool(name, spec):
    """Create a registry entry from a path string or a `{path, kind}` mapping.
    """
    if isinstance(spec, collections.abc.Mapping):
        path = spec.get("path")
        kind = spec.get("kind")
    else:
        path, kind = spec, None
    if not path:
        raise ConfigError("No path configured for tool %s" % name)
    path = str(path)
    kind = kind or _default_kind(name, path)
    if kind not in KINDS:
        raise ConfigError("Unknown validation kind %s for tool %s, expected one of: %s"
                          % (kind, name, ", ".join(sorted(KINDS))))
    return KINDS[kind](name, path)

def registry_from_config(tools):
    return collections.OrderedDict((name, make_tool(name, spec))
                                   for name, spec in tools.items())

def check_tools(registry):
    """Check every registered tool, raising after the full scan if any are unavailable.
    """
    logger.info("Checking required tools...")
    missing = []
    for tool in registry.values():
        if not tool.check():
            logger.error(tool.error())
            missing.append(tool)
    if missing:
        raise ToolMissingError(missing)
    logger.info("All tools are available.")

def get_tool(registry, name):
    try:
        return registry[name].resolve()
    except KeyError:
        raise ConfigError("Tool is not registered: %s" % name)
