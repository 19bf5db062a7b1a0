"""Loads run configuration from .yaml files on top of the built-in run defaults.

The result is an immutable `RunConfig` record passed to the pipeline driver.
"""
import collections
import copy
import os
import types

import toolz as tz
import yaml

from umialign import PipelineError, utils


class ConfigError(PipelineError):
    pass

ALIGNERS = ("bwa", "bwa-mem2")
REQUIRED_TOOLS = ("java", "picard", "fgbio")

DEFAULT_CONFIG = {
    "sample": "tumoral_01",
    "files": ["/data/lush-dev/yinlonghui/ctDNA/E150035817_L01_1218_1.fq.gz",
              "/data/lush-dev/yinlonghui/ctDNA/E150035817_L01_1218_2.fq.gz"],
    "platform_unit": "barcode_001",
    "platform": "MGI",
    "genome": {"fasta": "/data/lush-dev/shijiashuai/data/bioinfo/index/bwa-liheng/hg38.fa",
               "bwa": "/data/lush-dev/shijiashuai/data/bioinfo/index/bwa-liheng/hg38.fa",
               "bwa-mem2": "/data/lush-dev/shijiashuai/data/bioinfo/index/bwa-mem2/hg38.fa"},
    "algorithm": {"aligner": "bwa",
                  "num_cores": 40},
    "umi": {"read_structures": ["16M1S+T", "16M1S+T"],
            "single_tag": "RX",
            "molecular_index_tags": ["ZA", "ZB"]},
    "dirs": {"output": "/data/lush-dev/shijiashuai/workspace/dev/ctDNA/test/output/20241008_dev09_tumoral",
             "log": None,
             "tmp": None},
    "tools": {"time_cmd": "/data/lush-dev/shijiashuai/software/time-1.9/time",
              "java": "java",
              "picard": "/data/lush-dev/shijiashuai/workspace/dev/ctDNA/picard/2.18.29/picard.jar",
              "fgbio": "/data/lush-dev/shijiashuai/workspace/dev/ctDNA/fgbio/1.1.0/fgbio-1.1.0.jar",
              "bwa": "/data/lush-dev/shijiashuai/workspace/dev/ctDNA/bwa/0.7.17/bwa-0.7.17/bwa",
              "bwa-mem2": "/data/lush-dev/shijiashuai/workspace/dev/ctDNA/bwa-mem2/master/bwa-mem2"},
    "resources": {},
}

_RunConfig = collections.namedtuple(
    "RunConfig",
    "sample fastq1 fastq2 platform_unit platform genome aligner num_cores "
    "output_dir log_dir tmp_dir tools umi resources timestamp")

class RunConfig(_RunConfig):
    """Read-only parameters of a single pipeline run.
    """
    __slots__ = ()

    @property
    def ubam_file(self):
        return os.path.join(self.output_dir, "%s.uBAM" % self.sample)

    @property
    def umi_ubam_file(self):
        return os.path.join(self.output_dir, "%s.umi.uBAM" % self.sample)

    @property
    def merged_bam_file(self):
        return os.path.join(self.output_dir, "%s.umi.merged.BAM" % self.sample)

    @property
    def ref_file(self):
        return self.genome["fasta"]

    @property
    def aligner_index(self):
        return self.genome[self.aligner]

    @property
    def run_log_file(self):
        return os.path.join(self.log_dir, "pipeline_%s.log" % self.timestamp)

    @property
    def commands_log_file(self):
        return os.path.join(self.log_dir, "pipeline_%s-commands.log" % self.timestamp)

    def step_log_file(self, step_name):
        return os.path.join(self.log_dir, "%s_%s.log" % (step_name, self.timestamp))

# ## Loading

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        try:
            config = yaml.safe_load(in_handle) or {}
        except yaml.YAMLError as e:
            raise ConfigError("Could not parse configuration file %s: %s" % (config_file, e))
    if not isinstance(config, dict):
        raise ConfigError("Expected a mapping of settings in %s" % config_file)
    return _expand_paths(config)

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(setting, dict):
            config[field] = _expand_paths(setting)
        elif isinstance(setting, list):
            config[field] = [utils.expand_path(x) for x in setting]
        else:
            config[field] = utils.expand_path(setting)
    return config

def merge_config(base, update):
    """Recursively merge `update` on top of `base`, returning a new dictionary.
    """
    out = copy.deepcopy(base)
    for key, val in (update or {}).items():
        if isinstance(val, dict) and isinstance(out.get(key), dict):
            out[key] = merge_config(out[key], val)
        else:
            out[key] = copy.deepcopy(val)
    return out

# ## Building the run record

def _required(config, keys):
    val = tz.get_in(keys, config)
    if val is None or val == "" or val == []:
        raise ConfigError("Required configuration value is not set: %s" % ".".join(keys))
    return val

def _get_fastq_files(config):
    files = _required(config, ["files"])
    if isinstance(files, str) or len(files) != 2:
        raise ConfigError("Expected two paired-end read files, got: %s" % (files,))
    for f in files:
        if not f:
            raise ConfigError("Required configuration value is not set: files")
    return files

def _get_num_cores(config):
    num_cores = _required(config, ["algorithm", "num_cores"])
    try:
        num_cores = int(num_cores)
    except (TypeError, ValueError):
        raise ConfigError("Thread count must be an integer: %s" % num_cores)
    if num_cores < 1:
        raise ConfigError("Thread count must be positive: %s" % num_cores)
    return num_cores

def _get_umi(config):
    umi = {"read_structures": list(_required(config, ["umi", "read_structures"])),
           "single_tag": tz.get_in(["umi", "single_tag"], config),
           "molecular_index_tags": list(tz.get_in(["umi", "molecular_index_tags"], config) or [])}
    if len(umi["read_structures"]) != 2:
        raise ConfigError("Expected one read structure per read, got: %s" % umi["read_structures"])
    if umi["molecular_index_tags"] and len(umi["molecular_index_tags"]) != len(umi["read_structures"]):
        raise ConfigError("Need one molecular index tag per read structure: %s"
                          % umi["molecular_index_tags"])
    return umi

def _get_tools(config, aligner):
    tools = dict((k, v) for k, v in (config.get("tools") or {}).items() if v)
    for name in REQUIRED_TOOLS + (aligner,):
        if name not in tools:
            raise ConfigError("Required tool is not configured: %s" % name)
    return tools

def _freeze(val):
    """Read-only copy of nested settings: mappings become proxies and lists become tuples.
    """
    if isinstance(val, dict):
        return types.MappingProxyType(dict((k, _freeze(v)) for k, v in val.items()))
    elif isinstance(val, list):
        return tuple(_freeze(x) for x in val)
    return val

def build_run_config(config=None, timestamp=None):
    """Create the immutable run record from user settings merged over the defaults.
    """
    config = merge_config(DEFAULT_CONFIG, config)
    aligner = _required(config, ["algorithm", "aligner"])
    if aligner not in ALIGNERS:
        raise ConfigError("Unsupported aligner %s, expected one of: %s" % (aligner, ", ".join(ALIGNERS)))
    fastq1, fastq2 = _get_fastq_files(config)
    output_dir = os.path.abspath(_required(config, ["dirs", "output"]))
    log_dir = tz.get_in(["dirs", "log"], config) or os.path.join(output_dir, "logs")
    # temporary files default to a directory beside the output directory
    tmp_dir = tz.get_in(["dirs", "tmp"], config) or os.path.join(os.path.dirname(output_dir), "tmp")
    genome = {"fasta": _required(config, ["genome", "fasta"]),
              aligner: _required(config, ["genome", aligner])}
    return RunConfig(sample=str(_required(config, ["sample"])),
                     fastq1=fastq1, fastq2=fastq2,
                     platform_unit=str(_required(config, ["platform_unit"])),
                     platform=str(_required(config, ["platform"])),
                     genome=_freeze(genome),
                     aligner=aligner,
                     num_cores=_get_num_cores(config),
                     output_dir=output_dir,
                     log_dir=os.path.abspath(log_dir),
                     tmp_dir=os.path.abspath(tmp_dir),
                     tools=_freeze(_get_tools(config, aligner)),
                     umi=_freeze(_get_umi(config)),
                     resources=_freeze(config.get("resources") or {}),
                     timestamp=timestamp or utils.timestamp())

def get_resources(name, config):
    """Retrieve resources for a program, falling back to the `default` entry.
    """
    return tz.get_in([name], config.resources,
                     tz.get_in(["default"], config.resources, {})) or {}
