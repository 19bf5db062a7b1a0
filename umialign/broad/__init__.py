"""Work with Broad's Java libraries, and other jar-packaged tools, from Python.

  Picard -- BAM manipulation and analysis library.
  fgbio -- UMI and consensus tools built on the same Java stack.
"""
from umialign.pipeline import config_utils, tools


def get_default_jvm_opts(tmp_dir=None):
    """Retrieve default JVM options, pointing Java temporary files at the run temporary directory.
    """
    opts = []
    if tmp_dir:
        opts.append("-Djava.io.tmpdir=%s" % tmp_dir)
    return opts

def get_jvm_opts(program, config):
    resources = config_utils.get_resources(program, config)
    return [str(x) for x in resources.get("jvm_opts", [])] + get_default_jvm_opts(config.tmp_dir)

def java_cmd(program, config, registry):
    """Prepare the start of a commandline running a jar through java.
    """
    return ([tools.get_tool(registry, "java")] + get_jvm_opts(program, config) +
            ["-jar", tools.get_tool(registry, program)])
