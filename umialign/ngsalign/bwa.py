"""Next-gen alignments with BWA (http://bio-bwa.sourceforge.net/) or BWA-MEM2.
"""
from umialign.pipeline import config_utils, tools


def bwa_mem_cl(config, registry, fastq_file="/dev/stdin"):
    """Align interleaved paired reads, writing SAM to standard output.
    """
    bwa = tools.get_tool(registry, config.aligner)
    bwa_resources = config_utils.get_resources(config.aligner, config)
    bwa_params = [str(x) for x in bwa_resources.get("options", [])]
    return ([bwa, "mem", "-p", "-t", str(config.num_cores)] + bwa_params +
            [config.aligner_index, fastq_file])
