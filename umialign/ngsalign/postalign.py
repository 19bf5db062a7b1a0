"""Handle UMI annotation of unaligned reads with fgbio.

http://fulcrumgenomics.github.io/fgbio/tools/latest/ExtractUmisFromBam.html
"""
from umialign import broad


def extract_umis_cl(config, registry, in_bam, out_bam):
    """Move UMI bases from the reads into tags, one read structure per read.
    """
    cmd = broad.java_cmd("fgbio", config, registry) + ["ExtractUmisFromBam"]
    cmd += ["--input=%s" % in_bam, "--output=%s" % out_bam]
    cmd += ["--read-structure=%s" % config.umi["read_structures"][0]] + list(config.umi["read_structures"][1:])
    if config.umi.get("single_tag"):
        cmd += ["--single-tag=%s" % config.umi["single_tag"]]
    if config.umi.get("molecular_index_tags"):
        cmd += ["--molecular-index-tags=%s" % config.umi["molecular_index_tags"][0]]
        cmd += list(config.umi["molecular_index_tags"][1:])
    return cmd
