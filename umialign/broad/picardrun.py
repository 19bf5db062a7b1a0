"""Commandlines for the Picard utilities used in UMI-aware alignment.
"""
from umialign import broad


def cl_picard(command, options, config, registry):
    """Prepare a Picard commandline from option pairs.
    """
    options = ["%s=%s" % (x, y) for x, y in options]
    return broad.java_cmd("picard", config, registry) + [command] + options

def fastq_to_sam_cl(config, registry, out_file):
    """Convert paired fastq files into an unaligned BAM tagged with read group details.
    """
    opts = [("F1", config.fastq1),
            ("F2", config.fastq2),
            ("OUTPUT", out_file),
            ("READ_GROUP_NAME", config.sample),
            ("SAMPLE_NAME", config.sample),
            ("LIBRARY_NAME", config.sample),
            ("PLATFORM_UNIT", config.platform_unit),
            ("PLATFORM", config.platform),
            ("TMP_DIR", config.tmp_dir)]
    return cl_picard("FastqToSam", opts, config, registry)

def sam_to_fastq_cl(config, registry, in_bam):
    """Stream an unaligned BAM as interleaved fastq on standard output.
    """
    opts = [("I", in_bam),
            ("F", "/dev/stdout"),
            ("INTERLEAVE", "true"),
            ("TMP_DIR", config.tmp_dir)]
    return cl_picard("SamToFastq", opts, config, registry)

def merge_bam_alignment_cl(config, registry, unmapped_bam, out_file):
    """Merge alignments read from standard input with the unmapped BAM metadata.

    Output is coordinate sorted and indexed.
    """
    opts = [("UNMAPPED", unmapped_bam),
            ("ALIGNED", "/dev/stdin"),
            ("O", out_file),
            ("R", config.ref_file),
            ("SO", "coordinate"),
            ("ALIGNER_PROPER_PAIR_FLAGS", "true"),
            ("MAX_GAPS", -1),
            ("ORIENTATIONS", "FR"),
            ("VALIDATION_STRINGENCY", "SILENT"),
            ("CREATE_INDEX", "true"),
            ("TMP_DIR", config.tmp_dir)]
    return cl_picard("MergeBamAlignment", opts, config, registry)
