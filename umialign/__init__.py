"""Orchestrate conversion of paired FASTQ reads into an aligned, UMI-tagged BAM.
"""


class PipelineError(Exception):
    """Base class for failures that stop a pipeline run.
    """
    pass
