#!/usr/bin/env python
"""Align paired FASTQ reads into a UMI tagged, coordinate sorted BAM file.

Runs three external tools in order, logging each to its own timestamped
log file inside the run log directory:

  1. Picard FastqToSam -- convert the read pair to an unaligned BAM
  2. fgbio ExtractUmisFromBam -- move UMI bases into read tags
  3. Picard SamToFastq | bwa mem | Picard MergeBamAlignment

Without arguments the built-in run configuration is used. An optional YAML
file overrides any of the settings; see config/tumoral_01.yaml.

Usage:
  umialign_pipeline.py [<config_file>]
"""
import argparse
import sys

from umialign.pipeline import version
from umialign.pipeline.main import main


def parse_cl_args(in_args):
    description = "Convert paired FASTQ reads into an aligned, UMI tagged BAM."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("config_file", nargs="?",
                        help=("YAML configuration file overriding the built-in "
                              "run settings (optional)"))
    parser.add_argument("-v", "--version", action="version",
                        version=version.__version__)
    args = parser.parse_args(in_args)
    return {"config_file": args.config_file}

if __name__ == "__main__":
    sys.exit(main(**parse_cl_args(sys.argv[1:])))
