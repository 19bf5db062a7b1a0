"""Main entry point for running the UMI-aware alignment pipeline.

Steps run strictly in order, each consuming the file the previous one wrote:

  1. FASTQ pair -> unaligned BAM (Picard FastqToSam)
  2. unaligned BAM -> UMI tagged unaligned BAM (fgbio ExtractUmisFromBam)
  3. SamToFastq | bwa mem | MergeBamAlignment -> sorted, indexed BAM
"""
import os

from umialign import PipelineError, log, utils
from umialign.broad import picardrun
from umialign.log import logger
from umialign.ngsalign import bwa, postalign
from umialign.pipeline import config_utils, tools
from umialign.pipeline.config_utils import ConfigError
from umialign.provenance import do

INIT = "Init"
DIRECTORIES_READY = "DirectoriesReady"
TOOLS_VALIDATED = "ToolsValidated"
STEP1_DONE = "Step1Done"
STEP2_DONE = "Step2Done"
STEP3_DONE = "Step3Done"
COMPLETE = "Complete"
FAILED = "Failed"

STATES = [INIT, DIRECTORIES_READY, TOOLS_VALIDATED, STEP1_DONE, STEP2_DONE, STEP3_DONE, COMPLETE]

STEP1 = "step1_convert_to_uBAM"
STEP2 = "step2_extract_UMIs"
STEP3 = "step3_first_align"


class RunFilesError(PipelineError):
    """Output, log or temporary files of a run could not be created or written.
    """
    pass

def main(config_file=None, timestamp=None):
    """Load configuration and run the pipeline, returning the process exit code.
    """
    try:
        user_config = config_utils.load_config(config_file) if config_file else None
        config = config_utils.build_run_config(user_config, timestamp)
    except (ConfigError, IOError) as e:
        with log.setup_local_logging():
            logger.error(str(e))
        return 1
    try:
        run_main(config)
    except PipelineError:
        return 1
    except (IOError, OSError) as e:
        # the run log itself could not be opened
        with log.setup_local_logging():
            logger.error("Could not set up run logging in %s: %s" % (config.log_dir, e))
        return 1
    return 0

def run_main(config):
    """Run the full pipeline for a configuration, logging to the run log.
    """
    with log.setup_local_logging(config):
        try:
            return UmiAlignPipeline(config).run()
        except PipelineError as e:
            logger.error(str(e))
            raise
        except (IOError, OSError) as e:
            err = RunFilesError("Could not create pipeline files: %s" % e)
            logger.error(str(err))
            raise err from e

class UmiAlignPipeline:
    """Drive the pipeline steps for a single, immutable run configuration.
    """
    def __init__(self, config):
        self.config = config
        self.registry = tools.registry_from_config(config.tools)
        self.state = INIT

    def _advance(self, new_state):
        if self.state not in STATES or STATES.index(new_state) != STATES.index(self.state) + 1:
            raise PipelineError("Invalid pipeline transition %s -> %s" % (self.state, new_state))
        self.state = new_state

    def run(self):
        stages = [(self.create_directories, DIRECTORIES_READY),
                  (self.check_tools, TOOLS_VALIDATED),
                  (self.convert_fastq_to_ubam, STEP1_DONE),
                  (self.extract_umis, STEP2_DONE),
                  (self.align_genome, STEP3_DONE)]
        try:
            for fn, new_state in stages:
                fn()
                self._advance(new_state)
        except BaseException:
            self.state = FAILED
            raise
        self._advance(COMPLETE)
        logger.info("Pipeline completed successfully!")
        return self.config.merged_bam_file

    def create_directories(self):
        logger.info("Creating output and log directories...")
        for dname in [self.config.output_dir, self.config.log_dir, self.config.tmp_dir]:
            utils.safe_makedir(dname)

    def check_tools(self):
        tools.check_tools(self.registry)

    def _env(self):
        env = os.environ.copy()
        env["TMP_DIR"] = self.config.tmp_dir
        return env

    def _timed(self, cmd):
        """Wrap a command with GNU time when configured, reporting resource usage in the step log.
        """
        if "time_cmd" in self.registry:
            return [tools.get_tool(self.registry, "time_cmd"), "-v"] + cmd
        return cmd

    def _require_input(self, step_name, in_file):
        if not os.path.exists(in_file):
            raise do.StepExecutionError(step_name, [], self.config.step_log_file(step_name),
                                        reason="input file %s not found" % in_file)

    def convert_fastq_to_ubam(self):
        for in_file in [self.config.fastq1, self.config.fastq2]:
            self._require_input(STEP1, in_file)
        out_file = self.config.ubam_file
        cmd = picardrun.fastq_to_sam_cl(self.config, self.registry, out_file)
        do.run(self._timed(cmd), STEP1, self.config.step_log_file(STEP1),
               env=self._env(), checks=[do.file_nonempty(out_file)])
        return out_file

    def extract_umis(self):
        in_file = self.config.ubam_file
        self._require_input(STEP2, in_file)
        out_file = self.config.umi_ubam_file
        cmd = postalign.extract_umis_cl(self.config, self.registry, in_file, out_file)
        do.run(self._timed(cmd), STEP2, self.config.step_log_file(STEP2),
               env=self._env(), checks=[do.file_nonempty(out_file)])
        return out_file

    def align_genome(self):
        in_file = self.config.umi_ubam_file
        self._require_input(STEP3, in_file)
        out_file = self.config.merged_bam_file
        cmds = [picardrun.sam_to_fastq_cl(self.config, self.registry, in_file),
                bwa.bwa_mem_cl(self.config, self.registry),
                picardrun.merge_bam_alignment_cl(self.config, self.registry, in_file, out_file)]
        do.run_pipe([self._timed(cmd) for cmd in cmds], STEP3, self.config.step_log_file(STEP3),
                    env=self._env(), checks=[do.file_nonempty(out_file)])
        return out_file
