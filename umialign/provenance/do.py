"""Centralize running of external commands, providing logging and error checking.
"""
import os
import signal
import subprocess

from umialign import PipelineError, utils
from umialign.log import logger, logger_cl


class StepExecutionError(PipelineError):
    """A pipeline step whose processes failed or did not produce their output.

    `failures` holds (command line, exit code) pairs for every failing process.
    Negative exit codes are processes killed by a signal.
    """
    def __init__(self, step_name, failures, log_file, details=None, reason=None):
        self.step_name = step_name
        self.failures = list(failures)
        self.log_file = log_file
        self.details = list(details or [])
        self.reason = reason
        super(StepExecutionError, self).__init__(self._message())

    def _message(self):
        out = ["Step %s failed" % self.step_name]
        if self.reason:
            out.append(": %s" % self.reason)
        for cl, exitcode in self.failures:
            out.append("\n  %s (%s)" % (cl, describe_exitcode(exitcode)))
        if self.details:
            out.append("\nLast lines of %s:\n" % self.log_file)
            out.append("".join(self.details))
        return "".join(out)

def describe_exitcode(exitcode):
    if exitcode < 0:
        try:
            name = signal.Signals(-exitcode).name
        except ValueError:
            name = "signal %s" % -exitcode
        return "killed by %s" % name
    return "exit code %s" % exitcode

def cmd_str(cmd):
    return " ".join(str(x) for x in cmd)

def run(cmd, step_name, log_file, env=None, checks=None):
    """Run the provided command, logging details and checking for errors.
    """
    run_pipe([cmd], step_name, log_file, env=env, checks=checks)

def run_pipe(cmds, step_name, log_file, env=None, checks=None):
    """Run a chain of commands connected by pipes, failing if any of them fails.

    Output of each command feeds the next. Standard error of all commands,
    plus standard output of the final one, is written to `log_file`.
    """
    logger.info("Starting: %s" % step_name)
    logger_cl.debug(" | ".join(cmd_str(cmd) for cmd in cmds))
    failures = _do_run_pipe(cmds, log_file, env)
    if failures:
        raise StepExecutionError(step_name, failures, log_file, utils.tail(log_file))
    # Check for problems not identified by return codes
    for check in checks or []:
        if not check():
            raise StepExecutionError(step_name, [], log_file, utils.tail(log_file),
                                     reason="expected output not found after external command")
    logger.info("Completed: %s" % step_name)

def _do_run_pipe(cmds, log_file, env):
    """Start all processes, wait on every one and return (command, exit code) of failures.
    """
    cmds = [[str(x) for x in cmd] for cmd in cmds]
    procs = []
    with open(log_file, "wb") as log_handle:
        stdin = subprocess.DEVNULL
        try:
            for i, cmd in enumerate(cmds):
                is_last = i == len(cmds) - 1
                p = subprocess.Popen(cmd, stdin=stdin,
                                     stdout=log_handle if is_last else subprocess.PIPE,
                                     stderr=log_handle, close_fds=True, env=env)
                # only the downstream process holds the read end
                if stdin is not subprocess.DEVNULL:
                    stdin.close()
                stdin = p.stdout
                procs.append(p)
        except OSError as e:
            if stdin not in (None, subprocess.DEVNULL):
                stdin.close()
            for p in procs:
                p.kill()
                p.wait()
            log_handle.write(("%s\n" % e).encode("utf-8"))
            log_handle.flush()
            return [(cmd_str(cmds[len(procs)]), 127)]
        exitcodes = [p.wait() for p in procs]
    return [(cmd_str(cmd), code) for cmd, code in zip(cmds, exitcodes) if code != 0]

# checks for validating run completed successfully

def file_nonempty(target_file):
    def check():
        ok = utils.file_exists(target_file)
        if not ok:
            logger.info("Did not find non-empty output file {0}".format(target_file))
        return ok
    return check

def file_exists(target_file):
    def check():
        ok = os.path.exists(target_file)
        if not ok:
            logger.info("Did not find output file {0}".format(target_file))
        return ok
    return check
