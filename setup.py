#!/usr/bin/env python

"""Setup file and install script for the UMI-aware alignment pipeline"""

import os
import subprocess

import setuptools

VERSION = '0.1.0'

# add version number and git commit hash of the current revision to version.py
try:
    git_run = subprocess.run(['git', 'rev-parse', '--short', 'HEAD'],
                             stdout=subprocess.PIPE, stderr=subprocess.DEVNULL)
    git_run.check_returncode()
except (OSError, subprocess.SubprocessError):
    commit_hash = ''
else:
    commit_hash = git_run.stdout.strip().decode()

here = os.path.dirname(os.path.abspath(__file__))
with open(os.path.join(here, 'umialign', 'pipeline', 'version.py'), 'w') as version_file:
    version_file.writelines([f'__version__ = "{VERSION}"\n',
                             f'__git_revision__ = "{commit_hash}"\n'])

# picard, fgbio, bwa and java are external programs, located through the run configuration
setuptools.setup(
    name='umialign',
    version=VERSION,
    description='Convert paired FASTQ reads into an aligned, UMI tagged BAM',
    python_requires='>=3.6',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    scripts=['scripts/umialign_pipeline.py'],
    install_requires=['logbook', 'PyYAML', 'toolz'],
    extras_require={'tests': ['pytest', 'pytest-mock']},
)
