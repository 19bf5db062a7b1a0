import os
import stat

import pytest

from umialign.pipeline import config_utils

TIMESTAMP = "20241008_120000"

# Stand-in for java running the picard and fgbio jars. Writes the requested
# outputs, or fails for the subcommand named in FAKE_FAIL.
FAKE_JAVA = r"""#!/bin/sh
while [ "$1" != "-jar" ]; do shift; done
shift 2
cmd="$1"
shift
echo "running $cmd" >&2
echo "TMP_DIR=$TMP_DIR" >&2
if [ "$FAKE_FAIL" = "$cmd" ]; then
    echo "$cmd exploded" >&2
    exit 3
fi
out=""
for arg in "$@"; do
    case "$arg" in
        OUTPUT=*) out="${arg#OUTPUT=}" ;;
        --output=*) out="${arg#--output=}" ;;
        O=*) out="${arg#O=}" ;;
    esac
done
case "$cmd" in
    SamToFastq)
        printf '@read1/1\nACGT\n+\nIIII\n@read1/2\nTGCA\n+\nIIII\n'
        ;;
    MergeBamAlignment)
        cat > /dev/null
        if [ "$FAKE_FAIL" = "empty_merge" ]; then
            exit 0
        fi
        echo "merged" > "$out"
        echo "index" > "${out%.BAM}.bai"
        ;;
    *)
        echo "$cmd" > "$out"
        ;;
esac
"""

FAKE_BWA = r"""#!/bin/sh
if [ "$FAKE_FAIL" = "bwa" ]; then
    echo "bwa exploded" >&2
    exit 2
fi
if [ "$FAKE_FAIL" = "bwa_signal" ]; then
    kill -9 $$
fi
echo "[M::bwa] $*" >&2
cat
"""

FAKE_TIME = r"""#!/bin/sh
shift
echo "timed: $1" >&2
exec "$@"
"""


def _write_exe(fname, content):
    with open(fname, "w") as out_handle:
        out_handle.write(content)
    os.chmod(fname, os.stat(fname).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return fname


@pytest.fixture
def fake_tools(tmpdir, monkeypatch):
    """Fake external programs, with java placed on the PATH.
    """
    bin_dir = tmpdir.mkdir("bin")
    _write_exe(str(bin_dir.join("java")), FAKE_JAVA)
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))
    monkeypatch.delenv("FAKE_FAIL", raising=False)
    jar_dir = tmpdir.mkdir("jars")
    picard = jar_dir.join("picard.jar")
    picard.write("")
    fgbio = jar_dir.join("fgbio-1.1.0.jar")
    fgbio.write("")
    return {"java": "java",
            "picard": str(picard),
            "fgbio": str(fgbio),
            "bwa": _write_exe(str(bin_dir.join("bwa")), FAKE_BWA),
            "time_cmd": _write_exe(str(bin_dir.join("time")), FAKE_TIME)}


@pytest.fixture
def user_config(tmpdir, fake_tools):
    """Settings for a run on small local inputs with fake tools.
    """
    data_dir = tmpdir.mkdir("data")
    fq1 = data_dir.join("reads_1.fq.gz")
    fq1.write("@read1/1\n")
    fq2 = data_dir.join("reads_2.fq.gz")
    fq2.write("@read1/2\n")
    ref = data_dir.join("hg38.fa")
    ref.write(">chr1\nACGT\n")
    return {"files": [str(fq1), str(fq2)],
            "genome": {"fasta": str(ref), "bwa": str(ref)},
            "algorithm": {"num_cores": 4},
            "dirs": {"output": str(tmpdir.join("output", "tumoral")),
                     "tmp": str(tmpdir.join("output", "tmp"))},
            "tools": dict(fake_tools, **{"bwa-mem2": None})}


@pytest.fixture
def run_config(user_config):
    return config_utils.build_run_config(user_config, TIMESTAMP)
