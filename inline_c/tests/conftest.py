"""
Shared pytest fixtures for inline_c tests.

Provides C/C++ snippets, an isolated environment snapshot, settings
that keep temp files under ``tmp_path``, and a fake POSIX compiler
driver so the pipeline can be exercised without a real toolchain.

End-to-end tests need ``cc`` / ``c++`` on PATH and are skipped
otherwise (and on Windows, where the default toolchain is MSVC).
"""
import os
import platform
import shutil
import stat
import textwrap
from pathlib import Path

import pytest

from inline_c.config import Settings
from inline_c.core.flags import FLAG_VARIABLES

IS_WINDOWS = platform.system() == "Windows"


# ── Snippets ────────────────────────────────────────────────────────────────

HELLO_C = textwrap.dedent("""\
    #include <stdio.h>

    int main() {
        printf("Hello, World!\\n");

        return 0;
    }
""")

HELLO_CXX = textwrap.dedent("""\
    #include <iostream>

    int main() {
        std::cout << "Hello, World!";

        return 0;
    }
""")

RESULT_C = textwrap.dedent("""\
    int main() {
        int x = 1;
        int y = 2;

        return x + y;
    }
""")

GETENV_C = textwrap.dedent("""\
    #include <stdio.h>
    #include <stdlib.h>

    int main() {
        const char* foo = getenv("FOO");

        if (NULL == foo) {
            return 1;
        }

        printf("FOO is set to `%s`", foo);

        return 0;
    }
""")

ABORT_C = textwrap.dedent("""\
    #include <stdlib.h>

    int main() {
        abort();
    }
""")

BROKEN_C = textwrap.dedent("""\
    int main() {
        return undeclared_symbol;
    }
""")

STDERR_C = textwrap.dedent("""\
    #include <stdio.h>

    int main() {
        fprintf(stderr, "oops\\n");

        return 0;
    }
""")

DEFINE_C = textwrap.dedent("""\
    #include <stdio.h>
    #define SUM(a, b) ((a) + (b))
    #define ANSWER (40 + 2)

    int main() {
        printf("%d %d", SUM(1, 2), ANSWER);

        return 0;
    }
""")

FAKE_CC = textwrap.dedent("""\
    #!/bin/sh
    # Fake compiler driver: logs argv and FOO, honours FAKE_CC_FAIL,
    # and writes a shell script to the -o path.
    printf '%s\\n' "$@" > "$FAKE_CC_LOG"
    printf 'FOO=%s\\n' "$FOO" >> "$FAKE_CC_LOG"
    if [ -n "$FAKE_CC_FAIL" ]; then
        echo "fake-cc: error: $FAKE_CC_FAIL" >&2
        exit 1
    fi
    out=""
    prev=""
    for arg in "$@"; do
        if [ "$prev" = "-o" ]; then
            out="$arg"
        fi
        prev="$arg"
    done
    cat > "$out" <<'PROGRAM'
    #!/bin/sh
    printf 'FOO=%s' "$FOO"
    echo "warn" >&2
    exit 3
    PROGRAM
    chmod +x "$out"
""")


@pytest.fixture
def hello_c() -> str:
    return HELLO_C


@pytest.fixture
def hello_cxx() -> str:
    return HELLO_CXX


@pytest.fixture
def result_c() -> str:
    return RESULT_C


@pytest.fixture
def getenv_c() -> str:
    return GETENV_C


@pytest.fixture
def abort_c() -> str:
    return ABORT_C


@pytest.fixture
def broken_c() -> str:
    return BROKEN_C


@pytest.fixture
def stderr_c() -> str:
    return STDERR_C


@pytest.fixture
def define_c() -> str:
    return DEFINE_C


# ── Environment & settings ──────────────────────────────────────────────────

@pytest.fixture
def clean_env() -> dict:
    """
    os.environ without meta variables, flag variables, CC or CXX, so a
    developer's shell cannot leak into assertions.
    """
    dropped = set(FLAG_VARIABLES) | {"CC", "CXX", "FOO"}
    return {
        k: v for k, v in os.environ.items()
        if k not in dropped and not k.startswith("INLINE_C_")
    }


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    """Directory that receives every per-run temp dir."""
    d = tmp_path / "runs"
    d.mkdir()
    return d


@pytest.fixture
def settings(temp_root: Path) -> Settings:
    return Settings(TEMP_DIR=str(temp_root))


@pytest.fixture
def fake_cc(tmp_path: Path) -> Path:
    """Write the fake compiler driver and return its path."""
    p = tmp_path / "fake-cc"
    p.write_text(FAKE_CC)
    p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return p


@pytest.fixture
def fake_cc_log(tmp_path: Path) -> Path:
    return tmp_path / "fake-cc.log"


# ── Toolchain availability ──────────────────────────────────────────────────

@pytest.fixture
def c_compiler() -> str:
    """Path to ``cc``; skips the test when there is none."""
    path = shutil.which("cc")
    if IS_WINDOWS or path is None:
        pytest.skip("needs a GNU-style C compiler (`cc`) on PATH")
    return path


@pytest.fixture
def cxx_compiler() -> str:
    path = shutil.which("c++")
    if IS_WINDOWS or path is None:
        pytest.skip("needs a GNU-style C++ compiler (`c++`) on PATH")
    return path


@pytest.fixture
def posix():
    if IS_WINDOWS:
        pytest.skip("fake compiler is a POSIX shell script")
