"""
test_assertion — the chainable Assert checks.

Tests verify invariant properties:
  - Every passing check returns the same Assert for chaining.
  - Failures are AssertionError with expected and received values.
  - Stream checks are byte-exact unless normalization is asked for.
"""
import pytest

from inline_c.assertion import Assert, normalize_newlines
from inline_c.io.schema import ExecutionResult, ExitStatus, Stage


def _assert(code=0, signal=None, stdout=b"", stderr=b"", stage=Stage.EXECUTE):
    return Assert(ExecutionResult(
        stage=stage,
        status=ExitStatus(code=code, signal=signal),
        stdout=stdout,
        stderr=stderr,
    ))


class TestStatus:
    """success(), failure(), interrupted() and code()."""

    def test_success_chains(self):
        """A passing check returns the same object."""
        a = _assert(stdout=b"Hello, World!")
        assert a.success() is a
        a.success().stdout("Hello, World!").no_stderr()

    def test_success_failure_message(self):
        """The message carries the code and a quoted stderr."""
        a = _assert(code=2, stderr=b"line one\nline two")
        with pytest.raises(AssertionError) as excinfo:
            a.success()
        message = str(excinfo.value)
        assert message.startswith("Unexpected failure.\ncode=2\nstderr=\n")
        assert ">  line one\n> line two" in message

    def test_interrupted_reported_with_placeholder_code(self):
        """A signalled run reports code 1 in the success() message."""
        with pytest.raises(AssertionError, match="code=1"):
            _assert(code=None, signal=6).success()

    def test_failure(self):
        """failure() passes on non-zero and fails on zero."""
        _assert(code=3).failure().code(3)
        with pytest.raises(AssertionError, match="Unexpected success"):
            _assert(code=0).failure()

    def test_interrupted(self):
        """interrupted() passes only without an exit code."""
        _assert(code=None, signal=9).interrupted().failure()
        with pytest.raises(AssertionError, match="Unexpected completion, code=0"):
            _assert(code=0).interrupted()

    def test_code_mismatch(self):
        """A wrong code shows both values."""
        with pytest.raises(AssertionError, match="Codes mismatch\n  expected: 4\n  received: 3"):
            _assert(code=3).code(4)

    def test_code_when_interrupted(self):
        """code() on an interrupted run fails without a number."""
        with pytest.raises(AssertionError, match="Command interrupted, no code available."):
            _assert(code=None, signal=11).code(0)

    def test_compile_stage_failure(self):
        """Compile failures are checked with the same API."""
        a = _assert(code=1, stderr=b"error: boom", stage=Stage.COMPILE)
        a.failure().code(1).stderr(lambda text: "boom" in text)
        assert a.result.stage is Stage.COMPILE


class TestStreams:
    """stdout() and stderr() in their three forms."""

    def test_exact_str_and_bytes(self):
        """str expectations are UTF-8 encoded; bytes are compared as is."""
        a = _assert(stdout="héllo\n".encode("utf-8"))
        a.stdout("héllo\n").stdout("héllo\n".encode("utf-8"))

    def test_exact_is_byte_for_byte(self):
        """CRLF is not LF without normalization."""
        with pytest.raises(AssertionError, match="Stdout mismatch"):
            _assert(stdout=b"a\r\nb").stdout("a\nb")

    def test_normalized_newlines(self):
        """normalize=True folds CRLF and CR on both sides."""
        _assert(stdout=b"a\r\nb\rc\n").stdout("a\nb\nc\n", normalize=True)
        _assert(stdout=b"a\nb").stdout(b"a\r\nb", normalize=True)

    def test_predicate(self):
        """A callable is applied to the decoded text and named on failure."""
        a = _assert(stdout=b"FOO is set to `bar`")
        a.stdout(lambda text: text.startswith("FOO is set"))

        def has_baz(text):
            return "baz" in text

        with pytest.raises(AssertionError, match="does not satisfy predicate 'has_baz'"):
            a.stdout(has_baz)

    def test_predicate_sees_normalized_text(self):
        """Predicates receive normalized text when asked."""
        _assert(stdout=b"x\r\n").stdout(lambda text: text == "x\n", normalize=True)

    def test_stderr(self):
        """stderr() checks the error stream only."""
        a = _assert(stderr=b"oops\n")
        a.stderr("oops\n").no_stdout()
        with pytest.raises(AssertionError, match="Stderr mismatch"):
            a.stderr("nope")

    def test_no_stdout_no_stderr(self):
        """Emptiness checks pass on empty streams and fail otherwise."""
        _assert().no_stdout().no_stderr()
        with pytest.raises(AssertionError, match="Stdout is not empty"):
            _assert(stdout=b"x").no_stdout()
        with pytest.raises(AssertionError, match="Stderr is not empty"):
            _assert(stderr=b"x").no_stderr()

    def test_text_properties(self):
        """Decoded text replaces invalid UTF-8."""
        a = _assert(stdout=b"out", stderr=b"\xffbad")
        assert a.output_text == "out"
        assert a.error_text == "\ufffdbad"


class TestNormalizeNewlines:
    """normalize_newlines()."""

    def test_all_forms(self):
        """CRLF, CR and LF all become LF."""
        assert normalize_newlines("a\r\nb\rc\nd") == "a\nb\nc\nd"
