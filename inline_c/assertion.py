"""
Assert — chainable checks over a captured ExecutionResult.

    run(Language.C, program).success().stdout("Hello, World!").no_stderr()

Every check returns the same object or raises AssertionError, which
test runners report as an ordinary failure.
"""
from __future__ import annotations

from typing import Callable, Union

from inline_c.io.schema import ExecutionResult

Expected = Union[bytes, str, Callable[[str], bool]]


def normalize_newlines(text: str) -> str:
    """``\\r\\n`` and lone ``\\r`` become ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _quote(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").replace("\n", "\n> ")


class Assert:
    """Fluent assertions over one pipeline result."""

    def __init__(self, result: ExecutionResult):
        self._result = result

    def __repr__(self) -> str:
        return f"Assert(stage={self._result.stage.value}, status={self._result.status!r})"

    @property
    def result(self) -> ExecutionResult:
        return self._result

    @property
    def output_text(self) -> str:
        return self._result.stdout.decode("utf-8", errors="replace")

    @property
    def error_text(self) -> str:
        return self._result.stderr.decode("utf-8", errors="replace")

    # ── Status ──────────────────────────────────────────────────────────

    def success(self) -> Assert:
        status = self._result.status
        if not status.success:
            raise AssertionError(
                "Unexpected failure.\n"
                f"code={status.code_or(1)}\n"
                f"stderr=\n> ```\n>  {_quote(self._result.stderr)}\n> ```\n"
            )
        return self

    def failure(self) -> Assert:
        if self._result.status.success:
            raise AssertionError("Unexpected success")
        return self

    def interrupted(self) -> Assert:
        if not self._result.status.interrupted:
            raise AssertionError(
                f"Unexpected completion, code={self._result.status.code}"
            )
        return self

    def code(self, expected_code: int) -> Assert:
        received_code = self._result.status.code
        if received_code is None:
            raise AssertionError("Command interrupted, no code available.")
        if received_code != expected_code:
            raise AssertionError(
                f"Codes mismatch\n  expected: {expected_code}\n  received: {received_code}"
            )
        return self

    # ── Streams ─────────────────────────────────────────────────────────

    def stdout(self, expected: Expected, *, normalize: bool = False) -> Assert:
        _check_stream("Stdout", self._result.stdout, expected, normalize)
        return self

    def stderr(self, expected: Expected, *, normalize: bool = False) -> Assert:
        _check_stream("Stderr", self._result.stderr, expected, normalize)
        return self

    def no_stdout(self) -> Assert:
        if self._result.stdout:
            raise AssertionError(f"Stdout is not empty\n  received: {self._result.stdout!r}")
        return self

    def no_stderr(self) -> Assert:
        if self._result.stderr:
            raise AssertionError(f"Stderr is not empty\n  received: {self._result.stderr!r}")
        return self


def _check_stream(label: str, received: bytes, expected: Expected, normalize: bool) -> None:
    """
    Compare one captured stream.

    Without *normalize*, bytes and str are compared byte-for-byte
    (str is UTF-8 encoded).  Predicates always see decoded text.
    """
    if callable(expected):
        text = received.decode("utf-8", errors="replace")
        if normalize:
            text = normalize_newlines(text)
        if not expected(text):
            raise AssertionError(
                f"{label} does not satisfy predicate {getattr(expected, '__name__', expected)!r}\n"
                f"  received: {text!r}"
            )
        return

    expected_bytes = expected.encode("utf-8") if isinstance(expected, str) else bytes(expected)

    if normalize:
        want = normalize_newlines(expected_bytes.decode("utf-8", errors="replace"))
        got = normalize_newlines(received.decode("utf-8", errors="replace"))
        if want != got:
            raise AssertionError(
                f"{label} mismatch\n  expected: {want!r}\n  received: {got!r}"
            )
        return

    if expected_bytes != received:
        raise AssertionError(
            f"{label} mismatch\n  expected: {expected_bytes!r}\n  received: {received!r}"
        )
