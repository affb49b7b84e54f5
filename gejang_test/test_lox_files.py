"""Runs every .lox file under test_suite/ and checks it against the expectations
written in its comments:

    print 1;         // expect: 1
    print nil + 1;   // expect runtime error: Binary operation not implemented: Nil + Number
    var a = a;       // LoxResolutionError at 'a': Cannot read local variable in its own initializer.
    // [line 3] LoxSyntaxError at end: Expect ';' after value.

The annotation format is adapted from
https://github.com/munificent/craftinginterpreters/blob/93e3f56e3cfd78a9facc747b3ec6e5022ae7f4bc/util/test.py
by Bob Nystrom, licensed MIT.
"""

import re
from io import StringIO
from pathlib import Path
from typing import List, NamedTuple, Optional

import pytest

from gejang.lox import Lox
from gejang.utilities.error import EX_DATAERR, EX_SOFTWARE, LoxExit

TEST_ROOT = Path(__file__).resolve().parent.parent / "test_suite"

OUTPUT_EXPECT = re.compile(r"// expect: ?(.*)")
ERROR_EXPECT = re.compile(r"// (Lox(?:Syntax|Resolution)Error( at (?:end|'[^']+'))?: .*)")
ERROR_LINE_EXPECT = re.compile(r"// \[line (\d+)\] (Lox(?:Syntax|Resolution)Error( at (?:end|'[^']+'))?: .*)")
RUNTIME_ERROR_EXPECT = re.compile(r"// expect runtime error: (.+)")


class Expectation(NamedTuple):
    output: List[str]
    errors: List[str]
    exit_code: Optional[int]


def parse_expectations(source: str) -> Expectation:
    output: List[str] = list()
    static_errors: List[str] = list()
    runtime_errors: List[str] = list()
    for line_number, line in enumerate(source.splitlines(), start=1):
        if match := OUTPUT_EXPECT.search(line):
            output.append(match.group(1))
        elif match := ERROR_LINE_EXPECT.search(line):
            static_errors.append(f"[line {match.group(1)}] {match.group(2)}")
        elif match := ERROR_EXPECT.search(line):
            static_errors.append(f"[line {line_number}] {match.group(1)}")
        elif match := RUNTIME_ERROR_EXPECT.search(line):
            runtime_errors.append(f"[line {line_number}] LoxRuntimeError: {match.group(1)}")

    if static_errors and runtime_errors:
        raise ValueError("Cannot have both static and runtime errors.")
    if len(runtime_errors) > 1:
        raise ValueError("Cannot have more than one runtime error.")
    exit_code = EX_DATAERR if static_errors else EX_SOFTWARE if runtime_errors else None
    return Expectation(output, static_errors or runtime_errors, exit_code)


def discover() -> List[Path]:
    return sorted(TEST_ROOT.rglob("*.lox"))


@pytest.mark.parametrize("path", discover(), ids=lambda path: str(path.relative_to(TEST_ROOT)))
def test_lox_file(path: Path):
    source = path.read_text(encoding="utf-8")
    expected = parse_expectations(source)

    out, err = StringIO(), StringIO()
    exit_code = None
    try:
        Lox(output=out, error=err).run(source)
    except LoxExit as exit_:
        exit_code = exit_.code

    assert err.getvalue().splitlines() == expected.errors
    assert out.getvalue().splitlines() == expected.output
    assert exit_code == expected.exit_code
