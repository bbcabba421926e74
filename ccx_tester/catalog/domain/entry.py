"""TestEntry domain value object — one sample/command/expected-result pairing."""

from pydantic import BaseModel, Field


class TestEntry(BaseModel, frozen=True):
    """Immutable catalog record.

    `command` holds tool flags only; the produced-output and sample paths are
    appended at execution time.
    """

    __test__ = False  # not a pytest test class

    sample_file: str = Field(min_length=1)
    command: str
    expected_result_file: str = Field(min_length=1)
