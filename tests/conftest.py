import sys
from collections.abc import Callable
from pathlib import Path

import pytest

TOOL_DIR = Path(__file__).resolve().parent.parent
if str(TOOL_DIR) not in sys.path:
    sys.path.insert(0, str(TOOL_DIR))

import query2_info  # noqa: E402

Key = tuple[str, str, str]

_TABLE_NAMES = {
    entry.value: entry.name
    for entry in (
        query2_info.VALID_PNAMES
        + query2_info.VALID_TARGETS
        + query2_info.VALID_INTERNALFORMATS
    )
}


class FakeDriver:
    """In-memory stand-in for GLDriver.

    Responses are keyed by (pname, target, internalformat) names. A call with
    no response leaves params untouched, like a driver rejecting the query.
    """

    def __init__(
        self,
        responses: dict[Key, list[int]] | None = None,
        default: list[int] | None = None,
        extensions: tuple[str, ...] = (query2_info.EXTENSION_NAME,),
    ):
        self.responses = {} if responses is None else dict(responses)
        self.default = default
        self.extensions = set(extensions)
        self.call_errors: dict[Key, list[int]] = {}
        self.pending_errors: list[int] = []
        self.calls: list[tuple[int, str, str, str, int]] = []
        self.resolved: list[int] = []
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def has_extension(self, name: str) -> bool:
        return name in self.extensions

    def entry_point(self, width: query2_info.QueryWidth) -> Callable[..., None]:
        self.resolved.append(width.bits)

        def _query(target, internalformat, pname, bufsize, params) -> None:
            key = (
                _TABLE_NAMES[pname],
                _TABLE_NAMES[target],
                _TABLE_NAMES[internalformat],
            )
            self.calls.append((width.bits, *key, bufsize))
            self.pending_errors.extend(self.call_errors.get(key, []))
            values = self.responses.get(key, self.default)
            if values is None:
                return
            for index, value in enumerate(values[:bufsize]):
                params[index] = value

        return _query

    def get_error(self) -> int:
        if self.pending_errors:
            return self.pending_errors.pop(0)
        return query2_info.GL_NO_ERROR

    def queries_for(self, pname: str) -> list[tuple[int, str, str, str, int]]:
        return [call for call in self.calls if call[1] == pname]


@pytest.fixture
def make_driver() -> Callable[..., FakeDriver]:
    def _make_driver(**kwargs: object) -> FakeDriver:
        return FakeDriver(**kwargs)

    return _make_driver


@pytest.fixture
def enum() -> Callable[[str], query2_info.GLEnum]:
    return query2_info.gl_enum
