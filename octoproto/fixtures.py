"""Fixtures describing the responses a mock box gives to requests."""

from __future__ import annotations

import io
import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence, runtime_checkable

from .pack import (
    PackError,
    pack_response_status,
    unpack_index_num,
    unpack_limit,
    unpack_offset,
    unpack_space,
    unpack_tuples,
)
from .protocol import InsertMode, Ops, RequestType, RetCode, TupleData

Trigger = Callable[[list["FixtureType"]], list["FixtureType"]]

_DUMMY_RESPONSE = [[b"0"]]

_ids = itertools.count(1)
_ids_lock = threading.Lock()


def _next_id() -> int:
    with _ids_lock:
        return next(_ids)


def _request_type(msg: int) -> RequestType | int:
    try:
        return RequestType(msg)
    except ValueError:
        return msg


@runtime_checkable
class MockEntity(Protocol):
    """An entity a mock server can hand out and a repository can load."""

    def mock_select_response(self) -> Sequence[bytes]:
        """Return the tuple fields the mock server answers with."""
        ...

    def repo_selector(self, ctx: Any) -> Any:
        """Load the entity from the database."""
        ...


@dataclass
class FixtureType:
    """The response a mock server gives to one request."""

    id: int
    msg: RequestType | int
    request: bytes
    response: bytes
    resp_objs: list[MockEntity] | None = field(default_factory=list)
    # Run when the request is handled; may rewrite the server's fixture list.
    trigger: Trigger | None = None


@dataclass
class SelectMockFixture:
    indexnum: int = 0
    offset: int = 0
    limit: int = 0
    keys: list[list[bytes]] = field(default_factory=list)
    resp_tuples: list[TupleData] = field(default_factory=list)


@dataclass
class InsertMockFixture:
    need_ret_val: bool = False
    insert_mode: InsertMode = InsertMode.INSERT_OR_REPLACE
    tuple_: TupleData = field(default_factory=TupleData)


@dataclass
class UpdateMockFixture:
    primary_key: list[bytes] = field(default_factory=list)
    update_ops: list[Ops] = field(default_factory=list)


@dataclass
class DeleteMockFixture:
    primary_key: list[bytes] = field(default_factory=list)


@dataclass
class CallMockFixture:
    proc_name: str = ""
    args: list[bytes] = field(default_factory=list)
    resp_tuples: list[TupleData] = field(default_factory=list)


def create_fixture(
    fixture_id: int,
    msg: int,
    request: bytes,
    response: bytes,
    trigger: Trigger | None,
) -> FixtureType:
    """Build a fixture from raw request and response bytes."""
    return FixtureType(
        id=fixture_id,
        msg=_request_type(msg),
        request=request,
        response=response,
        resp_objs=[],
        trigger=trigger,
    )


def pack_mock_response(entities: Sequence[MockEntity]) -> bytes:
    """Build a successful box response holding the entities' tuples."""
    tuples = []
    for entity in entities:
        try:
            tuples.append(list(entity.mock_select_response()))
        except Exception as exc:
            raise PackError(f"error prepare fixtures: {exc}") from exc
    return pack_response_status(RetCode.OK, tuples)


def _entities_fixture(
    msg: RequestType,
    request_builder: Callable[[list[MockEntity]], bytes],
    entities: Sequence[MockEntity],
) -> FixtureType:
    fixture_id = _next_id()
    entities = list(entities)
    try:
        response = pack_mock_response(entities)
    except PackError as exc:
        raise PackError(f"error prepare fixture response: {exc}") from exc
    return FixtureType(
        id=fixture_id,
        msg=msg,
        request=request_builder(entities),
        response=response,
        resp_objs=entities,
        trigger=None,
    )


def create_select_fixture(
    request_builder: Callable[[list[MockEntity]], bytes],
    entities: Sequence[MockEntity],
) -> FixtureType:
    """Build a select fixture answering with ``entities``."""
    return _entities_fixture(RequestType.SELECT, request_builder, entities)


def create_call_fixture(
    request_builder: Callable[[list[MockEntity]], bytes],
    entities: Sequence[MockEntity],
) -> FixtureType:
    """Build a procedure call fixture answering with ``entities``."""
    return _entities_fixture(RequestType.CALL, request_builder, entities)


def _dummy_fixture(msg: RequestType, request: bytes, trigger: Trigger | None) -> FixtureType:
    return FixtureType(
        id=_next_id(),
        msg=msg,
        request=request,
        response=pack_response_status(RetCode.OK, _DUMMY_RESPONSE),
        resp_objs=None,
        trigger=trigger,
    )


def create_update_fixture(request: bytes, trigger: Trigger | None) -> FixtureType:
    """Build an update fixture with a placeholder successful response."""
    return _dummy_fixture(RequestType.UPDATE, request, trigger)


def create_delete_fixture(request: bytes, trigger: Trigger | None) -> FixtureType:
    """Build a delete fixture with a placeholder successful response."""
    return _dummy_fixture(RequestType.DELETE, request, trigger)


def create_insert_or_replace_fixture(
    entity: MockEntity,
    request: bytes,
    trigger: Trigger | None,
) -> FixtureType:
    """Build an insert fixture that answers with the inserted entity."""
    fixture_id = _next_id()
    try:
        response = pack_mock_response([entity])
    except PackError as exc:
        raise PackError(f"error while pack insert or replace response: {exc}") from exc
    return FixtureType(
        id=fixture_id,
        msg=RequestType.INSERT,
        request=request,
        response=response,
        resp_objs=None,
        trigger=trigger,
    )


def wrap_trigger_with_on_use_promise(
    trigger: Trigger | None,
) -> tuple[Trigger, Callable[[], bool]]:
    """Wrap ``trigger`` and return it with a function telling whether it ran."""
    used = threading.Event()

    def wrapped(fixtures: list[FixtureType]) -> list[FixtureType]:
        used.set()
        if trigger is not None:
            return trigger(fixtures)
        return fixtures

    return wrapped, used.is_set


def unpack_select(data: bytes) -> tuple[int, int, int, int, list[list[bytes]]]:
    """Decode a select request into namespace, index, offset, limit and keys."""
    reader = io.BytesIO(data)
    ns = unpack_space(reader)
    indexnum = unpack_index_num(reader)
    offset = unpack_offset(reader)
    limit = unpack_limit(reader)
    keys = unpack_tuples(reader)
    return ns, indexnum, offset, limit, keys