from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ..domain.exceptions import InvalidRequestError
from ..domain.models import Snapshot, SnapshotRequest
from ..services import SnapshotBuilder


class SnapshotUseCase:
    """Use case for generating a ``.zfix`` environment snapshot.

    Thin orchestration layer that validates the request and delegates to
    SnapshotBuilder.
    """

    def __init__(self, *, builder: SnapshotBuilder) -> None:
        self._builder = builder

    def execute(self, *, body: dict[str, Any]) -> Snapshot:
        try:
            request = SnapshotRequest.model_validate(body)
        except ValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(p) for p in first["loc"])
            raise InvalidRequestError(f"Invalid snapshot request: {loc}: {first['msg']}") from e
        return self._builder.build(request)
