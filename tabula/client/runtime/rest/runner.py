"""REST request runner using endpoint specs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .transport import Transport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EndpointSpec:
    id: str
    method: str  # "GET" | "POST" | "PUT" | "PATCH" | "DELETE"
    build_path: Callable[[dict[str, Any]], str]


class RestRunner:
    def __init__(self, transport: Transport) -> None:
        self._t = transport

    @property
    def transport(self) -> Transport:
        return self._t

    async def run(
        self, *, spec: EndpointSpec, params: dict[str, Any], body: Any = None
    ) -> Any:
        path = spec.build_path(params)
        started = time.perf_counter()
        data = await self._t.execute(spec.method, path, body)
        logger.debug(
            "endpoint_completed",
            extra={
                "endpoint": spec.id,
                "method": spec.method,
                "path": path,
                "latency_ms": (time.perf_counter() - started) * 1000,
            },
        )
        return data
