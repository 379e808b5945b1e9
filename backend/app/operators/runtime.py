"""Minimal in-process host that drives an operator through its lifecycle."""
from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from .records import Record, StreamSchema

logger = logging.getLogger(__name__)


class Punctuation(enum.Enum):
    WINDOW_MARKER = "WINDOW_MARKER"
    FINAL_MARKER = "FINAL_MARKER"


@dataclass(frozen=True)
class OperatorContext:
    """Identifies the operator instance in log lines."""

    name: str = "HttpPost"
    pe_id: int = 0
    job_id: int = 0

    def describe(self) -> str:
        return f"Operator {self.name} in PE: {self.pe_id} in Job: {self.job_id}"


Emitted = Record | Punctuation


class StreamingOutput:
    """Output port collecting submitted records and punctuation in order."""

    def __init__(
        self,
        schema: StreamSchema,
        listener: Callable[[Emitted], None] | None = None,
    ):
        self.schema = schema
        self._listener = listener
        self.submitted: list[Emitted] = []

    def new_record(self) -> Record:
        return Record(self.schema)

    def submit(self, record: Record) -> None:
        self._emit(record)

    def punctuate(self, mark: Punctuation) -> None:
        self._emit(mark)

    def _emit(self, item: Emitted) -> None:
        self.submitted.append(item)
        if self._listener is not None:
            self._listener(item)


class Operator(Protocol):
    def initialize(self, context: OperatorContext, output: StreamingOutput) -> None: ...

    def all_ports_ready(self) -> None: ...

    def process(self, record: Record) -> None: ...

    def process_punctuation(self, mark: Punctuation) -> None: ...

    def shutdown(self) -> None: ...


class OperatorHost:
    """Owns one operator instance and serializes delivery to it."""

    def __init__(
        self,
        operator: Operator,
        output_schema: StreamSchema,
        context: OperatorContext | None = None,
    ):
        self.operator = operator
        self.context = context or OperatorContext()
        self.output = StreamingOutput(output_schema)
        self._delivery_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()
        self._started = False
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> None:
        with self._lifecycle_lock:
            if self._started:
                return
            self.operator.initialize(self.context, self.output)
            self.operator.all_ports_ready()
            self._started = True

    def process(self, record: Record) -> list[Record]:
        """Deliver one record and return the records it produced."""

        if not self.running:
            raise RuntimeError("operator host is not running")
        with self._delivery_lock:
            mark = len(self.output.submitted)
            try:
                self.operator.process(record)
            finally:
                produced = self.output.submitted[mark:]
                del self.output.submitted[mark:]
        return [item for item in produced if isinstance(item, Record)]

    def punctuate(self, mark: Punctuation) -> list[Any]:
        if not self.running:
            raise RuntimeError("operator host is not running")
        with self._delivery_lock:
            start = len(self.output.submitted)
            self.operator.process_punctuation(mark)
            produced = self.output.submitted[start:]
            del self.output.submitted[start:]
        return produced

    def shutdown(self) -> None:
        with self._lifecycle_lock:
            if not self._started or self._stopped:
                return
            self._stopped = True
            # Not serialized with delivery: a hung dispatch must not block shutdown.
            self.operator.shutdown()
            logger.debug("%s shut down", self.context.describe())
