"""Named marks of elapsed active time and the durations measured between them."""

from __future__ import annotations

from collections import defaultdict

from .errors import NotFoundError
from .models import Mark, Measure


class MarkLedger:
    def __init__(self) -> None:
        self._marks: defaultdict[str, list[Mark]] = defaultdict(list)
        self._measures: defaultdict[str, list[Measure]] = defaultdict(list)

    def mark(self, name: str, elapsed_ms: float) -> Mark:
        entry = Mark(time=elapsed_ms)
        self._marks[name].append(entry)
        return entry

    def measure(self, name: str, start_mark: str, end_mark: str) -> Measure:
        """Record the duration between the latest ``start_mark`` and ``end_mark``.

        Out-of-order marks yield a negative duration, reported unchanged.
        """
        start = self._latest_mark(start_mark)
        end = self._latest_mark(end_mark)
        entry = Measure(name=name, start_time=start.time, duration=end.time - start.time)
        self._measures[name].append(entry)
        return entry

    def get_marks(self, name: str) -> list[Mark]:
        marks = self._marks.get(name)
        if not marks:
            raise NotFoundError("mark", name)
        return list(marks)

    def get_measures(self, name: str) -> list[Measure]:
        measures = self._measures.get(name)
        if not measures:
            raise NotFoundError("measure", name)
        return list(measures)

    def mark_names(self) -> list[str]:
        return [name for name, marks in self._marks.items() if marks]

    def measure_names(self) -> list[str]:
        return [name for name, measures in self._measures.items() if measures]

    def _latest_mark(self, name: str) -> Mark:
        marks = self._marks.get(name)
        if not marks:
            raise NotFoundError("mark", name)
        return marks[-1]
