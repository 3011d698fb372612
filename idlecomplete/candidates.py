"""Bounded candidate counting."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from itertools import islice
from typing import Callable, Iterator, Optional

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from .errors import CandidateSourceFailure
from .logging import CycleLogger, get_logger


@dataclass(frozen=True)
class CandidateCount:
    """Result of one bounded count.

    ``count`` is capped at the bound; ``examined`` is how many candidates
    were actually pulled from the source (at most bound + 1).
    """
    count: int
    exceeded_bound: bool = False
    examined: int = 0


class CandidateSource(ABC):
    """Lazy, restartable candidate enumeration."""

    @abstractmethod
    def enumerate_up_to(self, bound: int) -> Iterator:
        """Yield candidates; callers stop pulling after bound + 1 items."""
        pass


class CompleterSource(CandidateSource):
    """Candidate source over a prompt_toolkit completer and document."""

    def __init__(self, completer: Optional[Completer], document: Document):
        self.completer = completer
        self.document = document

    def enumerate_up_to(self, bound: int) -> Iterator[Completion]:
        if self.completer is None:
            return iter(())
        event = CompleteEvent(completion_requested=True)
        return iter(self.completer.get_completions(self.document, event))


class CandidateCounter:
    """Counts candidates for the current prompt state without materializing them."""

    def __init__(self, get_source: Callable[[], CandidateSource], logger: Optional[CycleLogger] = None):
        """Initialize the counter.

        Args:
            get_source: Returns the current candidate table (queried every call)
            logger: Cycle logger for source failures
        """
        self.get_source = get_source
        self.logger = logger or get_logger()

    def count(self, bound: int) -> CandidateCount:
        """Count candidates, stopping after bound + 1.

        Enumeration errors are logged and counted as zero candidates.
        """
        try:
            seen = self._count_raw(bound)
        except CandidateSourceFailure as e:
            self.logger.log_error("candidate_source_failure", str(e))
            return CandidateCount(count=0, exceeded_bound=False, examined=0)

        if seen > bound:
            return CandidateCount(count=bound, exceeded_bound=True, examined=seen)
        return CandidateCount(count=seen, exceeded_bound=False, examined=seen)

    def _count_raw(self, bound: int) -> int:
        try:
            source = self.get_source()
            candidates = source.enumerate_up_to(bound)
            return sum(1 for _ in islice(candidates, bound + 1))
        except Exception as e:
            raise CandidateSourceFailure(f"Candidate enumeration failed: {e}") from e
