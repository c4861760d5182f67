from __future__ import annotations

from typing import List, Optional, Tuple

from ..catalog import CHOICES, Catalog, Dilemma
from ..errors import DataIntegrityError, SessionClosedError
from .models import Response


def resolve_choice(response: Response, catalog: Catalog) -> Tuple[Dilemma, str]:
    """Return the dilemma and motif id a response points at, or raise ``DataIntegrityError``."""
    dilemma = catalog.dilemma(response.dilemma_id)
    if dilemma is None:
        raise DataIntegrityError(
            f"unknown dilemma {response.dilemma_id!r}",
            dilemma_id=response.dilemma_id,
        )
    if response.chosen_option not in CHOICES:
        raise DataIntegrityError(
            f"chosen option {response.chosen_option!r} for dilemma {dilemma.dilemma_id} is not one of A-D",
            dilemma_id=dilemma.dilemma_id,
            chosen_option=response.chosen_option,
        )
    motif_id = dilemma.motif_for(response.chosen_option)
    if motif_id is None:
        raise DataIntegrityError(
            f"option {response.chosen_option} of dilemma {dilemma.dilemma_id} has no motif mapping",
            dilemma_id=dilemma.dilemma_id,
            chosen_option=response.chosen_option,
        )
    return dilemma, motif_id


class Session:
    """One user's ordered run through the dilemmas.

    The session is open until ``expected_count`` responses have been
    recorded; the transition to complete happens once and a complete session
    never accepts another response.
    """

    def __init__(self, session_id: str, expected_count: int,
                 responses: Optional[List[Response]] = None, completed: bool = False):
        if expected_count < 1:
            raise ValueError("expected_count must be at least 1")
        self.session_id = session_id
        self.expected_count = expected_count
        self._responses: List[Response] = list(responses or [])
        self._completed = completed or len(self._responses) >= expected_count

    @property
    def completed(self) -> bool:
        return self._completed

    def snapshot(self) -> Tuple[Response, ...]:
        """The recorded responses, in order, as an immutable tuple."""
        return tuple(self._responses)

    def answered(self, dilemma_id: str) -> bool:
        return any(r.dilemma_id == dilemma_id for r in self._responses)

    def record(self, response: Response, catalog: Catalog) -> bool:
        """Add a response. Returns True when this response completed the session."""
        if self._completed:
            raise SessionClosedError(
                f"session {self.session_id} is complete and no longer accepts responses",
                session_id=self.session_id,
            )
        resolve_choice(response, catalog)
        if self.answered(response.dilemma_id):
            raise DataIntegrityError(
                f"session {self.session_id} already answered dilemma {response.dilemma_id}",
                session_id=self.session_id,
                dilemma_id=response.dilemma_id,
            )
        self._responses.append(response)
        if len(self._responses) >= self.expected_count:
            self._completed = True
            return True
        return False
