"""Exception hierarchy for collaborator and registry failures.

Parsing passes never raise on malformed text; these types cover the two
places where failure is surfaced to the caller: external collaborators
(AI recompute, generation streams) and section registry operations.
"""

from __future__ import annotations


class PDSectionsError(Exception):
    """Base class for errors raised by ``pd_sections``."""


class CollaboratorError(PDSectionsError):
    """An external collaborator failed; state is left as it was."""


class RecomputeError(CollaboratorError):
    """Factor recompute request failed or returned an unusable payload."""


class StreamError(CollaboratorError):
    """Generation stream reported an error payload."""


class RegistryError(PDSectionsError):
    """Invalid section registry operation."""


class SaveError(RegistryError):
    """Saving a section was rejected; nothing was committed."""


class CascadeError(RegistryError):
    """A saved edit could not be propagated to factor and summary sections.

    The edit to ``title`` is already committed when this is raised; only the
    dependent recompute was skipped. The collaborator failure is chained as
    ``__cause__``.
    """

    def __init__(self, title: str, message: str) -> None:
        super().__init__(message)
        self.title = title
