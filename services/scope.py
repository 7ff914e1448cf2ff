"""
Row scope of a checklist answer: once per project, or once per named participant.
The designation table decides how PARTICIPANT items fan out for a project.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import structlog

from models.enums import ApplicantCount, ItemScope, ParticipantDesignation
from services.errors import InvalidAnswerError

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProjectScope:
    @property
    def designation(self) -> None:
        return None


@dataclass(frozen=True)
class ParticipantScope:
    participant: ParticipantDesignation

    @property
    def designation(self) -> str:
        return self.participant.value


Scope = Union[ProjectScope, ParticipantScope]

# Three-or-more shares the two named slots until more designations exist
DESIGNATIONS_BY_APPLICANT_COUNT: dict[ApplicantCount, tuple[ParticipantDesignation, ...]] = {
    ApplicantCount.ONE_APPLICANT: (ParticipantDesignation.SOLO_APPLICANT,),
    ApplicantCount.TWO_APPLICANTS: (ParticipantDesignation.APPLICANT_ONE, ParticipantDesignation.APPLICANT_TWO),
    ApplicantCount.THREE_OR_MORE_APPLICANTS: (
        ParticipantDesignation.APPLICANT_ONE,
        ParticipantDesignation.APPLICANT_TWO,
    ),
}


def participant_designations(applicant_count: str | None) -> tuple[ParticipantDesignation, ...]:
    try:
        count = ApplicantCount(applicant_count or ApplicantCount.ONE_APPLICANT.value)
    except ValueError:
        logger.warning("unknown_applicant_count", applicant_count=applicant_count)
        count = ApplicantCount.ONE_APPLICANT
    if count is ApplicantCount.THREE_OR_MORE_APPLICANTS:
        logger.info("participant_fan_out_capped", applicant_count=count.value, designations=2)
    return DESIGNATIONS_BY_APPLICANT_COUNT[count]


def scopes_for_item(item_scope: str, applicant_count: str | None) -> list[Scope]:
    """All scopes a catalog item materializes into for a project."""
    if item_scope == ItemScope.PROJECT.value:
        return [ProjectScope()]
    if item_scope == ItemScope.PARTICIPANT.value:
        return [ParticipantScope(d) for d in participant_designations(applicant_count)]
    raise ValueError(f"Unknown item scope: {item_scope}")


def scope_for(item_scope: str, designation: str | None) -> Scope:
    """Scope of a single answer; PARTICIPANT items need a designation."""
    if item_scope == ItemScope.PROJECT.value:
        return ProjectScope()
    if designation is None:
        raise InvalidAnswerError("Participant-scoped item requires a participant designation")
    try:
        return ParticipantScope(ParticipantDesignation(designation))
    except ValueError as e:
        raise InvalidAnswerError(f"Unknown participant designation: {designation}") from e


def designation_filter(column, designation: str | None):
    """SQL predicate matching a row's designation; None matches project-level rows."""
    if designation is None:
        return column.is_(None)
    return column == designation
