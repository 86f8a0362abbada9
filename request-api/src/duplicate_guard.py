from typing import AbstractSet

from sqlalchemy.orm import Session

import crud
from exceptions import ConflictException


def check_duplicate_request(
    db: Session, emp_id: str, program: str, one_time_programs: AbstractSet[str]
):
    """Reject a second active request for a one-time program.

    Programs outside ``one_time_programs`` may be requested any number of
    times. Rejected requests never block a resubmission.
    """
    if program not in one_time_programs:
        return
    existing = crud.get_active_request(db, emp_id, program)
    if existing is not None:
        raise ConflictException(
            f"You already have a {existing.status.lower()} request for {program}"
        )
