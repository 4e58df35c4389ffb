import logging

from sqlalchemy.orm import Session

from eventcrm.models import Event
from eventcrm.services.projects import PIPELINE_ORDER, PipelineStatus
from eventcrm.services.ranking import compute_rank, needs_rebalance, spread_ranks

logger = logging.getLogger(__name__)


def column_events(db: Session, status: PipelineStatus, exclude_id: int | None = None) -> list[Event]:
    query = db.query(Event).filter(Event.pipeline_status == status.value)
    if exclude_id is not None:
        query = query.filter(Event.id != exclude_id)
    return query.order_by(Event.pipeline_rank.is_(None), Event.pipeline_rank.asc(), Event.updated_at.desc()).all()


def ordered_pipeline(db: Session) -> dict[PipelineStatus, list[Event]]:
    return {status: column_events(db, status) for status in PIPELINE_ORDER}


def tail_rank(db: Session, status: PipelineStatus) -> int:
    column = [e for e in column_events(db, status) if e.pipeline_rank is not None]
    return compute_rank(column[-1].pipeline_rank if column else None, None)


def _renumber(column: list[Event], status: PipelineStatus) -> None:
    for event, rank in zip(column, spread_ranks(len(column))):
        event.pipeline_rank = rank
    logger.info("Renumbered %d events in pipeline column %s", len(column), status.value)


def move_event(
    db: Session,
    event_id: int,
    status: PipelineStatus,
    *,
    after_id: int | None = None,
    before_id: int | None = None,
) -> Event:
    """Place an event in a pipeline column.

    ``after_id`` names the event that ends up directly above the moved one,
    ``before_id`` the one directly below. With neither, the event goes to
    the end of the column.
    """
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise LookupError(f"event {event_id} not found")

    column = column_events(db, status, exclude_id=event.id)
    ids = [e.id for e in column]
    for neighbour in (after_id, before_id):
        if neighbour is not None and neighbour not in ids:
            raise ValueError(f"event {neighbour} is not in column {status.value}")

    if after_id is not None:
        index = ids.index(after_id) + 1
        if before_id is not None and ids.index(before_id) != index:
            raise ValueError("neighbours are not adjacent")
    elif before_id is not None:
        index = ids.index(before_id)
    else:
        index = len(ids)

    left = column[index - 1] if index > 0 else None
    right = column[index] if index < len(column) else None
    left_rank = left.pipeline_rank if left else None
    right_rank = right.pipeline_rank if right else None

    unranked = any(e.pipeline_rank is None for e in column)
    if unranked or needs_rebalance(left_rank, right_rank):
        _renumber(column, status)
        left_rank = left.pipeline_rank if left else None
        right_rank = right.pipeline_rank if right else None

    old_status = event.pipeline_status
    event.pipeline_status = status.value
    event.pipeline_rank = compute_rank(left_rank, right_rank)
    db.flush()
    logger.info(
        "Moved event %s from %s to %s at rank %s",
        event.id,
        old_status,
        status.value,
        event.pipeline_rank,
    )
    return event
