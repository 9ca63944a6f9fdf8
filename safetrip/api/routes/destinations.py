from fastapi import APIRouter, BackgroundTasks, Depends, status
from typing import List

from safetrip.api.deps import get_session
from safetrip.models.destination import Destination
from safetrip.schemas.destination import (
    CurrentDestination,
    DestinationCreate,
    DestinationListResponse,
    DestinationUpdate,
)
from safetrip.services.session import UserSession
from safetrip.tasks.alerts import warm_alert_feeds

router = APIRouter(prefix="/destinations", tags=["Destinations"])


def _listing(session: UserSession) -> DestinationListResponse:
    store = session.store
    return DestinationListResponse(
        destinations=store.list_destinations(),
        current=store.current_destination,
        offline=store.is_offline,
        error=store.last_error.detail if store.last_error else None,
    )


@router.get("/", response_model=DestinationListResponse)
def get_destinations(session: UserSession = Depends(get_session)):
    """Get the traveler's destinations and the currently selected one."""
    return _listing(session)


@router.post("/reload", response_model=DestinationListResponse)
def reload_destinations(session: UserSession = Depends(get_session)):
    """Refetch destinations from the travel plans service."""
    session.store.load()
    return _listing(session)


@router.post("/", response_model=Destination, status_code=status.HTTP_201_CREATED)
def create_destination(destination: DestinationCreate, session: UserSession = Depends(get_session)):
    return session.store.add(destination)


@router.patch("/{destination_id}", response_model=Destination)
def update_destination(
        destination_id: str,
        changes: DestinationUpdate,
        session: UserSession = Depends(get_session),
):
    return session.store.update(destination_id, changes)


@router.delete("/{destination_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_destination(destination_id: str, session: UserSession = Depends(get_session)):
    session.store.remove(destination_id)


@router.post("/{destination_id}/activate", response_model=Destination)
def activate_destination(
        destination_id: str,
        background_tasks: BackgroundTasks,
        session: UserSession = Depends(get_session),
):
    """Make this the only active destination and warm its alert feeds."""
    destination = session.store.activate(destination_id)

    # Trigger initial feed fetch
    background_tasks.add_task(warm_alert_feeds, destination.destination_name)
    return destination


@router.put("/current", response_model=DestinationListResponse)
def select_destination(selection: CurrentDestination, session: UserSession = Depends(get_session)):
    """Point alert filtering at a destination without changing its status."""
    store = session.store
    store.set_active(store.get(selection.id) if selection.id else None)
    return _listing(session)


@router.get("/eligible", response_model=List[Destination])
def get_alert_eligible(session: UserSession = Depends(get_session)):
    """Active, alert-enabled destinations whose dates include today."""
    return session.store.get_active_alert_eligible()


@router.get("/upcoming", response_model=List[Destination])
def get_upcoming(session: UserSession = Depends(get_session)):
    return session.store.get_upcoming()
