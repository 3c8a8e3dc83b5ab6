"""Translate service exceptions into HTTP responses."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from ..permissions import PermissionDeniedError
from ..services import InvalidPeriodKeyError, ResourceNotFoundError, ServiceStateError

LOGGER = logging.getLogger(__name__)


@contextmanager
def service_errors(action: str) -> Iterator[None]:
    """Map domain errors raised while performing ``action`` to status codes."""

    try:
        yield
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except ResourceNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidPeriodKeyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ServiceStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        LOGGER.exception("Database failure while trying to %s", action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Unable to {action}",
        ) from exc
