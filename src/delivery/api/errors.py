"""Translate delivery domain errors into HTTP responses.

Protean's FastAPI integration covers ValidationError (400) and
ObjectNotFoundError (404); the handlers here add the delivery-specific
mappings. Starlette resolves handlers along the exception's MRO, so
TerminalStateError gets 409 even though it is a ValidationError.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from delivery.errors import Conflict, Forbidden, InvalidTransition, TerminalStateError


def _error_response(status_code: int, messages) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": messages})


async def _invalid_transition(request: Request, exc: InvalidTransition) -> JSONResponse:
    return _error_response(400, exc.messages)


async def _terminal_state(request: Request, exc: TerminalStateError) -> JSONResponse:
    return _error_response(409, exc.messages)


async def _conflict(request: Request, exc: Conflict) -> JSONResponse:
    return _error_response(409, exc.messages)


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    return _error_response(409, {"conflict": ["The record was modified concurrently"]})


async def _forbidden(request: Request, exc: Forbidden) -> JSONResponse:
    return _error_response(403, exc.messages)


def register_exception_handlers(app: FastAPI) -> None:
    register_protean_handlers(app)
    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(TerminalStateError, _terminal_state)
    app.add_exception_handler(Conflict, _conflict)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
    app.add_exception_handler(Forbidden, _forbidden)
