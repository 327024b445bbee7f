"""
Stargazer Backend — Star Route Handlers
========================================

What:  The five REST handlers for /stars.
How:   Each handler reads the path/form input, makes one StarService call,
       and writes one response. Failures are raised as application
       exceptions and rendered by the global handlers in main.py.

Route Inventory:
    GET    /stars              → 200 JSON array
    GET    /stars/{name}       → 200 JSON object | 404
    POST   /stars              → 201 + Location | 400 | 409
    PUT    /stars/{name}       → 204 | 404 | 409
    DELETE /stars/{name}       → 204 | 404

Path Matching:
    `{name:path}` captures the rest of the URL, slashes included, so
    GitHub-style names like "octocat/hello-world" are addressable as
    /stars/octocat/hello-world.
"""

import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from stargazer.database import get_db_session
from stargazer.schemas.star import ErrorResponse, StarResponse
from stargazer.services.star_service import star_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stars", tags=["Stars"])


@router.get(
    "",
    response_model=List[StarResponse],
    summary="List all stars",
)
async def list_stars(
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> List[StarResponse]:
    stars = await star_service.list_stars(db)
    return [StarResponse.model_validate(star) for star in stars]


@router.get(
    "/{name:path}",
    response_model=StarResponse,
    responses={404: {"description": "Star not found", "model": ErrorResponse}},
    summary="Get a single star by name",
)
async def view_star(
    name: str,
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> StarResponse:
    star = await star_service.get_star(db, name)
    return StarResponse.model_validate(star)


@router.post(
    "",
    status_code=201,
    response_class=Response,
    responses={
        201: {"description": "Star created; Location points at the new resource"},
        400: {"description": "Blank name", "model": ErrorResponse},
        409: {"description": "Name already taken", "model": ErrorResponse},
    },
    summary="Create a star from a form-encoded body",
)
async def create_star(
    request: Request,
    name: str = Form(..., description="Unique name, e.g. 'owner/repo'"),
    description: str = Form(default=""),
    url: str = Form(default=""),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> Response:
    """
    Create a star and answer 201 with an empty body.

    The Location header is the absolute URL of the new resource; the name is
    percent-quoted with "/" left intact so it routes back to view_star.
    """
    star = await star_service.create_star(db, name=name, description=description, url=url)
    location = request.url_for("view_star", name=quote(star.name, safe="/"))
    return Response(status_code=201, headers={"Location": str(location)})


@router.put(
    "/{name:path}",
    status_code=204,
    response_class=Response,
    responses={
        404: {"description": "Star not found", "model": ErrorResponse},
        409: {"description": "Rename target already taken", "model": ErrorResponse},
    },
    summary="Replace a star's description and url",
)
async def update_star(
    name: str,
    new_name: Optional[str] = Form(default=None, alias="name"),
    description: str = Form(default=""),
    url: str = Form(default=""),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> Response:
    """
    Overwrite description and url of the star in the path.

    The form's optional `name` field renames the star when it differs from
    the path name.
    """
    await star_service.update_star(
        db, name=name, description=description, url=url, new_name=new_name
    )
    return Response(status_code=204)


@router.delete(
    "/{name:path}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Star not found", "model": ErrorResponse}},
    summary="Delete a star",
)
async def delete_star(
    name: str,
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> Response:
    await star_service.delete_star(db, name)
    return Response(status_code=204)
