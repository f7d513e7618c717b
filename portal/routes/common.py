from urllib.parse import urlencode

from fastapi import HTTPException, status
from fastapi.responses import RedirectResponse

STORAGE_FAILURE_DETAIL = 'Service temporarily unavailable. Please try again.'


def see_other(path: str, **query: str) -> RedirectResponse:
    if query:
        path = f'{path}?{urlencode(query)}'
    return RedirectResponse(url=path, status_code=status.HTTP_303_SEE_OTHER)


def storage_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=STORAGE_FAILURE_DETAIL,
    )


def course_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Course not found.')
