from fastapi.responses import JSONResponse

from dashquery.core import logger


class DashQueryError(Exception):
    """Base of the semantic failures returned to callers unchanged."""

    status_code = 400
    default_message = "request could not be processed"

    def __init__(self, message=None, description=None):
        super().__init__(message or self.default_message)
        self.description = description


class InvalidArgumentError(DashQueryError):
    default_message = "invalid argument"


class QueryNotFoundError(DashQueryError):
    status_code = 404
    default_message = "query in query history not found"


class QueryAlreadyStarredError(DashQueryError):
    status_code = 409
    default_message = "query was already starred"


class StarredQueryNotFoundError(DashQueryError):
    status_code = 404
    default_message = "starred query not found"


class DashboardOrPanelIdentifierNotSetError(DashQueryError):
    default_message = "dashboard or panel identifier is not set"


class DashboardNotFoundError(DashQueryError):
    status_code = 404
    default_message = "dashboard not found"


class DashboardCorruptError(DashQueryError):
    status_code = 422
    default_message = "dashboard data is missing or corrupt"


class DashboardPanelNotFoundError(DashQueryError):
    status_code = 404
    default_message = "dashboard panel not found"


def error_response(error: DashQueryError) -> JSONResponse:
    description = getattr(error, "description", None)
    logger.warning(
        f"Request failed with {error.__class__.__name__}: {error}, description: {description}"
    )

    content = {"error": str(error), "message": str(error)}
    if description:
        content["description"] = description

    return JSONResponse(status_code=error.status_code, content=content)
