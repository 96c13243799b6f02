"""
crashpage example

Serves an endpoint that fails in a few different ways:
- /missing raises an exception carrying code 404
- /forbidden is answered by the custom error handler
- anything else raises a plain ValueError

To run this application:
    uvicorn debug_page:app --reload --port 8000
"""

from typing import Optional

from crashpage import Application, Failure, Request, Response, html_response
from crashpage.logger import Logger

logger = Logger(name="debug_page", json_logs=False)


class NotFound(Exception):
    code = 404


class Forbidden(Exception):
    code = 403


def load_item(name: str) -> str:
    raise NotFound(f"No item called {name!r}")


async def endpoint(request: Request) -> Response:
    if request.path == "/missing":
        return html_response(load_item(request.query_params.get("name", "")))
    if request.path == "/forbidden":
        raise Forbidden("Forbidden")
    raise ValueError(f"Nothing at <{request.path}>")


def error_handler(failure: Failure) -> Optional[Response]:
    if failure.code == 403:
        return html_response("<h1>Go away</h1>", status_code=403)
    return None


app = Application(endpoint, error_handler=error_handler, logger=logger)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
