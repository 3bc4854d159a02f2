from typing import Any
from fastapi import Request


def url_for(request: Request, name: str, **params: Any) -> str:
    """Route URL by name; `url_for('static', filename=...)` for files under /static."""
    if name == "static":
        return str(request.url_for("static", path=params["filename"]))
    return str(request.url_for(name, **params))
