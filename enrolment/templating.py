import os

from fastapi.templating import Jinja2Templates

from .config import settings
from .services.summary import format_age, format_long_date, format_short_date
from .utils import url_for

templates = Jinja2Templates(directory=os.path.join(settings.ROOT_PATH, "templates"))
templates.env.filters["long_date"] = format_long_date
templates.env.filters["short_date"] = format_short_date
templates.env.filters["age"] = format_age


def render_template(template_name: str, context: dict, status_code: int = 200):
    request = context["request"]

    standard_context = {
        "config": settings,
        "url_for": lambda name, **params: url_for(request, name, **params),
    }

    # Provided context takes precedence
    full_context = {**standard_context, **context}

    return templates.TemplateResponse(request, template_name, full_context, status_code=status_code)
