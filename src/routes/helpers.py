from datetime import date, datetime
from functools import wraps

from flask import g, render_template, request, url_for

from src.services.clinic_service import get_current_clinic
from src.ui.tables import filter_args, remove_filter


def clinic_required(view):
    """Resolve the current clinic onto `g.clinic`; render the empty state when there is none."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if get_current_clinic() is None:
            return render_template("no_clinic.html"), 200
        return view(*args, **kwargs)
    return wrapper


def parse_date(value):
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def current_url(**overrides):
    """URL of the current page with some query args replaced (None drops the arg)."""
    args = request.args.to_dict()
    for key, value in overrides.items():
        if value is None or value == "":
            args.pop(key, None)
        elif isinstance(value, date):
            args[key] = value.isoformat()
        else:
            args[key] = value
    # path args win over a query arg of the same name
    return url_for(request.endpoint, **{**args, **(request.view_args or {})})


def filter_removal_urls(filters):
    """One URL per active filter, pointing at the page without that filter."""
    base = {k: v for k, v in request.args.items() if not k.startswith("filter_") and k != "page"}
    urls = []
    for index in range(len(filters)):
        remaining = filter_args(remove_filter(filters, index))
        urls.append(url_for(request.endpoint, **{**base, **remaining, **(request.view_args or {})}))
    return urls
