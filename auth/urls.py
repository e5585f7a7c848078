from __future__ import annotations

import urllib.parse

AUTH_RESPONSE_PARAMS = frozenset({"code", "state", "error", "error_description"})


def is_authorization_response(params) -> bool:
    return any(key in params for key in AUTH_RESPONSE_PARAMS)


def strip_query_params(url: str, names) -> str:
    parsed = urllib.parse.urlparse(url)
    kept = [
        (key, value)
        for key, value in urllib.parse.parse_qsl(parsed.query, keep_blank_values=True)
        if key not in names
    ]
    new_query = urllib.parse.urlencode(kept)
    return urllib.parse.urlunparse(parsed._replace(query=new_query))


def strip_auth_response_params(url: str) -> str:
    return strip_query_params(url, AUTH_RESPONSE_PARAMS)
