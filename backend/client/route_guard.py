"""Page redirect decisions for the web front end.

This only shapes navigation; every API route checks auth on its own.
"""

from urllib.parse import urlencode

LOGIN_PATH = '/auth/login'
DASHBOARD_PATH = '/dashboard'
PASSTHROUGH_PREFIXES = ('/api', '/_next', '/static', '/public', '/favicon.ico')


def resolve_redirect(path: str, has_token: bool, role: str | None = None) -> str | None:
    """Return where to send a request for ``path``, or ``None`` to let it through."""
    if path.startswith(PASSTHROUGH_PREFIXES):
        return None

    if path.startswith('/auth'):
        return DASHBOARD_PATH if has_token else None

    if not has_token:
        return f'{LOGIN_PATH}?{urlencode({"redirect": path})}'

    if path.startswith('/admin') and role is not None and role != 'admin':
        return DASHBOARD_PATH

    return None
