"""HTTP plumbing for asdfplug.

Public API:

make_session : function
    Build a requests.Session with the asdfplug User-Agent and an optional
    bearer credential.
auth_headers : function
    The Authorization header for an optional token, for non-session callers
    such as `git -c http.extraHeader=...`.
"""

from .http import DEFAULT_TIMEOUT, auth_headers, make_session

__all__ = ["DEFAULT_TIMEOUT", "auth_headers", "make_session"]
