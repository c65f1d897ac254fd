"""
FastAPI Todo Backend package.

Personal, owner-scoped todo lists served as a bearer-token JSON API under
/api and as a cookie-authenticated HTML frontend. The application instance is
built by `src.api.main.create_app()`; `src.api.main.app` is the default one
configured from the environment.
"""
