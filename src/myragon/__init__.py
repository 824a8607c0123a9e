"""
=============================================================================
MYRAGON - HTTP REQUEST/RESPONSE BUILDING BLOCKS
=============================================================================

Value objects for the front controller of a web framework:

    myragon/
    ├── __init__.py          # This file - package exports
    ├── config.py            # Config dataclass + logging setup
    ├── wsgi.py              # make_app(): one handler as a WSGI app
    └── http/
        ├── box.py           # Read-only containers, header names
        ├── exceptions.py    # HTTPError hierarchy
        ├── request.py       # Environment + immutable Request
        ├── response.py      # Mutable Response builder, send()
        ├── status_codes.py  # Status enum and reason phrases
        └── transport.py     # Stream and WSGI output transports

There is no routing or middleware here; the handler passed to make_app()
decides everything.

=============================================================================
QUICK START
=============================================================================

    from myragon import make_app
    from myragon.http import Response

    def handler(request):
        if request.get_path() == "/old":
            return Response.redirect("/new")
        return Response.json({"path": request.get_path()})

    app = make_app(handler)      # serve with any WSGI server

=============================================================================
"""

__version__ = "1.0.0"

from .config import Config, configure_logging
from .http import Request, Response
from .wsgi import make_app

__all__ = ["Config", "configure_logging", "Request", "Response", "make_app", "__version__"]
