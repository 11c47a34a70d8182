"""Entry point for running the GeoQuest API server."""
from __future__ import annotations

import os

import logfire
import uvicorn

from ..infra.config import load_settings
from ..infra.instrumentation import configure_instrumentation
from .app import create_app

configure_instrumentation(environment=load_settings().environment)
app = create_app()
logfire.instrument_fastapi(app)


def main() -> None:
    """Run the GeoQuest API server."""
    port = int(os.environ.get('PORT', '9000'))
    host = os.environ.get('HOST', '0.0.0.0')

    uvicorn.run(
        'geoquest.ui.__main__:app',
        host=host,
        port=port,
        reload=os.environ.get('RELOAD', 'false').lower() == 'true',
    )


if __name__ == '__main__':
    main()
