import sys

import uvicorn

from salestrack.core.config import settings


def run_http(port: int = 8000):
    """Run the API with uvicorn"""
    print(f"Starting SalesTrack on port {port}...")
    uvicorn.run(
        "salestrack.main:app",  # Use string import
        host="0.0.0.0",
        port=port,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8000
    run_http(port)
