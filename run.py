"""
Entry point for the chat co-moderator host API.
Starts the FastAPI application with uvicorn.
"""

import sys
import uvicorn

from comoderator.config import settings


def run():
    """Run the co-moderator API server."""
    print("\n" + "=" * 60)
    print("CHAT CO-MODERATOR - Host API")
    print("=" * 60)
    print(f"🚀 Starting FastAPI application...")
    print(f"📍 Host: {settings.api.host}:{settings.api.port}")
    print(f"📚 API Docs: http://{settings.api.host}:{settings.api.port}/api/docs")
    print("=" * 60 + "\n")

    uvicorn.run(
        "comoderator.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    try:
        run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)
