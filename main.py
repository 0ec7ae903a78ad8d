"""
Production entrypoint for the GTA Equity Engine.

Binds to 0.0.0.0:$PORT as required by the hosting platform.
"""

import os
import uvicorn

from utils.config import Config, configure_logging

if __name__ == "__main__":
    configure_logging(Config.load())
    port = int(os.getenv("PORT", "8000"))
    print(f"Starting GTA Equity Engine on port {port}")

    # Import app here to ensure clean module loading
    from web.app import app

    uvicorn.run(app, host="0.0.0.0", port=port)
