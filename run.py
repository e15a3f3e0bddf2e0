"""
Local development entry point.

Creates the Flask app via create_app() and runs the dev server.
"""

import os
from greenmate import create_app

os.environ.setdefault("APP_CONFIG", "greenmate.config.DevConfig")

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=int(os.getenv("PORT", 5000)), debug=os.getenv("FLASK_DEBUG", "1") == "1")
