"""WSGI entry point for the property hub analytics service."""

import os
import sys

from propertyhub import create_app

app = create_app()

if __name__ == "__main__":
    port = 5000

    # Hosting platforms pass the port through the environment
    if "PORT" in os.environ:
        port = int(os.environ["PORT"])

    if len(sys.argv) > 2 and sys.argv[1] == "--port":
        port = int(sys.argv[2])

    debug = os.environ.get("FLASK_ENV", "development") == "development"
    app.run(debug=debug, host="0.0.0.0", port=port)
