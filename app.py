"""WSGI entry point: `flask --app app run` from the repository root."""

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src" / "meal_settlement_system"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from meal_settlement_system.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))
