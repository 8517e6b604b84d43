from pathlib import Path

DEFAULT_ENV = """# MySQL connection
DB_HOST=localhost
DB_USER=root
DB_PASSWORD=
DB_NAME=crud_app

# HTTP server
PORT=3000
"""


def write_default_env(path: Path) -> bool:
    """Write the default .env at `path`. Returns False when a file is already there."""
    if path.exists():
        return False
    path.write_text(DEFAULT_ENV, encoding="utf-8")
    return True
