"""
Create the database tables.

Run this once against a fresh database before starting the API.

Usage:
    python scripts/init_database.py           # Create missing tables
    python scripts/init_database.py --reset   # Drop everything first
"""
import argparse
import asyncio
import sys
from pathlib import Path

from rich.console import Console

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from photomarket.core.config import settings
from photomarket.core.database import Base, close_db, drop_db, init_db
import photomarket.models.database  # noqa: F401  registers the tables

console = Console()


async def initialize(reset: bool) -> int:
    """Create (and optionally drop) all tables."""
    target = settings.database_url.split("@")[-1]
    try:
        if reset:
            console.print(f"[yellow]Dropping all tables on {target}...[/yellow]")
            await drop_db()

        await init_db()
        console.print(f"[green]✓ Tables ready on {target}:[/green] {', '.join(sorted(Base.metadata.tables))}")
    except Exception as e:
        console.print(f"[red]✗ Error initializing database: {e}[/red]")
        return 1
    finally:
        await close_db()

    settings.ensure_directories_exist()
    console.print(f"[green]✓ Storage directories under {settings.storage_root}[/green]")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Create the photo marketplace tables")
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()
    return asyncio.run(initialize(args.reset))


if __name__ == "__main__":
    sys.exit(main())
