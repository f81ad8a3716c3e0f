"""
Regenerate thumbnails and watermarked copies from stored originals.

Usage:
    python scripts/regenerate_derivatives.py [--force] [--album-id UUID] [--batch-size N] [--workers N]
"""
from __future__ import annotations

import sys
import asyncio
import concurrent.futures
from pathlib import Path
from typing import Optional, Tuple
from uuid import UUID
import time

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table
from rich.panel import Panel

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from photomarket.core.config import settings
from photomarket.core.database import get_db_context
from photomarket.core.exceptions import PhotoStoreException
from photomarket.imaging import DerivativeGenerator
from photomarket.models.database import Photo
from photomarket.repositories import PhotoRepository
from photomarket.services import StorageService

console = Console()

Job = Tuple[UUID, str, Path]


class DerivativeRegenerator:
    """Re-render derivatives for many photos on a thread pool."""

    def __init__(
        self,
        force: bool = False,
        album_id: Optional[UUID] = None,
        batch_size: int = 200,
        max_workers: int = 4
    ):
        self.force = force
        self.album_id = album_id
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.storage = StorageService()
        self.generator = DerivativeGenerator()
        self.stats = {
            "total": 0,
            "generated": 0,
            "skipped": 0,
            "missing": 0,
            "errors": 0
        }
        self.start_time = time.time()

    def regenerate_sync(self, job: Job) -> Tuple[str, str, str]:
        """
        Render both derivatives of one photo.

        Returns:
            Tuple of (outcome, message, filename); outcome is one of
            generated, skipped, missing, error
        """
        photo_id, filename, source = job
        thumbnail_path = self.storage.get_thumbnail_path(source.name)
        watermarked_path = self.storage.get_watermarked_path(source.name)

        if not source.is_file():
            return "missing", f"original not found: {source}", filename
        if not self.force and thumbnail_path.exists() and watermarked_path.exists():
            return "skipped", "already exists", filename

        try:
            size = self.generator.generate_thumbnail(source, thumbnail_path, settings.thumbnail_size)
            self.generator.generate_watermarked(source, watermarked_path)
        except PhotoStoreException as e:
            return "error", e.message, filename

        return "generated", f"{size[0]}x{size[1]}", filename

    async def _load_batch(self, repo: PhotoRepository, offset: int) -> list[Photo]:
        if self.album_id:
            return await repo.get_by_album(self.album_id, skip=offset, limit=self.batch_size)
        return await repo.get_all(skip=offset, limit=self.batch_size)

    async def run(self):
        """Run the regeneration."""
        console.print(Panel.fit(
            "[bold cyan]Derivative Regeneration[/bold cyan]\n"
            f"Mode: {'FORCE REGENERATE' if self.force else 'SKIP EXISTING'}\n"
            f"Album: {self.album_id or 'all'}\n"
            f"Batch size: {self.batch_size}\n"
            f"Workers: {self.max_workers}\n"
            f"Thumbnail: {settings.thumbnail_size}px @ {settings.thumbnail_quality}%\n"
            f"Watermark: max {settings.watermark_max_width}px @ {settings.watermark_quality}%",
            border_style="cyan"
        ))

        async with get_db_context() as db:
            photo_repo = PhotoRepository(db)

            if self.album_id:
                total_photos = await photo_repo.count_by_album(self.album_id)
            else:
                total_photos = await photo_repo.count()
            self.stats["total"] = total_photos

            if total_photos == 0:
                console.print("\n[yellow]No photos found in database![/yellow]")
                return

            console.print(f"\n[bold]Processing {total_photos:,} photos with {self.max_workers} workers...[/bold]\n")

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TextColumn("[blue]{task.fields[speed]} img/s"),
                console=console
            ) as progress:

                task = progress.add_task("Regenerating derivatives...", total=total_photos, speed="0.0")
                processed = 0

                with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    offset = 0
                    while offset < total_photos:
                        photos = await self._load_batch(photo_repo, offset)
                        if not photos:
                            break

                        jobs = [
                            (photo.id, photo.filename, self.storage.resolve_original_path(photo))
                            for photo in photos
                        ]
                        future_to_job = {
                            executor.submit(self.regenerate_sync, job): job
                            for job in jobs
                        }

                        for future in concurrent.futures.as_completed(future_to_job):
                            outcome, message, filename = future.result()
                            processed += 1

                            if outcome == "generated":
                                self.stats["generated"] += 1
                                photo_id, _, source = future_to_job[future]
                                await photo_repo.update(photo_id, {
                                    "thumbnail_url": self.storage.thumbnail_url(source.name),
                                    "watermarked_url": self.storage.watermarked_url(source.name),
                                })
                            elif outcome == "skipped":
                                self.stats["skipped"] += 1
                            elif outcome == "missing":
                                self.stats["missing"] += 1
                                console.print(f"[yellow]?[/yellow] {filename[:40]}: {message}")
                            else:
                                self.stats["errors"] += 1
                                console.print(f"[red]✗[/red] {filename[:40]}: {message}")

                            elapsed = time.time() - self.start_time
                            speed = processed / elapsed if elapsed > 0 else 0
                            progress.update(task,
                                            advance=1,
                                            speed=f"{speed:.1f}",
                                            description=f"Processing: {filename[:40]}...")

                        offset += self.batch_size

                        # Commit URL updates after each batch
                        await db.commit()

        self.display_summary()

    def display_summary(self):
        """Display regeneration summary."""
        elapsed = time.time() - self.start_time
        speed = self.stats["total"] / elapsed if elapsed > 0 else 0

        table = Table(title="\n[bold]Regeneration Summary[/bold]")
        table.add_column("Metric", style="cyan")
        table.add_column("Count", justify="right", style="green")

        table.add_row("Total photos", f"{self.stats['total']:,}")
        table.add_row("Regenerated", f"{self.stats['generated']:,}")
        table.add_row("Skipped (already exists)", f"{self.stats['skipped']:,}")
        table.add_row("Missing originals", f"{self.stats['missing']:,}",
                      style="yellow" if self.stats["missing"] > 0 else "green")
        table.add_row("Errors", f"{self.stats['errors']:,}",
                      style="red" if self.stats["errors"] > 0 else "green")
        table.add_row("", "")
        table.add_row("Total time", f"{elapsed:.1f} seconds")
        table.add_row("Average speed", f"{speed:.1f} photos/second")

        console.print(table)


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Regenerate thumbnails and watermarked copies")
    parser.add_argument("--force", action="store_true", help="Regenerate existing derivatives")
    parser.add_argument("--album-id", type=UUID, default=None, help="Only photos of this album")
    parser.add_argument("--batch-size", type=int, default=200, help="Number of photos per batch")
    parser.add_argument("--workers", type=int, default=settings.max_workers, help="Number of parallel workers")

    args = parser.parse_args()

    regenerator = DerivativeRegenerator(
        force=args.force,
        album_id=args.album_id,
        batch_size=args.batch_size,
        max_workers=args.workers
    )
    asyncio.run(regenerator.run())


if __name__ == "__main__":
    main()
