"""Upload command for coursemedia."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from coursemedia.cli.common import Context, global_options, handle_errors
from coursemedia.core.config import UploadSettings
from coursemedia.core.output import (
    OutputFormat,
    create_transfer_progress,
    format_eta,
    format_file_size,
    print_output,
    print_success,
    print_warning,
)
from coursemedia.core.validation import validate_chunk_size, validate_workers
from coursemedia.models.progress import TransferProgress, UploadSummary
from coursemedia.models.upload import UploadSession
from coursemedia.services.uploads import plan_upload
from coursemedia.uploaders.common import LocalVideoFile
from coursemedia.uploaders.constants import MB, UPLOAD_PRESETS


def _resolve_settings(
    base: UploadSettings,
    preset: Optional[str],
    chunk_size_mb: Optional[int],
    workers: Optional[int],
) -> UploadSettings:
    settings = base
    if preset:
        settings = replace(settings, **UPLOAD_PRESETS[preset])
    if chunk_size_mb is not None:
        settings = replace(settings, chunk_size=validate_chunk_size(chunk_size_mb) * MB)
    if workers is not None:
        settings = replace(settings, concurrency=validate_workers(workers))
    return settings


def _plan_rows(session: UploadSession) -> dict[str, object]:
    return {
        "file": session.source.name,
        "size": format_file_size(session.source_file_size),
        "mime_type": session.source.mime_type,
        "strategy": session.strategy.value,
        "chunk_size": format_file_size(session.chunk_size) if session.is_chunked else "-",
        "chunks": session.total_chunks if session.is_chunked else 1,
        "key": session.manifest_prefix if session.is_chunked else session.object_key,
    }


@click.command("upload")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--course-id", type=int, required=True, help="Course to add the video to")
@click.option("--title", default=None, help="Video title (default: file name)")
@click.option("--description", default=None, help="Video description")
@click.option(
    "--preset",
    type=click.Choice(sorted(UPLOAD_PRESETS)),
    default=None,
    help="Chunk size and size limit preset",
)
@click.option("--chunk-size", "chunk_size_mb", type=int, default=None, help="Chunk size in MB")
@click.option("--workers", type=int, default=None, help="Parallel chunk uploads")
@click.option("--duration", type=int, default=0, help="Video length in seconds")
@click.option("--dry-run", is_flag=True, help="Show the upload plan without uploading")
@global_options
@handle_errors
def upload(
    ctx: Context,
    file: Path,
    course_id: int,
    title: Optional[str],
    description: Optional[str],
    preset: Optional[str],
    chunk_size_mb: Optional[int],
    workers: Optional[int],
    duration: int,
    dry_run: bool,
) -> None:
    """Upload a video file to a course.

    Files up to the direct threshold (500 MB by default) are uploaded as one
    object; larger files are split into chunks uploaded in parallel.

    Example:
        coursemedia upload lecture01.mp4 --course-id 12
        coursemedia upload archive.mkv --course-id 12 --preset large --workers 6
        coursemedia upload lecture01.mp4 --course-id 12 --dry-run
    """
    assert ctx.config is not None
    settings = _resolve_settings(ctx.config.upload, preset, chunk_size_mb, workers)
    source = LocalVideoFile.open(file)

    if dry_run:
        session = plan_upload(source, course_id, settings)
        if ctx.output_format == OutputFormat.JSON:
            print_output(_plan_rows(session), format=OutputFormat.JSON)
        else:
            click.echo("[DRY-RUN] No data will be uploaded", err=True)
            print_output(_plan_rows(session), title="Upload plan")
        return

    manager = ctx.upload_manager(settings)
    show_progress = ctx.output_format == OutputFormat.TABLE and not ctx.quiet
    sessions: list[UploadSession] = []
    started = time.monotonic()

    with create_transfer_progress() as progress:
        task = progress.add_task(
            f"Uploading {source.name}",
            total=source.size,
            speed="",
            eta=format_eta(None),
            visible=show_progress,
        )

        def on_progress(p: TransferProgress) -> None:
            progress.update(
                task,
                completed=p.bytes_transferred,
                speed=f"{format_file_size(p.speed_bytes_per_sec)}/s",
                eta=format_eta(p.estimated_seconds_remaining),
            )

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="upload") as executor:
            future = executor.submit(
                manager.upload,
                source,
                course_id,
                title=title,
                description=description,
                duration=duration,
                progress_callback=on_progress,
                on_begin=sessions.append,
            )
            try:
                while not future.done():
                    time.sleep(0.2)
            except KeyboardInterrupt:
                print_warning("Cancelling upload...")
                for session in sessions:
                    manager.cancel(session)
            record = future.result()

    session = sessions[0]
    summary = UploadSummary(
        session_id=session.session_id,
        strategy=session.strategy.value,
        status=session.status.value,
        total_size=session.source_file_size,
        chunks_total=session.total_chunks if session.is_chunked else 1,
        chunks_uploaded=sum(1 for c in session.chunks if c.uploaded) if session.is_chunked else 1,
        duration=time.monotonic() - started,
        video_id=record.id,
    )

    if ctx.quiet:
        click.echo(record.id)
        return

    if ctx.output_format == OutputFormat.JSON:
        data = record.model_dump(mode="json", exclude_none=True)
        data["session_id"] = summary.session_id
        data["strategy"] = summary.strategy
        print_output(data, format=OutputFormat.JSON)
        return

    print_success(f"Uploaded {source.name} as video {record.id}")
    print_output(
        {
            "video_id": record.id,
            "title": record.title,
            "strategy": summary.strategy,
            "size": format_file_size(summary.total_size),
            "chunks": f"{summary.chunks_uploaded}/{summary.chunks_total}",
            "elapsed": f"{summary.duration:.1f}s",
            "throughput": f"{summary.throughput_mbps:.1f} MB/s",
            "file_path": record.file_path,
        },
    )
