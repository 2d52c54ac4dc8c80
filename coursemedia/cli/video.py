"""Video commands for coursemedia."""

from __future__ import annotations

import click

from coursemedia.cli.common import Context, global_options, handle_errors
from coursemedia.core.output import OutputFormat, format_file_size, print_output
from coursemedia.services.storage import DEFAULT_SIGNED_URL_EXPIRY


@click.group()
def video() -> None:
    """Inspect uploaded videos."""
    pass


@video.command("list")
@click.option("--course-id", type=int, required=True, help="Course ID")
@global_options
@handle_errors
def video_list(ctx: Context, course_id: int) -> None:
    """List a course's videos in display order.

    Example:
        coursemedia video list --course-id 12
    """
    records = ctx.video_service().list_for_course(course_id)

    if ctx.output_format == OutputFormat.JSON:
        print_output(
            [r.model_dump(mode="json", exclude_none=True) for r in records],
            format=OutputFormat.JSON,
        )
        return

    rows = [
        {
            "id": r.id,
            "title": r.title,
            "size": format_file_size(r.file_size),
            "parts": r.total_chunks,
            "order": r.order_index,
            "status": r.status,
        }
        for r in records
    ]
    print_output(
        rows,
        columns=["id", "title", "size", "parts", "order", "status"],
        column_labels={
            "id": "ID",
            "title": "Title",
            "size": "Size",
            "parts": "Parts",
            "order": "Order",
            "status": "Status",
        },
        title=f"Videos in course {course_id}",
        quiet=ctx.quiet,
    )


@video.command("show")
@click.argument("video_id", type=int)
@global_options
@handle_errors
def video_show(ctx: Context, video_id: int) -> None:
    """Show one video's metadata.

    Example:
        coursemedia video show 42
    """
    record = ctx.video_service().get(video_id)

    if ctx.output_format == OutputFormat.JSON:
        print_output(record.model_dump(mode="json", exclude_none=True), format=OutputFormat.JSON)
        return

    print_output(
        {
            "id": record.id,
            "course_id": record.course_id,
            "title": record.title,
            "description": record.description or "-",
            "size": format_file_size(record.file_size),
            "mime_type": record.mime_type or "-",
            "duration": f"{record.duration}s",
            "chunked": record.is_chunked,
            "parts": record.total_chunks,
            "file_path": record.file_path,
            "file_url": record.file_url,
        },
        title=f"Video {record.id}",
        quiet=ctx.quiet,
    )


@video.command("urls")
@click.argument("video_id", type=int)
@click.option(
    "--expires-in",
    type=int,
    default=DEFAULT_SIGNED_URL_EXPIRY,
    show_default=True,
    help="Signed URL lifetime in seconds",
)
@global_options
@handle_errors
def video_urls(ctx: Context, video_id: int, expires_in: int) -> None:
    """Print signed playback URLs, one per stored part in order.

    A chunked video prints one URL per chunk; the player concatenates the
    parts in the order shown.

    Example:
        coursemedia video urls 42 --expires-in 600
    """
    service = ctx.video_service()
    urls = service.playback_urls(service.get(video_id), expires_in=expires_in)

    if ctx.output_format == OutputFormat.JSON:
        print_output({"video_id": video_id, "urls": urls}, format=OutputFormat.JSON)
        return

    for url in urls:
        click.echo(url)
