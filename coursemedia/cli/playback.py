"""Playback commands for coursemedia."""

from __future__ import annotations

import sys
from typing import Optional

import click

from coursemedia.cli.common import Context, ExitCode, global_options, handle_errors
from coursemedia.core.output import OutputFormat, print_output, print_success, print_warning
from coursemedia.models.playback import PlaybackProgressState, PlaybackStatus, ProgressReport
from coursemedia.playback.guard import SkipGuard
from coursemedia.playback.tracker import progress_percent


@click.group()
def playback() -> None:
    """Playback progress and seek policy."""
    pass


@playback.command("check-seek")
@click.option("--max-watched", type=float, required=True, help="Furthest watched position (s)")
@click.option("--target", type=float, required=True, help="Requested seek position (s)")
@click.option("--completed", is_flag=True, help="Viewer has completed the video before")
@click.option(
    "--skip-prevention/--no-skip-prevention",
    default=None,
    help="Override the configured skip prevention setting",
)
@global_options
@handle_errors
def playback_check_seek(
    ctx: Context,
    max_watched: float,
    target: float,
    completed: bool,
    skip_prevention: bool | None,
) -> None:
    """Evaluate a seek request against the skip prevention policy.

    Exits with status 1 when the seek would be refused.

    Example:
        coursemedia playback check-seek --max-watched 120 --target 300
        coursemedia playback check-seek --max-watched 120 --target 300 --completed
    """
    assert ctx.config is not None
    if skip_prevention is None:
        skip_prevention = ctx.config.playback.skip_prevention

    state = PlaybackProgressState(
        max_watched_position=max_watched,
        has_completed_once=completed,
        status=PlaybackStatus.COMPLETED if completed else PlaybackStatus.IN_PROGRESS,
    )
    decision = SkipGuard(skip_prevention_disabled=not skip_prevention).check(target, state)

    data = {
        "allowed": decision.allowed,
        "requested": target,
        "target": decision.target,
        "message": decision.message,
    }
    if ctx.output_format == OutputFormat.JSON:
        print_output(data, format=OutputFormat.JSON)
    elif not ctx.quiet:
        if decision.allowed:
            print_success(f"Seek to {target:g}s allowed")
        else:
            print_warning(decision.message)
            click.echo(f"Player returns to {decision.target:g}s")

    if not decision.allowed:
        sys.exit(ExitCode.GENERAL_ERROR)


@playback.command("report")
@click.argument("video_id")
@click.option("--position", type=float, required=True, help="Current position (s)")
@click.option("--duration", type=float, required=True, help="Video duration (s)")
@click.option("--total-watched", type=float, default=0.0, help="Accumulated watch time (s)")
@click.option("--user-id", help="Viewer user ID")
@click.option("--course-id", help="Course the video belongs to")
@click.option("--log-id", help="Existing view-log row to update")
@global_options
@handle_errors
def playback_report(
    ctx: Context,
    video_id: str,
    position: float,
    duration: float,
    total_watched: float,
    user_id: Optional[str],
    course_id: Optional[str],
    log_id: Optional[str],
) -> None:
    """Send one progress report to the LMS app.

    The status is derived from the position the same way the player does it.

    Example:
        coursemedia playback report 42 --position 540 --duration 600 \\
            --user-id u-17 --course-id 3
    """
    assert ctx.config is not None
    percent = progress_percent(position, duration)
    complete = percent >= ctx.config.playback.completion_threshold
    report = ProgressReport(
        video_id=video_id,
        user_id=user_id,
        course_id=course_id,
        log_id=log_id,
        position=max(0.0, position),
        total_watched=max(0.0, total_watched),
        progress_percent=percent,
        is_complete=complete,
        status=PlaybackStatus.COMPLETED if complete else PlaybackStatus.IN_PROGRESS,
        video_duration=duration if duration > 0 else None,
        reason="manual",
    )

    result = ctx.progress_service().update(video_id, report)
    if isinstance(result, dict) and result.get("log_id") is not None:
        report = report.model_copy(update={"log_id": result["log_id"]})

    if ctx.output_format == OutputFormat.JSON:
        print_output(report.to_payload(), format=OutputFormat.JSON)
        return
    if not ctx.quiet:
        print_success(f"Saved progress for video {video_id}: {percent}% ({report.status.value})")
