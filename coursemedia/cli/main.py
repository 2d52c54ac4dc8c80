"""Main CLI entry point for coursemedia."""

from __future__ import annotations

import click

from coursemedia import __version__

# Import command groups
from coursemedia.cli.common import Context, global_options, handle_errors
from coursemedia.cli.config_cmd import config
from coursemedia.cli.playback import playback
from coursemedia.cli.upload import upload
from coursemedia.cli.video import video
from coursemedia.core.config import get_api_key, get_token
from coursemedia.core.output import OutputFormat, print_output

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="coursemedia")
def cli() -> None:
    """coursemedia - Video uploads and playback progress for an LMS.

    Uploads course videos to object storage (chunked and parallel for large
    files), records their metadata, and evaluates playback progress rules.

    Get started:

      coursemedia config init                      # Create config file

      coursemedia upload lecture.mp4 --course-id 1 # Upload a video

      coursemedia video list --course-id 1         # List course videos

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Command Groups
# =============================================================================

cli.add_command(config)
cli.add_command(upload)
cli.add_command(video)
cli.add_command(playback)


# =============================================================================
# Top-Level Commands
# =============================================================================


@cli.command()
@global_options
@handle_errors
def status(ctx: Context) -> None:
    """Show the active profile and which credentials are set."""
    profile = ctx.get_profile()
    assert ctx.config is not None

    data = {
        "profile": ctx.profile_name or ctx.config.default_profile,
        "url": profile.url,
        "app_url": profile.api_base_url,
        "bucket": profile.bucket,
        "api_key": "set" if get_api_key() else "missing",
        "access_token": "set" if get_token() else "missing",
    }
    print_output(
        data,
        format=ctx.output_format,
        column_labels={
            "profile": "Profile",
            "url": "Backend",
            "app_url": "App",
            "bucket": "Bucket",
            "api_key": "API Key",
            "access_token": "Access Token",
        },
        quiet=ctx.quiet,
        id_field="profile",
    )
    if ctx.output_format == OutputFormat.TABLE and not get_api_key():
        click.echo("Set COURSEMEDIA_API_KEY to authenticate against the backend.", err=True)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
