"""Config commands for coursemedia."""

from __future__ import annotations

from typing import Optional

import click

from coursemedia.core.config import CONFIG_FILE, Config
from coursemedia.core.exceptions import CourseMediaError
from coursemedia.core.output import (
    OutputFormat,
    format_file_size,
    print_error,
    print_key_value,
    print_output,
    print_success,
)
from coursemedia.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from coursemedia.core.validation import (
    validate_server_url,
    validate_timeout,
    validate_url_or_none,
)
from coursemedia.uploaders.constants import DEFAULT_BUCKET


def _load_config() -> Config:
    try:
        return Config.load()
    except CourseMediaError as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1)


@click.group()
def config() -> None:
    """Manage coursemedia configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="Backend URL", help="Storage/database backend URL")
@click.option("--app-url", default=None, help="LMS web app URL (progress endpoint)")
@click.option("--profile", default="default", help="Profile name")
@click.option("--bucket", default=DEFAULT_BUCKET, show_default=True, help="Video bucket")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(
    url: str,
    app_url: Optional[str],
    profile: str,
    bucket: str,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        coursemedia config init --url https://project.supabase.co
    """
    try:
        url = validate_server_url(url)
        app_url = validate_url_or_none(app_url)
    except CourseMediaError as e:
        print_error(str(e))
        raise SystemExit(1)

    if CONFIG_FILE.exists():
        cfg = _load_config()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(name=profile, url=url, app_url=app_url, bucket=bucket)

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "url": url,
            "app_url": app_url or "-",
            "bucket": bucket,
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found. Run 'coursemedia config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        data["upload"] = cfg.upload.to_dict()
        data["playback"] = cfg.playback.to_dict()
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")

    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "app_url": profile.app_url or "-",
                "bucket": profile.bucket,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
            },
        )
        click.echo()

    print_key_value(
        {
            "chunk_size": format_file_size(cfg.upload.chunk_size),
            "direct_threshold": format_file_size(cfg.upload.direct_threshold),
            "max_file_size": format_file_size(cfg.upload.max_file_size),
            "concurrency": cfg.upload.concurrency,
            "max_retries": cfg.upload.max_retries,
            "completion_threshold": f"{cfg.playback.completion_threshold}%",
            "report_interval": f"{cfg.playback.report_interval:g}s",
            "skip_prevention": cfg.playback.skip_prevention,
        },
        title="Tuning",
    )


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        coursemedia config use-context production
    """
    cfg = _load_config()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("current-context")
def config_current_context() -> None:
    """Show the current active profile."""
    cfg = _load_config()

    if not cfg.profiles:
        print_error("No configuration found.")
        raise SystemExit(1)

    click.echo(cfg.default_profile)


@config.command("add-profile")
@click.argument("name")
@click.option("--url", required=True, help="Storage/database backend URL")
@click.option("--app-url", default=None, help="LMS web app URL (progress endpoint)")
@click.option("--bucket", default=DEFAULT_BUCKET, show_default=True, help="Video bucket")
@click.option(
    "--timeout",
    type=int,
    default=DEFAULT_HTTP_TIMEOUT_SECONDS,
    show_default=True,
    help="Request timeout in seconds",
)
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    app_url: Optional[str],
    bucket: str,
    timeout: int,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        coursemedia config add-profile staging --url https://staging.supabase.co
    """
    try:
        url = validate_server_url(url)
        app_url = validate_url_or_none(app_url)
        timeout = validate_timeout(timeout)
    except CourseMediaError as e:
        print_error(str(e))
        raise SystemExit(1)

    cfg = _load_config()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name=name,
        url=url,
        app_url=app_url,
        bucket=bucket,
        timeout=timeout,
        verify_ssl=not no_verify_ssl,
    )
    cfg.save()

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        coursemedia config remove-profile staging
    """
    cfg = _load_config()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save()

    print_success(f"Profile '{name}' removed")
