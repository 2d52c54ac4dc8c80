"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from coursemedia.core.client import BackendClient
from coursemedia.core.config import Config, Profile, UploadSettings, get_api_key, get_token
from coursemedia.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    CourseMediaError,
    ProfileNotFoundError,
    UploadCancelled,
)
from coursemedia.core.logging import setup_logging
from coursemedia.core.output import OutputFormat, print_error
from coursemedia.services.progress import ProgressService
from coursemedia.services.storage import StorageService
from coursemedia.services.uploads import UploadSessionManager
from coursemedia.services.videos import VideoService

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.client: Optional[BackendClient] = None
        self.app_client: Optional[BackendClient] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False

    def get_profile(self) -> Profile:
        """Resolve the active profile.

        Raises:
            ConfigurationError: If no profile is configured.
        """
        if self.config is None:
            self.config = Config.load()
        try:
            return self.config.get_profile(self.profile_name)
        except ProfileNotFoundError:
            raise ConfigurationError(
                f"Profile '{self.profile_name or self.config.default_profile}' not found. "
                "Run 'coursemedia config init' to create one."
            )

    def _build_client(self, url: str, profile: Profile) -> BackendClient:
        return BackendClient(
            base_url=url,
            api_key=get_api_key(),
            access_token=get_token(),
            timeout=profile.timeout,
            verify_ssl=profile.verify_ssl,
        )

    def get_client(self) -> BackendClient:
        """Get or create the storage/database client."""
        if self.client is None:
            profile = self.get_profile()
            self.client = self._build_client(profile.url, profile)
        return self.client

    def get_app_client(self) -> BackendClient:
        """Get or create the LMS app client (progress endpoint)."""
        if self.app_client is None:
            profile = self.get_profile()
            self.app_client = self._build_client(profile.api_base_url, profile)
        return self.app_client

    def storage_service(self) -> StorageService:
        profile = self.get_profile()
        return StorageService(
            self.get_client(), profile.bucket, timeout=profile.storage_timeout
        )

    def video_service(self) -> VideoService:
        return VideoService(self.get_client(), self.storage_service())

    def progress_service(self) -> ProgressService:
        return ProgressService(self.get_app_client())

    def upload_manager(self, settings: Optional[UploadSettings] = None) -> UploadSessionManager:
        """Upload session manager wired to the active profile."""
        if self.config is None:
            self.config = Config.load()
        return UploadSessionManager(
            self.storage_service(),
            self.video_service(),
            settings or self.config.upload,
        )

    def close(self) -> None:
        for client in (self.client, self.app_client):
            if client is not None:
                client.close()
        self.client = None
        self.app_client = None


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="COURSEMEDIA_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        ctx.config = Config.load()

        try:
            return f(ctx, *args, **kwargs)
        finally:
            ctx.close()

    return wrapper  # type: ignore


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exit codes."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except UploadCancelled as e:
            print_error(str(e))
            sys.exit(ExitCode.USER_CANCELLED)
        except AuthenticationError as e:
            print_error(str(e))
            sys.exit(ExitCode.AUTH_ERROR)
        except ConnectionError as e:
            print_error(str(e))
            sys.exit(ExitCode.NETWORK_ERROR)
        except CourseMediaError as e:
            print_error(str(e))
            sys.exit(ExitCode.GENERAL_ERROR)
        except click.ClickException:
            raise
        except Exception as e:
            print_error(f"Unexpected error: {e}")
            sys.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    PERMISSION_ERROR = 4
    USER_CANCELLED = 5
