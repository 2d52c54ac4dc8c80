"""Tests for coursemedia.playback.tracker."""

from __future__ import annotations

from datetime import datetime

import pytest
from conftest import FakeClock

from coursemedia.models.playback import PlaybackStatus, ProgressReport, ViewSession
from coursemedia.playback.tracker import PlaybackProgressTracker, progress_percent


def _tracker(clock: FakeClock, duration: float = 600.0, **kwargs):
    reports: list[ProgressReport] = []
    tracker = PlaybackProgressTracker(
        1, reports.append, duration=duration, clock=clock, **kwargs
    )
    return tracker, reports


def _play_until(tracker: PlaybackProgressTracker, clock: FakeClock, end: float, step: float):
    """Advance the clock and the playhead together, ticking every ``step``."""
    while clock.now + step <= end + 1e-9:
        clock.advance(step)
        tracker.tick(clock.now)


# =============================================================================
# Percent
# =============================================================================


class TestProgressPercent:
    """Tests for the rounded, clamped percent."""

    @pytest.mark.parametrize(
        ("position", "duration", "expected"),
        [
            (0, 600, 0),
            (1, 3, 33),
            (2, 3, 67),
            (3, 600, 1),
            (540, 600, 90),
            (600, 600, 100),
            (700, 600, 100),
            (-5, 100, 0),
            (10, 0, 0),
            (10, -1, 0),
        ],
    )
    def test_rounding_and_bounds(self, position, duration, expected):
        assert progress_percent(position, duration) == expected


# =============================================================================
# Write Policy
# =============================================================================


class TestReportCadence:
    """Tests for periodic and forced writes."""

    def test_one_periodic_write_then_one_on_pause(self, clock: FakeClock):
        tracker, reports = _tracker(clock)

        tracker.play()
        _play_until(tracker, clock, 20.0, 0.25)

        assert len(reports) == 1
        assert reports[0].reason == "periodic"
        assert reports[0].position == pytest.approx(15.0)

        tracker.pause()

        assert len(reports) == 2
        assert reports[1].reason == "pause"
        assert reports[1].position == pytest.approx(20.0)

    def test_periodic_write_waits_for_debounce(self, clock: FakeClock):
        tracker, reports = _tracker(clock)

        tracker.play()
        _play_until(tracker, clock, 15.0, 0.25)
        assert reports == []

        _play_until(tracker, clock, 16.0, 0.25)
        assert len(reports) == 1

    def test_first_progress_does_not_write(self, clock: FakeClock):
        tracker, reports = _tracker(clock)

        tracker.play()
        _play_until(tracker, clock, 3.0, 1.0)

        assert tracker.state.status == PlaybackStatus.IN_PROGRESS
        assert reports == []

    def test_forced_write_replaces_pending_periodic(self, clock: FakeClock):
        tracker, reports = _tracker(clock)

        tracker.play()
        _play_until(tracker, clock, 15.5, 0.25)
        tracker.seek(5.0)

        assert [r.reason for r in reports] == ["seek"]
        _play_until(tracker, clock, 17.0, 0.25)
        assert [r.reason for r in reports] == ["seek"]

    def test_interval_restarts_after_resume(self, clock: FakeClock):
        tracker, reports = _tracker(clock)

        tracker.play()
        _play_until(tracker, clock, 10.0, 1.0)
        tracker.pause()
        assert len(reports) == 1

        clock.advance(10.0)
        tracker.play()
        # 14 seconds of play after resuming: not yet due
        for _ in range(14):
            clock.advance(1.0)
            tracker.tick(10.0 + clock.now - 20.0)
        assert len(reports) == 1

        for _ in range(2):
            clock.advance(1.0)
            tracker.tick(10.0 + clock.now - 20.0)
        assert len(reports) == 2
        assert reports[1].reason == "periodic"

    @pytest.mark.parametrize(
        ("action", "reason"),
        [
            ("page_hidden", "hidden"),
            ("close", "unmount"),
            ("flush", "manual"),
        ],
    )
    def test_forced_writes(self, clock: FakeClock, action: str, reason: str):
        tracker, reports = _tracker(clock)
        tracker.play()
        _play_until(tracker, clock, 5.0, 1.0)

        getattr(tracker, action)()

        assert [r.reason for r in reports] == [reason]

    def test_end_forces_write(self, clock: FakeClock):
        tracker, reports = _tracker(clock, completion_threshold=100)
        tracker.play()
        _play_until(tracker, clock, 5.0, 1.0)

        tracker.end(5.0)

        assert [r.reason for r in reports] == ["end"]
        assert not tracker.is_playing

    def test_close_stops_tracking(self, clock: FakeClock):
        tracker, reports = _tracker(clock)
        tracker.play()

        tracker.close()
        tracker.tick(30.0)
        tracker.pause()

        assert [r.reason for r in reports] == ["unmount"]

    def test_reporter_errors_are_swallowed(self, clock: FakeClock):
        def failing(report: ProgressReport) -> None:
            raise RuntimeError("network down")

        tracker = PlaybackProgressTracker(1, failing, duration=600, clock=clock)
        tracker.play()
        clock.advance(1.0)
        tracker.tick(1.0)

        tracker.pause()

        assert tracker.state.current_position == 1.0

    def test_report_carries_full_state(self, clock: FakeClock):
        tracker, reports = _tracker(clock, total_watched=100.0)
        tracker.play()
        _play_until(tracker, clock, 60.0, 1.0)
        reports.clear()

        tracker.pause()

        report = reports[0]
        assert report.video_id == 1
        assert report.position == pytest.approx(60.0)
        assert report.total_watched == pytest.approx(160.0)
        assert report.progress_percent == 10
        assert report.status == PlaybackStatus.IN_PROGRESS
        assert report.is_complete is False
        assert report.video_duration == 600.0


# =============================================================================
# Completion and Review Mode
# =============================================================================


class TestCompletion:
    """Tests for completion and review mode."""

    def test_completion_write_is_the_last(self, clock: FakeClock):
        completed = []
        tracker, reports = _tracker(clock, duration=100.0, on_complete=completed.append)

        tracker.play()
        _play_until(tracker, clock, 90.0, 1.0)

        assert reports[-1].reason == "complete"
        assert reports[-1].is_complete is True
        assert reports[-1].status == PlaybackStatus.COMPLETED
        assert tracker.review_mode
        assert len(completed) == 1
        count = len(reports)

        _play_until(tracker, clock, 99.0, 1.0)
        tracker.seek(10.0)
        tracker.pause()
        tracker.close()

        assert len(reports) == count
        assert tracker.state.status == PlaybackStatus.COMPLETED

    def test_completion_threshold_is_configurable(self, clock: FakeClock):
        tracker, reports = _tracker(clock, duration=100.0, completion_threshold=95)
        tracker.play()

        _play_until(tracker, clock, 94.0, 1.0)
        assert not tracker.review_mode

        _play_until(tracker, clock, 95.0, 1.0)
        assert tracker.review_mode

    def test_completed_earlier_never_writes(self, clock: FakeClock):
        tracker, reports = _tracker(clock, duration=100.0, is_completed=True)

        assert tracker.review_mode
        assert tracker.state.status == PlaybackStatus.COMPLETED

        tracker.play()
        _play_until(tracker, clock, 40.0, 1.0)
        tracker.seek(80.0)
        tracker.pause()
        tracker.page_hidden()
        tracker.close()

        assert reports == []
        assert tracker.state.status == PlaybackStatus.COMPLETED

    def test_status_stays_completed_after_rewind(self, clock: FakeClock):
        tracker, _ = _tracker(clock, duration=100.0)
        tracker.play()
        _play_until(tracker, clock, 92.0, 1.0)

        tracker.seek(0.0)

        state = tracker.state
        assert state.status == PlaybackStatus.COMPLETED
        assert state.has_completed_once
        assert state.progress_percent == 0


# =============================================================================
# State
# =============================================================================


class TestState:
    """Tests for resume, duration and state copies."""

    def test_resume_position(self, clock: FakeClock):
        tracker, _ = _tracker(clock, resume_position=120.0)

        state = tracker.state
        assert state.current_position == 120.0
        assert state.max_watched_position == 120.0
        assert state.status == PlaybackStatus.IN_PROGRESS
        assert state.progress_percent == 20

    def test_max_watched_never_decreases(self, clock: FakeClock):
        tracker, _ = _tracker(clock)
        tracker.play()
        _play_until(tracker, clock, 30.0, 1.0)

        tracker.seek(5.0)

        state = tracker.state
        assert state.current_position == 5.0
        assert state.max_watched_position == 30.0

    def test_watch_time_counts_only_while_playing(self, clock: FakeClock):
        tracker, _ = _tracker(clock)
        tracker.play()
        _play_until(tracker, clock, 3.0, 1.0)
        tracker.pause()

        clock.advance(10.0)
        assert tracker.state.total_watched_seconds == pytest.approx(3.0)

        tracker.play()
        clock.advance(1.0)
        tracker.tick(4.0)

        assert tracker.state.total_watched_seconds == pytest.approx(4.0)

    def test_paused_tick_does_not_count(self, clock: FakeClock):
        tracker, _ = _tracker(clock)

        clock.advance(5.0)
        tracker.tick(0.0, playing=False)
        clock.advance(5.0)
        tracker.tick(0.0, playing=False)

        assert tracker.state.total_watched_seconds == 0.0
        assert not tracker.is_playing

    def test_state_is_a_copy(self, clock: FakeClock):
        tracker, _ = _tracker(clock)
        state = tracker.state
        state.max_watched_position = 500.0

        assert tracker.state.max_watched_position == 0.0

    def test_duration_learned_later(self, clock: FakeClock):
        tracker, _ = _tracker(clock, duration=0.0, resume_position=30.0)
        assert tracker.state.progress_percent == 0

        tracker.set_duration(60.0)

        assert tracker.state.progress_percent == 50


class TestViewerIdentity:
    """Tests for viewer fields carried on reports."""

    def test_reports_carry_viewer_and_start_time(self, clock: FakeClock):
        started = datetime(2026, 4, 1, 9, 30)
        viewer = ViewSession(user_id="u-17", course_id=3, session_id="view-1", log_id=77)
        tracker, reports = _tracker(clock, viewer=viewer, wall_clock=lambda: started)

        tracker.play()
        clock.advance(5)
        tracker.tick(5)
        tracker.pause()

        report = reports[-1]
        assert report.user_id == "u-17"
        assert report.course_id == 3
        assert report.session_id == "view-1"
        assert report.log_id == 77
        assert report.start_time == started

    def test_start_time_is_set_once(self, clock: FakeClock):
        stamps = iter([datetime(2026, 4, 1, 9, 30), datetime(2026, 4, 1, 9, 45)])
        tracker, reports = _tracker(clock, wall_clock=lambda: next(stamps))

        tracker.play()
        tracker.pause(10)
        tracker.play()
        tracker.pause(20)

        assert {r.start_time for r in reports} == {datetime(2026, 4, 1, 9, 30)}

    def test_no_viewer_leaves_identity_empty(self, clock: FakeClock):
        tracker, reports = _tracker(clock)

        tracker.flush()

        assert reports[-1].user_id is None
        assert reports[-1].start_time is None
