"""
Shared fixtures for the progress channel.
"""

import pytest

from mdextract.progress import ProgressReporter


@pytest.fixture
def reports():
    """Every report emitted, in order."""
    return []


@pytest.fixture
def reporter(reports):
    return ProgressReporter(reports.append)


@pytest.fixture
def stages(reports):
    def _stages():
        return [report.stage for report in reports]
    return _stages
