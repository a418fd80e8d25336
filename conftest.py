"""
Root conftest for all tests.

Tests never talk to AWS or GitHub. Dummy AWS settings are exported before
collection so that boto3 clients built by code under test (always patched
or pointed at stubs) never pick up a developer's real credentials or fail
for lack of a region.

IMPORTANT: This file must exist at the project root to be loaded first.
"""

import os

_DUMMY_AWS_ENV = {
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "AWS_DEFAULT_REGION": "us-east-1",
}


def pytest_configure(config):
    """Hook that runs before test collection starts.

    Override AWS credentials with dummies for the whole session.
    """
    os.environ.update(_DUMMY_AWS_ENV)
    os.environ.pop("AWS_PROFILE", None)
