"""Behavioural coverage for webhook intake over HTTP."""

from __future__ import annotations

import typing as typ

import falcon.testing
import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from spectacle.api import AppDependencies, create_app
from spectacle.builds import BuildJob, BuildQueue
from spectacle.config.models import RepositoryConfig
from spectacle.hooks import EventRouter, HookEventLogger, HookIntake, SignatureVerifier
from spectacle.registry import RepositoryRegistry
from tests.helpers.fakes import FakeLogger
from tests.helpers.webhooks import SECRET, delivery, push_payload, watch_payload

if typ.TYPE_CHECKING:
    from falcon.testing.client import Result

scenarios("../webhook_intake.feature")


class IntakeContext(typ.TypedDict, total=False):
    """Shared mutable scenario state."""

    client: falcon.testing.TestClient
    build_queue: BuildQueue
    logger: FakeLogger
    response: Result


@pytest.fixture
def intake_context() -> IntakeContext:
    """Provide empty scenario state."""
    return {}


@given(
    parsers.parse('a Spectacle app configured for "{repository}" on branch "{branch}"')
)
def given_app(intake_context: IntakeContext, repository: str, branch: str) -> None:
    """Build an app whose registry holds a single repository."""
    registry = RepositoryRegistry(
        [
            RepositoryConfig(
                name=repository,
                secret=SECRET,
                branch=branch,
                clone_url=f"https://github.com/{repository}.git",
            )
        ]
    )
    build_queue = BuildQueue(capacity=1)
    logger = FakeLogger()
    intake = HookIntake(
        EventRouter(registry, SignatureVerifier()),
        build_queue,
        HookEventLogger(logger),
    )
    intake_context["client"] = falcon.testing.TestClient(
        create_app(AppDependencies(intake=intake))
    )
    intake_context["build_queue"] = build_queue
    intake_context["logger"] = logger


@given("the build queue is full")
def given_full_queue(intake_context: IntakeContext) -> None:
    """Fill every slot of the build queue."""
    build_queue = intake_context["build_queue"]
    for _ in range(build_queue.capacity):
        build_queue.submit(BuildJob("acme/other", "file:///other", "main"))


@when(parsers.parse('GitHub delivers a signed push to "{ref}" of "{repository}"'))
def when_signed_push(intake_context: IntakeContext, ref: str, repository: str) -> None:
    """POST a correctly signed push."""
    body, headers = delivery(push_payload(repository, ref))
    intake_context["response"] = intake_context["client"].simulate_post(
        "/hook", body=body, headers=headers
    )


@when(
    parsers.parse(
        'GitHub delivers a push to "{ref}" of "{repository}" '
        "that was altered after signing"
    )
)
def when_tampered_push(
    intake_context: IntakeContext, ref: str, repository: str
) -> None:
    """POST a push whose body no longer matches its signature."""
    body, headers = delivery(push_payload(repository, ref))
    tampered = body.replace(b"octocat", b"mallory")
    intake_context["response"] = intake_context["client"].simulate_post(
        "/hook", body=tampered, headers=headers
    )


@when(parsers.parse('GitHub delivers a signed "{event}" event for "{repository}"'))
def when_signed_event(
    intake_context: IntakeContext, event: str, repository: str
) -> None:
    """POST a correctly signed non-push event."""
    body, headers = delivery(watch_payload(repository), event=event)
    intake_context["response"] = intake_context["client"].simulate_post(
        "/hook", body=body, headers=headers
    )


@then(parsers.parse("the response status is {status:d}"))
def then_status(intake_context: IntakeContext, status: int) -> None:
    """Assert the HTTP response status code."""
    response = intake_context["response"]
    assert response.status_code == status, (
        f"expected status {status}, got {response.status_code}: {response.text}"
    )


@then(parsers.parse('the response outcome is "{outcome}"'))
def then_outcome(intake_context: IntakeContext, outcome: str) -> None:
    """Assert the outcome reported in the 202 body."""
    assert intake_context["response"].json == {"outcome": outcome}


@then(parsers.parse('{count:d} build is queued for "{repository}"'))
def then_builds_queued(
    intake_context: IntakeContext, count: int, repository: str
) -> None:
    """Assert the queue holds exactly *count* jobs for *repository*."""
    build_queue = intake_context["build_queue"]
    assert build_queue.depth == count
    job = build_queue.take(timeout=0)
    assert job is not None
    assert job.repository == repository


@then("no build is queued")
def then_nothing_queued(intake_context: IntakeContext) -> None:
    """Assert the queue is empty."""
    assert intake_context["build_queue"].depth == 0


@then(parsers.parse('the intake logged "{event_type}"'))
def then_logged(intake_context: IntakeContext, event_type: str) -> None:
    """Assert a log line of the given event type was emitted."""
    assert intake_context["logger"].matching(f"[{event_type}]")


@then("the response carries a Retry-After header")
def then_retry_after(intake_context: IntakeContext) -> None:
    """Assert the busy response tells GitHub when to retry."""
    assert intake_context["response"].headers.get("Retry-After")
