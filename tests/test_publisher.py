"""
Tests for the progress publisher.
"""

from cycleshift.core.publisher import ProgressPublisher
from cycleshift.models.cycle import CycleRun, CycleStep, RunStatus, StepStatus


def make_run() -> CycleRun:
    step = CycleStep(
        id="step_1",
        name="Step 1",
        job_id="job-1",
        validation_key="points_cleared",
    )
    return CycleRun(total_steps=1, steps=[step])


class TestSubscribe:
    """Tests for registration and removal."""

    def test_subscriber_receives_run(self):
        publisher = ProgressPublisher()
        received = []
        publisher.subscribe(received.append)

        publisher.publish(make_run())

        assert len(received) == 1
        assert received[0].status == RunStatus.NOT_STARTED

    def test_publish_none(self):
        publisher = ProgressPublisher()
        received = []
        publisher.subscribe(received.append)

        publisher.publish(None)

        assert received == [None]

    def test_unsubscribe(self):
        publisher = ProgressPublisher()
        received = []
        unsubscribe = publisher.subscribe(received.append)

        unsubscribe()
        publisher.publish(make_run())

        assert received == []
        assert publisher.subscriber_count == 0

    def test_unsubscribe_twice_is_safe(self):
        publisher = ProgressPublisher()
        unsubscribe = publisher.subscribe(lambda run: None)

        unsubscribe()
        unsubscribe()

        assert publisher.subscriber_count == 0

    def test_same_callback_registered_twice(self):
        publisher = ProgressPublisher()
        received = []
        first = publisher.subscribe(received.append)
        publisher.subscribe(received.append)

        publisher.publish(make_run())
        assert len(received) == 2

        first()
        publisher.publish(make_run())
        assert len(received) == 3


class TestPublish:
    """Tests for delivery semantics."""

    def test_failing_callback_is_isolated(self):
        publisher = ProgressPublisher()
        received = []

        def broken(run):
            raise RuntimeError("subscriber failed")

        publisher.subscribe(broken)
        publisher.subscribe(received.append)

        publisher.publish(make_run())

        assert len(received) == 1

    def test_each_subscriber_gets_its_own_copy(self):
        publisher = ProgressPublisher()
        run = make_run()
        received = []

        def mutate(snapshot):
            snapshot.steps[0].status = StepStatus.FAILED
            received.append(snapshot)

        publisher.subscribe(mutate)
        publisher.subscribe(received.append)

        publisher.publish(run)

        assert run.steps[0].status == StepStatus.PENDING
        assert received[0] is not received[1]
        assert received[1].steps[0].status == StepStatus.PENDING

    def test_unsubscribe_during_publish(self):
        publisher = ProgressPublisher()
        received = []
        handles = {}

        def remove_other(run):
            handles["other"]()

        publisher.subscribe(remove_other)
        handles["other"] = publisher.subscribe(received.append)

        publisher.publish(make_run())

        assert received == []
        assert publisher.subscriber_count == 1
