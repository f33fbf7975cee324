import gc
import threading
import weakref

import pytest

from aerodramus.promise import (Promise, Deferred, Progress, when, resolved,
                                rejected, PENDING, RESOLVED, REJECTED)


class Boom(Exception):
    pass


def make_promise():
    """A pending promise and its settlement handle."""
    handles = []
    promise = Promise(handles.append)
    return promise, handles[0]


class TestPromiseState:
    def test_starts_pending(self) -> None:
        promise, _ = make_promise()

        assert promise.is_pending()
        assert not promise.is_settled()
        assert promise.state == PENDING

    def test_resolve(self) -> None:
        promise, deferred = make_promise()

        deferred.resolve('ok')

        assert promise.is_resolved()
        assert promise.is_settled()
        assert not promise.is_rejected()
        assert promise.state == RESOLVED
        assert promise.value == 'ok'

    def test_reject(self) -> None:
        promise, deferred = make_promise()
        error = Boom()

        deferred.reject(error)

        assert promise.is_rejected()
        assert promise.state == REJECTED
        assert promise.error is error

    def test_resolved_with_none_is_not_pending(self) -> None:
        promise = resolved(None)

        assert promise.is_resolved()
        assert promise.value is None

    @pytest.mark.parametrize('calls', [
        [('resolve', 1), ('reject', Boom()), ('resolve', 2)],
        [('reject', Boom()), ('resolve', 1), ('reject', Boom())],
        [('resolve', 1), ('resolve', 2)],
    ])
    def test_only_first_settlement_counts(self, calls) -> None:
        promise, deferred = make_promise()
        seen = []
        promise.on_settled(lambda value, error: seen.append((value, error)))

        for method, argument in calls:
            getattr(deferred, method)(argument)

        first_method, first_argument = calls[0]
        if first_method == 'resolve':
            assert promise.is_resolved()
            assert seen == [(first_argument, None)]
        else:
            assert promise.is_rejected()
            assert seen == [(None, first_argument)]

    def test_racing_settlements_settle_once(self) -> None:
        for _ in range(50):
            promise, deferred = make_promise()
            seen = []
            promise.on_settled(lambda value, error: seen.append(value))
            barrier = threading.Barrier(2)

            def resolve():
                barrier.wait()
                deferred.resolve('value')

            def reject():
                barrier.wait()
                deferred.reject(Boom())

            threads = [threading.Thread(target=resolve),
                       threading.Thread(target=reject)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert len(seen) == 1
            assert promise.is_settled()

    def test_setup_exception_rejects(self) -> None:
        def setup(deferred):
            raise Boom('setup failed')

        promise = Promise(setup)

        assert promise.is_rejected()
        assert isinstance(promise.error, Boom)

    def test_repr(self) -> None:
        assert 'pending' in repr(make_promise()[0])
        assert "resolved(5)" in repr(resolved(5))
        assert 'rejected' in repr(rejected(Boom()))


class TestSubscriptions:
    def test_late_subscription_is_replayed_once(self) -> None:
        promise = resolved('ok')
        seen = []

        promise.on_success(seen.append)

        assert seen == ['ok']

    def test_held_rejection_fires_on_first_failure_handler(self) -> None:
        error = Boom()
        promise = rejected(error)
        seen = []

        promise.on_failure(seen.append)
        promise.on_success(seen.append)

        assert seen == [error]

    def test_progress_before_settlement(self) -> None:
        promise, deferred = make_promise()
        seen = []
        promise.on_progress(seen.append)

        deferred.notify(0.25)
        deferred.notify(0.5)
        deferred.resolve('done')
        deferred.notify(0.75)

        assert seen == [0.25, 0.5]

    def test_progress_after_settlement_is_dropped(self) -> None:
        promise, deferred = make_promise()
        seen = []
        promise.on_progress(seen.append)

        deferred.resolve('done')
        deferred.notify(Progress(1, 2))

        assert seen == []

    def test_on_settled(self) -> None:
        seen = []
        error = Boom()

        resolved(1).on_settled(lambda value, err: seen.append((value, err)))
        rejected(error).on_settled(lambda value, err: seen.append((value, err)))

        assert seen == [(1, None), (None, error)]

    def test_handlers_see_settled_state(self) -> None:
        promise, deferred = make_promise()
        states = []
        promise.on_success(lambda value: states.append(promise.state))

        deferred.resolve(1)

        assert states == [RESOLVED]

    def test_failing_handler_does_not_block_others(self) -> None:
        promise, deferred = make_promise()
        seen = []

        def broken(value):
            raise Boom()
        promise.on_success(broken).on_success(seen.append)

        deferred.resolve(1)

        assert seen == [1]
        assert promise.is_resolved()


class TestThen:
    def test_maps_value(self) -> None:
        derived = resolved(5).then(lambda x: x + 1)

        assert derived.is_resolved()
        assert derived.value == 6

    def test_exception_rejects(self) -> None:
        error = Boom()

        def fail(value):
            raise error

        derived = resolved(5).then(fail)

        assert derived.is_rejected()
        assert derived.error is error

    def test_waits_for_upstream(self) -> None:
        promise, deferred = make_promise()
        derived = promise.then(lambda x: x * 2)
        assert derived.is_pending()

        deferred.resolve(21)

        assert derived.value == 42

    def test_flattens_returned_promise(self) -> None:
        inner, inner_deferred = make_promise()
        progress = []
        derived = resolved(1).then(lambda x: inner)
        derived.on_progress(progress.append)

        assert derived.is_pending()
        inner_deferred.notify(0.5)
        inner_deferred.resolve('inner value')

        assert derived.value == 'inner value'
        assert progress == [0.5]

    def test_flattens_returned_rejection(self) -> None:
        error = Boom()

        derived = resolved(1).then(lambda x: rejected(error))

        assert derived.is_rejected()
        assert derived.error is error

    def test_flattens_a_single_level(self) -> None:
        innermost = resolved('deep')

        derived = resolved(1).then(lambda x: resolved(innermost))

        assert derived.value is innermost

    def test_failure_passes_through(self) -> None:
        error = Boom()

        derived = rejected(error).then(lambda x: x + 1)

        assert derived.error is error

    def test_failure_transform(self) -> None:
        derived = rejected(Boom('low level')).then(
            lambda x: x, lambda e: RuntimeError('wrapped: %s' % e))

        assert isinstance(derived.error, RuntimeError)
        assert str(derived.error) == 'wrapped: low level'

    def test_progress_passes_through_and_transforms(self) -> None:
        promise, deferred = make_promise()
        plain, scaled = [], []
        promise.then(lambda x: x).on_progress(plain.append)
        promise.then(lambda x: x, None, lambda p: p * 100) \
               .on_progress(scaled.append)

        deferred.notify(0.5)

        assert plain == [0.5]
        assert scaled == [50.0]

    def test_none_on_success_passes_value(self) -> None:
        assert resolved('same').then(None).value == 'same'

    def test_chain(self) -> None:
        seen = []

        resolved(1).then(lambda x: x + 1) \
                   .then(lambda x: resolved(x * 10)) \
                   .then(str) \
                   .on_success(seen.append)

        assert seen == ['20']


class TestWhen:
    def test_resolves_in_argument_order(self) -> None:
        (p1, d1), (p2, d2), (p3, d3) = [make_promise() for _ in range(3)]
        joined = when(p1, p2, p3)

        d3.resolve('c')
        d1.resolve('a')
        assert joined.is_pending()
        d2.resolve('b')

        assert joined.value == ['a', 'b', 'c']

    def test_first_rejection_wins(self) -> None:
        (p1, d1), (p2, d2), (p3, d3) = [make_promise() for _ in range(3)]
        error = Boom()
        joined = when(p1, p2, p3)

        d2.reject(error)

        assert joined.is_rejected()
        assert joined.error is error

        d1.resolve('a')
        d3.resolve('c')
        assert joined.is_rejected()

    def test_forwards_every_progress(self) -> None:
        (p1, d1), (p2, d2) = make_promise(), make_promise()
        seen = []
        when(p1, p2).on_progress(seen.append)

        d1.notify('p1 half')
        d2.notify('p2 half')
        d1.notify('p1 done')

        assert seen == ['p1 half', 'p2 half', 'p1 done']

    def test_already_settled_inputs(self) -> None:
        assert Promise.when(resolved(1), resolved(2)).value == [1, 2]

    def test_no_inputs(self) -> None:
        assert when().value == []


class TestOwnership:
    def test_unsettled_promise_is_freed(self) -> None:
        promise, deferred = make_promise()
        promise_ref = weakref.ref(promise)
        deferred_ref = weakref.ref(deferred)

        del promise, deferred

        assert promise_ref() is None
        assert deferred_ref() is None

    def test_unsettled_promise_with_handlers_is_freed(self) -> None:
        def setup(deferred):
            pass
        promise = Promise(setup)
        promise.then(lambda x: x).on_success(lambda x: None)
        promise_ref = weakref.ref(promise)

        del promise

        assert promise_ref() is None

    def test_producer_keeps_settling_after_consumer_drops_upstream(self) -> None:
        promise, deferred = make_promise()
        derived = promise.then(lambda x: x + 1)
        del promise
        gc.collect()

        deferred.resolve(1)

        assert derived.value == 2

    def test_deferred_alone(self) -> None:
        deferred = Deferred()

        deferred.resolve(3)
        deferred.reject(Boom())

        assert deferred.state == RESOLVED
        assert deferred.value == 3


class TestProgress:
    def test_fraction(self) -> None:
        assert Progress(1, 4).fraction_completed == 0.25
        assert Progress(10, 4).fraction_completed == 1.0
        assert Progress(3).fraction_completed == 0.0
        assert Progress(3, 0).fraction_completed == 0.0

    def test_equality(self) -> None:
        assert Progress(1, 2) == Progress(1, 2)
        assert Progress(1, 2) != Progress(2, 2)
