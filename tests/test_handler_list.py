from triggers.handler_list import HandlerList


def _recorder(log, name, result=None):
    def callback(*args):
        log.append((name, args))
        return result

    return callback


def test_execute_runs_in_registration_order_without_priorities():
    log = []
    handler_list = HandlerList("k")
    for name in "abc":
        handler_list.add(_recorder(log, name))

    handler_list.execute(("x",))

    assert log == [("a", ("x",)), ("b", ("x",)), ("c", ("x",))]


def test_execute_sorts_by_priority_stably():
    log = []
    handler_list = HandlerList("k")
    handler_list.add(_recorder(log, "late")).set_priority(5)
    handler_list.add(_recorder(log, "first")).set_priority(-1)
    handler_list.add(_recorder(log, "late2")).set_priority(5)
    handler_list.add(_recorder(log, "default"))

    handler_list.execute()

    assert [name for name, _ in log] == ["first", "default", "late", "late2"]
    assert not handler_list.needs_priority_update


def test_add_after_priorities_marks_list_stale():
    handler_list = HandlerList("k")
    handler_list.add(lambda: None).set_priority(1)
    handler_list.execute()
    assert not handler_list.needs_priority_update

    handler_list.add(lambda: None)
    assert handler_list.needs_priority_update


def test_add_without_priorities_keeps_list_clean():
    handler_list = HandlerList("k")
    handler_list.add(lambda: None)
    handler_list.add(lambda: None)
    assert not handler_list.needs_priority_update


def test_execute_skips_cancelled_but_does_not_purge():
    log = []
    handler_list = HandlerList("k")
    handler_list.add(_recorder(log, "a")).cancel()
    handler_list.add(_recorder(log, "b"))

    handler_list.execute()

    assert log == [("b", ())]
    assert handler_list.needs_purge
    assert len(handler_list._handlers) == 2


def test_execute_purges_when_configured():
    handler_list = HandlerList("k", purge_on_execute=True)
    handler_list.add(lambda: None).cancel()
    handler_list.add(lambda: None)

    handler_list.execute()

    assert not handler_list.needs_purge
    assert len(handler_list._handlers) == 1


def test_execute_honours_cancellation_mid_pass():
    log = []
    handler_list = HandlerList("k")
    handler_list.add(lambda: second.cancel())
    second = handler_list.add(_recorder(log, "second"))

    handler_list.execute()

    assert log == []


def test_poll_collects_results_and_purges_once_handlers():
    handler_list = HandlerList("k")
    handler_list.add(lambda x: x + 1)
    handler_list.add(lambda x: x * 10).set_once()

    assert handler_list.poll((2,)) == [3, 20]
    assert not handler_list.needs_purge
    assert len(handler_list._handlers) == 1
    assert handler_list.poll((2,)) == [3]


def test_poll_purges_before_traversal():
    handler_list = HandlerList("k")
    handler_list.add(lambda: "a").cancel()
    handler_list.add(lambda: "b")

    assert handler_list.poll() == ["b"]
    assert len(handler_list._handlers) == 1


def test_modify_folds_running_value():
    handler_list = HandlerList("k")
    handler_list.add(lambda value: value + "1")
    handler_list.add(lambda value: value + "2")
    handler_list.add(lambda value: value + "0").set_priority(-1)

    assert handler_list.modify("v") == "v012"


def test_modify_passes_bound_and_dispatch_args():
    handler_list = HandlerList("k")
    handler_list.add(lambda value, factor, offset: value * factor + offset, (3,))

    assert handler_list.modify(2, (1,)) == 7


def test_modify_skips_cancelled_handlers():
    handler_list = HandlerList("k")
    handler_list.add(lambda value: value * 100).cancel()
    handler_list.add(lambda value: value + 1)

    assert handler_list.modify(1) == 2


def test_modify_with_no_active_handlers_returns_input():
    handler_list = HandlerList("k")
    handler_list.add(lambda value: None).cancel()
    marker = object()
    assert handler_list.modify(marker) is marker


def test_clear_cancels_and_empties_eagerly():
    handler_list = HandlerList("k")
    handlers = [handler_list.add(lambda: None) for _ in range(3)]
    handlers[0].set_priority(2)

    handler_list.clear()

    assert all(h.cancelled for h in handlers)
    assert handler_list._handlers == []
    assert not handler_list.needs_purge
    assert not handler_list.needs_priority_update
    assert len(handler_list) == 0


def test_clear_can_defer_removal():
    handler_list = HandlerList("k", eager_clear=False)
    handlers = [handler_list.add(lambda: None) for _ in range(3)]

    handler_list.clear()

    assert all(h.cancelled for h in handlers)
    assert len(handler_list._handlers) == 3
    assert handler_list.needs_purge
    assert handler_list.poll() == []
    assert handler_list._handlers == []


def test_clear_mid_pass_stops_remaining_handlers():
    log = []
    handler_list = HandlerList("k")
    handler_list.add(lambda: handler_list.clear())
    handler_list.add(_recorder(log, "after"))

    handler_list.execute()

    assert log == []
    assert not handler_list


def test_handler_added_mid_pass_does_not_break_traversal():
    log = []
    handler_list = HandlerList("k")

    def register_more():
        log.append("outer")
        handler_list.add(_recorder(log, "late"))

    handler_list.add(register_more).set_once()
    handler_list.execute()

    handler_list.execute()
    assert log.count("outer") == 1
    assert ("late", ()) in log


def test_len_bool_and_snapshot_count_active_only():
    handler_list = HandlerList("k")
    assert not handler_list
    a = handler_list.add(lambda: None)
    b = handler_list.add(lambda: None)
    a.cancel()

    assert len(handler_list) == 1
    assert handler_list
    assert handler_list.handlers() == [b]


def test_ties_return_to_registration_order_after_priority_change():
    handler_list = HandlerList("k")
    handler_list.add(lambda: "a")
    handler_list.add(lambda: "b")
    c = handler_list.add(lambda: "c")

    c.set_priority(-1)
    assert handler_list.poll() == ["c", "a", "b"]

    c.set_priority(0)
    assert handler_list.poll() == ["a", "b", "c"]


def test_sequence_numbers_follow_registration():
    handler_list = HandlerList("k")
    handlers = [handler_list.add(lambda: None) for _ in range(3)]
    assert [h.sequence for h in handlers] == [0, 1, 2]
