"""
Tests for the interpreter session actor
"""

import re
import pytest
from concurrent.futures import ThreadPoolExecutor
from interpreter import start_session, run_in_session, session_variables, stop_session
from stdlib import BufferSink
from error_handling import UnexpectedTokenError, UnterminatedStringError


class TestInterpreterSession:
    """Runs routed through a pykka actor"""

    @pytest.fixture
    def session(self, sink):
        """Start a session writing to the shared sink fixture"""
        actor_ref = start_session(sink)
        yield actor_ref
        stop_session(actor_ref)

    def test_run_writes_to_sink(self, session, sink):
        run_in_session(session, 'roots x = "hi"; sound(x);')
        assert sink.getvalue() == "hi\n"
        assert session_variables(session) == {'x': 'hi'}

    def test_errors_reach_the_caller(self, session, sink):
        with pytest.raises(UnexpectedTokenError):
            run_in_session(session, 'sound("a"); sound(x;')
        assert sink.getvalue() == "a\n"

        with pytest.raises(UnterminatedStringError):
            run_in_session(session, 'sound("open')

    def test_session_survives_errors(self, session, sink):
        with pytest.raises(UnexpectedTokenError):
            run_in_session(session, 'sound(x;')
        run_in_session(session, 'sound("still here");')
        assert sink.getvalue() == "still here\n"

    def test_runs_do_not_leak_variables(self, session, sink):
        run_in_session(session, 'roots x = "first";')
        run_in_session(session, 'sound(x);')
        assert sink.getvalue() == "\n"
        assert session_variables(session) == {}

    def test_concurrent_runs_do_not_interleave(self, session, sink):
        """Each run resets the sink, so only one whole run's output can remain"""
        sources = [f'roots n = "run{i}"; sound(n); sound(n);' for i in range(20)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda source: run_in_session(session, source), sources))

        assert re.fullmatch(r'(run\d+)\n\1\n', sink.getvalue())

    def test_default_sink_is_a_buffer(self):
        actor_ref = start_session()
        try:
            run_in_session(actor_ref, 'sound("x");')
            sink = actor_ref.proxy().interpreter.get().sink
            assert isinstance(sink, BufferSink)
            assert sink.getvalue() == "x\n"
        finally:
            stop_session(actor_ref)
