"""
Unit tests for the JSON-RPC dispatcher and its stdio loop.
"""

import io
import json

import pytest

from mcp_server_store.protocol.dispatcher import Dispatcher
from mcp_server_store.protocol.schemas import InvalidParamsError, JSONRPCRequest
from mcp_server_store.protocol.transport import StdioTransport, TransportError


def request(method, params=None, request_id=1):
    return JSONRPCRequest(jsonrpc="2.0", method=method, params=params, id=request_id)


class TestHandleRequest:
    """Test single-request handling."""

    @pytest.mark.asyncio
    async def test_routes_to_handler_with_raw_params(self, dispatcher):
        seen = []
        dispatcher.register_method("echo", lambda params: seen.append(params) or {"ok": True})

        response = await dispatcher.handle_request(request("echo", params=[1, "two"]))

        assert seen == [[1, "two"]]
        assert response.result == {"ok": True}
        assert response.error is None
        assert response.id == 1

    @pytest.mark.asyncio
    async def test_async_handler(self, dispatcher):
        async def handler(params):
            return {"async": True}

        dispatcher.register_method("a", handler)

        response = await dispatcher.handle_request(request("a"))

        assert response.result == {"async": True}

    @pytest.mark.asyncio
    async def test_unknown_method(self, dispatcher):
        response = await dispatcher.handle_request(request("nope", request_id=2))

        assert response.error.code == -32601
        assert "nope" in response.error.message
        assert response.id == 2

    @pytest.mark.asyncio
    async def test_invalid_version(self, dispatcher):
        dispatcher.register_method("ping", lambda params: {})
        bad = JSONRPCRequest(jsonrpc="1.0", method="ping", id=5)

        response = await dispatcher.handle_request(bad)

        assert response.error.code == -32600
        assert response.id == 5

    @pytest.mark.asyncio
    async def test_protocol_error_passes_through(self, dispatcher):
        def handler(params):
            raise InvalidParamsError("Bad params", data="missing name")

        dispatcher.register_method("m", handler)

        response = await dispatcher.handle_request(request("m"))

        assert response.error.code == -32602
        assert response.error.message == "Bad params"
        assert response.error.data == "missing name"

    @pytest.mark.asyncio
    async def test_other_errors_become_internal(self, dispatcher):
        def handler(params):
            raise RuntimeError("kaboom")

        dispatcher.register_method("m", handler)

        response = await dispatcher.handle_request(request("m"))

        assert response.error.code == -32603
        assert response.error.data == "kaboom"

    @pytest.mark.asyncio
    async def test_last_registration_wins(self, dispatcher):
        dispatcher.register_method("m", lambda params: "first")
        dispatcher.register_method("m", lambda params: "second")

        response = await dispatcher.handle_request(request("m"))

        assert response.result == "second"
        assert dispatcher.methods == ["m"]


class TestProcessLine:
    """Test decoding plus dispatch of one line."""

    @pytest.mark.asyncio
    async def test_parse_error_has_null_id(self, dispatcher):
        response = await dispatcher.process_line("{not json")

        assert response.error.code == -32700
        assert response.id is None

    @pytest.mark.asyncio
    async def test_notification_gets_no_response(self, dispatcher):
        dispatcher.register_method("note", lambda params: {"would": "reply"})

        response = await dispatcher.process_line('{"jsonrpc":"2.0","method":"note"}')

        assert response is None

    @pytest.mark.asyncio
    async def test_failing_notification_gets_no_response(self, dispatcher):
        response = await dispatcher.process_line('{"jsonrpc":"2.0","method":"missing"}')

        assert response is None

    @pytest.mark.asyncio
    async def test_invalid_notification_gets_no_response(self, dispatcher):
        response = await dispatcher.process_line('{"jsonrpc":"2.0","method":42}')

        assert response is None

    @pytest.mark.asyncio
    async def test_non_object_gets_invalid_request(self, dispatcher):
        response = await dispatcher.process_line('"hello"')

        assert response.error.code == -32600
        assert response.id is None


class TestServe:
    """Test the read/dispatch/write loop."""

    @pytest.mark.asyncio
    async def test_one_line_per_request(self, dispatcher, make_transport, written_messages):
        dispatcher.register_method("ping", lambda params: {})
        transport, writer = make_transport(
            {"jsonrpc": "2.0", "method": "ping", "id": 1},
            {"jsonrpc": "2.0", "method": "ping"},
            {"jsonrpc": "2.0", "method": "ping", "id": "two"},
        )

        await dispatcher.serve(transport)

        assert written_messages(writer) == [
            {"jsonrpc": "2.0", "result": {}, "id": 1},
            {"jsonrpc": "2.0", "result": {}, "id": "two"},
        ]

    @pytest.mark.asyncio
    async def test_malformed_line_does_not_stop_loop(
        self, dispatcher, make_transport, written_messages
    ):
        dispatcher.register_method("ping", lambda params: {})
        transport, writer = make_transport(
            "{this is not json",
            {"jsonrpc": "2.0", "method": "ping", "id": 9},
        )

        await dispatcher.serve(transport)

        messages = written_messages(writer)
        assert len(messages) == 2
        assert messages[0]["error"]["code"] == -32700
        assert messages[0]["id"] is None
        assert messages[1] == {"jsonrpc": "2.0", "result": {}, "id": 9}

    @pytest.mark.asyncio
    async def test_unknown_method_end_to_end(self, dispatcher, make_transport, written_messages):
        transport, writer = make_transport('{"jsonrpc":"2.0","method":"nope","id":2}')

        await dispatcher.serve(transport)

        [message] = written_messages(writer)
        assert message["error"]["code"] == -32601
        assert message["id"] == 2

    @pytest.mark.asyncio
    async def test_handler_crash_does_not_stop_loop(
        self, dispatcher, make_transport, written_messages
    ):
        def crash(params):
            raise ValueError("bad")

        dispatcher.register_method("crash", crash)
        dispatcher.register_method("ping", lambda params: {})
        transport, writer = make_transport(
            {"jsonrpc": "2.0", "method": "crash", "id": 1},
            {"jsonrpc": "2.0", "method": "ping", "id": 2},
        )

        await dispatcher.serve(transport)

        messages = written_messages(writer)
        assert messages[0]["error"]["code"] == -32603
        assert messages[1]["result"] == {}

    @pytest.mark.asyncio
    async def test_unserializable_result_is_dropped(
        self, dispatcher, make_transport, written_messages
    ):
        dispatcher.register_method("bad", lambda params: {"value": object()})
        dispatcher.register_method("ping", lambda params: {})
        transport, writer = make_transport(
            {"jsonrpc": "2.0", "method": "bad", "id": 1},
            {"jsonrpc": "2.0", "method": "ping", "id": 2},
        )

        await dispatcher.serve(transport)

        assert written_messages(writer) == [{"jsonrpc": "2.0", "result": {}, "id": 2}]

    @pytest.mark.asyncio
    async def test_blank_lines_are_skipped(self, dispatcher, written_messages):
        dispatcher.register_method("ping", lambda params: {})
        reader = io.StringIO('\n   \n{"jsonrpc":"2.0","method":"ping","id":1}')
        writer = io.StringIO()

        await dispatcher.serve(StdioTransport(reader=reader, writer=writer))

        assert written_messages(writer) == [{"jsonrpc": "2.0", "result": {}, "id": 1}]

    @pytest.mark.asyncio
    async def test_undecodable_line_does_not_stop_loop(self, dispatcher):
        dispatcher.register_method("ping", lambda params: {})
        reader = io.TextIOWrapper(
            io.BytesIO(b'\xff\xfe garbage\n{"jsonrpc":"2.0","method":"ping","id":1}\n'),
            encoding="utf-8",
        )
        writer = io.BytesIO()

        await dispatcher.serve(StdioTransport(reader=reader, writer=writer))

        messages = [json.loads(line) for line in writer.getvalue().decode("utf-8").splitlines()]
        assert messages[0]["error"]["code"] == -32700
        assert messages[0]["id"] is None
        assert messages[1] == {"jsonrpc": "2.0", "result": {}, "id": 1}

    @pytest.mark.asyncio
    async def test_non_json_constant_is_parse_error(
        self, dispatcher, make_transport, written_messages
    ):
        dispatcher.register_method("ping", lambda params: {})
        transport, writer = make_transport('{"jsonrpc":"2.0","method":"ping","id":NaN}')

        await dispatcher.serve(transport)

        [message] = written_messages(writer)
        assert message["error"]["code"] == -32700
        assert message["id"] is None

    @pytest.mark.asyncio
    async def test_empty_input_returns_cleanly(self, dispatcher):
        writer = io.StringIO()

        await dispatcher.serve(StdioTransport(reader=io.StringIO(""), writer=writer))

        assert writer.getvalue() == ""

    @pytest.mark.asyncio
    async def test_read_failure_is_surfaced(self, dispatcher):
        class BrokenReader:
            def readline(self):
                raise OSError("device gone")

        transport = StdioTransport(reader=BrokenReader(), writer=io.StringIO())

        with pytest.raises(TransportError):
            await dispatcher.serve(transport)

    @pytest.mark.asyncio
    async def test_each_response_is_flushed(self, dispatcher):
        class RecordingWriter(io.StringIO):
            def __init__(self):
                super().__init__()
                self.flushed = []

            def flush(self):
                self.flushed.append(self.getvalue())
                super().flush()

        dispatcher.register_method("ping", lambda params: {})
        lines = "".join(
            json.dumps({"jsonrpc": "2.0", "method": "ping", "id": i}) + "\n" for i in range(3)
        )
        writer = RecordingWriter()

        await dispatcher.serve(StdioTransport(reader=io.StringIO(lines), writer=writer))

        assert [snapshot.count("\n") for snapshot in writer.flushed] == [1, 2, 3]
