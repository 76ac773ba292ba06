"""Minimal stand-in for the Airtable MCP server, speaking JSON-RPC on stdio.

Tool names select canned behaviours used by the transport and client tests.
"""

import json
import os
import sys
import time


def send(message):
    sys.stdout.write(json.dumps(message) + "\n")
    sys.stdout.flush()


def text_result(text, is_error=False):
    result = {"content": [{"type": "text", "text": text}]}
    if is_error:
        result["isError"] = True
    return result


def handle_call(request_id, name, arguments):
    if name == "list_bases":
        send({"jsonrpc": "2.0", "id": request_id, "result": text_result(json.dumps({"bases": [{"id": "appFAKE", "name": "Fake"}]}))})
    elif name == "echo":
        send({"jsonrpc": "2.0", "id": request_id, "result": text_result(json.dumps(arguments))})
    elif name == "plain":
        send({"jsonrpc": "2.0", "id": request_id, "result": text_result("not json at all")})
    elif name == "image":
        send({"jsonrpc": "2.0", "id": request_id, "result": {"content": [{"type": "image", "data": "AAAA"}]}})
    elif name == "env":
        send({"jsonrpc": "2.0", "id": request_id, "result": text_result(json.dumps({"key": os.environ.get("AIRTABLE_API_KEY")}))})
    elif name == "fail":
        send({"jsonrpc": "2.0", "id": request_id, "result": text_result("Table not writable", is_error=True)})
    elif name == "rpc_error":
        send({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32602, "message": "Unknown tool"}})
    elif name == "stale":
        send({"jsonrpc": "2.0", "id": -1, "result": text_result("stale")})
        send({"jsonrpc": "2.0", "id": request_id, "result": text_result(json.dumps({"fresh": True}))})
    elif name == "garbage":
        sys.stdout.write("this is not json\n")
        sys.stdout.flush()
    elif name == "sleep":
        time.sleep(float(arguments.get("seconds", 5)))
    elif name == "exit":
        sys.exit(0)


def main():
    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        message = json.loads(line)
        if "id" not in message:
            continue

        method = message.get("method")
        request_id = message["id"]
        if method == "initialize":
            send({"jsonrpc": "2.0", "method": "notifications/message", "params": {"level": "info"}})
            sys.stdout.write("\n")
            send(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "result": {
                        "protocolVersion": message["params"]["protocolVersion"],
                        "capabilities": {"tools": {}},
                        "serverInfo": {"name": "fake-airtable", "version": "0.0.1"},
                    },
                }
            )
        elif method == "tools/list":
            send({"jsonrpc": "2.0", "id": request_id, "result": {"tools": [{"name": "list_bases", "description": "List bases"}]}})
        elif method == "tools/call":
            params = message.get("params", {})
            handle_call(request_id, params.get("name"), params.get("arguments", {}))
        else:
            send({"jsonrpc": "2.0", "id": request_id, "error": {"code": -32601, "message": "Method not found"}})


if __name__ == "__main__":
    main()
