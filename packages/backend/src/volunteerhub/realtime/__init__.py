"""Real-time layer — live WebSocket connections and message fan-out.

Three pieces:
1. ConnectionRegistry — user id → that user's open connections (tabs/devices)
2. RealtimeGateway — handshake auth, sendMessage handling, fan-out
3. websocket.py — the FastAPI route that adapts a WebSocket to the gateway

Fan-out is best-effort: if the recipient has no open connection the
message and notification are still stored and show up on the next fetch.
"""
