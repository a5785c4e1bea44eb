"""Live check: stream synthetic gaze to /ws/gaze and watch /ws/heatmap frames."""

import asyncio
import json
import math
import os

import websockets


HOST = os.environ.get("GAZE_HOST", "localhost:8000")
GAZE_URI = f"ws://{HOST}/ws/gaze"
HEATMAP_URI = f"ws://{HOST}/ws/heatmap"


async def heatmap_listener(ready_event: asyncio.Event):
    """Connect to /ws/heatmap and print a one-line digest of each snapshot."""
    async with websockets.connect(HEATMAP_URI) as ws:
        print("[HEATMAP] Connected, waiting for snapshots...\n")
        ready_event.set()

        while True:
            data = json.loads(await ws.recv())
            points = data.get("data", [])
            hottest = max(points, key=lambda p: p["value"], default=None)
            if hottest:
                print(
                    f"[HEATMAP] {len(points)} bucket(s), max={data['max']:.2f}% "
                    f"at ({hottest['x']},{hottest['y']})"
                )
            else:
                print("[HEATMAP] empty")


async def send_gaze(duration_s: float = 5.0, rate_hz: float = 60.0):
    """Orbit a fixation point slowly, lingering near the centre."""
    async with websockets.connect(GAZE_URI) as ws:
        steps = int(duration_s * rate_hz)
        for i in range(steps):
            angle = i / steps * 2 * math.pi
            sample = {
                "absoluteX": 960 + 200 * math.cos(angle) ** 3,
                "absoluteY": 540 + 120 * math.sin(angle) ** 3,
            }
            await ws.send(json.dumps(sample))
            ack = json.loads(await ws.recv())
            if ack["status"] != "accepted":
                print(f"[GAZE] {ack}")
            await asyncio.sleep(1 / rate_hz)


async def main():
    print("Connecting to heatmap WebSocket...")
    ready = asyncio.Event()
    listener_task = asyncio.create_task(heatmap_listener(ready))
    await ready.wait()

    print("\nStreaming gaze samples...\n")
    await send_gaze()

    await asyncio.sleep(1)
    listener_task.cancel()
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main())
