"""
Pause and resume reading/writing on an asyncio transport.

Reading is paused when a connection has buffered more unread bytes than the
session is consuming, which leaves the rest in the OS socket buffer. Writing is
paused by the transport itself (via Protocol.pause_writing) when its write buffer
goes over the high water mark; drain() blocks the writer until it comes back down.
"""


import asyncio

HIGH_WATER_LIMIT_READ = 65536


class FlowControl:

    def __init__(self, transport: asyncio.Transport):
        self.read_paused = False
        self.write_paused = False
        self._write_event: asyncio.Event = asyncio.Event()
        self._write_event.set() # Set the event to allow writing initially
        self._transport = transport

    async def drain(self):
        await self._write_event.wait()  # Wait until the write event is set

    def pause_reading(self):
        if not self.read_paused:
            self.read_paused = True
            self._transport.pause_reading()

    def resume_reading(self):
        if self.read_paused:
            self.read_paused = False
            self._transport.resume_reading()

    def pause_writing(self):
        if not self.write_paused:
            self.write_paused = True
            self._write_event.clear()

    def resume_writing(self):
        if self.write_paused:
            self.write_paused = False
            self._write_event.set()
