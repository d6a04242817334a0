"""Single-producer single-consumer FIFO ring buffers: plain, blocking, and with asyncio wake-ups."""

__version__ = "0.1.0"
__all__ = ["rb", "sync", "blocking", "aio_rb"]