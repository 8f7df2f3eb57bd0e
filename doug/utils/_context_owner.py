import asyncio
from typing import Any, AsyncContextManager, Callable, Optional


class AsyncContextOwner:
    """
    Holds an async context manager open inside a dedicated task.

    The async contexts of the MCP SDK (stdio / streamable HTTP clients and the client
    session) run anyio task groups, which must be exited by the same task that entered
    them. An owner task enters the context, hands the entered value back to the caller
    of `open()`, and keeps the context open until `close()` is called. Opening and
    closing may therefore happen in different tasks, for example in the concurrent
    teardown of a registry.

    Parameters
    ----------
    name : str
        Name given to the owner task.
    on_failure : Optional[Callable[[BaseException], None]]
        Called when the context fails on its own after it was opened successfully.
    """

    def __init__(self, name: str, on_failure: Optional[Callable[[BaseException], None]] = None):
        self.name = name
        self.on_failure = on_failure
        self._task: Optional[asyncio.Task] = None
        self._ready: Optional[asyncio.Future] = None
        self._stop: Optional[asyncio.Event] = None

    @property
    def is_open(self) -> bool:
        return self._task is not None and not self._task.done()

    async def open(self, context_factory: Callable[[], AsyncContextManager[Any]]) -> Any:
        """
        Enter the context returned by `context_factory` in the owner task.

        Returns
        -------
        Any
            The value produced by entering the context.

        Raises
        ------
        RuntimeError
            If the owner already holds an open context.
        Exception
            Any error raised while entering the context.
        """
        if self._task is not None:
            raise RuntimeError(f"Context owner [{self.name}] is already open")

        loop = asyncio.get_running_loop()
        self._ready = loop.create_future()
        self._stop = asyncio.Event()
        self._task = loop.create_task(self._run(context_factory), name=self.name)
        try:
            return await self._ready
        except BaseException:
            # The owner task has already finished, or must not outlive a cancelled open().
            task, self._task = self._task, None
            if not task.done():
                task.cancel()
            raise

    async def close(self) -> None:
        """
        Exit the context and wait for the owner task to finish.

        Closing an owner that is not open is a no-op. An error raised while exiting the
        context, or raised by the context before `close()` was called, is re-raised here.
        """
        task, self._task = self._task, None
        if task is None:
            return
        self._stop.set()
        await task

    async def _run(self, context_factory: Callable[[], AsyncContextManager[Any]]) -> None:
        try:
            async with context_factory() as value:
                self._ready.set_result(value)
                await self._stop.wait()
        except Exception as ex:
            if not self._ready.done():
                self._ready.set_exception(ex)
                return
            if not self._stop.is_set() and self.on_failure is not None:
                self.on_failure(ex)
            raise
        finally:
            if not self._ready.done():
                self._ready.cancel()
