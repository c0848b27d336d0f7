"""
=============================================================================
WORKER THREAD POOL
=============================================================================

Connections are handled on a fixed set of worker threads fed from a
bounded queue, so a burst of clients queues up instead of spawning a
thread each.

    accept loop ──submit()──► ┌──────────────┐ ──get()──► Worker-0
                              │  task queue  │ ──get()──► Worker-1
                              │  (bounded)   │ ──get()──► Worker-2
                              └──────────────┘ ──get()──► Worker-3

    - queue.Queue does its own locking
    - None in the queue is a poison pill: the worker that takes it exits
    - A worker logs and survives any exception raised by a task
    - When every worker is busy and tasks are waiting, one more worker is
      started, up to max_workers

Several workers can be inside the request handler at the same moment,
which is why the visit counter lives behind a lock (see state.py).

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class WorkerState(Enum):
    IDLE = "idle"
    BUSY = "busy"
    STOPPED = "stopped"


@dataclass
class Task:
    """
    A deferred call: func(*args, **kwargs).

    Attributes:
        timeout: Seconds the task may wait in the queue before it is
                 dropped as stale. None = never stale.
        on_stale: Called with the same arguments instead of func when
                  the task is dropped, so the owner can release what
                  it passed in (e.g. answer and close a connection).
        submitted_at: When submit() queued it.
    """

    func: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)
    timeout: Optional[float] = None
    on_stale: Optional[Callable[..., Any]] = None
    submitted_at: float = field(default_factory=time.time)

    @property
    def is_stale(self) -> bool:
        return self.timeout is not None and (time.time() - self.submitted_at) > self.timeout


class Worker(threading.Thread):
    """Thread that runs tasks from the shared queue until told to stop."""

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int, idle_timeout: float = 1.0):
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id
        self.idle_timeout = idle_timeout

        self.state = WorkerState.IDLE
        self._stop_event = threading.Event()

        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while not self._stop_event.is_set():
            try:
                task = self.task_queue.get(timeout=self.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        self.state = WorkerState.STOPPED
        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.state = WorkerState.BUSY
        start_time = time.time()

        try:
            if task.is_stale:
                logger.warning(
                    f"Task timed out before execution "
                    f"(waited {start_time - task.submitted_at:.2f}s, timeout was {task.timeout}s)"
                )
                self.tasks_failed += 1
                if task.on_stale is not None:
                    task.on_stale(*task.args, **task.kwargs)
                return

            task.func(*task.args, **task.kwargs)
            self.tasks_completed += 1
            logger.debug(f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s")

        except Exception as e:
            # One failing connection must not take the worker down with it.
            logger.exception(
                f"Worker {self.worker_id} task failed after {time.time() - start_time:.3f}s: {e}"
            )
            self.tasks_failed += 1

        finally:
            self.state = WorkerState.IDLE

    def stop(self):
        self._stop_event.set()


class ThreadPool:
    """
    Bounded pool of Worker threads.

    Usage:
        pool = ThreadPool(min_workers=4, max_workers=16)
        pool.start()
        pool.submit(process_connection, args=(conn,))
        pool.shutdown(wait=True, timeout=30.0)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 1.0,
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.queue_size = queue_size
        self.idle_timeout = idle_timeout

        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list = []
        self._lock = threading.Lock()  # Guards _workers
        self._started = False
        self._shutting_down = False
        self._next_worker_id = 0

    @property
    def is_running(self) -> bool:
        return self._started and not self._shutting_down

    def start(self):
        """Start min_workers threads. No-op if already started."""
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.min_workers} workers")
        self._shutting_down = False
        with self._lock:
            for _ in range(self.min_workers):
                self._add_worker()
        self._started = True

    def _add_worker(self) -> Worker:
        """Start one more worker. Caller holds self._lock."""
        worker = Worker(self._task_queue, self._next_worker_id, self.idle_timeout)
        self._next_worker_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(
        self,
        func: Callable[..., Any],
        args: tuple = (),
        kwargs: Optional[dict] = None,
        timeout: Optional[float] = None,
        block: bool = False,
        on_stale: Optional[Callable[..., Any]] = None,
    ) -> bool:
        """
        Queue func(*args, **kwargs) for a worker.

        Args:
            timeout: Staleness limit for the queued task (see Task).
            block: Wait for queue space instead of rejecting.
            on_stale: Called instead of func if the task goes stale.

        Returns:
            True if queued, False if the queue was full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self.is_running:
            raise RuntimeError("Thread pool is not running")

        task = Task(
            func=func,
            args=args,
            kwargs=kwargs or {},
            timeout=timeout,
            on_stale=on_stale,
        )

        try:
            self._task_queue.put(task, block=block)
        except queue.Full:
            return False

        self._maybe_scale_up()
        return True

    def _maybe_scale_up(self):
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            all_busy = all(w.state == WorkerState.BUSY for w in self._workers)
            if all_busy and self._task_queue.qsize() > 0:
                logger.debug(f"Scaling up: {len(self._workers)} -> {len(self._workers) + 1} workers")
                self._add_worker()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop the pool.

        1. Reject new tasks
        2. If wait: let the queue drain (bounded by timeout)
        3. One poison pill per worker, then join them

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound in seconds for draining the queue.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutting_down = True

        if wait:
            deadline = None if timeout is None else time.time() + timeout
            while self._task_queue.unfinished_tasks:
                if deadline is not None and time.time() > deadline:
                    logger.warning("Shutdown timeout, forcing stop")
                    break
                time.sleep(0.05)

        with self._lock:
            workers = list(self._workers)
            self._workers.clear()

        for _ in workers:
            try:
                self._task_queue.put(None, block=False)
            except queue.Full:
                break

        for worker in workers:
            worker.stop()
            worker.join(timeout=2.0)

        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def stats(self) -> dict:
        """Worker and task counts, for debugging and logs."""
        with self._lock:
            workers = list(self._workers)
        return {
            "workers": {
                "total": len(workers),
                "busy": sum(1 for w in workers if w.state == WorkerState.BUSY),
                "idle": sum(1 for w in workers if w.state == WorkerState.IDLE),
            },
            "tasks": {
                "queued": self._task_queue.qsize(),
                "completed": sum(w.tasks_completed for w in workers),
                "failed": sum(w.tasks_failed for w in workers),
            },
        }
