"""
Tests for OutboundQueue (tick_tcp/outbound_queue.py).
"""

import threading

from tick_tcp.outbound_queue import OutboundQueue


class TestOutboundQueue:
	"""Tests for FIFO ordering and drain semantics."""

	def test_starts_empty_and_unallocated(self):
		q = OutboundQueue()
		assert len(q) == 0
		assert not q
		assert not q.is_allocated
		assert q.drain() == []

	def test_allocated_on_first_append(self):
		q = OutboundQueue()
		q.append("a")
		assert q.is_allocated
		assert len(q) == 1

	def test_drain_is_fifo(self):
		q = OutboundQueue()
		for message in ["a", "b", "c"]:
			q.append(message)
		assert q.drain() == ["a", "b", "c"]

	def test_drain_clears_queue(self):
		"""A drained batch is owned by the caller and never returned again."""
		q = OutboundQueue()
		q.append("a")
		batch = q.drain()
		q.append("b")

		assert batch == ["a"]
		assert q.drain() == ["b"]
		assert q.drain() == []
		assert not q.is_allocated

	def test_unbounded(self):
		q = OutboundQueue()
		for i in range(10000):
			q.append(str(i))
		assert len(q) == 10000

	def test_concurrent_appends(self):
		"""
		Purpose:
			Verify no message is lost and per-thread order is kept when
			several threads append at once.

		Workflow:
			1. Start 8 threads each appending 500 tagged messages
			2. Drain once all threads finish
			3. Check count and per-thread ordering
		"""
		q = OutboundQueue()
		threads = 8
		per_thread = 500

		def producer(tag: int):
			for i in range(per_thread):
				q.append(f"{tag}:{i}")

		workers = [threading.Thread(target=producer, args=(t,)) for t in range(threads)]
		for w in workers:
			w.start()
		for w in workers:
			w.join()

		messages = q.drain()
		assert len(messages) == threads * per_thread
		for tag in range(threads):
			sequence = [int(m.split(":")[1]) for m in messages if m.startswith(f"{tag}:")]
			assert sequence == list(range(per_thread))
