import asyncio
import unittest

from utils.debounce import Debouncer


class DebouncerTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.emitted = []
        self.debouncer = Debouncer(self.emitted.append, delay=0.05)

    async def test_burst_emits_only_last_value(self):
        for term in ["j", "ja", "jan", "jane"]:
            self.debouncer.push(term)
            await asyncio.sleep(0.01)

        self.assertEqual(self.emitted, [])
        await asyncio.sleep(0.1)

        self.assertEqual(self.emitted, ["jane"])
        self.assertFalse(self.debouncer.pending)

    async def test_values_apart_in_time_both_emit(self):
        self.debouncer.push("a")
        await asyncio.sleep(0.1)
        self.debouncer.push("b")
        await asyncio.sleep(0.1)

        self.assertEqual(self.emitted, ["a", "b"])

    async def test_flush_emits_immediately(self):
        self.debouncer.push("now")
        self.debouncer.flush()

        self.assertEqual(self.emitted, ["now"])
        await asyncio.sleep(0.1)
        self.assertEqual(self.emitted, ["now"])

    async def test_flush_without_pending_value_does_nothing(self):
        self.debouncer.flush()
        self.assertEqual(self.emitted, [])

    async def test_cancel_drops_pending_value(self):
        self.debouncer.push("gone")
        self.debouncer.cancel()
        await asyncio.sleep(0.1)

        self.assertEqual(self.emitted, [])


if __name__ == "__main__":
    unittest.main()
