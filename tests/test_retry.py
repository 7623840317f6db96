"""
Unit tests for the exponential-backoff retry wrapper.

Contract:
- at most retries + 1 attempts
- waits delay, delay * 1.5, delay * 1.5^2, ... between attempts
- the last error propagates unchanged
"""

import unittest

from catalogsync.retry import retry_operation


class Flaky:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"attempt {self.calls}")
        return "ok"


class TestRetryOperation(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.waits: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            self.waits.append(seconds)

        self.sleep = fake_sleep

    async def test_success_first_try_does_not_wait(self) -> None:
        op = Flaky(0)
        self.assertEqual(await retry_operation(op, sleep=self.sleep), "ok")
        self.assertEqual(op.calls, 1)
        self.assertEqual(self.waits, [])

    async def test_recovers_after_failures(self) -> None:
        op = Flaky(2)
        result = await retry_operation(op, retries=3, delay=0.1, sleep=self.sleep)
        self.assertEqual(result, "ok")
        self.assertEqual(op.calls, 3)
        self.assertEqual(len(self.waits), 2)
        self.assertAlmostEqual(self.waits[0], 0.1)
        self.assertAlmostEqual(self.waits[1], 0.15)

    async def test_exhaustion_propagates_last_error(self) -> None:
        op = Flaky(10)
        with self.assertRaises(ConnectionError) as ctx:
            await retry_operation(op, retries=3, delay=0.1, sleep=self.sleep)

        self.assertEqual(str(ctx.exception), "attempt 4")
        self.assertEqual(op.calls, 4)
        # 0.1 + 0.15 + 0.225
        self.assertAlmostEqual(sum(self.waits), 0.475)

    async def test_zero_retries_means_single_attempt(self) -> None:
        op = Flaky(1)
        with self.assertRaises(ConnectionError):
            await retry_operation(op, retries=0, sleep=self.sleep)
        self.assertEqual(op.calls, 1)


if __name__ == "__main__":
    unittest.main()
