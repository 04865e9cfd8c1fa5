"""Golden test: deterministic report verification.

Building the report twice from the same snapshot and instant must produce
byte-identical JSON.  This guards against non-determinism creeping into
the engines (e.g. set ordering, dict ordering, wall-clock reads).
"""

import hashlib
import json
import random
from datetime import datetime, timedelta, timezone

from trade_insights.journal.report import build_report

from ..factories import BASE_TIME, make_trade

NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def _journal(seed: int):
    rng = random.Random(seed)
    trades = []
    hours = rng.sample(range(24 * 28), 60)
    for i, hour in enumerate(hours):
        pnl = round(rng.uniform(-80, 120), 2)
        trades.append(make_trade(
            pnl,
            id=f"g{i}",
            trade_date=BASE_TIME + timedelta(hours=hour),
            direction=rng.choice(["long", "short"]),
            lot_size=rng.choice([0.5, 1.0, 1.0, 2.0]),
            setup=rng.choice(["breakout", "fvg", "range", None]),
            emotions=rng.choice(["calm", "stressé", None]),
            duration_seconds=rng.randint(60, 6 * 3600),
        ))
    return trades


def _digest(trades) -> str:
    payload = json.dumps(build_report(trades, now=NOW).to_dict(), sort_keys=True)
    return hashlib.sha256(payload.encode()).hexdigest()


class TestDeterministicReport:
    """Golden test: same inputs -> same output hash."""

    def test_deterministic_hash(self):
        trades = _journal(42)
        assert _digest(trades) == _digest(trades)

    def test_rebuilt_snapshot_matches(self):
        assert _digest(_journal(7)) == _digest(_journal(7))

    def test_different_snapshots_differ(self):
        assert _digest(_journal(7)) != _digest(_journal(8))
